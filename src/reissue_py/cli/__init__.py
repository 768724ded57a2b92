"""Command line interface for reissue-py."""

from __future__ import annotations

from reissue_py.cli.app import app, main

__all__ = ["app", "main"]
