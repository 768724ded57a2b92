"""Version control integration."""

from __future__ import annotations

from reissue_py.vcs.git import Commit, ExternalRepository, GitRepository

__all__ = ["Commit", "ExternalRepository", "GitRepository"]
