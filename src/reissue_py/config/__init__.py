"""Configuration management for reissue-py."""

from __future__ import annotations

from reissue_py.config.loader import load_config
from reissue_py.config.models import (
    ChangelogConfig,
    FragmentConfig,
    ReissueConfig,
)

__all__ = [
    "ChangelogConfig",
    "FragmentConfig",
    "ReissueConfig",
    "load_config",
]
