"""Core business logic for reissue-py.

This module contains the fundamental building blocks:
- Version token parsing and bumping
- The changelog model, parser and printer
- Fragment sources (directory files, git trailers)
- Release-time changelog updates
"""

from __future__ import annotations

from reissue_py.core.changelog import (
    DEFAULT_SECTIONS,
    UNRELEASED,
    Changelog,
    VersionRecord,
    merge_changes,
    normalize_sections,
)
from reissue_py.core.version import Segment, VersionToken, successor
from reissue_py.core.parser import parse
from reissue_py.core.printer import print_changelog
from reissue_py.core.fragments import (
    DirectoryFragmentSource,
    FragmentSource,
    GitTrailerFragmentSource,
    NullFragmentSource,
    create_fragment_source,
)
from reissue_py.core.updater import finalize, reformat, update

__all__ = [
    # Changelog
    "DEFAULT_SECTIONS",
    "UNRELEASED",
    "Changelog",
    # Fragments
    "DirectoryFragmentSource",
    "FragmentSource",
    "GitTrailerFragmentSource",
    "NullFragmentSource",
    # Version
    "Segment",
    "VersionRecord",
    "VersionToken",
    "create_fragment_source",
    # Updates
    "finalize",
    "merge_changes",
    "normalize_sections",
    "parse",
    "print_changelog",
    "reformat",
    "successor",
    "update",
]
