"""In-memory changelog model.

A changelog is a title, a free-text preamble and a list of version
records ordered newest first. Each record maps section names (``Added``,
``Fixed``, ...) to the entries listed under them, in the order they were
first seen.

The model does not care which section names are used; whitelisting is the
job of the fragment sources.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from reissue_py.core.version import VersionToken
from reissue_py.exceptions import FormatError

UNRELEASED = "Unreleased"

DEFAULT_SECTIONS = ("Added", "Changed", "Deprecated", "Removed", "Fixed", "Security")

Changes = dict[str, list[str]]


@dataclass
class VersionRecord:
    """One released (or pending) version in the changelog."""

    version: str
    date: str = UNRELEASED
    changes: Changes = field(default_factory=dict)

    @property
    def is_unreleased(self) -> bool:
        return not self.date or self.date == UNRELEASED


@dataclass
class Changelog:
    """A parsed changelog document."""

    title: str = ""
    preamble: str = ""
    versions: list[VersionRecord] = field(default_factory=list)

    def find(self, version: str) -> VersionRecord | None:
        """Return the record for a version string, if present."""
        return next((record for record in self.versions if record.version == version), None)

    @property
    def unreleased(self) -> VersionRecord | None:
        """The pending record, if any."""
        return next((record for record in self.versions if record.is_unreleased), None)

    def latest(self) -> VersionRecord | None:
        """Return the record with the highest version.

        Versions are compared as version numbers, not by list position.
        Records whose version cannot be parsed sort below all others.
        """
        best: VersionRecord | None = None
        best_token: VersionToken | None = None
        for record in self.versions:
            token = _parse_or_none(record.version)
            if best is None or (token is not None and (best_token is None or token > best_token)):
                best, best_token = record, token
        return best


def _parse_or_none(version: str) -> VersionToken | None:
    try:
        return VersionToken.parse(version)
    except FormatError:
        return None


def normalize_sections(sections: str | Iterable[str] | None) -> list[str]:
    """Capitalize section names and drop case-insensitive duplicates.

    Args:
        sections: Section names, a single name, or None for the defaults

    Returns:
        Normalized list, first occurrence wins
    """
    if sections is None:
        return list(DEFAULT_SECTIONS)
    if isinstance(sections, str):
        sections = [sections]

    normalized: list[str] = []
    for name in sections:
        capitalized = name.strip().capitalize()
        if capitalized and capitalized not in normalized:
            normalized.append(capitalized)
    return normalized


def merge_changes(*sources: Mapping[str, Iterable[str]] | None) -> Changes:
    """Merge change mappings section by section.

    The first mapping is taken as supplied, duplicates included. Sections
    keep first-seen order. Entries from every later mapping are appended
    only when the same text is not already in that section. Deduplication
    is per section and per merge, never across the whole document.

    Example:
        >>> merge_changes({"Added": ["X"]}, {"Added": ["X", "Y"]})
        {'Added': ['X', 'Y']}
    """
    merged: Changes = {}
    for position, source in enumerate(sources):
        if not source:
            continue
        for section, entries in source.items():
            bucket = merged.setdefault(section, [])
            if position == 0:
                bucket.extend(entries)
                continue
            for entry in entries:
                if entry not in bucket:
                    bucket.append(entry)
    return merged
