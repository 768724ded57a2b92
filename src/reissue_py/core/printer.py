"""Canonical Markdown rendering of a changelog.

The output of :func:`print_changelog` is the canonical form: parsing it
and printing it again yields the same text byte for byte.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reissue_py.core.changelog import UNRELEASED
from reissue_py.core.parser import CONTINUATION_INDENT

if TYPE_CHECKING:
    from reissue_py.core.changelog import Changelog, VersionRecord

DEFAULT_TITLE = "Changelog"
DEFAULT_PREAMBLE = "All project changes are documented in this file."
PLACEHOLDER_VERSION = f"## [0.0.0] - {UNRELEASED}"


def print_changelog(changelog: Changelog) -> str:
    """Render a changelog as Markdown.

    An empty version list renders a ``0.0.0`` placeholder so the file is
    never a bare header.

    Args:
        changelog: Changelog to render

    Returns:
        Markdown text ending with a single newline
    """
    blocks = [
        f"# {changelog.title or DEFAULT_TITLE}",
        changelog.preamble or DEFAULT_PREAMBLE,
    ]
    if changelog.versions:
        blocks.extend(format_version(record) for record in changelog.versions)
    else:
        blocks.append(PLACEHOLDER_VERSION)
    return "\n\n".join(blocks) + "\n"


def format_version(record: VersionRecord) -> str:
    """Render one version record without surrounding blank lines."""
    parts = [f"## [{record.version}] - {record.date or UNRELEASED}"]
    for section, entries in record.changes.items():
        parts.append(format_section(section, entries))
    return "\n\n".join(parts)


def format_section(section: str, entries: list[str]) -> str:
    """Render a ``### Section`` block with its bullet list."""
    formatted = [text for text in map(format_entry, entries) if text]
    if not formatted:
        return f"### {section}"
    bullets = "\n".join(f"- {text}" for text in formatted)
    return f"### {section}\n\n{bullets}"


def format_entry(entry: str) -> str:
    """Fold a multi-line entry into the indented continuation form.

    Blank lines are dropped: inside a bullet list they would end the entry.
    """
    lines = (line.strip() for line in entry.splitlines())
    return CONTINUATION_INDENT.join(line for line in lines if line)
