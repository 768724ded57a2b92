"""Markdown changelog parser.

Reads the "Keep a Changelog" subset this package writes::

    # Title

    Preamble text.

    ## [1.2.0] - 2024-05-01

    ### Added

    - Entry
      continued on a second line

Parsing never fails. Missing parts default to empty values so that legacy
or hand-edited files can always be loaded and rewritten in canonical form.
"""

from __future__ import annotations

import logging
import re

from reissue_py.core.changelog import UNRELEASED, Changelog, VersionRecord

logger = logging.getLogger(__name__)

TITLE_PREFIX = "# "
VERSION_PREFIX = "## "
SECTION_PREFIX = "### "
DATE_SEPARATOR = " - "
CONTINUATION_INDENT = "\n  "

_BULLET = re.compile(r"^ ?-(?:\s+(.*))?$")


def parse(text: str) -> Changelog:
    """Parse changelog Markdown into a :class:`Changelog`.

    Args:
        text: Full file contents

    Returns:
        Parsed changelog; never raises for malformed input
    """
    return _Scanner(text).parse()


def parse_version_line(line: str) -> tuple[str, str]:
    """Split a ``## [version] - date`` header into version and date.

    The brackets are optional. Without a date separator the whole line is
    the version and the date defaults to Unreleased.
    """
    header = line[len(VERSION_PREFIX) :] if line.startswith(VERSION_PREFIX) else line
    version, _, date = header.partition(DATE_SEPARATOR)
    version = version.strip().replace("[", "").replace("]", "").strip()
    return version, date.strip() or UNRELEASED


class _Scanner:
    """Single forward pass over the lines of a changelog."""

    def __init__(self, text: str) -> None:
        if not text.endswith("\n"):
            text += "\n"
        self.lines = text.splitlines()
        self.position = 0

    def parse(self) -> Changelog:
        title = self._title()
        preamble = self._preamble()
        versions = []
        while not self._at_end():
            versions.append(self._version())
        return Changelog(title=title, preamble=preamble, versions=versions)

    def _at_end(self) -> bool:
        return self.position >= len(self.lines)

    def _peek(self) -> str:
        return self.lines[self.position]

    def _title(self) -> str:
        while not self._at_end() and not self._peek().strip():
            self.position += 1
        if self._at_end():
            return ""
        line = self._peek()
        if line.startswith(TITLE_PREFIX):
            self.position += 1
            return line[len(TITLE_PREFIX) :].strip()
        return ""

    def _preamble(self) -> str:
        collected = []
        while not self._at_end() and not self._peek().startswith(VERSION_PREFIX):
            collected.append(self._peek())
            self.position += 1
        return "\n".join(collected).strip()

    def _version(self) -> VersionRecord:
        version, date = parse_version_line(self._peek())
        self.position += 1
        record = VersionRecord(version=version, date=date)

        section: list[str] | None = None
        current: str | None = None

        def flush() -> None:
            nonlocal current
            if section is not None and current is not None and current.strip():
                section.append(current)
            current = None

        while not self._at_end():
            line = self._peek()
            if line.startswith(VERSION_PREFIX):
                break
            self.position += 1

            if line.startswith(SECTION_PREFIX):
                flush()
                name = line[len(SECTION_PREFIX) :].strip()
                section = record.changes.setdefault(name, [])
                continue

            if not line.strip():
                flush()
                continue

            if section is None:
                logger.debug("Dropping text outside of a section in %s: %r", version, line)
                continue

            bullet = _BULLET.match(line)
            if bullet:
                flush()
                current = (bullet.group(1) or "").strip()
            elif current:
                current += CONTINUATION_INDENT + line.strip()
            else:
                current = line.strip()

        flush()
        return record
