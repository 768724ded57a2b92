"""Changelog fragment sources.

Pending changelog entries can be collected from one of three places:

* nowhere (:class:`NullFragmentSource`), when harvesting is disabled;
* a directory of small files named ``{id}.{section}.{ext}``
  (:class:`DirectoryFragmentSource`);
* ``Section: text`` trailers in the commits since the last release tag
  (:class:`GitTrailerFragmentSource`).

Every source returns entries grouped by capitalized section name. A source
whose backing store is missing returns nothing instead of failing.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from reissue_py.core.changelog import DEFAULT_SECTIONS, Changes, normalize_sections
from reissue_py.core.version import Segment, VersionToken, highest_segment
from reissue_py.exceptions import FormatError, FragmentSourceError
from reissue_py.vcs.git import GitRepository

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reissue_py.vcs.git import Commit, ExternalRepository

logger = logging.getLogger(__name__)

GIT_TRAILERS = "git"

DEFAULT_TAG_PATTERN = r"^v(\d+\.\d+\.[0-9A-Za-z]+.*)$"

# Any "Key: value" line; whitelisting happens afterwards
TRAILER_REGEX = re.compile(r"^(?P<key>[A-Za-z][A-Za-z0-9-]*):(?!//)\s*(?P<value>.*?)\s*$")
VERSION_TRAILER_REGEX = re.compile(r"^version:\s*(major|minor|patch)\s*$", re.IGNORECASE)


class FragmentSource(ABC):
    """Base class for pending changelog entry sources."""

    @abstractmethod
    def read(self) -> Changes:
        """Return pending entries grouped by section."""

    @abstractmethod
    def clear(self) -> None:
        """Remove consumed fragments from the source, if it owns any."""


class NullFragmentSource(FragmentSource):
    """Source used when fragment harvesting is disabled."""

    def read(self) -> Changes:
        return {}

    def clear(self) -> None:
        return None


class _SectionFilter:
    """Case-insensitive section whitelist; None allows every section."""

    def __init__(self, valid_sections: Iterable[str] | None) -> None:
        self.valid_sections = None if valid_sections is None else normalize_sections(valid_sections)

    def allows(self, section: str) -> bool:
        if self.valid_sections is None:
            return True
        return section.capitalize() in self.valid_sections


class DirectoryFragmentSource(FragmentSource):
    """Read fragments from files named ``{id}.{section}.{ext}``.

    Args:
        directory: Directory holding fragment files (not searched recursively)
        valid_sections: Accepted section names, None to accept any
    """

    def __init__(
        self,
        directory: Path | str,
        valid_sections: Iterable[str] | None = DEFAULT_SECTIONS,
    ) -> None:
        self.directory = Path(directory)
        self._filter = _SectionFilter(valid_sections)

    @property
    def valid_sections(self) -> list[str] | None:
        return self._filter.valid_sections

    def read(self) -> Changes:
        fragments: Changes = {}
        for path in self.fragment_files():
            section = path.name.split(".")[1]
            if not self._filter.allows(section):
                logger.debug("Skipping fragment %s: unknown section %r", path.name, section)
                continue

            content = path.read_text(encoding="utf-8").strip()
            if not content:
                logger.debug("Skipping empty fragment %s", path.name)
                continue

            fragments.setdefault(section.capitalize(), []).append(content)
        return fragments

    def clear(self) -> None:
        for path in self.fragment_files():
            logger.debug("Removing fragment %s", path)
            path.unlink()

    def fragment_files(self) -> list[Path]:
        """Return the files named like fragments, sorted by name."""
        if not self.directory.is_dir():
            logger.debug("Fragment directory %s does not exist", self.directory)
            return []
        return sorted(
            (
                path
                for path in self.directory.iterdir()
                if path.is_file() and _is_fragment_name(path.name)
            ),
            key=lambda path: path.name,
        )


def _is_fragment_name(name: str) -> bool:
    parts = name.split(".")
    return len(parts) == 3 and all(parts)


class GitTrailerFragmentSource(FragmentSource):
    """Read fragments from commit message trailers.

    Commits are taken from after the most recently *created* tag matching
    ``tag_pattern``, which is not necessarily the highest version. A line
    such as ``Fixed: Crash on startup`` becomes the entry
    ``Crash on startup (abc1234)`` in the Fixed section.

    Args:
        repository: History to read; defaults to git in the working directory
        tag_pattern: Regex for release tags with one capture group holding
            the version
        valid_sections: Accepted trailer names, None to accept the defaults
    """

    def __init__(
        self,
        repository: ExternalRepository | None = None,
        *,
        tag_pattern: str | re.Pattern[str] | None = None,
        valid_sections: Iterable[str] | None = None,
    ) -> None:
        self.repository = repository if repository is not None else GitRepository()
        self.tag_pattern = _compile_tag_pattern(tag_pattern)
        self._filter = _SectionFilter(normalize_sections(valid_sections))

    def read(self) -> Changes:
        if not self.repository.is_available():
            return {}
        return parse_trailers(self._commits(), self._filter.valid_sections or [])

    def clear(self) -> None:
        return None

    def last_tag(self) -> str | None:
        """Return the boundary tag, or None when no tag matches."""
        if not self.repository.is_available():
            return None
        return self._find_last_tag()

    def last_tag_version(self) -> VersionToken | None:
        """Return the version captured from the boundary tag."""
        tag = self.last_tag()
        if tag is None:
            return None
        match = self.tag_pattern.search(tag)
        if match is None:
            return None
        try:
            return VersionToken.parse(match.group(1))
        except FormatError:
            logger.debug("Tag %s does not carry a parsable version", tag)
            return None

    def read_version_bump(self) -> Segment | None:
        """Return the highest ``Version:`` trailer bump since the last tag."""
        if not self.repository.is_available():
            return None
        bumps = []
        for commit in self._commits():
            for line in commit.message.splitlines():
                match = VERSION_TRAILER_REGEX.match(line.strip())
                if match:
                    bumps.append(Segment(match.group(1).lower()))
        return highest_segment(bumps)

    def _find_last_tag(self) -> str | None:
        tags = self.repository.list_tags_matching(self.tag_pattern)
        return tags[0] if tags else None

    def _commits(self) -> list[Commit]:
        tag = self._find_last_tag()
        logger.debug("Reading trailers since %s", tag or "the first commit")
        return self.repository.commits_since(tag)


def _compile_tag_pattern(tag_pattern: str | re.Pattern[str] | None) -> re.Pattern[str]:
    if tag_pattern is None:
        tag_pattern = DEFAULT_TAG_PATTERN
    try:
        compiled = re.compile(tag_pattern) if isinstance(tag_pattern, str) else tag_pattern
    except re.error as e:
        raise FragmentSourceError(f"Invalid tag pattern {tag_pattern!r}: {e}") from e
    if compiled.groups < 1:
        raise FragmentSourceError(
            f"Tag pattern {compiled.pattern!r} must have a capture group for the version"
        )
    return compiled


def parse_trailers(commits: Iterable[Commit], valid_sections: list[str]) -> Changes:
    """Collect ``Section: text`` trailers from commit messages.

    Non-blank lines following a trailer that are not trailers themselves
    continue it and are joined with a single space. Each entry ends with
    the commit's short sha in parentheses.

    Args:
        commits: Commits, oldest first
        valid_sections: Capitalized section names to accept

    Returns:
        Entries grouped by section, in commit order
    """
    result: Changes = {}
    for commit in commits:
        for section, text in _trailer_entries(commit.message, valid_sections):
            result.setdefault(section, []).append(f"{text} ({commit.sha})")
    return result


def _trailer_entries(message: str, valid_sections: list[str]) -> list[tuple[str, str]]:
    entries = []
    section: str | None = None
    text = ""
    # the extra blank line closes a trailer on the last line
    for raw_line in [*message.splitlines(), ""]:
        line = raw_line.strip()
        trailer = TRAILER_REGEX.match(line)
        if line and not trailer:
            if section is not None:
                text = f"{text} {line}" if text else line
            continue

        if section is not None and text:
            entries.append((section, text))
        section, text = None, ""
        if trailer and trailer.group("key").capitalize() in valid_sections:
            section = trailer.group("key").capitalize()
            text = trailer.group("value") or ""
    return entries


def create_fragment_source(
    option: str | Path | bool | None,
    *,
    valid_sections: Iterable[str] | None = DEFAULT_SECTIONS,
    tag_pattern: str | re.Pattern[str] | None = None,
    repository: ExternalRepository | None = None,
) -> FragmentSource:
    """Build the fragment source for a configuration option.

    Args:
        option: None or False to disable, ``"git"`` for commit trailers,
            any other string or a Path for a fragment directory
        valid_sections: Section whitelist
        tag_pattern: Release tag regex (git trailers only)
        repository: Repository override (git trailers only)

    Raises:
        FragmentSourceError: If option is not one of the supported forms
    """
    if option is None or option is False:
        return NullFragmentSource()
    if isinstance(option, str) and option == GIT_TRAILERS:
        return GitTrailerFragmentSource(
            repository, tag_pattern=tag_pattern, valid_sections=valid_sections
        )
    if isinstance(option, (str, Path)) and str(option).strip():
        return DirectoryFragmentSource(option, valid_sections)
    raise FragmentSourceError(f"Invalid fragment option: {option!r}")
