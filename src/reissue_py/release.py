"""File-level release primitives.

These are the operations a task runner or CI job calls in sequence:
``reissue`` (bump the version and open a new changelog record),
``finalize`` (date the pending record), ``reformat``, ``preview`` and
``clear_fragments``.

Each primitive reads its files, does all the work in memory and writes
only when every step has succeeded.
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from pathlib import Path
from typing import TYPE_CHECKING

from reissue_py.core.changelog import UNRELEASED, Changelog, VersionRecord
from reissue_py.core.fragments import DirectoryFragmentSource, create_fragment_source
from reissue_py.core.parser import parse
from reissue_py.core.printer import print_changelog
from reissue_py.core.updater import DEFAULT_VERSION_LIMIT
from reissue_py.core.updater import finalize as finalize_changelog
from reissue_py.core.updater import reformat as reformat_changelog
from reissue_py.core.updater import update
from reissue_py.core.version import VersionToken
from reissue_py.exceptions import FormatError
from reissue_py.project.files import write_text_atomic
from reissue_py.project.version_file import prepare_bump, read_version

if TYPE_CHECKING:
    import re
    from collections.abc import Iterable, Mapping

    from reissue_py.core.changelog import Changes
    from reissue_py.core.fragments import FragmentSource, GitTrailerFragmentSource
    from reissue_py.core.updater import Retain
    from reissue_py.core.version import RedoFunc
    from reissue_py.vcs.git import ExternalRepository

logger = logging.getLogger(__name__)

DEFAULT_CHANGELOG = "CHANGELOG.md"

STARTER_PREAMBLE = (
    "All notable changes to this project will be documented in this file.\n"
    "\n"
    "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),\n"
    "and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html)."
)


def _source(
    fragment: str | Path | FragmentSource | None,
    sections: Iterable[str] | None,
    tag_pattern: str | re.Pattern[str] | None,
    repository: ExternalRepository | None = None,
) -> FragmentSource:
    if fragment is not None and not isinstance(fragment, (str, Path)):
        return fragment
    if sections is None:
        return create_fragment_source(fragment, tag_pattern=tag_pattern, repository=repository)
    return create_fragment_source(
        fragment, valid_sections=sections, tag_pattern=tag_pattern, repository=repository
    )


def read_changelog(path: Path | str) -> Changelog:
    """Parse a changelog file."""
    return parse(Path(path).read_text(encoding="utf-8"))


def write_changelog(path: Path | str, changelog: Changelog) -> Path:
    """Print a changelog and write it atomically."""
    return write_text_atomic(path, print_changelog(changelog))


def reissue(
    version_file: Path | str,
    *,
    changelog_file: Path | str | None = DEFAULT_CHANGELOG,
    segment: str = "patch",
    date: str = UNRELEASED,
    changes: Mapping[str, Iterable[str]] | None = None,
    version_limit: int = DEFAULT_VERSION_LIMIT,
    redo: RedoFunc | None = None,
    fragment: str | Path | FragmentSource | None = None,
    tag_pattern: str | re.Pattern[str] | None = None,
    retain: Retain = None,
    sections: Iterable[str] | None = None,
) -> str:
    """Bump the version file and add the new version to the changelog.

    Nothing is written unless both the bump and the changelog update
    succeed.

    Args:
        version_file: File holding the version string
        changelog_file: Changelog to update, or None to only bump
        segment: Segment to bump
        date: Date for the new record
        changes: Explicit changes by section
        version_limit: Number of records kept in the changelog
        redo: Custom bump function
        fragment: None, ``"git"``, a fragment directory or a FragmentSource
        tag_pattern: Release tag regex for git trailers
        retain: Archive sink for the latest version
        sections: Section whitelist for fragments

    Returns:
        The new version string
    """
    new_version, version_text = prepare_bump(version_file, segment, redo=redo)

    changelog = None
    if changelog_file is not None:
        changelog = read_changelog(changelog_file)
        update(
            changelog,
            new_version,
            date=date,
            changes=changes,
            fragment_source=_source(fragment, sections, tag_pattern),
            version_limit=version_limit,
            retain=retain,
        )

    write_text_atomic(version_file, version_text)
    if changelog is not None and changelog_file is not None:
        write_changelog(changelog_file, changelog)

    logger.info("Bumped %s to %s", version_file, new_version)
    return new_version


def update_changelog(
    changelog_file: Path | str,
    version: str,
    *,
    date: str = UNRELEASED,
    changes: Mapping[str, Iterable[str]] | None = None,
    version_limit: int = DEFAULT_VERSION_LIMIT,
    fragment: str | Path | FragmentSource | None = None,
    tag_pattern: str | re.Pattern[str] | None = None,
    retain: Retain = None,
    sections: Iterable[str] | None = None,
) -> Changelog:
    """Add a version record to a changelog file and return the result."""
    changelog = read_changelog(changelog_file)
    update(
        changelog,
        version,
        date=date,
        changes=changes,
        fragment_source=_source(fragment, sections, tag_pattern),
        version_limit=version_limit,
        retain=retain,
    )
    write_changelog(changelog_file, changelog)
    return changelog


def finalize(
    date: str | date_type | None = None,
    *,
    changelog_file: Path | str = DEFAULT_CHANGELOG,
    fragment: str | Path | FragmentSource | None = None,
    tag_pattern: str | re.Pattern[str] | None = None,
    retain: Retain = None,
    sections: Iterable[str] | None = None,
) -> tuple[str, str]:
    """Set the release date of the pending version in a changelog file.

    Args:
        date: Release date; defaults to today
        changelog_file: Changelog to finalize
        fragment: Fragment option, merged into the pending record
        tag_pattern: Release tag regex for git trailers
        retain: Archive sink for the finalized version
        sections: Section whitelist for fragments

    Returns:
        Tuple of (version, date) for the finalized record
    """
    if date is None:
        date = date_type.today()
    release_date = date.isoformat() if isinstance(date, date_type) else str(date)

    changelog = read_changelog(changelog_file)
    version, release_date = finalize_changelog(
        changelog,
        release_date,
        fragment_source=_source(fragment, sections, tag_pattern),
        retain=retain,
    )
    write_changelog(changelog_file, changelog)
    logger.info("Finalized %s on %s", version, release_date)
    return version, release_date


def reformat(
    changelog_file: Path | str = DEFAULT_CHANGELOG,
    *,
    version_limit: int = DEFAULT_VERSION_LIMIT,
    retain: Retain = None,
) -> Changelog:
    """Rewrite a changelog file in canonical form.

    A missing file is first created with :func:`generate_changelog`.
    """
    if not Path(changelog_file).exists():
        generate_changelog(changelog_file)

    changelog = reformat_changelog(
        read_changelog(changelog_file), version_limit=version_limit, retain=retain
    )
    write_changelog(changelog_file, changelog)
    return changelog


def generate_changelog(
    changelog_file: Path | str = DEFAULT_CHANGELOG,
    *,
    version: str = "0.1.0",
    changes: Mapping[str, Iterable[str]] | None = None,
) -> Path:
    """Create a starter changelog with a single unreleased version."""
    if changes is None:
        changes = {"Added": ["Initial release"]}
    changelog = Changelog(
        title="Changelog",
        preamble=STARTER_PREAMBLE,
        versions=[
            VersionRecord(
                version=version,
                date=UNRELEASED,
                changes={section: list(entries) for section, entries in changes.items()},
            )
        ],
    )
    return write_changelog(changelog_file, changelog)


def clear_fragments(directory: Path | str | None) -> None:
    """Delete fragment files; a missing or unset directory is ignored."""
    if directory is None:
        return
    DirectoryFragmentSource(directory).clear()


def preview(
    fragment: str | Path | FragmentSource | None,
    *,
    tag_pattern: str | re.Pattern[str] | None = None,
    sections: Iterable[str] | None = None,
    repository: ExternalRepository | None = None,
) -> Changes:
    """Return pending fragment entries without changing anything."""
    return _source(fragment, sections, tag_pattern, repository).read()


def _is_newer(desired: str, current: VersionToken) -> bool:
    """Order a bump result against the current version.

    Results the dotted pattern cannot read exactly are compared as text.
    """
    try:
        token = VersionToken.parse(desired)
    except FormatError:
        return desired != str(current)
    if str(token) != desired.strip():
        return desired != str(current)
    return token > current


def bump_from_trailers(
    version_file: Path | str,
    source: GitTrailerFragmentSource,
    *,
    redo: RedoFunc | None = None,
) -> str | None:
    """Bump the version file according to ``Version:`` commit trailers.

    When the file still holds the last tagged version, the requested bump is
    applied. When it was already bumped past the tag, it is bumped again
    only if the trailer asks for a larger step than the one already taken.

    Args:
        version_file: File holding the version string
        source: Git trailer source providing the tag and the trailers
        redo: Custom bump function

    Returns:
        The new version, or None when nothing was bumped
    """
    bump = source.read_version_bump()
    if bump is None:
        logger.info("No Version: trailer found since the last tag")
        return None

    current = read_version(version_file)
    tag_version = source.last_tag_version()
    if tag_version is not None and current != tag_version:
        desired = tag_version.bump_text(bump, redo=redo)
        if not _is_newer(desired, current):
            logger.info("Version already bumped (%s -> %s), skipping", tag_version, current)
            return None

    new_version, version_text = prepare_bump(version_file, bump, redo=redo)
    write_text_atomic(version_file, version_text)
    logger.info("Version bumped (%s) to %s", bump, new_version)
    return new_version
