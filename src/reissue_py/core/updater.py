"""Release-time changelog transformations.

These functions work on an in-memory :class:`Changelog`; reading and
writing files is left to :mod:`reissue_py.release`.

* :func:`update` prepends a record for a new version, merging explicit
  changes with harvested fragments.
* :func:`finalize` stamps the pending record with its release date.
* :func:`reformat` only applies the retention window.

Before the retention window drops old records, the latest version can be
archived to a directory or handed to a callback.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

from reissue_py.core.changelog import UNRELEASED, Changelog, VersionRecord, merge_changes
from reissue_py.core.printer import print_changelog
from reissue_py.exceptions import FormatError
from reissue_py.project.files import write_text_atomic

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from reissue_py.core.fragments import FragmentSource

logger = logging.getLogger(__name__)

DEFAULT_VERSION_LIMIT = 2

RetainCallback: TypeAlias = "Callable[[VersionRecord, str], object]"
Retain: TypeAlias = "Path | str | RetainCallback | None"


def update(
    changelog: Changelog,
    version: str,
    *,
    date: str = UNRELEASED,
    changes: Mapping[str, Iterable[str]] | None = None,
    fragment_source: FragmentSource | None = None,
    version_limit: int = DEFAULT_VERSION_LIMIT,
    retain: Retain = None,
) -> Changelog:
    """Add a record for a new version at the top of the changelog.

    Explicit changes are kept as supplied, repeated entries included;
    fragment entries are appended to their sections unless the same text is
    already there. A record that already exists for ``version`` is replaced
    and its entries kept ahead of the explicit ones. Any other record still
    marked Unreleased was never released, so its entries are folded into the
    new record and the stale record is dropped.

    Args:
        changelog: Changelog to modify in place
        version: New version string
        date: Release date, Unreleased by default
        changes: Explicit changes by section
        fragment_source: Source of pending fragments
        version_limit: Number of records to keep
        retain: Archive sink for the latest version before truncation

    Returns:
        The same changelog, updated

    Raises:
        ValueError: If version_limit is less than 1
    """
    _check_limit(version_limit)
    fragments = fragment_source.read() if fragment_source is not None else {}

    carried = []
    for record in list(changelog.versions):
        if record.version == version or record.is_unreleased:
            if record.version != version:
                logger.info("Folding unreleased %s into %s", record.version, version)
            carried.append(record.changes)
            changelog.versions.remove(record)

    merged = merge_changes(*carried)
    for section, entries in (changes or {}).items():
        bucket = merged.setdefault(section, [])
        bucket.extend([entry for entry in entries if entry not in bucket])
    merged = merge_changes(merged, fragments)
    changelog.versions.insert(0, VersionRecord(version=version, date=date, changes=merged))

    _retain_and_truncate(changelog, version_limit, retain)
    return changelog


def finalize(
    changelog: Changelog,
    date: str,
    *,
    fragment_source: FragmentSource | None = None,
    retain: Retain = None,
) -> tuple[str, str]:
    """Set the release date of the pending version.

    Fragments are merged into the existing pending record rather than
    creating a new one. Without a pending record nothing changes.

    Args:
        changelog: Changelog to modify in place
        date: Release date
        fragment_source: Source of pending fragments
        retain: Archive sink for the finalized version

    Returns:
        Version and date of the finalized record, or of the latest record
        when nothing was pending

    Raises:
        FormatError: If the changelog has no versions at all
    """
    if not changelog.versions:
        raise FormatError("The changelog has no versions to finalize")

    record = changelog.unreleased
    if record is None:
        latest = changelog.latest() or changelog.versions[0]
        logger.info("No unreleased version; %s is already dated %s", latest.version, latest.date)
        return latest.version, latest.date

    if fragment_source is not None:
        record.changes = merge_changes(record.changes, fragment_source.read())
    record.date = date

    retain_latest(changelog, retain)
    return record.version, record.date


def reformat(
    changelog: Changelog,
    *,
    version_limit: int = DEFAULT_VERSION_LIMIT,
    retain: Retain = None,
) -> Changelog:
    """Apply only the retention window; printing does the normalizing."""
    _check_limit(version_limit)
    _retain_and_truncate(changelog, version_limit, retain)
    return changelog


def retain_latest(changelog: Changelog, retain: Retain) -> VersionRecord | None:
    """Archive the highest version together with the full printed changelog.

    Args:
        changelog: Changelog before truncation
        retain: Directory receiving ``{version}.md``, or a callable taking
            the record and the printed text

    Returns:
        The archived record, or None when nothing was archived
    """
    if retain is None or retain is False:
        return None
    record = changelog.latest()
    if record is None:
        return None

    text = print_changelog(changelog)
    if callable(retain):
        retain(record, text)
        return record

    directory = Path(retain)
    directory.mkdir(parents=True, exist_ok=True)
    target = write_text_atomic(directory / f"{record.version}.md", text)
    logger.info("Retained changelog for %s in %s", record.version, target)
    return record


def _retain_and_truncate(changelog: Changelog, version_limit: int, retain: Retain) -> None:
    retain_latest(changelog, retain)
    dropped = changelog.versions[version_limit:]
    if dropped:
        logger.debug("Dropping %d old version(s) from the changelog", len(dropped))
        del changelog.versions[version_limit:]


def _check_limit(version_limit: int) -> None:
    if version_limit < 1:
        raise ValueError(f"version_limit must be at least 1, got {version_limit}")
