"""Version file manipulation.

This module reads and bumps the version embedded in a source file such
as ``__version__.py`` or ``lib/my_gem/version.rb``.

Only the first version-looking string in the file is touched; every other
byte is preserved by using a targeted regex replacement rather than
parsing the file.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from reissue_py.core.changelog import UNRELEASED
from reissue_py.core.version import VERSION_PATTERN, VersionToken
from reissue_py.exceptions import FormatError, ProjectError
from reissue_py.project.files import write_text_atomic

if TYPE_CHECKING:
    from reissue_py.core.version import RedoFunc

logger = logging.getLogger(__name__)

# RELEASE_DATE = "2024-01-01" goes back to Unreleased on every bump
RELEASE_DATE_PATTERN = re.compile(r"""^(\s*RELEASE_DATE\s*=\s*)(["'])[^"']*\2""", re.MULTILINE)


def _compile(pattern: str | re.Pattern[str] | None) -> re.Pattern[str]:
    if pattern is None:
        return VERSION_PATTERN
    return re.compile(pattern) if isinstance(pattern, str) else pattern


def _read(file_path: Path) -> str:
    if not file_path.is_file():
        raise ProjectError(f"Version file not found: {file_path}")
    return file_path.read_text(encoding="utf-8")


def read_version(
    file_path: Path | str,
    pattern: str | re.Pattern[str] | None = None,
) -> VersionToken:
    """Read the version from a file.

    Args:
        file_path: Path to the file to read
        pattern: Custom regex; its first group (or the whole match when it
                 has no group) is the version. Defaults to the dotted
                 version pattern.

    Returns:
        Parsed version token

    Raises:
        ProjectError: If the file doesn't exist
        FormatError: If no version is found
    """
    path = Path(file_path)
    content = _read(path)
    match = _compile(pattern).search(content)
    if match is None:
        raise FormatError(f"Could not find a version in {path}")
    return VersionToken.parse(match.group(1) if match.re.groups else match.group(0))


def prepare_bump(
    file_path: Path | str,
    segment: str,
    *,
    redo: RedoFunc | None = None,
    pattern: str | re.Pattern[str] | None = None,
) -> tuple[str, str]:
    """Compute a bumped version file without writing it.

    Args:
        file_path: Path to the version file
        segment: Segment to bump (major, minor, patch, pre)
        redo: Custom bump function replacing the built-in algorithm
        pattern: Custom version regex (see :func:`read_version`)

    Returns:
        Tuple of (new version string, new file content)

    Raises:
        ProjectError: If the file doesn't exist
        FormatError: If no version is found
        InvalidSegmentError: If segment is unknown and redo is not given
    """
    path = Path(file_path)
    content = _read(path)
    regex = _compile(pattern)

    match = regex.search(content)
    if match is None:
        raise FormatError(f"Could not find a version in {path}")

    group = 1 if regex.groups else 0
    current = VersionToken.parse(match.group(group))
    new_version = current.bump_text(segment, redo=redo)

    start, end = match.span(group)
    new_content = content[:start] + new_version + content[end:]
    new_content, reset = RELEASE_DATE_PATTERN.subn(
        lambda m: f"{m.group(1)}{m.group(2)}{UNRELEASED}{m.group(2)}", new_content, count=1
    )
    if reset:
        logger.debug("Reset RELEASE_DATE in %s", path)

    logger.debug("Bumping %s from %s to %s", path, current, new_version)
    return new_version, new_content


def bump_version_file(
    file_path: Path | str,
    segment: str,
    *,
    output: Path | str | None = None,
    redo: RedoFunc | None = None,
    pattern: str | re.Pattern[str] | None = None,
) -> str:
    """Bump the version in a file and write it back.

    This allows reading from one file and writing to another.

    Args:
        file_path: Path to the version file
        segment: Segment to bump (major, minor, patch, pre)
        output: Where to write the result; defaults to file_path
        redo: Custom bump function replacing the built-in algorithm
        pattern: Custom version regex (see :func:`read_version`)

    Returns:
        The new version string
    """
    new_version, new_content = prepare_bump(file_path, segment, redo=redo, pattern=pattern)
    write_text_atomic(output if output is not None else file_path, new_content)
    return new_version
