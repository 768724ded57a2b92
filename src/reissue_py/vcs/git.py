"""Git access for fragment harvesting.

Only two questions are ever asked of the repository: which tags match a
pattern (newest created first) and which commits follow a given ref. They
are expressed by :class:`ExternalRepository` so the trailer logic can be
tested against an in-memory fake; :class:`GitRepository` answers them by
running the ``git`` binary.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from reissue_py.exceptions import GitError

if TYPE_CHECKING:
    import re

logger = logging.getLogger(__name__)

# %h = short hash, %x00 = NUL separator, %B = raw body
_LOG_FORMAT = "%h%x00%B%x00"


@dataclass(frozen=True)
class Commit:
    """A commit reduced to what trailer parsing needs."""

    sha: str
    message: str


@runtime_checkable
class ExternalRepository(Protocol):
    """Read-only view of a version-control history."""

    def is_available(self) -> bool:
        """Whether the tool and a repository are both present."""
        ...

    def list_tags_matching(self, pattern: re.Pattern[str]) -> list[str]:
        """Tags whose name matches pattern, most recently created first."""
        ...

    def commits_since(self, ref: str | None) -> list[Commit]:
        """Commits after ref (all commits when ref is None), oldest first."""
        ...


class GitRepository:
    """ExternalRepository backed by the git command line."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else Path.cwd()

    def is_available(self) -> bool:
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--git-dir"],
                capture_output=True,
                text=True,
                check=False,
                cwd=self.path,
            )
        except (FileNotFoundError, NotADirectoryError):
            logger.debug("git executable or working directory not available")
            return False
        if result.returncode != 0:
            logger.debug("%s is not inside a git repository", self.path)
            return False
        return True

    def list_tags_matching(self, pattern: re.Pattern[str]) -> list[str]:
        output = self._run(
            "for-each-ref",
            "--sort=-creatordate",
            "--format=%(refname:short)",
            "refs/tags",
        )
        return [tag for tag in output.splitlines() if tag and pattern.search(tag)]

    def commits_since(self, ref: str | None) -> list[Commit]:
        revision = f"{ref}..HEAD" if ref else "HEAD"
        try:
            output = self._run("log", revision, "--reverse", f"--format={_LOG_FORMAT}")
        except GitError as e:
            # a repository without any commit has no HEAD yet
            if "does not have any commits" in e.stderr or "unknown revision" in e.stderr:
                logger.debug("No commits found for %s", revision)
                return []
            raise
        return parse_log_output(output)

    def _run(self, *args: str) -> str:
        """Run a git command and return its stdout.

        Raises:
            GitError: If git exits with a non-zero status
        """
        command = ["git", *args]
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {args[0]} failed with exit code {e.returncode}",
                command=command,
                returncode=e.returncode,
                stdout=e.stdout or "",
                stderr=e.stderr or "",
            ) from e
        return result.stdout


def parse_log_output(output: str) -> list[Commit]:
    """Split ``git log --format=%h%x00%B%x00`` output into commits."""
    parts = output.split("\x00")
    commits = []
    # pairs of (sha, message); the trailing element after the last NUL is padding
    for index in range(0, len(parts) - 1, 2):
        sha = parts[index].strip()
        if sha:
            commits.append(Commit(sha=sha, message=parts[index + 1]))
    return commits
