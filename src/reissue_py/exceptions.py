"""Exception hierarchy for reissue-py.

Every error raised on purpose by this package derives from
:class:`ReissueError`, so callers (and the CLI) can catch a single type.
"""

from __future__ import annotations


class ReissueError(Exception):
    """Base class for all reissue-py errors."""


class FormatError(ReissueError):
    """Input text lacks a version or changelog structure that was required."""


class InvalidSegmentError(ReissueError, ValueError):
    """A bump was requested for an unknown version segment."""

    def __init__(self, segment: str, valid: tuple[str, ...] | list[str]) -> None:
        self.segment = segment
        self.valid = tuple(valid)
        super().__init__(
            f"Invalid version segment {segment!r}. Expected one of: {', '.join(self.valid)}"
        )


class FragmentSourceError(ReissueError):
    """A fragment source was configured with an unsupported option."""


class ProjectError(ReissueError):
    """A project file (version file, changelog) could not be used."""


class ConfigNotFoundError(ReissueError):
    """No pyproject.toml could be located."""


class ConfigValidationError(ReissueError):
    """The [tool.reissue] configuration is invalid."""


class GitError(ReissueError):
    """A git command exited with a non-zero status.

    The external tool's output is kept verbatim so it can be reported.
    """

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.command = command or []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)

    def __str__(self) -> str:
        details = [self.args[0]]
        if self.command:
            details.append(f"Command: {' '.join(self.command)}")
        if self.returncode is not None:
            details.append(f"Exit status: {self.returncode}")
        if self.stdout.strip():
            details.append(f"STDOUT: {self.stdout.strip()}")
        if self.stderr.strip():
            details.append(f"STDERR: {self.stderr.strip()}")
        return "\n".join(details)
