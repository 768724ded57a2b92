"""Configuration models for reissue-py.

Configuration lives in ``[tool.reissue]`` of ``pyproject.toml``::

    [tool.reissue]
    version_file = "src/my_package/__version__.py"

    [tool.reissue.changelog]
    path = "CHANGELOG.md"
    version_limit = 2
    retain_dir = "changelogs"

    [tool.reissue.fragments]
    source = "git"            # or a directory such as "changelog.d"
    clear = false
    tag_pattern = '^v(\\d+\\.\\d+\\.\\d+.*)$'
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reissue_py.core.changelog import DEFAULT_SECTIONS, normalize_sections
from reissue_py.core.fragments import GIT_TRAILERS
from reissue_py.core.updater import DEFAULT_VERSION_LIMIT


class ChangelogConfig(BaseModel):
    """Changelog file settings."""

    model_config = ConfigDict(extra="forbid")

    path: Path = Path("CHANGELOG.md")
    version_limit: int = Field(default=DEFAULT_VERSION_LIMIT, ge=1)
    retain_dir: Path | None = None
    sections: list[str] = Field(default_factory=lambda: list(DEFAULT_SECTIONS))

    @field_validator("sections", mode="before")
    @classmethod
    def _normalize_sections(cls, value: object) -> list[str]:
        if isinstance(value, str):
            return normalize_sections(value)
        if isinstance(value, (list, tuple)):
            return normalize_sections(str(item) for item in value)
        raise ValueError("sections must be a string or a list of strings")


class FragmentConfig(BaseModel):
    """Where pending changelog entries come from."""

    model_config = ConfigDict(extra="forbid")

    source: str | None = None
    clear: bool = False
    tag_pattern: str | None = None

    @field_validator("source")
    @classmethod
    def _empty_source_disables(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("tag_pattern")
    @classmethod
    def _valid_tag_pattern(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            compiled = re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        if compiled.groups < 1:
            raise ValueError("tag_pattern needs a capture group for the version")
        return value

    @property
    def uses_git(self) -> bool:
        return self.source == GIT_TRAILERS

    @property
    def directory(self) -> Path | None:
        if self.source is None or self.uses_git:
            return None
        return Path(self.source)


class ReissueConfig(BaseModel):
    """Root configuration for reissue-py."""

    model_config = ConfigDict(extra="forbid")

    version_file: Path | None = None
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    fragments: FragmentConfig = Field(default_factory=FragmentConfig)

    def resolve(self, root: Path) -> ReissueConfig:
        """Return a copy with relative paths anchored at root."""

        def anchor(path: Path | None) -> Path | None:
            if path is None or path.is_absolute():
                return path
            return root / path

        changelog = self.changelog.model_copy(
            update={
                "path": anchor(self.changelog.path),
                "retain_dir": anchor(self.changelog.retain_dir),
            }
        )
        fragments = self.fragments
        if fragments.directory is not None:
            fragments = fragments.model_copy(
                update={"source": str(anchor(fragments.directory))}
            )
        return self.model_copy(
            update={
                "version_file": anchor(self.version_file),
                "changelog": changelog,
                "fragments": fragments,
            }
        )
