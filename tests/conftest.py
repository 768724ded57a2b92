"""Shared fixtures."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from reissue_py.vcs.git import Commit

FIXTURES = Path(__file__).parent / "fixtures"


class FakeRepository:
    """In-memory history for trailer tests.

    Commits are listed oldest first. ``tags`` maps a tag name to the index
    of the commit it points at and is kept in creation order, newest first.
    """

    def __init__(
        self,
        commits: list[Commit] | None = None,
        tags: dict[str, int] | None = None,
        available: bool = True,
    ) -> None:
        self.commits = commits or []
        self.tags = tags or {}
        self.available = available
        self.requested_refs: list[str | None] = []

    def is_available(self) -> bool:
        return self.available

    def list_tags_matching(self, pattern: re.Pattern[str]) -> list[str]:
        return [tag for tag in self.tags if pattern.search(tag)]

    def commits_since(self, ref: str | None) -> list[Commit]:
        self.requested_refs.append(ref)
        if ref is None:
            return list(self.commits)
        return self.commits[self.tags[ref] + 1 :]


@pytest.fixture
def changelog_fixture() -> str:
    """Hand-edited changelog with irregular spacing."""
    return (FIXTURES / "changelog.md").read_text(encoding="utf-8")


@pytest.fixture
def version_file(tmp_path: Path) -> Path:
    """A Python version module at 0.1.0."""
    path = tmp_path / "version.py"
    path.write_text('__version__ = "0.1.0"\nRELEASE_DATE = "2024-01-01"\n')
    return path


@pytest.fixture
def fake_repository() -> type[FakeRepository]:
    """Factory for in-memory repositories."""
    return FakeRepository


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Project with [tool.reissue] configuration, a version file and a changelog."""
    project = tmp_path / "project"
    (project / "src" / "demo").mkdir(parents=True)
    (project / "src" / "demo" / "__init__.py").write_text('__version__ = "1.2.3"\n')
    (project / "changelog.d").mkdir()
    (project / "CHANGELOG.md").write_text(
        "# Changelog\n\n## [1.2.3] - 2024-01-01\n\n### Added\n\n- First\n"
    )
    (project / "pyproject.toml").write_text(
        """\
[project]
name = "demo"
version = "1.2.3"

[tool.reissue]
version_file = "src/demo/__init__.py"

[tool.reissue.changelog]
version_limit = 3
sections = ["added", "fixed", "Performance"]

[tool.reissue.fragments]
source = "changelog.d"
clear = true
"""
    )
    return project
