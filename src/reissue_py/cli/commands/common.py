"""Helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from reissue_py.config import load_config
from reissue_py.core.fragments import create_fragment_source
from reissue_py.vcs.git import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from reissue_py.config.models import ReissueConfig
    from reissue_py.core.fragments import FragmentSource
    from reissue_py.vcs.git import ExternalRepository


def fail(err_console: Console, message: str, error: Exception | None = None) -> NoReturn:
    """Print an error and exit with status 1."""
    if error is None:
        err_console.print(f"[red]Error:[/] {message}")
        raise SystemExit(1)
    err_console.print(f"[red]{message}:[/] {error}")
    raise SystemExit(1) from error


def load_project(path: str | None, err_console: Console) -> tuple[Path, ReissueConfig]:
    """Resolve the project directory and load its configuration."""
    project_path = Path(path) if path else Path.cwd()
    try:
        config = load_config(project_path)
    except Exception as e:
        fail(err_console, "Error loading config", e)
    return project_path, config


def fragment_source(
    config: ReissueConfig,
    project_path: Path,
    repository: ExternalRepository | None = None,
) -> FragmentSource:
    """Build the configured fragment source."""
    fragments = config.fragments
    if fragments.uses_git and repository is None:
        repository = GitRepository(project_path)
    return create_fragment_source(
        fragments.source,
        valid_sections=config.changelog.sections,
        tag_pattern=fragments.tag_pattern,
        repository=repository,
    )


def require_version_file(config: ReissueConfig, err_console: Console) -> Path:
    """Return the configured version file or exit."""
    if config.version_file is None:
        fail(
            err_console,
            "No version file configured.\n"
            "Set [cyan]version_file[/] under [cyan]\\[tool.reissue][/] in pyproject.toml.",
        )
    return config.version_file
