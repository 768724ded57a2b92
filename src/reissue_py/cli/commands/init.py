"""Implementation of the 'init' command."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.syntax import Syntax

from reissue_py.cli.commands.common import fail

if TYPE_CHECKING:
    from rich.console import Console

SAMPLE_CONFIG = """\
[tool.reissue]
version_file = "src/my_package/__init__.py"

[tool.reissue.changelog]
path = "CHANGELOG.md"
version_limit = 2

[tool.reissue.fragments]
source = "changelog.d"    # or "git" for commit trailers
clear = true
"""


def run_init(path: str | None, console: Console, err_console: Console) -> None:
    """Run the init command.

    Creates a starter CHANGELOG.md when the project has none and prints
    the configuration block to add to pyproject.toml.

    Args:
        path: Optional path to project directory
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()
    if not project_path.is_dir():
        fail(err_console, f"{project_path} is not a directory")

    from reissue_py.release import DEFAULT_CHANGELOG, generate_changelog

    changelog_path = project_path / DEFAULT_CHANGELOG
    if changelog_path.exists():
        console.print(f"  [dim]•[/] {DEFAULT_CHANGELOG} already exists, leaving it alone")
    else:
        try:
            generate_changelog(changelog_path)
        except OSError as e:
            fail(err_console, f"Error creating {DEFAULT_CHANGELOG}", e)
        console.print(f"  [green]✓[/] Created {DEFAULT_CHANGELOG}")

    console.print(
        Panel(
            Syntax(SAMPLE_CONFIG, "toml"),
            title="Add to [cyan]pyproject.toml[/]",
            border_style="blue",
        )
    )
