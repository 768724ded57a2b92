"""Implementation of the 'reformat' command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.syntax import Syntax

from reissue_py.cli.commands.common import fail, load_project

if TYPE_CHECKING:
    from rich.console import Console


def run_reformat(
    path: str | None,
    limit: int | None,
    execute: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the reformat command.

    Args:
        path: Optional path to project directory
        limit: Number of versions to keep; the configured limit when omitted
        execute: Whether to actually apply changes
        console: Console for standard output
        err_console: Console for error output
    """
    _, config = load_project(path, err_console)
    changelog_path = config.changelog.path
    version_limit = limit if limit is not None else config.changelog.version_limit

    if not execute:
        from reissue_py.core.printer import print_changelog
        from reissue_py.core.updater import reformat as reformat_changelog
        from reissue_py.release import read_changelog

        if not changelog_path.exists():
            console.print(
                f"[yellow]DRY-RUN[/] - {changelog_path.name} not found; "
                "a starter changelog would be created."
            )
            return
        try:
            # retain is left out so a dry run never writes an archive
            changelog = reformat_changelog(
                read_changelog(changelog_path), version_limit=version_limit
            )
        except Exception as e:
            fail(err_console, f"Error reading {changelog_path.name}", e)

        console.print(
            Panel(
                Syntax(print_changelog(changelog), "markdown", word_wrap=True),
                title=f"[yellow]Dry Run Preview[/] - {changelog_path.name}",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    from reissue_py.release import reformat

    try:
        changelog = reformat(
            changelog_path,
            version_limit=version_limit,
            retain=config.changelog.retain_dir,
        )
    except Exception as e:
        fail(err_console, "Error reformatting changelog", e)

    console.print(
        f"  [green]✓[/] Reformatted {changelog_path.name} "
        f"({len(changelog.versions)} version(s) kept)"
    )
