"""Implementation of the 'finalize' command."""

from __future__ import annotations

from datetime import date as date_type
from typing import TYPE_CHECKING

from rich.panel import Panel

from reissue_py.cli.commands.common import fail, fragment_source, load_project

if TYPE_CHECKING:
    from rich.console import Console


def run_finalize(
    path: str | None,
    date: str | None,
    execute: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the finalize command.

    Args:
        path: Optional path to project directory
        date: Release date; today when omitted
        execute: Whether to actually apply changes
        console: Console for standard output
        err_console: Console for error output
    """
    project_path, config = load_project(path, err_console)
    changelog_path = config.changelog.path
    if not changelog_path.exists():
        fail(err_console, f"{changelog_path.name} not found. Run [cyan]reissue init[/] first.")

    release_date = date or date_type.today().isoformat()

    from reissue_py.release import read_changelog

    try:
        changelog = read_changelog(changelog_path)
    except Exception as e:
        fail(err_console, f"Error reading {changelog_path.name}", e)

    pending = changelog.unreleased
    if pending is None:
        latest = changelog.latest()
        if latest is None:
            fail(err_console, f"{changelog_path.name} has no versions to finalize")
        console.print(
            f"[yellow]Nothing to finalize.[/] Latest version [cyan]{latest.version}[/] "
            f"was released on {latest.date}."
        )
        return

    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    console.print(
        f"\n{mode_str} - Finalizing [cyan]{pending.version}[/] on [green]{release_date}[/]\n"
    )

    if not execute:
        console.print(
            Panel(
                "[bold]Would make the following changes:[/]\n\n"
                f"  • Date [cyan]{pending.version}[/] as {release_date} "
                f"in [cyan]{changelog_path.name}[/]",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    from reissue_py.release import finalize

    try:
        version, finalized_on = finalize(
            release_date,
            changelog_file=changelog_path,
            fragment=fragment_source(config, project_path),
            retain=config.changelog.retain_dir,
        )
    except Exception as e:
        fail(err_console, "Error finalizing changelog", e)

    console.print(f"  [green]✓[/] Updated {changelog_path.name}")
    console.print(
        Panel(
            f"[green]Finalized {version} on {finalized_on}![/]",
            title="[green]Finalize Complete[/]",
            border_style="green",
        )
    )
