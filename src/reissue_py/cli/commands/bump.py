"""Implementation of the 'bump' command.

The bump command advances the version file and opens a new record for
that version at the top of the changelog.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel

from reissue_py.cli.commands.common import (
    fail,
    fragment_source,
    load_project,
    require_version_file,
)

if TYPE_CHECKING:
    from rich.console import Console


def run_bump(
    path: str | None,
    segment: str,
    date: str,
    execute: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the bump command.

    Args:
        path: Optional path to project directory
        segment: Version segment to bump (major, minor, patch, pre)
        date: Date for the new changelog record
        execute: Whether to actually apply changes
        console: Console for standard output
        err_console: Console for error output
    """
    project_path, config = load_project(path, err_console)
    version_file = require_version_file(config, err_console)

    from reissue_py.project.version_file import prepare_bump, read_version

    try:
        current_version = read_version(version_file)
        next_version, _ = prepare_bump(version_file, segment)
    except Exception as e:
        err_console.print(f"[red]Error bumping version:[/] {e}")
        raise SystemExit(1) from e

    changelog_path = config.changelog.path
    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    console.print(
        f"\n{mode_str} - Updating from [cyan]{current_version}[/] to [green]{next_version}[/]\n"
    )

    if not execute:
        console.print(
            Panel(
                "[bold]Would make the following changes:[/]\n\n"
                f"  • Update version in [cyan]{version_file.name}[/]\n"
                f"  • Add [cyan]{next_version}[/] ({date}) to [cyan]{changelog_path.name}[/]",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    from reissue_py.release import reissue

    source = fragment_source(config, project_path)
    try:
        new_version = reissue(
            version_file,
            changelog_file=changelog_path if changelog_path.exists() else None,
            segment=segment,
            date=date,
            version_limit=config.changelog.version_limit,
            fragment=source,
            retain=config.changelog.retain_dir,
        )
    except Exception as e:
        fail(err_console, "Error updating release files", e)

    console.print(f"  [green]✓[/] Updated version in {version_file.name}")
    if changelog_path.exists():
        console.print(f"  [green]✓[/] Updated {changelog_path.name}")
    else:
        console.print(f"  [yellow]![/] {changelog_path.name} not found; run [cyan]reissue init[/]")

    if config.fragments.clear and config.fragments.directory is not None:
        source.clear()
        console.print(f"  [green]✓[/] Cleared fragments in {config.fragments.directory}")

    console.print(
        Panel(
            f"[green]Successfully bumped to version {new_version}![/]\n\n"
            "Next steps:\n"
            "  1. Review the changes\n"
            f"  2. Commit: [cyan]git add . && git commit -m 'Bump version to {new_version}'[/]\n"
            "  3. Before releasing: [cyan]reissue finalize --execute[/]",
            title="[green]Bump Complete[/]",
            border_style="green",
        )
    )
