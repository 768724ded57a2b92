"""Implementation of the fragment commands: 'preview', 'clear-fragments'
and 'trailer-bump'.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from reissue_py.cli.commands.common import (
    fail,
    fragment_source,
    load_project,
    require_version_file,
)
from reissue_py.core.changelog import DEFAULT_SECTIONS
from reissue_py.core.fragments import DirectoryFragmentSource, GitTrailerFragmentSource
from reissue_py.vcs.git import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from reissue_py.core.changelog import Changes


def run_preview(path: str | None, console: Console, err_console: Console) -> None:
    """Run the preview command.

    Args:
        path: Optional path to project directory
        console: Console for standard output
        err_console: Console for error output
    """
    project_path, config = load_project(path, err_console)
    if config.fragments.source is None:
        console.print(
            "[yellow]Fragments are disabled.[/] Set [cyan]source[/] under "
            "[cyan]\\[tool.reissue.fragments][/] to collect changelog entries."
        )
        return

    try:
        source = fragment_source(config, project_path)
        entries = source.read()
    except Exception as e:
        fail(err_console, "Error reading fragments", e)

    if isinstance(source, GitTrailerFragmentSource):
        tag = source.last_tag()
        console.print(f"[dim]Comparing against:[/] {tag or 'the first commit'}")
    else:
        console.print(f"[dim]Fragment directory:[/] {config.fragments.directory}")

    if not entries:
        console.print("[yellow]No pending changelog entries.[/]")
        return

    table = Table(title="Pending changelog entries", show_lines=False)
    table.add_column("Section", style="cyan", no_wrap=True)
    table.add_column("Entry")
    total = 0
    for section, section_entries in _ordered(entries):
        for entry in section_entries:
            table.add_row(section, escape(entry))
            total += 1
    console.print(table)
    noun = "entry" if total == 1 else "entries"
    console.print(f"\n[bold]{total}[/] {noun} in {len(entries)} section(s)")


def _ordered(entries: Changes) -> list[tuple[str, list[str]]]:
    """Sort sections in Keep a Changelog order, unknown sections last."""
    known = [(s, entries[s]) for s in DEFAULT_SECTIONS if s in entries]
    rest = sorted((s, e) for s, e in entries.items() if s not in DEFAULT_SECTIONS)
    return known + rest


def run_clear_fragments(
    path: str | None,
    execute: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the clear-fragments command.

    Args:
        path: Optional path to project directory
        execute: Whether to actually delete the files
        console: Console for standard output
        err_console: Console for error output
    """
    _, config = load_project(path, err_console)
    directory = config.fragments.directory
    if directory is None:
        console.print("[yellow]No fragment directory configured. Nothing to clear.[/]")
        return

    if not execute:
        files = DirectoryFragmentSource(directory).fragment_files()
        listing = "\n".join(f"  • {escape(p.name)}" for p in files) or "  (no files)"
        console.print(
            Panel(
                f"[bold]Would delete fragment files in [cyan]{directory}[/]:[/]\n\n{listing}",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    from reissue_py.release import clear_fragments

    try:
        clear_fragments(directory)
    except OSError as e:
        fail(err_console, "Error clearing fragments", e)
    console.print(f"  [green]✓[/] Cleared fragments in {directory}")


def run_trailer_bump(
    path: str | None,
    execute: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the trailer-bump command.

    Args:
        path: Optional path to project directory
        execute: Whether to actually apply changes
        console: Console for standard output
        err_console: Console for error output
    """
    project_path, config = load_project(path, err_console)
    version_file = require_version_file(config, err_console)

    try:
        source = GitTrailerFragmentSource(
            GitRepository(project_path),
            tag_pattern=config.fragments.tag_pattern,
            valid_sections=config.changelog.sections,
        )
        bump = source.read_version_bump()
    except Exception as e:
        fail(err_console, "Error reading commit trailers", e)

    if bump is None:
        console.print("[yellow]No Version: trailer found since the last release. Nothing to do.[/]")
        return

    if not execute:
        from reissue_py.project.version_file import read_version

        try:
            current = read_version(version_file)
        except Exception as e:
            fail(err_console, "Error reading version", e)
        console.print(
            Panel(
                "[bold]Commit trailers request a version bump:[/]\n\n"
                f"  • Bump [cyan]{bump}[/] of {current} in [cyan]{version_file.name}[/]\n"
                f"  • Last release tag: {source.last_tag() or 'none'}",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    from reissue_py.release import bump_from_trailers

    try:
        new_version = bump_from_trailers(version_file, source)
    except Exception as e:
        fail(err_console, "Error bumping version", e)

    if new_version is None:
        console.print("[yellow]Version was already bumped since the last release.[/]")
        return
    console.print(f"  [green]✓[/] Bumped {version_file.name} to [green]{new_version}[/]")
