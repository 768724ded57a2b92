"""Command line entry point for reissue-py."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import typer
from rich.console import Console
from rich.logging import RichHandler

from reissue_py import __version__

app = typer.Typer(
    name="reissue",
    help="Keep a changelog and a version file in step across releases.",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


@dataclass
class CliState:
    """Options shared by every command."""

    path: str | None = None


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    path: str | None = typer.Option(
        None, "--path", "-p", help="Project directory (defaults to the current directory)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Keep a changelog and a version file in step across releases."""
    if version:
        console.print(f"reissue-py {__version__}")
        raise typer.Exit(0)
    _configure_logging(verbose)
    ctx.obj = CliState(path=path)


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj if isinstance(ctx.obj, CliState) else CliState()


@app.command()
def bump(
    ctx: typer.Context,
    segment: str = typer.Argument("patch", help="major, minor, patch or pre"),
    date: str = typer.Option("Unreleased", "--date", help="Date for the new changelog record"),
    execute: bool = typer.Option(False, "--execute", help="Apply the changes"),
) -> None:
    """Bump the version file and open a new changelog record."""
    from reissue_py.cli.commands.bump import run_bump

    run_bump(_state(ctx).path, segment, date, execute, console, err_console)


@app.command()
def finalize(
    ctx: typer.Context,
    date: str | None = typer.Argument(None, help="Release date (defaults to today)"),
    execute: bool = typer.Option(False, "--execute", help="Apply the changes"),
) -> None:
    """Set the release date of the unreleased changelog record."""
    from reissue_py.cli.commands.finalize import run_finalize

    run_finalize(_state(ctx).path, date, execute, console, err_console)


@app.command()
def reformat(
    ctx: typer.Context,
    limit: int | None = typer.Option(None, "--limit", min=1, help="Versions to keep"),
    execute: bool = typer.Option(False, "--execute", help="Apply the changes"),
) -> None:
    """Rewrite the changelog in canonical form."""
    from reissue_py.cli.commands.reformat import run_reformat

    run_reformat(_state(ctx).path, limit, execute, console, err_console)


@app.command()
def preview(ctx: typer.Context) -> None:
    """Show the changelog entries pending in fragments or git trailers."""
    from reissue_py.cli.commands.fragments import run_preview

    run_preview(_state(ctx).path, console, err_console)


@app.command("clear-fragments")
def clear_fragments(
    ctx: typer.Context,
    execute: bool = typer.Option(False, "--execute", help="Delete the files"),
) -> None:
    """Delete consumed fragment files."""
    from reissue_py.cli.commands.fragments import run_clear_fragments

    run_clear_fragments(_state(ctx).path, execute, console, err_console)


@app.command("trailer-bump")
def trailer_bump(
    ctx: typer.Context,
    execute: bool = typer.Option(False, "--execute", help="Apply the changes"),
) -> None:
    """Bump the version as requested by Version: commit trailers."""
    from reissue_py.cli.commands.fragments import run_trailer_bump

    run_trailer_bump(_state(ctx).path, execute, console, err_console)


@app.command()
def init(ctx: typer.Context) -> None:
    """Create a starter CHANGELOG.md and show the configuration to add."""
    from reissue_py.cli.commands.init import run_init

    run_init(_state(ctx).path, console, err_console)


def main() -> None:
    app()
