"""
y2m CLI - bulk checkout of the YaST and libyui repositories

A command-line tool keeping a flat directory of module checkouts by:
1. Listing the repositories of the yast and libyui GitHub organizations
2. Cloning modules (SSH or read-only), one directory per module
3. Pulling updates and checking out a branch/tag across many modules

Module sets: ALL (every module), FAV (the Y2MFAV favorites in ~/.y2m) or
explicit module names, with or without the "yast-" prefix.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from y2m import __version__
from y2m.config import Settings
from y2m.exceptions import ConfigError, ListingFetchError
from y2m.pipeline import ModulePipeline
from y2m.schemas import RunSummary

app = typer.Typer(
    name="y2m",
    help="Check out and update the YaST and libyui repositories in bulk.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def _pipeline(ctx: typer.Context) -> ModulePipeline:
    """Load settings and build the pipeline on first use.

    Deferred past argument parsing so a usage error creates no files.
    """
    state = ctx.ensure_object(dict)
    if "pipeline" not in state:
        try:
            settings = Settings.load(
                config_file=state.get("config"),
                cache_dir=state.get("cache_dir"),
                work_dir=state.get("work_dir"),
            )
        except ConfigError as e:
            err_console.print(f"[red]❌ Error: {e}[/red]")
            raise typer.Exit(1)
        state["pipeline"] = ModulePipeline(settings, console=console, err_console=err_console)
    return state["pipeline"]


def _print_summary(summary: RunSummary) -> None:
    console.print(
        f"\n[bold]📊 Modules:[/bold] [green]{len(summary.done)}[/green] done, "
        f"[yellow]{len(summary.skipped)}[/yellow] skipped, "
        f"[dim]{len(summary.removed)}[/dim] removed upstream, "
        f"[red]{len(summary.failed)}[/red] failed"
    )


@app.callback()
def setup(
    ctx: typer.Context,
    work_dir: Optional[Path] = typer.Option(
        None,
        "--work-dir",
        "-C",
        help="Directory holding the module checkouts (default: current directory)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Configuration file (default: ~/.y2m)",
    ),
    cache_dir: Optional[Path] = typer.Option(
        None,
        "--cache-dir",
        help="Repository listing cache (default: user cache directory)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Check out and update the YaST and libyui repositories in bulk.

    Examples:
        y2m clone core network
        y2m read-only ALL
        y2m pull
        y2m checkout SLE-15-SP5 FAV
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    ctx.obj = {"config": config, "cache_dir": cache_dir, "work_dir": work_dir}


@app.command("list")
@app.command("li", hidden=True)
def list_repositories(ctx: typer.Context):
    """List the repositories of both organizations."""
    pipeline = _pipeline(ctx)
    try:
        listings = pipeline.list_repositories()
    except ListingFetchError as e:
        err_console.print(f"[red]❌ Error: {e}[/red]")
        raise typer.Exit(1)

    for organization, names in listings.items():
        console.print(f"\n[bold cyan]{organization}[/bold cyan] ({len(names)} repositories)")
        console.print(" ".join(names))


def _clone(ctx: typer.Context, modules: List[str], read_only: bool) -> None:
    pipeline = _pipeline(ctx)
    try:
        summary = pipeline.clone(modules, read_only=read_only)
    except ListingFetchError as e:
        err_console.print(f"[red]❌ Error: {e}[/red]")
        raise typer.Exit(1)
    _print_summary(summary)


@app.command("clone")
@app.command("cl", hidden=True)
def clone(
    ctx: typer.Context,
    modules: List[str] = typer.Argument(..., help="ALL, FAV or module names"),
):
    """Clone modules over SSH (for committers)."""
    _clone(ctx, list(modules), read_only=False)


@app.command("read-only")
@app.command("ro", hidden=True)
def read_only(
    ctx: typer.Context,
    modules: List[str] = typer.Argument(..., help="ALL, FAV or module names"),
):
    """Clone modules read-only over HTTPS."""
    _clone(ctx, list(modules), read_only=True)


@app.command("pull")
@app.command("up", hidden=True)
def pull(
    ctx: typer.Context,
    modules: Optional[List[str]] = typer.Argument(
        None, help="ALL, FAV or module names (default: all checked-out modules)"
    ),
):
    """Pull updates into checked-out modules."""
    summary = _pipeline(ctx).pull(list(modules or []))
    _print_summary(summary)


@app.command("checkout")
@app.command("co", hidden=True)
@app.command("br", hidden=True)
def checkout(
    ctx: typer.Context,
    branch: str = typer.Argument(..., help="Branch or tag to check out"),
    modules: Optional[List[str]] = typer.Argument(
        None, help="ALL, FAV or module names (default: all checked-out modules)"
    ),
):
    """Check out a branch or tag in checked-out modules."""
    summary = _pipeline(ctx).checkout(branch, list(modules or []))
    _print_summary(summary)


@app.command("help")
def show_help(ctx: typer.Context):
    """Show usage."""
    typer.echo(ctx.parent.get_help())


@app.command()
def version():
    """Show the version of y2m."""
    console.print(f"[bold cyan]y2m[/bold cyan] v{__version__}")


def main():
    """Entry point for the CLI.

    Usage errors (unknown command, missing argument) exit with status 1
    instead of the usual status 2.
    """
    try:
        app()
    except SystemExit as e:
        sys.exit(1 if e.code == 2 else e.code)


if __name__ == "__main__":
    main()
