"""Main CLI entry point for promrw."""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from promrw import __version__
from promrw.cli import config, push
from promrw.config import get_settings
from promrw.exceptions import PromRWError
from promrw.logging_config import setup_logging

app = typer.Typer(
    name="promrw",
    help="promrw - push metrics to Prometheus remote write endpoints",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()
console_err = Console(stderr=True)


class CLIState:
    """Global CLI state."""

    verbose: bool = False


state = CLIState()


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"promrw version: {__version__}")
        console.print(f"Python: {sys.version.split()[0]}")
        raise typer.Exit(0)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version information and exit",
        callback=version_callback,
        is_eager=True,
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    promrw - Prometheus remote write client

    Push samples straight to Prometheus, Mimir, VictoriaMetrics or any other
    remote write compatible endpoint.
    """
    state.verbose = verbose

    if config_file:
        get_settings(config_path=config_file, reload=True)

    setup_logging("DEBUG" if verbose else None)

    ctx.obj = state


def handle_error(error: PromRWError) -> None:
    """Print a library error with a user-friendly message and exit."""
    console_err.print(f"\n[red]Error:[/red] {escape(error.message)}")

    if state.verbose and error.context:
        console_err.print("\n[yellow]Context:[/yellow]")
        for key, value in error.context.items():
            console_err.print(f"  {key}: {escape(str(value))}")

    sys.exit(1)


app.command("push")(push.push)
app.add_typer(config.app, name="config", help="Configuration management")


def main_cli() -> None:
    """Entry point for CLI application with error handling."""
    try:
        app()
    except PromRWError as e:
        handle_error(e)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    main_cli()
