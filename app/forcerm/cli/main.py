"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from forcerm import __version__
from forcerm.cli.commands import config, info, preview, run
from forcerm.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="forcerm",
    help="Force-delete stubborn folders.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"forcerm version {__version__}")
        raise typer.Exit()


def _enable_debug_logging() -> None:
    """Route application debug logs through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """forcerm - Force-delete stubborn folders.

    Removes folders that resist ordinary deletion: read-only, hidden or
    system items, files owned by other accounts and files held open by
    running processes.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    if verbose:
        _enable_debug_logging()


# Register commands
app.command(name="run")(run.run_deletion)
app.command(name="preview")(preview.preview_deletion)
app.command(name="info")(info.folder_info)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
