"""Config commands.

Show, locate and initialize the engine settings file.
"""

import sys
from typing import Annotated

import typer
from rich.table import Table

from forcerm.cli.types import get_settings
from forcerm.core.paths import get_settings_path
from forcerm.core.platform import detect_capabilities
from forcerm.core.settings import EngineSettings, SettingsError, save_settings
from forcerm.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and manage engine settings.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the effective settings and host capabilities."""
    settings = get_settings()
    caps = detect_capabilities()

    table = Table(
        title="forcerm Settings",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", style="header")
    table.add_column("Value")

    for name, value in settings.model_dump().items():
        table.add_row(name, "-" if value is None else str(value))
    table.add_row("log_dir (effective)", str(settings.effective_log_dir))

    console.print(table)
    console.print(f"\n[muted]Platform:[/muted] {sys.platform}")
    elevated = "[success]yes[/success]" if caps.elevated else "[warning]no[/warning]"
    console.print(f"[muted]Elevated:[/muted] {elevated}")
    if caps.commands:
        console.print(f"[muted]Helper commands:[/muted] {', '.join(sorted(caps.commands))}")


@app.command()
def path() -> None:
    """Print the location of the settings file."""
    typer.echo(get_settings_path())


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file with default values."""
    settings_path = get_settings_path()
    if settings_path.exists() and not force:
        print_info(f"Settings file already exists: {settings_path}")
        print_info("Use --force to overwrite it.")
        return

    try:
        saved = save_settings(EngineSettings(), settings_path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Settings written to {saved}")
