"""CLI package for forcerm.

This package contains the Typer application and all subcommands.
"""

from forcerm.cli.main import app

__all__ = ["app"]
