"""CLI commands for forcerm.

This package contains all subcommand implementations.
"""

from forcerm.cli.commands import config, info, preview, run

__all__ = ["config", "info", "preview", "run"]
