"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum
from pathlib import Path

import typer

from forcerm.core.platform import detect_capabilities
from forcerm.core.settings import EngineSettings, SettingsError, load_settings
from forcerm.engine import DeletionEngine
from forcerm.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def get_settings(path: Path | None = None) -> EngineSettings:
    """Load engine settings, exiting with an error if they are invalid.

    Args:
        path: Settings file override.

    Returns:
        Validated EngineSettings.

    Raises:
        typer.Exit: If the settings file cannot be loaded.
    """
    try:
        return load_settings(path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def create_engine(settings: EngineSettings | None = None) -> DeletionEngine:
    """Create a deletion engine for the current host.

    Args:
        settings: Engine settings. Loaded from disk when None.

    Returns:
        DeletionEngine bound to the detected host capabilities.
    """
    return DeletionEngine(settings or get_settings(), detect_capabilities())
