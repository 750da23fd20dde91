"""Utility modules for forcerm.

This module exports commonly used utility functions.
"""

from forcerm.utils.formatting import (
    console,
    err_console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from forcerm.utils.shell import CommandResult, command_exists, run_command, try_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "try_command",
]
