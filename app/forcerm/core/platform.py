"""Host capability detection.

The engine needs to know two things about the host: which family of
removal tools it offers (Windows ``attrib``/``takeown``/``icacls`` or
POSIX ``rm``/``chattr``) and whether the current process runs elevated.
Both are computed once by :func:`detect_capabilities` and passed into
the engine explicitly.
"""

import getpass
import logging
import os
import sys
from dataclasses import dataclass

from forcerm.utils.shell import command_exists, try_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HostCapabilities:
    """What the current host can do to unlock and remove items.

    Attributes:
        windows: Host uses Windows attributes, ownership and ACLs.
        elevated: Process runs as Administrator / root.
        user: Account name permissions are granted to.
        commands: Names of optional helper commands found on PATH.
    """

    windows: bool
    elevated: bool
    user: str
    commands: frozenset[str] = frozenset()

    def has(self, command: str) -> bool:
        """Check whether a helper command is available."""
        return command in self.commands


# Helper commands each platform family may use
_WINDOWS_COMMANDS: tuple[str, ...] = ("attrib", "takeown", "icacls", "cmd")
_POSIX_COMMANDS: tuple[str, ...] = ("rm", "rmdir", "chattr")


def is_elevated(windows: bool | None = None) -> bool:
    """Check whether the current process has administrative rights.

    On Windows ``net session`` only succeeds for Administrators; on
    POSIX hosts the effective uid is checked.

    Args:
        windows: Override platform detection (for testing).

    Returns:
        True if running elevated.
    """
    if windows is None:
        windows = sys.platform == "win32"

    if windows:
        result = try_command(["net", "session"], timeout=5.0)
        return result is not None and result.success

    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "Everyone"


def detect_capabilities() -> HostCapabilities:
    """Probe the host once and describe its removal capabilities.

    Returns:
        HostCapabilities for the running host.
    """
    windows = sys.platform == "win32"
    candidates = _WINDOWS_COMMANDS if windows else _POSIX_COMMANDS
    commands = frozenset(name for name in candidates if command_exists(name))
    elevated = is_elevated(windows)

    caps = HostCapabilities(
        windows=windows,
        elevated=elevated,
        user=_current_user(),
        commands=commands,
    )
    if elevated:
        logger.info("Running with administrative privileges")
    else:
        logger.info("Not running elevated - some operations may fail")
    return caps
