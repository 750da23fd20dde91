"""Escalating single-item deletion.

Each item is removed by walking a ladder of increasingly forceful
strategies until one succeeds:

1. Direct removal (``os.unlink`` / ``os.rmdir``).
2. Clear read-only/hidden/system attributes, then direct removal.
3. The OS forced-removal command (``del /f /q`` / ``rd /q``).
4. Take ownership and grant full control, then the forced-removal command.

Windows hosts get all four rungs. POSIX hosts only get direct removal,
followed by ``rm``/``rmdir`` as a best-effort system delete when those
commands are present. Directory rungs only ever remove empty
directories; anything left inside keeps its parent alive.

The ladder is plain data (a tuple of :class:`Rung`) chosen once from
the host capabilities, and every rung shares the
``attempt(path, timeout) -> bool`` contract.
"""

import logging
import os
import stat
from collections.abc import Callable
from dataclasses import dataclass

from forcerm.core.platform import HostCapabilities
from forcerm.models.items import ItemKind
from forcerm.utils.shell import try_command

logger = logging.getLogger(__name__)

# attempt(path, timeout) -> removed
Attempt = Callable[[str, float], bool]


@dataclass(frozen=True, slots=True)
class Rung:
    """One step of an escalation ladder.

    Attributes:
        name: Short identifier used in logs.
        attempt: Strategy function; returns True once the item is gone.
        timeout: Seconds the strategy's external commands may take.
    """

    name: str
    attempt: Attempt
    timeout: float


def _gone(path: str) -> bool:
    return not os.path.lexists(path)


def _run(args: list[str], timeout: float) -> bool:
    result = try_command(args, timeout=timeout)
    return result is not None and result.success


# =============================================================================
# Strategies
# =============================================================================


def unlink_file(path: str, _timeout: float) -> bool:
    """Remove a file directly. A missing file counts as removed."""
    try:
        os.unlink(path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.debug("unlink failed for %s: %s", path, e)
        return False
    return True


def remove_empty_dir(path: str, _timeout: float) -> bool:
    """Remove an empty directory directly. A missing one counts as removed."""
    try:
        os.rmdir(path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.debug("rmdir failed for %s: %s", path, e)
        return False
    return True


def _clear_attributes(path: str, timeout: float) -> None:
    _run(["attrib", "-r", "-s", "-h", path], timeout)
    try:
        mode = os.lstat(path).st_mode
        os.chmod(path, stat.S_IMODE(mode) | stat.S_IWRITE)
    except OSError as e:
        logger.debug("chmod failed for %s: %s", path, e)


def clear_attributes_then_unlink(path: str, timeout: float) -> bool:
    """Drop read-only/system/hidden flags, then unlink."""
    _clear_attributes(path, timeout)
    return unlink_file(path, timeout)


def clear_attributes_then_rmdir(path: str, timeout: float) -> bool:
    """Drop read-only/system/hidden flags, then remove the empty directory."""
    _clear_attributes(path, timeout)
    return remove_empty_dir(path, timeout)


def force_delete_file_command(path: str, timeout: float) -> bool:
    """Delete a file with ``del /f /q``."""
    _run(["cmd", "/c", "del", "/f", "/q", path], timeout)
    return _gone(path)


def force_remove_dir_command(path: str, timeout: float) -> bool:
    """Remove an empty directory with ``rd /q`` (no ``/s``: never recursive)."""
    _run(["cmd", "/c", "rd", "/q", path], timeout)
    return _gone(path)


def _take_ownership(path: str, user: str, timeout: float) -> None:
    _run(["takeown", "/f", path], timeout)
    _run(["icacls", path, "/grant", f"{user}:F", "/c", "/q"], timeout)


def make_escalated_file_delete(user: str) -> Attempt:
    """Build the ownership-escalation rung for files."""

    def escalated_delete_file(path: str, timeout: float) -> bool:
        _take_ownership(path, user, timeout / 3)
        return force_delete_file_command(path, timeout / 3)

    return escalated_delete_file


def make_escalated_dir_remove(user: str) -> Attempt:
    """Build the ownership-escalation rung for directories."""

    def escalated_remove_dir(path: str, timeout: float) -> bool:
        _take_ownership(path, user, timeout / 3)
        return force_remove_dir_command(path, timeout / 3)

    return escalated_remove_dir


def system_rm(path: str, timeout: float) -> bool:
    """Best-effort ``rm -f`` on POSIX hosts."""
    _run(["rm", "-f", "--", path], timeout)
    return _gone(path)


def system_rmdir(path: str, timeout: float) -> bool:
    """Best-effort ``rmdir`` on POSIX hosts."""
    _run(["rmdir", "--", path], timeout)
    return _gone(path)


# =============================================================================
# Ladders
# =============================================================================


def build_ladder(kind: ItemKind, caps: HostCapabilities) -> tuple[Rung, ...]:
    """Select the escalation ladder for an item kind on this host.

    Args:
        kind: File or directory.
        caps: Capabilities of the host.

    Returns:
        Rungs in the order they should be attempted.
    """
    if caps.windows:
        if kind == ItemKind.FILE:
            return (
                Rung("unlink", unlink_file, 0.3),
                Rung("attributes", clear_attributes_then_unlink, 0.3),
                Rung("del", force_delete_file_command, 0.5),
                Rung("takeown", make_escalated_file_delete(caps.user), 2.0),
            )
        return (
            Rung("rmdir", remove_empty_dir, 0.3),
            Rung("attributes", clear_attributes_then_rmdir, 0.3),
            Rung("rd", force_remove_dir_command, 1.0),
            Rung("takeown", make_escalated_dir_remove(caps.user), 3.0),
        )

    if kind == ItemKind.FILE:
        rungs = [Rung("unlink", unlink_file, 0.3)]
        if caps.has("rm"):
            rungs.append(Rung("rm", system_rm, 1.0))
    else:
        rungs = [Rung("rmdir", remove_empty_dir, 0.3)]
        if caps.has("rmdir"):
            rungs.append(Rung("rmdir-command", system_rmdir, 1.0))
    return tuple(rungs)


class ItemDeleter:
    """Deletes single files or empty directories, escalating as needed.

    The deleter never raises: every failure is reported as ``False``.

    Args:
        caps: Capabilities of the host, selecting the ladders.
    """

    def __init__(self, caps: HostCapabilities) -> None:
        self._caps = caps
        self._ladders = {kind: build_ladder(kind, caps) for kind in ItemKind}

    def __reduce__(self) -> tuple[type["ItemDeleter"], tuple[HostCapabilities]]:
        # Ladders hold closures; rebuild them from the capabilities when
        # the deleter is shipped to a worker process.
        return (ItemDeleter, (self._caps,))

    @property
    def capabilities(self) -> HostCapabilities:
        return self._caps

    def ladder(self, kind: ItemKind) -> tuple[Rung, ...]:
        return self._ladders[kind]

    def delete(self, path: str, kind: ItemKind) -> bool:
        """Delete one item.

        Args:
            path: Absolute path of the item.
            kind: Whether the item is a file or a directory.

        Returns:
            True if the item is gone (including if it was already gone),
            False if every rung failed.
        """
        for step, rung in enumerate(self._ladders[kind]):
            if _gone(path):
                return True
            try:
                if rung.attempt(path, rung.timeout):
                    if step:
                        logger.debug("Removed %s via %s", path, rung.name)
                    return True
            except Exception:  # noqa: BLE001 - a broken strategy must not stop the ladder
                logger.exception("Strategy %s crashed on %s", rung.name, path)
        return _gone(path)

    def delete_file(self, path: str) -> bool:
        return self.delete(path, ItemKind.FILE)

    def delete_directory(self, path: str) -> bool:
        return self.delete(path, ItemKind.DIRECTORY)
