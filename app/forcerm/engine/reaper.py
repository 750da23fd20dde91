"""Handle reaper: terminate processes that keep files under a root open.

On Windows, processes holding open files or memory-mapped files inside
the target subtree prevent its removal. The reaper discovers them with
psutil, asks them to terminate, and kills the ones that do not exit. A
working directory alone does not make a process a holder. POSIX hosts
unlink open files without trouble, so the engine only reaps on Windows.
Discovery is best-effort: any failure degrades to "nothing found".
"""

import logging
import os
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

import psutil

from forcerm.models.results import HandleReport

logger = logging.getLogger(__name__)

# Process names that must never be touched
_SYSTEM_PROCESSES: frozenset[str] = frozenset(
    {
        "system",
        "registry",
        "idle",
        "csrss.exe",
        "smss.exe",
        "wininit.exe",
        "services.exe",
        "lsass.exe",
        "init",
        "systemd",
        "launchd",
        "kthreadd",
    }
)

# PIDs at or below this value belong to the OS
_MIN_PID = 4


@dataclass(frozen=True, slots=True)
class HandleHolder:
    """A process with at least one open reference into the target subtree.

    Attributes:
        pid: Process id.
        name: Process name.
        paths: Paths under the root the process holds.
    """

    pid: int
    name: str
    paths: tuple[str, ...]

    @property
    def label(self) -> str:
        return f"{self.name} ({self.pid})"


def _protected_pids() -> set[int]:
    """PIDs of this process and its ancestors."""
    pids = {os.getpid()}
    try:
        pids.update(p.pid for p in psutil.Process().parents())
    except psutil.Error:
        pass
    return pids


def _is_under(path: str, root: str) -> bool:
    normalized = os.path.normcase(os.path.abspath(path))
    return normalized == root or normalized.startswith(root + os.sep)


def _held_paths(proc: psutil.Process, root: str) -> list[str]:
    held: list[str] = []
    for opened in proc.open_files():
        if _is_under(opened.path, root):
            held.append(opened.path)
    try:
        for mapping in proc.memory_maps(grouped=True):
            if mapping.path and _is_under(mapping.path, root):
                held.append(mapping.path)
    except (AttributeError, NotImplementedError):
        pass
    return held


class HandleReaper:
    """Finds and terminates processes holding handles into a subtree.

    Args:
        grace_period: Seconds to wait for a graceful exit before killing.
        settle_delay: Pause after terminations so the OS releases handles.
        sleep: Sleep function (injectable for tests).
    """

    def __init__(
        self,
        *,
        grace_period: float = 3.0,
        settle_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._grace_period = grace_period
        self._settle_delay = settle_delay
        self._sleep = sleep

    def find_holders(self, root: Path) -> list[HandleHolder]:
        """Discover processes with open references under ``root``.

        Args:
            root: Root of the subtree.

        Returns:
            Processes holding handles; empty if discovery is unavailable.
        """
        target = os.path.normcase(os.path.abspath(root))
        protected = _protected_pids()
        holders: list[HandleHolder] = []

        try:
            processes: Iterable[psutil.Process] = psutil.process_iter(["pid", "name"])
            for proc in processes:
                pid = proc.info.get("pid") or proc.pid
                name = proc.info.get("name") or "?"
                if pid <= _MIN_PID or pid in protected or name.lower() in _SYSTEM_PROCESSES:
                    continue
                try:
                    held = _held_paths(proc, target)
                except (psutil.AccessDenied, psutil.NoSuchProcess, psutil.ZombieProcess):
                    continue
                if held:
                    holders.append(HandleHolder(pid=pid, name=name, paths=tuple(held)))
        except (psutil.Error, OSError) as e:
            logger.warning("Handle discovery failed: %s", e)
            return []

        return holders

    def terminate(self, holder: HandleHolder) -> str | None:
        """Terminate one holder, escalating to kill.

        Args:
            holder: Process to stop.

        Returns:
            Label of the terminated process (suffixed ``[forced]`` when it
            had to be killed), or None if it could not be stopped.
        """
        try:
            proc = psutil.Process(holder.pid)
            logger.info("Terminating process %s", holder.label)
            proc.terminate()
            try:
                proc.wait(timeout=self._grace_period)
                return holder.label
            except psutil.TimeoutExpired:
                proc.kill()
                proc.wait(timeout=self._grace_period)
                return f"{holder.label} [forced]"
        except psutil.NoSuchProcess:
            return holder.label
        except (psutil.Error, OSError) as e:
            logger.warning("Could not terminate process %s: %s", holder.label, e)
            return None

    def reap(self, root: Path) -> HandleReport:
        """Find and terminate every process holding handles under ``root``.

        Args:
            root: Root of the subtree.

        Returns:
            HandleReport listing the processes acted on.
        """
        holders = self.find_holders(root)
        if not holders:
            logger.info("No processes found with open handles under %s", root)
            return HandleReport()

        terminated = [label for label in map(self.terminate, holders) if label]
        if terminated:
            self._sleep(self._settle_delay)

        logger.info("Terminated %d process(es)", len(terminated))
        return HandleReport(
            closed_handles=len(terminated),
            terminated_processes=tuple(terminated),
        )
