"""Ownership, permission and attribute normalization for a subtree.

Three independent, best-effort operations that make a tree deletable
before the per-item ladder runs: claim ownership, grant the acting
user full control, and clear write-protection flags. Each is
idempotent, tolerates partial failure and is bounded by a timeout.
"""

import logging
import os
import stat
import time
from collections import deque
from collections.abc import Callable
from pathlib import Path

from forcerm.core.platform import HostCapabilities
from forcerm.models.results import StepOutcome
from forcerm.utils.shell import try_command

logger = logging.getLogger(__name__)

_DIR_BITS = stat.S_IRWXU
_FILE_BITS = stat.S_IRUSR | stat.S_IWUSR


class Normalizer:
    """Unlocks a subtree so its items can be removed.

    Args:
        caps: Capabilities of the host.
        timeout: Seconds each recursive step may take.
    """

    def __init__(self, caps: HostCapabilities, timeout: float = 30.0) -> None:
        self._caps = caps
        self._timeout = timeout

    def take_ownership(self, root: Path) -> StepOutcome:
        """Recursively claim ownership of ``root`` and its contents."""
        if self._caps.windows:
            return self._command(
                "takeown", ["takeown", "/f", str(root), "/r", "/d", "y"], root
            )
        if not self._caps.elevated:
            return StepOutcome.skip("Ownership changes require root")

        uid = os.geteuid()
        gid = os.getegid()
        return self._walk(root, "chown", lambda path, _is_dir: os.lchown(path, uid, gid))

    def grant_permissions(self, root: Path) -> StepOutcome:
        """Recursively grant the acting user read, write and delete access."""
        if self._caps.windows:
            args = ["icacls", str(root), "/grant", f"{self._caps.user}:F", "/t", "/c", "/q"]
            return self._command("icacls", args, root)

        def add_owner_bits(path: str, is_dir: bool) -> None:
            mode = os.lstat(path).st_mode
            if stat.S_ISLNK(mode):
                return
            wanted = _DIR_BITS if is_dir else _FILE_BITS
            if stat.S_IMODE(mode) & wanted != wanted:
                os.chmod(path, stat.S_IMODE(mode) | wanted)

        return self._walk(root, "chmod", add_owner_bits)

    def clear_attributes(self, root: Path) -> StepOutcome:
        """Recursively clear read-only, hidden, system and immutable flags."""
        if self._caps.windows:
            pattern = os.path.join(str(root), "*")
            return self._command("attrib", ["attrib", "-r", "-s", "-h", pattern, "/s", "/d"], root)
        if not (self._caps.elevated and self._caps.has("chattr")):
            return StepOutcome.skip("Clearing immutable flags requires root and chattr")
        return self._command("chattr", ["chattr", "-R", "-f", "-i", "-a", str(root)], root)

    # === Private helpers ===

    def _command(self, name: str, args: list[str], root: Path) -> StepOutcome:
        logger.info("Running %s on %s", name, root)
        result = try_command(args, timeout=self._timeout)
        if result is None:
            msg = f"{name} did not complete within {self._timeout:.0f}s or could not start"
            logger.warning(msg)
            return StepOutcome(success=False, warning=msg)
        if not result.success:
            # Partial failure is expected; the per-item ladder retries later
            msg = f"{name} had issues (exit {result.returncode}): {result.stderr.strip()[:200]}"
            logger.warning(msg)
            return StepOutcome(success=True, warning=msg)
        return StepOutcome(success=True)

    def _walk(
        self,
        root: Path,
        name: str,
        action: Callable[[str, bool], None],
    ) -> StepOutcome:
        deadline = time.monotonic() + self._timeout
        pending: deque[str] = deque([str(root)])
        failures = 0
        first_error: str | None = None

        while pending:
            if time.monotonic() > deadline:
                msg = f"{name} stopped after {self._timeout:.0f}s"
                logger.warning(msg)
                return StepOutcome(success=False, warning=msg)

            current = pending.popleft()
            try:
                action(current, True)
            except OSError as e:
                failures += 1
                first_error = first_error or f"{current}: {e}"

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                failures += 1
                first_error = first_error or f"{current}: {e}"
                continue

            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        pending.append(entry.path)
                    else:
                        action(entry.path, False)
                except OSError as e:
                    failures += 1
                    first_error = first_error or f"{entry.path}: {e}"

        if failures:
            msg = f"{name} failed on {failures} item(s), first: {first_error}"
            logger.warning(msg)
            return StepOutcome(success=True, warning=msg)
        return StepOutcome(success=True)
