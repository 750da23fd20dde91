"""Tree scanner for deletion roots.

Enumerates every file and every directory beneath a root using an
explicit worklist, so arbitrarily deep trees never hit the interpreter's
recursion limit. Unreadable directories are skipped with a warning.
"""

import logging
import os
import threading
from collections import deque
from collections.abc import Callable, Iterator
from pathlib import Path

from forcerm.engine.errors import FolderNotFoundError, NotADirectoryPathError, ScanCancelledError
from forcerm.models.items import ItemKind, ScannedItem, ScanResult

logger = logging.getLogger(__name__)

# Default number of items between two scheduler ticks
DEFAULT_YIELD_EVERY = 100


def check_root(root: Path) -> None:
    """Validate that ``root`` is an existing directory.

    Args:
        root: Path to validate.

    Raises:
        FolderNotFoundError: If nothing exists at ``root``.
        NotADirectoryPathError: If ``root`` exists but is not a directory.
    """
    if not root.exists():
        msg = "Folder does not exist"
        raise FolderNotFoundError(msg)
    if not root.is_dir():
        msg = "Path is not a directory"
        raise NotADirectoryPathError(msg)


class TreeScanner:
    """Breadth-first scanner producing every item under a root.

    Real directories are descended into; everything else, including
    symlinks that point at directories, is reported as a file so that
    deleting it removes the link and never the link target.

    Args:
        root: Directory to scan.
        yield_every: Number of items between calls to ``on_tick``.
        on_tick: Called with the running item count every ``yield_every``
            items, giving the host a chance to report progress.
        cancel: Event that aborts the scan at the next tick when set.
    """

    def __init__(
        self,
        root: Path,
        *,
        yield_every: int = DEFAULT_YIELD_EVERY,
        on_tick: Callable[[int], None] | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        if yield_every < 1:
            msg = f"yield_every must be >= 1, got {yield_every}"
            raise ValueError(msg)
        self._root = root
        self._yield_every = yield_every
        self._on_tick = on_tick
        self._cancel = cancel
        self._unreadable: list[str] = []

    def scan(self) -> ScanResult:
        """Scan the whole tree.

        Returns:
            ScanResult with all items in discovery order.

        Raises:
            ScanCancelledError: If the cancel event was set during the scan.
        """
        items = tuple(self.iter_items())
        return ScanResult(
            root=str(self._root),
            items=items,
            unreadable=tuple(self._unreadable),
        )

    def iter_items(self) -> Iterator[ScannedItem]:
        """Yield items lazily in discovery order.

        Yields:
            ScannedItem for each file and directory under the root.

        Raises:
            ScanCancelledError: If the cancel event was set during the scan.
        """
        self._unreadable = []
        pending: deque[str] = deque([str(self._root)])
        order = 0

        while pending:
            current = pending.popleft()
            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                logger.warning("Could not read directory: %s (%s)", current, e)
                self._unreadable.append(current)
                continue

            for entry in entries:
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError:
                    logger.warning("Cannot determine type of: %s", entry.path)
                    continue

                if is_dir:
                    pending.append(entry.path)
                    kind = ItemKind.DIRECTORY
                else:
                    kind = ItemKind.FILE

                yield ScannedItem(path=entry.path, kind=kind, order=order)
                order += 1
                if order % self._yield_every == 0:
                    self._tick(order)

    @property
    def unreadable(self) -> tuple[str, ...]:
        """Directories skipped during the last scan."""
        return tuple(self._unreadable)

    def _tick(self, count: int) -> None:
        if self._cancel is not None and self._cancel.is_set():
            msg = f"Scan cancelled after {count} items"
            raise ScanCancelledError(msg)
        if self._on_tick is not None:
            self._on_tick(count)


def collect_directories(root: Path) -> list[str]:
    """List every real directory under ``root`` (excluding root itself).

    Args:
        root: Directory to walk.

    Returns:
        Directory paths in discovery order.
    """
    return [item.path for item in TreeScanner(root).iter_items() if item.is_directory]
