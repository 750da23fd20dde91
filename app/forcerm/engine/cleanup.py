"""Empty-directory cleanup after the delete phase.

Once the files are gone, every directory under the root is removed
deepest first, so a child is always attempted before its parent.
Failures are expected (an excluded file keeps its ancestors alive) and
are not errors. The root itself is left for the caller.
"""

import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path

from forcerm.engine.deleter import ItemDeleter
from forcerm.engine.scanner import collect_directories

logger = logging.getLogger(__name__)


def depth(path: str) -> int:
    """Number of path segments in ``path``."""
    return len(Path(path).parts)


def order_deepest_first(directories: Iterable[str]) -> list[str]:
    """Sort directories so that children precede their parents.

    Args:
        directories: Directory paths.

    Returns:
        Paths sorted by segment count, deepest first.
    """
    return sorted(directories, key=depth, reverse=True)


def _inside(path: str, root: str) -> bool:
    return path.startswith(root.rstrip(os.sep) + os.sep)


class DirectoryCleanup:
    """Removes the now-empty directories beneath a root.

    Args:
        deleter: Escalating deleter used for each directory.
        on_attempt: Called with each directory before its removal is
            attempted.
    """

    def __init__(
        self,
        deleter: ItemDeleter,
        on_attempt: Callable[[str], None] | None = None,
    ) -> None:
        self._deleter = deleter
        self._on_attempt = on_attempt

    def run(self, root: Path, skip: Iterable[str] = ()) -> int:
        """Remove empty directories under ``root``, deepest first.

        Args:
            root: Deletion root (not removed here).
            skip: Directories that must be kept (excluded by pattern).

        Returns:
            Number of directories removed.
        """
        root_str = str(root)
        kept = set(skip)
        removed = 0

        for directory in order_deepest_first(collect_directories(root)):
            if directory in kept or not _inside(directory, root_str):
                continue
            if self._on_attempt is not None:
                self._on_attempt(directory)
            if self._deleter.delete_directory(directory):
                removed += 1
            else:
                logger.debug("Directory kept (not empty or locked): %s", directory)

        logger.info("Removed %d directories under %s", removed, root)
        return removed
