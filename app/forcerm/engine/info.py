"""Folder size and item counts under hard caps.

Walks the tree with an explicit stack, counting at most ``max_items``
entries and descending at most ``max_depth`` levels, so even
pathological trees (cycles through junctions, millions of entries)
finish promptly. ``limited`` tells the caller the counts are lower bounds.
"""

import logging
import os
from pathlib import Path

from forcerm.engine.scanner import check_root
from forcerm.models.results import FolderInfo

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 10_000
DEFAULT_MAX_DEPTH = 20


def calculate_folder_info(
    root: Path,
    *,
    max_items: int = DEFAULT_MAX_ITEMS,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> FolderInfo:
    """Compute total size, file count and folder count for ``root``.

    Args:
        root: Folder to measure.
        max_items: Hard cap on entries visited.
        max_depth: Directories deeper than this are counted but not entered.

    Returns:
        FolderInfo for the folder.

    Raises:
        FolderNotFoundError: If ``root`` does not exist.
        NotADirectoryPathError: If ``root`` is not a directory.
    """
    check_root(root)

    size = 0
    files = 0
    folders = 0
    processed = 0
    stack: list[tuple[str, int]] = [(str(root), 0)]

    while stack and processed < max_items:
        current, level = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as e:
            logger.warning("Could not read directory %s: %s", current, e)
            continue

        for entry in entries:
            if processed >= max_items:
                break
            processed += 1
            try:
                if entry.is_dir(follow_symlinks=False):
                    folders += 1
                    if level + 1 < max_depth:
                        stack.append((entry.path, level + 1))
                elif entry.is_file(follow_symlinks=False):
                    files += 1
                    try:
                        size += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        pass
            except OSError:
                logger.warning("Could not access %s", entry.path)

    return FolderInfo(
        size=size,
        file_count=files,
        folder_count=folders,
        limited=processed >= max_items,
    )
