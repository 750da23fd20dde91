"""Deletion engine for forcerm.

The engine force-deletes a directory tree: it scans the tree, filters
out excluded items, deletes the rest in parallel with escalating retry
strategies, and finally removes the emptied directories.
"""

from forcerm.engine.errors import (
    FolderNotFoundError,
    ForcermError,
    NotADirectoryPathError,
    PreconditionError,
    RootRemovalError,
    ScanCancelledError,
)
from forcerm.engine.orchestrator import DeletionEngine

__all__ = [
    "DeletionEngine",
    "FolderNotFoundError",
    "ForcermError",
    "NotADirectoryPathError",
    "PreconditionError",
    "RootRemovalError",
    "ScanCancelledError",
]
