"""Models for scanned filesystem items.

This module defines the data structures the scanner produces and the
exclusion filter consumes: individual scanned items, the complete scan
of a root, and the include/exclude split.
"""

from dataclasses import dataclass
from enum import Enum


class ItemKind(str, Enum):
    """Kind of a scanned filesystem entry.

    Attributes:
        FILE: Anything removed with unlink (regular files, symlinks, fifos).
        DIRECTORY: A real directory (never a symlink to one).
    """

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True, slots=True)
class ScannedItem:
    """A filesystem entry discovered under the deletion root.

    Attributes:
        path: Absolute path of the entry.
        kind: Whether the entry is a file or a directory.
        order: Zero-based discovery index within the scan.
    """

    path: str
    kind: ItemKind
    order: int

    def __post_init__(self) -> None:
        """Validate scanned item data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.order < 0:
            msg = f"Order must be non-negative, got {self.order}"
            raise ValueError(msg)

    @property
    def is_file(self) -> bool:
        return self.kind == ItemKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind == ItemKind.DIRECTORY


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Everything reachable under a root, in discovery order.

    Attributes:
        root: The scanned root directory.
        items: All scanned items (files and directories) in discovery order.
        unreadable: Directories that could not be listed and were skipped.
    """

    root: str
    items: tuple[ScannedItem, ...] = ()
    unreadable: tuple[str, ...] = ()

    @property
    def files(self) -> tuple[ScannedItem, ...]:
        return tuple(item for item in self.items if item.is_file)

    @property
    def directories(self) -> tuple[ScannedItem, ...]:
        return tuple(item for item in self.items if item.is_directory)

    @property
    def total(self) -> int:
        return len(self.items)


@dataclass(frozen=True, slots=True)
class FilterDecision:
    """Outcome of matching one item against the exclusion patterns.

    Attributes:
        item: The item that was tested.
        excluded: True if the item is kept (not deleted).
        pattern: The pattern responsible for the exclusion, if any.
    """

    item: ScannedItem
    excluded: bool
    pattern: str | None = None


@dataclass(frozen=True, slots=True)
class FilterResult:
    """Partition of scanned items into the delete-set and the kept set.

    Attributes:
        included: Items that will be deleted.
        excluded: Items matched by an exclusion pattern (or beneath an
            excluded directory).
    """

    included: tuple[ScannedItem, ...] = ()
    excluded: tuple[ScannedItem, ...] = ()

    @property
    def included_files(self) -> list[str]:
        return [item.path for item in self.included if item.is_file]

    @property
    def excluded_directories(self) -> frozenset[str]:
        return frozenset(item.path for item in self.excluded if item.is_directory)
