"""Deletion request model."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DeletionRequest:
    """A request to force-delete a folder.

    Attributes:
        root_path: Folder to delete.
        dry_run: Only report what would be deleted.
        exclusion_patterns: Glob patterns for items to keep, in order.
    """

    root_path: Path
    dry_run: bool = False
    exclusion_patterns: tuple[str, ...] = ()

    @classmethod
    def create(
        cls,
        root_path: str | Path,
        *,
        dry_run: bool = False,
        exclusion_patterns: list[str] | tuple[str, ...] | None = None,
    ) -> "DeletionRequest":
        """Build a request from loosely typed caller input.

        Args:
            root_path: Folder to delete.
            dry_run: Only report what would be deleted.
            exclusion_patterns: Glob patterns for items to keep.

        Returns:
            An immutable DeletionRequest with an absolute root path.
        """
        return cls(
            root_path=Path(root_path).absolute(),
            dry_run=dry_run,
            exclusion_patterns=tuple(exclusion_patterns or ()),
        )
