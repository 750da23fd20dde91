"""Exceptions raised by the deletion engine.

Only conditions that must stop a run surface as exceptions. Per-item
failures, preparation problems and worker crashes are recorded in the
run log and the summary instead.
"""


class ForcermError(Exception):
    """Base exception for engine errors."""


class PreconditionError(ForcermError):
    """Raised when a request fails its entry checks, before any mutation."""


class FolderNotFoundError(PreconditionError):
    """Raised when the root folder does not exist."""


class NotADirectoryPathError(PreconditionError):
    """Raised when the root path exists but is not a directory."""


class RootRemovalError(ForcermError):
    """Raised when an empty root folder cannot be removed."""


class ScanCancelledError(ForcermError):
    """Raised when a scan is cancelled between ticks."""
