"""Result models produced by the deletion engine.

This module defines the outcomes of each pipeline phase: preparation
reports, batch results from the parallel delete phase, the final run
summary, and the read-only preview and folder-info results.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class StepOutcome:
    """Outcome of one best-effort preparation step.

    Attributes:
        success: The step ran to completion (possibly with partial failures).
        warning: Description of a partial or complete failure, if any.
        skipped: The step does not apply on this host and was not run.
    """

    success: bool = True
    warning: str | None = None
    skipped: bool = False

    @classmethod
    def skip(cls, reason: str) -> "StepOutcome":
        return cls(success=True, warning=reason, skipped=True)


@dataclass(frozen=True, slots=True)
class HandleReport:
    """What the handle reaper did.

    Attributes:
        closed_handles: Number of processes whose handles were released.
        terminated_processes: Labels (``name (pid)``) of terminated processes;
            ``[forced]`` marks processes that had to be killed.
    """

    closed_handles: int = 0
    terminated_processes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PreparationReport:
    """Combined outcome of the unlock preparation phase.

    Attributes:
        ownership: Recursive ownership claim.
        permissions: Recursive permission grant.
        attributes: Recursive attribute/flag clearing.
        handles: Handle reaper outcome.
    """

    ownership: StepOutcome = field(default_factory=StepOutcome)
    permissions: StepOutcome = field(default_factory=StepOutcome)
    attributes: StepOutcome = field(default_factory=StepOutcome)
    handles: HandleReport = field(default_factory=HandleReport)

    @property
    def warnings(self) -> list[str]:
        """Warnings from steps that actually ran."""
        steps = (self.ownership, self.permissions, self.attributes)
        return [s.warning for s in steps if s.warning and not s.skipped]


@dataclass(frozen=True, slots=True)
class DeletionBatch:
    """A contiguous slice of the delete-set handled by one worker.

    Attributes:
        index: Worker number, starting at 0.
        paths: File paths assigned to the worker.
    """

    index: int
    paths: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.paths)


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Aggregated outcome of deleting one or more batches.

    Results combine by summation, so the order in which workers finish
    does not matter.

    Attributes:
        deleted_count: Items removed (or already gone).
        failed_count: Items still present after every escalation rung.
        failed_paths: Paths of the failed items.
    """

    deleted_count: int = 0
    failed_count: int = 0
    failed_paths: tuple[str, ...] = ()

    def __add__(self, other: "BatchResult") -> "BatchResult":
        return BatchResult(
            deleted_count=self.deleted_count + other.deleted_count,
            failed_count=self.failed_count + other.failed_count,
            failed_paths=self.failed_paths + other.failed_paths,
        )

    @property
    def total(self) -> int:
        return self.deleted_count + self.failed_count

    @classmethod
    def all_failed(cls, paths: tuple[str, ...] | list[str]) -> "BatchResult":
        return cls(failed_count=len(paths), failed_paths=tuple(paths))


@dataclass(frozen=True, slots=True)
class DeletionSummary:
    """Terminal result of a run.

    Attributes:
        success: Whether the run counts as successful under the configured policy.
        dry_run: The run only previewed the deletion.
        deleted_count: Files removed during the delete phase (directories are
            counted in ``directories_removed``).
        failed_count: Files that could not be removed.
        excluded_count: Scanned items kept by exclusion patterns.
        would_delete: Items (files and directories) a dry run would delete
            (0 for real runs).
        would_delete_files: Files among ``would_delete``, comparable to
            ``deleted_count`` of a real run.
        directories_removed: Directories removed by the cleanup pass.
        root_removed: The root folder itself is gone.
        failed_paths: Sample of paths that could not be removed.
        elapsed_seconds: Wall-clock duration of the run.
        log_path: Location of the per-run log file.
        error_count: Number of ERROR entries in the run log.
        warning_count: Number of WARN entries in the run log.
        sample_errors: First error messages from the run log.
    """

    success: bool
    dry_run: bool = False
    deleted_count: int = 0
    failed_count: int = 0
    excluded_count: int = 0
    would_delete: int = 0
    would_delete_files: int = 0
    directories_removed: int = 0
    root_removed: bool = False
    failed_paths: tuple[str, ...] = ()
    elapsed_seconds: float = 0.0
    log_path: str | None = None
    error_count: int = 0
    warning_count: int = 0
    sample_errors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PreviewResult:
    """What a run would do, without touching the filesystem.

    Attributes:
        total: Scanned items (files plus directories).
        to_delete: Items that would be deleted.
        excluded: Items kept by exclusion patterns.
        sample_included: First paths that would be deleted.
        sample_excluded: First paths that would be kept.
    """

    total: int
    to_delete: int
    excluded: int
    sample_included: tuple[str, ...] = ()
    sample_excluded: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class FolderInfo:
    """Size and item counts of a folder, computed under hard caps.

    Attributes:
        size: Total size of counted files in bytes.
        file_count: Number of files counted.
        folder_count: Number of directories counted.
        limited: The item cap was hit, so counts are lower bounds.
    """

    size: int
    file_count: int
    folder_count: int
    limited: bool = False
