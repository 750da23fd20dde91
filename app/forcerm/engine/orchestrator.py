"""Deletion engine: the public entry point of forcerm.

Sequences a run through its stages::

    prepare -> scanning -> deleting -> cleanup -> complete

Preconditions are checked before anything is touched. A dry run stops
after scanning and filtering. Everything that goes wrong after the
preconditions is recorded in the per-run log and the summary rather
than raised, apart from an empty root that cannot be removed.
"""

import logging
import sys
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from forcerm.core.platform import HostCapabilities, detect_capabilities
from forcerm.core.runlog import RunLog
from forcerm.core.settings import EngineSettings
from forcerm.engine.cleanup import DirectoryCleanup
from forcerm.engine.coordinator import DeletionCoordinator
from forcerm.engine.deleter import ItemDeleter
from forcerm.engine.errors import PreconditionError, RootRemovalError
from forcerm.engine.exclusion import ExclusionFilter
from forcerm.engine.info import calculate_folder_info
from forcerm.engine.normalizer import Normalizer
from forcerm.engine.prepare import prepare_for_deletion
from forcerm.engine.progress import ProgressCallback, ProgressReporter
from forcerm.engine.reaper import HandleReaper
from forcerm.engine.scanner import TreeScanner, check_root
from forcerm.models.items import FilterResult, ScanResult
from forcerm.models.progress import Stage
from forcerm.models.request import DeletionRequest
from forcerm.models.results import BatchResult, DeletionSummary, FolderInfo, PreviewResult

logger = logging.getLogger(__name__)

# Number of failed paths kept in the summary
FAILED_SAMPLE_SIZE = 10


class DeletionEngine:
    """Force-deletes folders, previews deletions and measures folders.

    Host capabilities (platform, elevation) are detected once and passed
    in; components never probe the host on their own.

    Args:
        settings: Engine settings. Defaults are used when None.
        capabilities: Host capabilities. Detected when None.
        deleter: Item deleter override.
        normalizer: Normalizer override.
        reaper: Handle reaper override.
        sleep: Sleep function used for the post-preparation settle delay.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        capabilities: HostCapabilities | None = None,
        *,
        deleter: ItemDeleter | None = None,
        normalizer: Normalizer | None = None,
        reaper: HandleReaper | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._caps = capabilities or detect_capabilities()
        self._deleter = deleter or ItemDeleter(self._caps)
        self._normalizer = normalizer or Normalizer(
            self._caps, timeout=self._settings.prepare_timeout_seconds
        )
        self._reaper = reaper or HandleReaper()
        self._sleep = sleep

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def capabilities(self) -> HostCapabilities:
        return self._caps

    # =========================================================================
    # Read-only operations
    # =========================================================================

    def preview(self, root: str | Path, exclusion_patterns: Sequence[str] = ()) -> PreviewResult:
        """Report what a run would delete, without touching anything.

        Args:
            root: Folder to inspect.
            exclusion_patterns: Glob patterns for items to keep.

        Returns:
            PreviewResult with counts and sample paths.

        Raises:
            FolderNotFoundError: If ``root`` does not exist.
            NotADirectoryPathError: If ``root`` is not a directory.
        """
        root_path = Path(root).absolute()
        check_root(root_path)

        scan = self._scan(root_path)
        split = ExclusionFilter(root_path, exclusion_patterns).split(scan.items)
        sample = self._settings.preview_sample_size
        return PreviewResult(
            total=scan.total,
            to_delete=len(split.included),
            excluded=len(split.excluded),
            sample_included=tuple(item.path for item in split.included[:sample]),
            sample_excluded=tuple(item.path for item in split.excluded[:sample]),
        )

    def get_info(self, root: str | Path) -> FolderInfo:
        """Measure a folder under the configured item and depth caps.

        Raises:
            FolderNotFoundError: If ``root`` does not exist.
            NotADirectoryPathError: If ``root`` is not a directory.
        """
        return calculate_folder_info(
            Path(root).absolute(),
            max_items=self._settings.info_max_items,
            max_depth=self._settings.info_max_depth,
        )

    # =========================================================================
    # Deletion
    # =========================================================================

    def run(
        self,
        root: str | Path,
        *,
        dry_run: bool = False,
        exclusion_patterns: Sequence[str] = (),
        on_progress: ProgressCallback | None = None,
        log_dir: Path | None = None,
    ) -> DeletionSummary:
        """Force-delete ``root``, keeping items matched by exclusion patterns.

        Args:
            root: Folder to delete.
            dry_run: Only scan and filter; report would-be counts.
            exclusion_patterns: Glob patterns for items to keep.
            on_progress: Receives staged ProgressEvents.
            log_dir: Directory for the per-run log (settings default when None).

        Returns:
            DeletionSummary of the run.

        Raises:
            FolderNotFoundError: If ``root`` does not exist.
            NotADirectoryPathError: If ``root`` is not a directory.
            RootRemovalError: If ``root`` is empty but cannot be removed.
        """
        request = DeletionRequest.create(
            root, dry_run=dry_run, exclusion_patterns=list(exclusion_patterns)
        )
        return self.execute(request, on_progress=on_progress, log_dir=log_dir)

    def execute(
        self,
        request: DeletionRequest,
        *,
        on_progress: ProgressCallback | None = None,
        log_dir: Path | None = None,
    ) -> DeletionSummary:
        """Run a prepared DeletionRequest. See :meth:`run`."""
        root = request.root_path
        progress = ProgressReporter(on_progress)

        with RunLog(root, log_dir or self._settings.effective_log_dir) as log:
            log.info(
                "Starting deletion process",
                {
                    "folderPath": str(root),
                    "dryRun": request.dry_run,
                    "exclusionPatterns": list(request.exclusion_patterns),
                    "isAdmin": self._caps.elevated,
                    "platform": sys.platform,
                },
            )
            try:
                check_root(root)
            except PreconditionError as e:
                log.error(str(e))
                raise

            if not request.dry_run and self._settings.prepare:
                self._prepare(root, progress, log)

            progress.emit(Stage.SCANNING, 10, "Scanning folder structure...")
            log.info("Scanning folder structure")
            scan = self._scan(root, progress)
            for directory in scan.unreadable:
                log.warn("Could not read directory", {"path": directory})

            if scan.total == 0:
                return self._finish_empty(request, progress, log)

            split = ExclusionFilter(root, request.exclusion_patterns).split(scan.items)
            return self._delete(request, scan, split, progress, log)

    # =========================================================================
    # Stages
    # =========================================================================

    def _prepare(self, root: Path, progress: ProgressReporter, log: RunLog) -> None:
        progress.emit(Stage.PREPARE, 0, "Preparing folder for deletion...")
        log.info("Starting preparation phase")

        def on_step(message: str) -> None:
            progress.emit(Stage.PREPARE, 5, message)
            log.info(message)

        # Open handles only block removal on Windows
        reap = self._settings.reap_handles and self._caps.windows
        reaper = self._reaper if reap else None
        try:
            report = prepare_for_deletion(root, self._normalizer, reaper, on_step=on_step)
        except (OSError, RuntimeError) as e:
            log.warn("Preparation phase had errors", {"error": str(e)})
            return

        for warning in report.warnings:
            log.warn("Preparation step had issues", {"warning": warning})

        terminated = report.handles.terminated_processes
        if terminated:
            progress.emit(
                Stage.PREPARE, 8, f"Closed {len(terminated)} process(es) with file locks"
            )
            log.info(
                f"Terminated {len(terminated)} processes with file locks",
                {"processes": list(terminated)},
            )

        if self._settings.settle_delay_seconds:
            self._sleep(self._settings.settle_delay_seconds)
        progress.emit(Stage.PREPARE, 8, "Preparation complete")

    def _scan(self, root: Path, progress: ProgressReporter | None = None) -> ScanResult:
        def on_tick(count: int) -> None:
            if progress is not None:
                progress.emit(Stage.SCANNING, 10, f"Scanned {count} items...")

        scanner = TreeScanner(root, yield_every=self._settings.scan_yield_every, on_tick=on_tick)
        return scanner.scan()

    def _finish_empty(
        self,
        request: DeletionRequest,
        progress: ProgressReporter,
        log: RunLog,
    ) -> DeletionSummary:
        root = request.root_path
        if request.dry_run:
            progress.emit(Stage.COMPLETE, 100, "Dry run complete - folder is empty")
            return self._summary(log, success=True, dry_run=True)

        if not self._deleter.delete_directory(str(root)):
            log.error("Failed to delete empty directory", {"path": str(root)})
            msg = f"Failed to delete empty directory: {root}"
            raise RootRemovalError(msg)

        log.info("Deleted empty directory")
        progress.emit(Stage.COMPLETE, 100, "Complete")
        return self._summary(log, success=True, root_removed=True)

    def _delete(
        self,
        request: DeletionRequest,
        scan: ScanResult,
        split: FilterResult,
        progress: ProgressReporter,
        log: RunLog,
    ) -> DeletionSummary:
        root = request.root_path
        excluded_count = len(split.excluded)
        if excluded_count:
            log.info(f"Excluded {excluded_count} items based on patterns")

        files = split.included_files
        to_delete = len(split.included)
        breakdown = f"{len(files)} files, {to_delete - len(files)} directories"
        suffix = f", {excluded_count} excluded" if excluded_count else ""
        progress.emit(
            Stage.SCANNING, 10, f"Found {to_delete} items to delete ({breakdown}{suffix})"
        )
        log.info(f"Found {to_delete} items to delete ({breakdown}), {excluded_count} excluded")

        # Dry run ends here, before anything is mutated
        if request.dry_run:
            progress.emit(
                Stage.COMPLETE,
                100,
                f"Dry run complete - would delete {to_delete} items ({breakdown})",
            )
            return self._summary(
                log,
                success=True,
                dry_run=True,
                excluded_count=excluded_count,
                would_delete=to_delete,
                would_delete_files=len(files),
            )

        coordinator = DeletionCoordinator(
            self._deleter,
            max_threads=self._settings.max_threads,
            worker_timeout=self._settings.worker_timeout_seconds,
            isolation=self._settings.isolation,
            on_progress=progress.forward,
            log=log,
        )
        workers = len(coordinator.batches(files))
        progress.emit(Stage.DELETING, 15, f"Using {workers} threads for fast deletion...")
        result = coordinator.run(files)

        log.info(
            "Deletion phase complete",
            {"deleted": result.deleted_count, "failed": result.failed_count},
        )
        if result.failed_paths:
            log.warn(
                f"Failed to delete {result.failed_count} items",
                {"samples": list(result.failed_paths[:FAILED_SAMPLE_SIZE])},
            )
            for path in result.failed_paths:
                log.error(f"Could not delete {path}")

        progress.emit(Stage.CLEANUP, 96, "Cleaning up directories...")
        log.info("Starting cleanup phase")
        removed_dirs = DirectoryCleanup(self._deleter).run(
            root, skip=split.excluded_directories
        )
        progress.emit(Stage.CLEANUP, 98, f"Removed {removed_dirs} directories")

        root_removed = self._deleter.delete_directory(str(root))
        if root_removed:
            log.info("Removed root folder")
        else:
            log.warn("Could not remove root folder", {"path": str(root)})

        progress.emit(
            Stage.COMPLETE,
            100,
            f"Complete! Deleted {result.deleted_count} files, {result.failed_count} failed",
        )
        return self._summary(
            log,
            success=self._is_success(result),
            deleted_count=result.deleted_count,
            failed_count=result.failed_count,
            excluded_count=excluded_count,
            directories_removed=removed_dirs,
            root_removed=root_removed,
            failed_paths=result.failed_paths[:FAILED_SAMPLE_SIZE],
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _is_success(self, result: BatchResult) -> bool:
        if self._settings.success_policy == "no_failures":
            return result.failed_count == 0
        return result.failed_count == 0 or result.deleted_count > 0

    @staticmethod
    def _summary(log: RunLog, *, success: bool, **fields: object) -> DeletionSummary:
        return DeletionSummary(
            success=success,
            elapsed_seconds=log.elapsed_seconds,
            log_path=str(log.path),
            error_count=log.error_count,
            warning_count=log.warning_count,
            sample_errors=log.sample_errors,
            **fields,  # type: ignore[arg-type]
        )
