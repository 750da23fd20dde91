"""Parallel deletion of the delete-set.

The included files are partitioned into contiguous, disjoint batches,
one per worker. Each worker runs in its own process (or thread) and
streams per-item outcomes back over a private pipe; the coordinator is
the only writer of the aggregate. A worker that exceeds its wall-clock
budget is stopped and its unreported items are counted as failed, so
``deleted + failed`` always equals the number of input paths.
"""

from __future__ import annotations

import logging
import math
import multiprocessing
import os
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from multiprocessing.connection import Connection, wait
from typing import TYPE_CHECKING, Any

from forcerm.models.progress import ProgressEvent, Stage
from forcerm.models.results import BatchResult, DeletionBatch

if TYPE_CHECKING:
    from forcerm.core.runlog import RunLog
    from forcerm.core.settings import Isolation
    from forcerm.engine.deleter import ItemDeleter

logger = logging.getLogger(__name__)

# Upper bound on a single wait for worker messages
_POLL_INTERVAL = 0.1

# Seconds to wait for a stopped worker to exit
_JOIN_TIMEOUT = 1.0

# Message kinds sent from workers
_ITEM = "item"
_DONE = "done"
_ERROR = "error"

# Share of the progress range the delete phase may use
_DELETE_PERCENT_CAP = 95


def available_parallelism() -> int:
    """Number of CPUs this process may use."""
    counter = getattr(os, "process_cpu_count", None) or os.cpu_count
    return counter() or 1


def partition(
    paths: Sequence[str],
    max_threads: int,
    parallelism: int | None = None,
) -> list[DeletionBatch]:
    """Split paths into contiguous batches, one per worker.

    ``batch_count = min(parallelism, max_threads)`` and
    ``batch_size = ceil(len(paths) / batch_count)``; trailing empty
    batches are dropped.

    Args:
        paths: Files to delete, in order.
        max_threads: Configured worker cap.
        parallelism: Available CPUs (detected when None).

    Returns:
        Disjoint batches covering every path exactly once.
    """
    if not paths:
        return []
    if max_threads < 1:
        msg = f"max_threads must be >= 1, got {max_threads}"
        raise ValueError(msg)

    cpus = parallelism if parallelism is not None else available_parallelism()
    batch_count = max(1, min(cpus, max_threads))
    batch_size = math.ceil(len(paths) / batch_count)

    batches: list[DeletionBatch] = []
    for index in range(batch_count):
        start = index * batch_size
        if start >= len(paths):
            break
        batches.append(DeletionBatch(index=index, paths=tuple(paths[start : start + batch_size])))
    return batches


def _batch_worker(batch: DeletionBatch, deleter: ItemDeleter, conn: Connection, stop: Any) -> None:
    """Worker body: delete each path in order, reporting every outcome."""
    try:
        for path in batch.paths:
            if stop.is_set():
                break
            conn.send((_ITEM, path, deleter.delete_file(path)))
        conn.send((_DONE, None, None))
    except Exception as e:  # noqa: BLE001 - reported to the coordinator, which fails the batch
        try:
            conn.send((_ERROR, f"{type(e).__name__}: {e}", None))
        except OSError:
            pass
    finally:
        conn.close()


@dataclass
class _Worker:
    batch: DeletionBatch
    conn: Connection
    stop: Any
    handle: multiprocessing.process.BaseProcess | threading.Thread
    deadline: float
    outcomes: dict[str, bool] = field(default_factory=dict)
    error: str | None = None
    timed_out: bool = False

    def result(self) -> BatchResult:
        failed = tuple(p for p in self.batch.paths if not self.outcomes.get(p, False))
        return BatchResult(
            deleted_count=len(self.batch) - len(failed),
            failed_count=len(failed),
            failed_paths=failed,
        )


class DeletionCoordinator:
    """Fans the delete-set out to concurrent, isolated workers.

    Args:
        deleter: Escalating deleter each worker uses.
        max_threads: Upper bound on concurrent workers.
        worker_timeout: Wall-clock seconds each worker may run.
        isolation: "process" runs each batch in its own process (stoppable
            at any point); "thread" runs batches in threads, which stop
            between items.
        on_progress: Receives a ProgressEvent after each worker finishes.
        log: Run log receiving worker warnings and errors.
        parallelism: Override CPU detection.
        start_method: multiprocessing start method for process workers
            (platform default when None).
    """

    def __init__(
        self,
        deleter: ItemDeleter,
        *,
        max_threads: int = 8,
        worker_timeout: float = 60.0,
        isolation: Isolation = "process",
        on_progress: Callable[[ProgressEvent], None] | None = None,
        log: RunLog | None = None,
        parallelism: int | None = None,
        start_method: str | None = None,
    ) -> None:
        self._deleter = deleter
        self._max_threads = max_threads
        self._worker_timeout = worker_timeout
        self._isolation = isolation
        self._on_progress = on_progress
        self._log = log
        self._parallelism = parallelism
        self._start_method = start_method

    def batches(self, paths: Sequence[str]) -> list[DeletionBatch]:
        return partition(paths, self._max_threads, self._parallelism)

    def run(self, paths: Sequence[str]) -> BatchResult:
        """Delete every path, returning the aggregated outcome.

        Args:
            paths: Files to delete.

        Returns:
            BatchResult whose deleted and failed counts sum to ``len(paths)``.
        """
        batches = self.batches(paths)
        total = len(paths)
        aggregate = BatchResult()
        if not batches:
            return aggregate

        self._info(
            "Starting multi-threaded deletion",
            {"threads": len(batches), "batchSize": len(batches[0]), "isolation": self._isolation},
        )

        pending: dict[Connection, _Worker] = {}
        for batch in batches:
            try:
                worker = self._start(batch)
            except OSError as e:
                self._error(f"Worker {batch.index} could not start", {"error": str(e)})
                aggregate = self._report(aggregate + BatchResult.all_failed(batch.paths), total)
                continue
            pending[worker.conn] = worker

        while pending:
            now = time.monotonic()
            for worker in [w for w in pending.values() if now >= w.deadline]:
                del pending[worker.conn]
                self._abandon(worker)
                aggregate = self._report(aggregate + self._finish(worker), total)
            if not pending:
                break

            nearest = min(w.deadline for w in pending.values()) - now
            ready = wait(list(pending), timeout=max(0.0, min(nearest, _POLL_INTERVAL)))
            for conn in ready:
                worker = pending[conn]
                if self._receive(worker):
                    del pending[worker.conn]
                    aggregate = self._report(aggregate + self._finish(worker), total)

        return aggregate

    # === Private helpers ===

    def _start(self, batch: DeletionBatch) -> _Worker:
        name = f"forcerm-worker-{batch.index}"
        handle: multiprocessing.process.BaseProcess | threading.Thread
        if self._isolation == "process":
            ctx = multiprocessing.get_context(self._start_method)
            reader, writer = ctx.Pipe(duplex=False)
            stop: Any = ctx.Event()
            handle = ctx.Process(
                target=_batch_worker,
                args=(batch, self._deleter, writer, stop),
                name=name,
                daemon=True,
            )
            handle.start()
            # Only the child keeps a writer, so its exit surfaces as EOF
            writer.close()
        else:
            reader, writer = multiprocessing.Pipe(duplex=False)
            stop = threading.Event()
            handle = threading.Thread(
                target=_batch_worker,
                args=(batch, self._deleter, writer, stop),
                name=name,
                daemon=True,
            )
            handle.start()

        return _Worker(
            batch=batch,
            conn=reader,
            stop=stop,
            handle=handle,
            deadline=time.monotonic() + self._worker_timeout,
        )

    def _receive(self, worker: _Worker) -> bool:
        """Drain available messages; True once the worker has finished."""
        while worker.conn.poll():
            try:
                kind, payload, ok = worker.conn.recv()
            except (EOFError, OSError):
                worker.error = worker.error or "worker exited without reporting"
                return True
            if kind == _ITEM:
                worker.outcomes[payload] = bool(ok)
            elif kind == _DONE:
                return True
            else:
                worker.error = payload
                return True
        return False

    def _abandon(self, worker: _Worker) -> None:
        # Keep whatever was reported before the deadline
        if self._receive(worker):
            return
        worker.timed_out = True
        worker.stop.set()
        if isinstance(worker.handle, threading.Thread):
            return
        worker.handle.terminate()
        worker.handle.join(_JOIN_TIMEOUT)

    def _finish(self, worker: _Worker) -> BatchResult:
        if not worker.timed_out:
            worker.handle.join(_JOIN_TIMEOUT)
        worker.conn.close()

        result = worker.result()
        index = worker.batch.index
        if worker.timed_out:
            self._warn(
                f"Worker {index} timed out after {self._worker_timeout:.0f}s",
                {"abandoned": result.failed_count},
            )
        elif worker.error is not None:
            self._error(f"Worker {index} failed", {"error": worker.error})
        if worker.error is not None or worker.timed_out:
            self._warn("Worker failed but continuing", {"failed": result.failed_count})
        return result

    def _report(self, aggregate: BatchResult, total: int) -> BatchResult:
        if self._on_progress is not None and total:
            percent = min(_DELETE_PERCENT_CAP, math.floor(aggregate.deleted_count / total * 100))
            self._on_progress(
                ProgressEvent(
                    stage=Stage.DELETING,
                    percent=percent,
                    message=(
                        f"Deleted {aggregate.deleted_count} of {total} files "
                        f"({aggregate.failed_count} failed)"
                    ),
                )
            )
        return aggregate

    def _info(self, message: str, details: dict[str, Any]) -> None:
        logger.info("%s %s", message, details)
        if self._log is not None:
            self._log.info(message, details)

    def _warn(self, message: str, details: dict[str, Any]) -> None:
        logger.warning("%s %s", message, details)
        if self._log is not None:
            self._log.warn(message, details)

    def _error(self, message: str, details: dict[str, Any]) -> None:
        logger.error("%s %s", message, details)
        if self._log is not None:
            self._log.error(message, details)
