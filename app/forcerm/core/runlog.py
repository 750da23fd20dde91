"""Per-run deletion log.

Every engine run writes a side log of timestamped, leveled entries to
its own file, one entry per line::

    [2026-01-05T10:00:00.123456+00:00] [INFO] Scanning folder structure
    [2026-01-05T10:00:01.002000+00:00] [WARN] Worker 3 timed out | {"items": 120}

Structured details are passed through ``extra={"details": {...}}`` and
appended as compact JSON.
"""

import json
import logging
import re
import time
from datetime import UTC, datetime
from itertools import count
from pathlib import Path
from typing import Any

from forcerm.core.paths import ensure_dir

# Number of error messages kept for the run summary
ERROR_SAMPLE_SIZE = 10

_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

_run_ids = count(1)


class RunLogFormatter(logging.Formatter):
    """Format records as ``[timestamp] [LEVEL] message | details``."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=UTC).isoformat()
        level = _LEVEL_NAMES.get(record.levelno, record.levelname)
        line = f"[{timestamp}] [{level}] {record.getMessage()}"
        details = getattr(record, "details", None)
        if details:
            line += " | " + json.dumps(details, default=str, separators=(",", ":"))
        return line


class _TallyHandler(logging.Handler):
    """Count warnings and errors, keeping the first few error messages."""

    def __init__(self) -> None:
        super().__init__(level=logging.INFO)
        self.entries = 0
        self.warnings = 0
        self.errors = 0
        self.error_messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.entries += 1
        if record.levelno >= logging.ERROR:
            self.errors += 1
            if len(self.error_messages) < ERROR_SAMPLE_SIZE:
                self.error_messages.append(record.getMessage())
        elif record.levelno >= logging.WARNING:
            self.warnings += 1


def log_file_name(folder: Path, when: datetime | None = None) -> str:
    """Build the log file name for a run against ``folder``.

    Args:
        folder: Root folder of the run.
        when: Timestamp to embed (defaults to now, UTC).

    Returns:
        File name of the form ``deletion_<safe-name>_<timestamp>.log``.
    """
    when = when or datetime.now(tz=UTC)
    stamp = re.sub(r"[:.]", "-", when.isoformat(timespec="milliseconds"))
    safe_name = re.sub(r"[^a-z0-9]", "_", folder.name or "root", flags=re.IGNORECASE)
    return f"deletion_{safe_name}_{stamp}.log"


class RunLog:
    """Leveled log for a single engine run.

    Records go to a dedicated file under ``log_dir`` and are tallied so
    the run summary can report error/warning counts. Records do not
    propagate to the application loggers.

    Args:
        folder: Root folder of the run (used to name the file).
        log_dir: Directory that receives the log file.
    """

    def __init__(self, folder: Path, log_dir: Path) -> None:
        ensure_dir(log_dir, "log")
        self.path = log_dir / log_file_name(folder)
        self._started = time.monotonic()

        self._logger = logging.getLogger(f"forcerm.run.{next(_run_ids)}")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False

        self._file_handler = logging.FileHandler(self.path, encoding="utf-8")
        self._file_handler.setFormatter(RunLogFormatter())
        self._tally = _TallyHandler()
        self._logger.addHandler(self._file_handler)
        self._logger.addHandler(self._tally)

    def info(self, message: str, details: dict[str, Any] | None = None) -> None:
        self._logger.info(message, extra={"details": details})

    def warn(self, message: str, details: dict[str, Any] | None = None) -> None:
        self._logger.warning(message, extra={"details": details})

    def error(self, message: str, details: dict[str, Any] | None = None) -> None:
        self._logger.error(message, extra={"details": details})

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self._started

    @property
    def error_count(self) -> int:
        return self._tally.errors

    @property
    def warning_count(self) -> int:
        return self._tally.warnings

    @property
    def sample_errors(self) -> tuple[str, ...]:
        return tuple(self._tally.error_messages)

    def close(self) -> None:
        """Flush and detach the handlers. Safe to call more than once."""
        for handler in (self._file_handler, self._tally):
            self._logger.removeHandler(handler)
            handler.close()

    def __enter__(self) -> "RunLog":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()
