"""Engine settings and their TOML persistence.

Settings tune the deletion engine (parallelism, timeouts, preparation
behaviour, success policy). They are stored in
~/.config/forcerm/config.toml; a missing file means "use defaults".
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from forcerm.core.paths import get_log_dir, get_settings_path

# How batches are isolated from each other
Isolation = Literal["process", "thread"]

# When a run with some failures still counts as a success
SuccessPolicy = Literal["any_deleted", "no_failures"]


class EngineSettings(BaseModel):
    """Tunable parameters for the deletion engine.

    Attributes:
        max_threads: Upper bound on concurrent deletion workers.
        worker_timeout_seconds: Wall-clock budget for a single worker's batch.
        isolation: Run batches in separate processes or in threads.
        scan_yield_every: Item cadence at which scans hand control back.
        info_max_items: Hard item cap for folder info calculation.
        info_max_depth: Depth cap for folder info calculation.
        prepare: Run the unlock preparation phase before deleting.
        reap_handles: Terminate processes holding handles during preparation
            (Windows hosts only).
        prepare_timeout_seconds: Budget for each recursive preparation step.
        settle_delay_seconds: Pause after preparation so handles are released.
        success_policy: Threshold for reporting a run with failures as successful.
        log_dir: Directory for per-run logs (None = XDG state dir).
        preview_sample_size: Number of sample paths listed in previews.
    """

    model_config = ConfigDict(extra="forbid")

    max_threads: Annotated[
        int,
        Field(ge=1, le=64, description="Maximum concurrent deletion workers"),
    ] = 8
    worker_timeout_seconds: Annotated[
        float,
        Field(gt=0, le=3600, description="Per-worker timeout in seconds"),
    ] = 60.0
    isolation: Annotated[
        Isolation,
        Field(description="Worker isolation (process or thread)"),
    ] = "process"
    scan_yield_every: Annotated[
        int,
        Field(ge=1, description="Scan tick cadence in items"),
    ] = 100
    info_max_items: Annotated[
        int,
        Field(ge=1, description="Item cap for folder info"),
    ] = 10_000
    info_max_depth: Annotated[
        int,
        Field(ge=1, description="Depth cap for folder info"),
    ] = 20
    prepare: Annotated[
        bool,
        Field(description="Run the unlock preparation phase"),
    ] = True
    reap_handles: Annotated[
        bool,
        Field(description="Terminate processes holding open handles (Windows)"),
    ] = True
    prepare_timeout_seconds: Annotated[
        float,
        Field(gt=0, le=600, description="Timeout per preparation step"),
    ] = 30.0
    settle_delay_seconds: Annotated[
        float,
        Field(ge=0, le=30, description="Pause after preparation"),
    ] = 1.0
    success_policy: Annotated[
        SuccessPolicy,
        Field(description="When a run with failures is still a success"),
    ] = "any_deleted"
    log_dir: Annotated[
        Path | None,
        Field(description="Per-run log directory (None = default)"),
    ] = None
    preview_sample_size: Annotated[
        int,
        Field(ge=0, le=1000, description="Sample paths shown in previews"),
    ] = 20

    @property
    def effective_log_dir(self) -> Path:
        """Get the log directory, falling back to the XDG state location."""
        if self.log_dir is not None:
            return self.log_dir
        return get_log_dir()


class SettingsError(Exception):
    """Base exception for settings errors."""


class SettingsParseError(SettingsError):
    """Raised when the settings file cannot be parsed."""


def load_settings(path: Path | None = None) -> EngineSettings:
    """Load engine settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default location.

    Returns:
        Validated EngineSettings. Defaults if the file does not exist.

    Raises:
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the file cannot be read or fails validation.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        return EngineSettings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return EngineSettings.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise SettingsError(f"Invalid settings content: {e}") from e


def save_settings(settings: EngineSettings, path: Path | None = None) -> Path:
    """Save engine settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        settings: The settings to save.
        path: Destination path. If None, uses the default location.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    data = _settings_to_dict(settings)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path


def _settings_to_dict(settings: EngineSettings) -> dict[str, object]:
    """Convert settings to a TOML-serializable dictionary.

    TOML has no null, so unset optional values are left out.
    """
    data = settings.model_dump(mode="json", exclude_none=True)
    return {key: value for key, value in data.items() if value is not None}
