"""Staged progress reporting for a single run.

The reporter enforces the pipeline's ordering rules: stages only move
forward (prepare, scanning, deleting, cleanup, complete) and the
percentage never decreases within a run.
"""

from collections.abc import Callable

from forcerm.models.progress import ProgressEvent, Stage

ProgressCallback = Callable[[ProgressEvent], None]

_STAGE_ORDER: dict[Stage, int] = {stage: index for index, stage in enumerate(Stage)}


class ProgressReporter:
    """Forwards progress events to a caller, keeping them monotonic.

    Args:
        callback: Receives every event; None discards events.
    """

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback
        self._stage: Stage | None = None
        self._percent = 0
        self._events: list[ProgressEvent] = []

    @property
    def stage(self) -> Stage | None:
        return self._stage

    @property
    def percent(self) -> int:
        return self._percent

    @property
    def events(self) -> list[ProgressEvent]:
        return list(self._events)

    def emit(self, stage: Stage, percent: int, message: str) -> ProgressEvent:
        """Emit an event, clamping the percentage to keep it non-decreasing.

        Args:
            stage: Stage of the event.
            percent: Requested completion percentage.
            message: Status line.

        Returns:
            The event actually delivered.

        Raises:
            ValueError: If ``stage`` lies before the current stage.
        """
        if self._stage is not None and _STAGE_ORDER[stage] < _STAGE_ORDER[self._stage]:
            msg = f"Cannot move back from {self._stage.value} to {stage.value}"
            raise ValueError(msg)

        self._stage = stage
        self._percent = max(self._percent, min(100, max(0, percent)))
        event = ProgressEvent(stage=stage, percent=self._percent, message=message)
        self._events.append(event)
        if self._callback is not None:
            self._callback(event)
        return event

    def forward(self, event: ProgressEvent) -> ProgressEvent:
        """Re-emit an event produced by a component."""
        return self.emit(event.stage, event.percent, event.message)
