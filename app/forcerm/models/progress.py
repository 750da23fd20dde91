"""Progress models emitted while a deletion runs."""

from dataclasses import dataclass
from enum import Enum


class Stage(str, Enum):
    """Pipeline stage, in the order a run passes through them."""

    PREPARE = "prepare"
    SCANNING = "scanning"
    DELETING = "deleting"
    CLEANUP = "cleanup"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """A single progress notification.

    Attributes:
        stage: Pipeline stage the run is in.
        percent: Overall completion, 0-100.
        message: Human-readable status line.
    """

    stage: Stage
    percent: int
    message: str

    def __post_init__(self) -> None:
        """Validate the percentage range."""
        if not (0 <= self.percent <= 100):
            msg = f"Percent must be between 0 and 100, got {self.percent}"
            raise ValueError(msg)
