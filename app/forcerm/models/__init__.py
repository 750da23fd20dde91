"""Data models for forcerm.

This module exports all domain models used throughout the application.
"""

from forcerm.models.items import FilterDecision, FilterResult, ItemKind, ScannedItem, ScanResult
from forcerm.models.progress import ProgressEvent, Stage
from forcerm.models.request import DeletionRequest
from forcerm.models.results import (
    BatchResult,
    DeletionBatch,
    DeletionSummary,
    FolderInfo,
    HandleReport,
    PreparationReport,
    PreviewResult,
    StepOutcome,
)

__all__ = [
    "BatchResult",
    "DeletionBatch",
    "DeletionRequest",
    "DeletionSummary",
    "FilterDecision",
    "FilterResult",
    "FolderInfo",
    "HandleReport",
    "ItemKind",
    "PreparationReport",
    "PreviewResult",
    "ProgressEvent",
    "ScanResult",
    "ScannedItem",
    "Stage",
    "StepOutcome",
]
