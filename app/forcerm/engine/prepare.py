"""Preparation phase: unlock a tree before it is deleted.

Runs the normalizer steps (ownership, permissions, attributes) and the
handle reaper in sequence. Every step is best-effort; a failing step is
reported but never stops the pipeline, because the per-item escalation
ladder retries each item later anyway.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from forcerm.engine.normalizer import Normalizer
from forcerm.engine.reaper import HandleReaper
from forcerm.models.results import HandleReport, PreparationReport, StepOutcome

logger = logging.getLogger(__name__)


def prepare_for_deletion(
    root: Path,
    normalizer: Normalizer,
    reaper: HandleReaper | None = None,
    on_step: Callable[[str], None] | None = None,
) -> PreparationReport:
    """Take ownership, grant permissions, clear attributes, release handles.

    Args:
        root: Folder about to be deleted.
        normalizer: Performs the ownership/permission/attribute steps.
        reaper: Terminates handle holders; None skips that step.
        on_step: Called with a status message before each step.

    Returns:
        PreparationReport with the outcome of every step.
    """

    def announce(message: str) -> None:
        logger.info(message)
        if on_step is not None:
            on_step(message)

    announce("Taking ownership of folder...")
    ownership = _guarded("ownership", normalizer.take_ownership, root)

    announce("Granting full permissions...")
    permissions = _guarded("permissions", normalizer.grant_permissions, root)

    announce("Removing file attributes...")
    attributes = _guarded("attributes", normalizer.clear_attributes, root)

    handles = HandleReport()
    if reaper is not None:
        announce("Closing file handles and terminating processes...")
        handles = reaper.reap(root)

    return PreparationReport(
        ownership=ownership,
        permissions=permissions,
        attributes=attributes,
        handles=handles,
    )


def _guarded(name: str, step: Callable[[Path], StepOutcome], root: Path) -> StepOutcome:
    try:
        return step(root)
    except OSError as e:
        logger.warning("Preparation step %s failed: %s", name, e)
        return StepOutcome(success=False, warning=f"{name}: {e}")
