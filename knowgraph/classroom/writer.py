"""
CompletionWriter - Record that a learner finished a capsule.

A failed write is reported back to the caller, never raised into the UI
and never reflected in any computed view.
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

from knowgraph.schemas import ProgressRecord

from .progress import ProgressTracker

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    """Outcome of a completion write."""
    success: bool
    capsule_id: str
    record: Optional[ProgressRecord] = None
    error: Optional[str] = None


class CompletionWriter:
    """Idempotent completion upserts on top of ProgressTracker."""

    def __init__(self, progress: ProgressTracker):
        self.progress = progress

    def mark_complete(self, user_id: str, capsule_id: str) -> CompletionResult:
        """
        Upsert a completed progress record for (user_id, capsule_id).

        Safe to retry. Callers recompute the course view afterwards; on
        failure they must not treat the capsule as completed.
        """
        try:
            record = self.progress.upsert_completion(user_id, capsule_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to mark capsule {capsule_id} complete for user {user_id}: {e}")
            return CompletionResult(success=False, capsule_id=capsule_id, error=str(e))

        logger.info(f"Marked capsule {capsule_id} complete for user {user_id}")
        return CompletionResult(success=True, capsule_id=capsule_id, record=record)
