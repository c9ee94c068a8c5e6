"""
ProgressTracker - Per-learner capsule progress in the KnowGraph database.

Stores one record per (user, capsule):
- Completion flag and timestamp
- Watch percentage
- Last activity timestamp

Every call names the learner explicitly; there is no current-user state.
"""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from knowgraph.schemas import ProgressRecord

from .database import connect, ensure_database, placeholders


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _row_to_record(row: sqlite3.Row) -> ProgressRecord:
    return ProgressRecord(
        user_id=row["user_id"],
        capsule_id=row["capsule_id"],
        is_completed=bool(row["is_completed"]),
        completed_at=_parse_timestamp(row["completed_at"]),
        watch_percentage=row["watch_percentage"],
        last_watched_at=_parse_timestamp(row["last_watched_at"]),
    )


class ProgressTracker:
    """
    Track learner progress in SQLite.

    Writes are upserts keyed by (user_id, capsule_id), so repeating a write
    never creates a second record.
    """

    def __init__(self, db_path: str | Path):
        """
        Initialize progress tracker.

        Args:
            db_path: Path to the KnowGraph database (created if missing)
        """
        self.db_path = Path(db_path)
        ensure_database(self.db_path)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        return connect(self.db_path)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_progress(self, user_id: str, capsule_ids: Iterable[str]) -> list[ProgressRecord]:
        """Get the learner's progress records for the given capsules."""
        capsule_ids = list(capsule_ids)
        if not capsule_ids:
            return []

        conn = self._get_connection()
        try:
            cursor = conn.execute(
                f"""SELECT user_id, capsule_id, is_completed, completed_at,
                           watch_percentage, last_watched_at
                    FROM progress
                    WHERE user_id = ? AND capsule_id IN ({placeholders(len(capsule_ids))})
                    ORDER BY capsule_id""",
                [user_id, *capsule_ids]
            )
            return [_row_to_record(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_completed_capsule_ids(self, user_id: str, capsule_ids: Iterable[str]) -> set[str]:
        """Get the subset of capsule_ids the learner has completed."""
        return {
            record.capsule_id
            for record in self.get_progress(user_id, capsule_ids)
            if record.is_completed
        }

    def get_last_activity(self, user_id: str, capsule_ids: Iterable[str]) -> Optional[datetime]:
        """Most recent last_watched_at across the given capsules."""
        records = self.get_progress(user_id, capsule_ids)
        if not records:
            return None
        return max(record.last_watched_at for record in records)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def upsert_completion(
        self,
        user_id: str,
        capsule_id: str,
        now: Optional[datetime] = None,
    ) -> ProgressRecord:
        """
        Mark a capsule completed for a learner.

        Creates the record or overwrites the existing one with
        is_completed, completed_at, watch_percentage=100 and last_watched_at.

        Raises:
            sqlite3.IntegrityError: If the capsule does not exist
            sqlite3.Error: On any other database failure
        """
        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO progress (user_id, capsule_id, is_completed, completed_at,
                                         watch_percentage, last_watched_at)
                   VALUES (?, ?, 1, ?, 100, ?)
                   ON CONFLICT(user_id, capsule_id) DO UPDATE SET
                     is_completed = 1,
                     completed_at = excluded.completed_at,
                     watch_percentage = 100,
                     last_watched_at = excluded.last_watched_at""",
                (user_id, capsule_id, timestamp, timestamp)
            )
            conn.commit()
        finally:
            conn.close()

        return ProgressRecord(
            user_id=user_id,
            capsule_id=capsule_id,
            is_completed=True,
            completed_at=datetime.fromisoformat(timestamp),
            watch_percentage=100,
            last_watched_at=datetime.fromisoformat(timestamp),
        )

    def count_records(self, user_id: str, capsule_id: str) -> int:
        """Number of stored records for one (user, capsule) key."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                """SELECT COUNT(*) AS count FROM progress
                   WHERE user_id = ? AND capsule_id = ?""",
                (user_id, capsule_id)
            ).fetchone()
            return row["count"]
        finally:
            conn.close()
