"""
EnrollmentBook - Course enrollments and their approval state.

Learners request access (pending); an admin approves or rejects after
checking the bank transfer offline. Only approved learners may open the
classroom.
"""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from knowgraph.schemas import Enrollment, EnrollmentStatus

from .database import connect, ensure_database


def _row_to_enrollment(row: sqlite3.Row) -> Enrollment:
    return Enrollment(
        user_id=row["user_id"],
        course_id=row["course_id"],
        status=EnrollmentStatus(row["status"]),
        payment_reference=row["payment_reference"],
        enrolled_at=datetime.fromisoformat(row["enrolled_at"]),
        approved_at=datetime.fromisoformat(row["approved_at"]) if row["approved_at"] else None,
    )


class EnrollmentBook:
    """Store enrollments in SQLite, one per (user, course)."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        ensure_database(self.db_path)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        return connect(self.db_path)

    def enroll(
        self,
        user_id: str,
        course_id: str,
        payment_reference: Optional[str] = None,
    ) -> Enrollment:
        """Request enrollment. An existing enrollment is returned unchanged."""
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO enrollments (user_id, course_id, status, payment_reference, enrolled_at)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(user_id, course_id) DO NOTHING""",
                (user_id, course_id, EnrollmentStatus.PENDING.value, payment_reference,
                 datetime.now(timezone.utc).isoformat())
            )
            conn.commit()
        finally:
            conn.close()
        return self.get_enrollment(user_id, course_id)

    def get_enrollment(self, user_id: str, course_id: str) -> Optional[Enrollment]:
        """Get the enrollment for a learner and course."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                """SELECT user_id, course_id, status, payment_reference, enrolled_at, approved_at
                   FROM enrollments WHERE user_id = ? AND course_id = ?""",
                (user_id, course_id)
            ).fetchone()
            return _row_to_enrollment(row) if row else None
        finally:
            conn.close()

    def set_status(self, user_id: str, course_id: str, status: EnrollmentStatus) -> Optional[Enrollment]:
        """Approve or reject an enrollment. Returns None if there is none."""
        approved_at = datetime.now(timezone.utc).isoformat() if status == EnrollmentStatus.APPROVED else None
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """UPDATE enrollments SET status = ?, approved_at = ?
                   WHERE user_id = ? AND course_id = ?""",
                (status.value, approved_at, user_id, course_id)
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None
        finally:
            conn.close()
        return self.get_enrollment(user_id, course_id)

    def is_approved(self, user_id: str, course_id: str) -> bool:
        """Check if the learner may open the course."""
        enrollment = self.get_enrollment(user_id, course_id)
        return enrollment is not None and enrollment.status == EnrollmentStatus.APPROVED

    def get_enrollments(
        self,
        course_id: Optional[str] = None,
        status: Optional[EnrollmentStatus] = None,
    ) -> list[Enrollment]:
        """Get enrollments, newest first, optionally filtered by course and status."""
        query = """SELECT user_id, course_id, status, payment_reference, enrolled_at, approved_at
                   FROM enrollments WHERE 1 = 1"""
        params = []
        if course_id:
            query += " AND course_id = ?"
            params.append(course_id)
        if status:
            query += " AND status = ?"
            params.append(status.value)
        query += " ORDER BY enrolled_at DESC, rowid DESC"

        conn = self._get_connection()
        try:
            return [_row_to_enrollment(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    def get_pending_enrollments(self, course_id: Optional[str] = None) -> list[Enrollment]:
        """Requests waiting for an admin decision, newest first."""
        return self.get_enrollments(course_id, EnrollmentStatus.PENDING)

    def get_approved_enrollments(self, course_id: Optional[str] = None) -> list[Enrollment]:
        """Get approved enrollments ordered by course, then user."""
        enrollments = self.get_enrollments(course_id, EnrollmentStatus.APPROVED)
        return sorted(enrollments, key=lambda e: (e.course_id, e.user_id))

    def get_user_enrollments(self, user_id: str) -> list[Enrollment]:
        """All of a learner's enrollments, newest first."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT user_id, course_id, status, payment_reference, enrolled_at, approved_at
                   FROM enrollments WHERE user_id = ?
                   ORDER BY enrolled_at DESC, rowid DESC""",
                (user_id,)
            )
            return [_row_to_enrollment(row) for row in cursor.fetchall()]
        finally:
            conn.close()
