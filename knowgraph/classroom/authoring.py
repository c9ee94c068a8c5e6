"""
CourseAuthor - Admin back office writes for the content graph.

Provides:
- Course, learning path and capsule creation
- Prerequisite edges with cycle validation at write time
- Audit of cycles already present in stored data
"""

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from knowgraph.schemas import Course, Capsule, LearningPath, PrerequisiteEdge

from .database import connect, ensure_database
from .prerequisites import find_cycle_path, find_prerequisite_cycles

logger = logging.getLogger(__name__)


class PrerequisiteCycleError(ValueError):
    """Adding the prerequisite would make a set of capsules unlockable."""

    def __init__(self, capsule_id: str, prerequisite_capsule_id: str, cycle: list[str]):
        self.capsule_id = capsule_id
        self.prerequisite_capsule_id = prerequisite_capsule_id
        self.cycle = cycle
        super().__init__(
            f"Capsule {capsule_id} cannot require {prerequisite_capsule_id}: "
            f"cycle {' -> '.join(cycle)}"
        )


def _new_id() -> str:
    return uuid.uuid4().hex


def _load_edges(conn: sqlite3.Connection) -> list[PrerequisiteEdge]:
    cursor = conn.execute(
        "SELECT capsule_id, prerequisite_capsule_id FROM capsule_prerequisites"
    )
    return [
        PrerequisiteEdge(
            capsule_id=row["capsule_id"],
            prerequisite_capsule_id=row["prerequisite_capsule_id"],
        )
        for row in cursor.fetchall()
    ]


class CourseAuthor:
    """Create and edit course content in SQLite."""

    def __init__(self, db_path: str | Path):
        """
        Initialize author.

        Args:
            db_path: Path to the KnowGraph database (created if missing)
        """
        self.db_path = Path(db_path)
        ensure_database(self.db_path)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        return connect(self.db_path)

    # -------------------------------------------------------------------------
    # Courses
    # -------------------------------------------------------------------------

    def create_course(
        self,
        title: str,
        description: Optional[str] = None,
        is_published: bool = False,
        course_id: Optional[str] = None,
    ) -> Course:
        """Create a course."""
        course = Course(
            id=course_id or _new_id(),
            title=title,
            description=description,
            is_published=is_published,
        )
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO courses (id, title, description, is_published)
                   VALUES (?, ?, ?, ?)""",
                (course.id, course.title, course.description, int(course.is_published))
            )
            conn.commit()
        finally:
            conn.close()

        logger.info(f"Created course {course.id}: {course.title}")
        return course

    def set_published(self, course_id: str, is_published: bool) -> bool:
        """Publish or unpublish a course. Returns False if the course doesn't exist."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "UPDATE courses SET is_published = ? WHERE id = ?",
                (int(is_published), course_id)
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def delete_course(self, course_id: str) -> bool:
        """Delete a course with its paths, capsules, edges, progress and enrollments."""
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM courses WHERE id = ?", (course_id,))
            conn.commit()
            deleted = cursor.rowcount > 0
        finally:
            conn.close()

        if deleted:
            logger.info(f"Deleted course {course_id}")
        return deleted

    # -------------------------------------------------------------------------
    # Learning Paths and Capsules
    # -------------------------------------------------------------------------

    def add_learning_path(
        self,
        course_id: str,
        title: str,
        description: Optional[str] = None,
        path_id: Optional[str] = None,
    ) -> LearningPath:
        """Append a learning path to the end of a course."""
        conn = self._get_connection()
        try:
            count = conn.execute(
                "SELECT COUNT(*) AS count FROM learning_paths WHERE course_id = ?",
                (course_id,)
            ).fetchone()["count"]

            path = LearningPath(
                id=path_id or _new_id(),
                course_id=course_id,
                title=title,
                description=description,
                order_index=count,
            )
            conn.execute(
                """INSERT INTO learning_paths (id, course_id, title, description, order_index)
                   VALUES (?, ?, ?, ?, ?)""",
                (path.id, path.course_id, path.title, path.description, path.order_index)
            )
            conn.commit()
            return path
        finally:
            conn.close()

    def add_capsule(
        self,
        learning_path_id: str,
        title: str,
        description: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        capsule_id: Optional[str] = None,
    ) -> Capsule:
        """Append a capsule to the end of a learning path."""
        conn = self._get_connection()
        try:
            count = conn.execute(
                "SELECT COUNT(*) AS count FROM capsules WHERE learning_path_id = ?",
                (learning_path_id,)
            ).fetchone()["count"]

            capsule = Capsule(
                id=capsule_id or _new_id(),
                learning_path_id=learning_path_id,
                title=title,
                description=description,
                duration_minutes=duration_minutes,
                order_index=count,
            )
            conn.execute(
                """INSERT INTO capsules (id, learning_path_id, title, description,
                                         duration_minutes, order_index)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (capsule.id, capsule.learning_path_id, capsule.title, capsule.description,
                 capsule.duration_minutes, capsule.order_index)
            )
            conn.commit()
            return capsule
        finally:
            conn.close()

    def delete_capsule(self, capsule_id: str) -> bool:
        """Delete a capsule with its prerequisite edges and progress records."""
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM capsules WHERE id = ?", (capsule_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Prerequisites
    # -------------------------------------------------------------------------

    def add_prerequisite(self, capsule_id: str, prerequisite_capsule_id: str) -> PrerequisiteEdge:
        """
        Require prerequisite_capsule_id to be completed before capsule_id.

        The check and the insert run in one write transaction, so two
        admins cannot close a cycle between them.

        Raises:
            ValueError: If either capsule doesn't exist
            PrerequisiteCycleError: If the edge would create a cycle
        """
        edge = PrerequisiteEdge(
            capsule_id=capsule_id,
            prerequisite_capsule_id=prerequisite_capsule_id,
        )
        conn = self._get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")

            for cid in (capsule_id, prerequisite_capsule_id):
                row = conn.execute("SELECT 1 FROM capsules WHERE id = ?", (cid,)).fetchone()
                if not row:
                    raise ValueError(f"Capsule not found: {cid}")

            cycle = find_cycle_path(_load_edges(conn), capsule_id, prerequisite_capsule_id)
            if cycle:
                raise PrerequisiteCycleError(capsule_id, prerequisite_capsule_id, cycle)

            conn.execute(
                """INSERT INTO capsule_prerequisites (capsule_id, prerequisite_capsule_id, created_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT(capsule_id, prerequisite_capsule_id) DO NOTHING""",
                (capsule_id, prerequisite_capsule_id, datetime.now(timezone.utc).isoformat())
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        logger.debug(f"Added prerequisite {prerequisite_capsule_id} -> {capsule_id}")
        return edge

    def remove_prerequisite(self, capsule_id: str, prerequisite_capsule_id: str) -> bool:
        """Remove a prerequisite edge. Returns False if it didn't exist."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """DELETE FROM capsule_prerequisites
                   WHERE capsule_id = ? AND prerequisite_capsule_id = ?""",
                (capsule_id, prerequisite_capsule_id)
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def audit_prerequisite_cycles(self) -> list[list[str]]:
        """
        Report cycles in stored prerequisite data.

        Edges written through add_prerequisite can't form cycles, but data
        imported by other means may. Capsules on a cycle stay locked for
        every learner; this only reports them.
        """
        conn = self._get_connection()
        try:
            cycles = find_prerequisite_cycles(_load_edges(conn))
        finally:
            conn.close()

        for cycle in cycles:
            logger.warning(f"Prerequisite cycle: {' -> '.join(cycle + cycle[:1])}")
        return cycles
