"""
CourseLoader - Read the content graph from the KnowGraph database.

Provides read-only access to:
- Courses
- Learning paths with their capsules
- Capsule prerequisite edges
"""

import sqlite3
from collections import defaultdict
from pathlib import Path
from typing import Iterable, Optional

from knowgraph.schemas import Course, Capsule, LearningPath, PrerequisiteEdge

from .database import connect, placeholders


def _row_to_course(row: sqlite3.Row) -> Course:
    return Course(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        is_published=bool(row["is_published"]),
    )


def _row_to_capsule(row: sqlite3.Row) -> Capsule:
    return Capsule(
        id=row["id"],
        learning_path_id=row["learning_path_id"],
        title=row["title"],
        description=row["description"],
        duration_minutes=row["duration_minutes"],
        order_index=row["order_index"],
    )


class CourseLoader:
    """
    Load course content from SQLite.

    Thread-safe for read operations. Each method creates a new connection.
    """

    def __init__(self, db_path: str | Path):
        """
        Initialize loader with path to the KnowGraph database.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        if not self.db_path.exists():
            raise FileNotFoundError(f"KnowGraph database not found: {db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        return connect(self.db_path)

    # -------------------------------------------------------------------------
    # Courses
    # -------------------------------------------------------------------------

    def get_course(self, course_id: str) -> Optional[Course]:
        """Get a single course by ID."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT id, title, description, is_published FROM courses WHERE id = ?",
                (course_id,)
            )
            row = cursor.fetchone()
            return _row_to_course(row) if row else None
        finally:
            conn.close()

    def get_courses(self, published_only: bool = False) -> list[Course]:
        """Get all courses ordered by title."""
        conn = self._get_connection()
        try:
            query = "SELECT id, title, description, is_published FROM courses"
            if published_only:
                query += " WHERE is_published = 1"
            query += " ORDER BY title, id"
            return [_row_to_course(row) for row in conn.execute(query).fetchall()]
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Learning Paths and Capsules
    # -------------------------------------------------------------------------

    def get_learning_paths(self, course_id: str) -> list[LearningPath]:
        """Get learning paths for a course with capsules nested, both ordered by order_index."""
        conn = self._get_connection()
        try:
            path_rows = conn.execute(
                """SELECT id, course_id, title, description, order_index
                   FROM learning_paths
                   WHERE course_id = ?
                   ORDER BY order_index, rowid""",
                (course_id,)
            ).fetchall()
            if not path_rows:
                return []

            path_ids = [row["id"] for row in path_rows]
            capsule_rows = conn.execute(
                f"""SELECT id, learning_path_id, title, description,
                           duration_minutes, order_index
                    FROM capsules
                    WHERE learning_path_id IN ({placeholders(len(path_ids))})
                    ORDER BY order_index, rowid""",
                path_ids
            ).fetchall()

            capsules_by_path = defaultdict(list)
            for row in capsule_rows:
                capsules_by_path[row["learning_path_id"]].append(_row_to_capsule(row))

            return [
                LearningPath(
                    id=row["id"],
                    course_id=row["course_id"],
                    title=row["title"],
                    description=row["description"],
                    order_index=row["order_index"],
                    capsules=capsules_by_path.get(row["id"], []),
                )
                for row in path_rows
            ]
        finally:
            conn.close()

    def get_capsule(self, capsule_id: str) -> Optional[Capsule]:
        """Get a single capsule by ID."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                """SELECT id, learning_path_id, title, description,
                          duration_minutes, order_index
                   FROM capsules WHERE id = ?""",
                (capsule_id,)
            ).fetchone()
            return _row_to_capsule(row) if row else None
        finally:
            conn.close()

    def get_capsule_course_id(self, capsule_id: str) -> Optional[str]:
        """Get the course a capsule belongs to."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                """SELECT lp.course_id
                   FROM capsules c
                   JOIN learning_paths lp ON c.learning_path_id = lp.id
                   WHERE c.id = ?""",
                (capsule_id,)
            ).fetchone()
            return row["course_id"] if row else None
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Prerequisites
    # -------------------------------------------------------------------------

    def get_prerequisites(self, capsule_ids: Iterable[str]) -> list[PrerequisiteEdge]:
        """Get prerequisite edges declared by the given capsules."""
        capsule_ids = list(capsule_ids)
        if not capsule_ids:
            return []

        conn = self._get_connection()
        try:
            cursor = conn.execute(
                f"""SELECT capsule_id, prerequisite_capsule_id
                    FROM capsule_prerequisites
                    WHERE capsule_id IN ({placeholders(len(capsule_ids))})
                    ORDER BY created_at, rowid""",
                capsule_ids
            )
            return [
                PrerequisiteEdge(
                    capsule_id=row["capsule_id"],
                    prerequisite_capsule_id=row["prerequisite_capsule_id"],
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    def get_all_prerequisites(self) -> list[PrerequisiteEdge]:
        """Get every prerequisite edge in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT capsule_id, prerequisite_capsule_id
                   FROM capsule_prerequisites
                   ORDER BY created_at, rowid"""
            )
            return [
                PrerequisiteEdge(
                    capsule_id=row["capsule_id"],
                    prerequisite_capsule_id=row["prerequisite_capsule_id"],
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()
