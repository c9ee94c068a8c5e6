"""
ProgressionEngine - Lock state, resume point and navigation for one learner.

Given a course's learning paths, its prerequisite map and the learner's
completed set, the engine produces:
- Status-annotated paths (locked / completed per capsule)
- The resume point (next actionable capsule)
- Next/previous navigation over unlocked capsules
- Aggregate course progress

The engine is pure: it performs no I/O, never mutates its input, and gives
identical output for identical input. After a completion is written, build
a new engine from the updated completed set.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from knowgraph.schemas import Capsule, LearningPath

from .prerequisites import missing_prerequisites

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapsuleStatus:
    """Capsule with lock/completion state for one learner."""
    capsule: Capsule
    is_locked: bool
    is_completed: bool
    missing_prerequisites: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.capsule.id


@dataclass
class PathStatus:
    """Learning path with its capsule statuses in order."""
    path: LearningPath
    capsules: list[CapsuleStatus]

    @property
    def completed_count(self) -> int:
        return sum(1 for status in self.capsules if status.is_completed)

    @property
    def total_count(self) -> int:
        return len(self.capsules)


def progress_percent(completed: int, total: int) -> int:
    """Percentage rounded half-up to an integer; 0 for an empty course."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


class ProgressionEngine:
    """
    Compute the status-annotated view of a course for one learner.

    Capsules are ordered globally by path order_index, then capsule
    order_index within the path. Input order is not trusted; ties keep
    their input order.
    """

    def __init__(
        self,
        paths: Iterable[LearningPath],
        prerequisites_by_capsule: Optional[dict[str, list[str]]] = None,
        completed_capsule_ids: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the engine.

        Args:
            paths: Learning paths with nested capsules, in any order
            prerequisites_by_capsule: capsule ID -> prerequisite capsule IDs
            completed_capsule_ids: Capsule IDs the learner has completed
        """
        self._paths = [
            path.model_copy(update={
                "capsules": sorted(path.capsules, key=lambda c: c.order_index),
            })
            for path in sorted(paths, key=lambda p: p.order_index)
        ]
        self._prerequisites = {
            capsule_id: list(prereq_ids)
            for capsule_id, prereq_ids in (prerequisites_by_capsule or {}).items()
        }
        self._completed = frozenset(completed_capsule_ids or ())
        self._known_ids = frozenset(
            capsule.id for path in self._paths for capsule in path.capsules
        )

        self._statuses = self._build_statuses()
        self._order: list[CapsuleStatus] = [
            status
            for path_status in self._statuses
            for status in path_status.capsules
        ]
        self._index: dict[str, int] = {}
        for idx, status in enumerate(self._order):
            self._index.setdefault(status.id, idx)

    # -------------------------------------------------------------------------
    # Statuses
    # -------------------------------------------------------------------------

    def compute_statuses(self) -> list[PathStatus]:
        """
        The annotated graph: paths in order, each with capsule statuses in order.

        Statuses are computed once per engine; each call returns fresh lists
        over the same frozen CapsuleStatus objects.
        """
        return [
            PathStatus(path=path_status.path, capsules=list(path_status.capsules))
            for path_status in self._statuses
        ]

    def _build_statuses(self) -> list[PathStatus]:
        result = []
        for path in self._paths:
            statuses = []
            for capsule in path.capsules:
                prereq_ids = self._prerequisites.get(capsule.id, [])
                missing = missing_prerequisites(prereq_ids, self._completed, self._known_ids)

                dangling = [pid for pid in missing if pid not in self._known_ids]
                if dangling:
                    logger.debug(
                        f"Capsule {capsule.id} requires capsules outside the loaded graph: {dangling}"
                    )

                statuses.append(CapsuleStatus(
                    capsule=capsule,
                    is_locked=bool(missing),
                    is_completed=capsule.id in self._completed,
                    missing_prerequisites=missing,
                ))
            result.append(PathStatus(path=path, capsules=statuses))
        return result

    def get_status(self, capsule_id: str) -> Optional[CapsuleStatus]:
        """Status of a capsule in this course, or None if it is not part of it."""
        idx = self._index.get(capsule_id)
        return self._order[idx] if idx is not None else None

    @property
    def total_count(self) -> int:
        return len(self._order)

    @property
    def completed_count(self) -> int:
        return sum(1 for status in self._order if status.is_completed)

    @property
    def total_duration_minutes(self) -> int:
        return sum(status.capsule.duration_minutes or 0 for status in self._order)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def find_resume_point(self) -> Optional[CapsuleStatus]:
        """
        Pick the capsule a learner should land on when entering the course.

        Priority:
        1. First capsule that is neither completed nor locked
        2. First capsule in the course (even if locked or completed)
        3. None for a course without capsules
        """
        for status in self._order:
            if not status.is_completed and not status.is_locked:
                return status
        return self._order[0] if self._order else None

    @property
    def resume_capsule_id(self) -> Optional[str]:
        status = self.find_resume_point()
        return status.id if status else None

    def next_unlocked(self, current_id: str) -> Optional[CapsuleStatus]:
        """First unlocked capsule after current_id in course order (completed ones included)."""
        idx = self._index.get(current_id)
        if idx is None:
            return None
        for status in self._order[idx + 1:]:
            if not status.is_locked:
                return status
        return None

    def previous_unlocked(self, current_id: str) -> Optional[CapsuleStatus]:
        """Closest unlocked capsule before current_id in course order."""
        idx = self._index.get(current_id)
        if idx is None:
            return None
        for status in reversed(self._order[:idx]):
            if not status.is_locked:
                return status
        return None

    def capsule_position(self, capsule_id: str) -> tuple[int, int]:
        """
        Get capsule position as (current, total).

        Returns (0, total) if the capsule is not in the course.
        """
        idx = self._index.get(capsule_id)
        if idx is None:
            return (0, len(self._order))
        return (idx + 1, len(self._order))

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def course_progress(self) -> int:
        """Completed capsules as an integer percentage of all capsules."""
        return progress_percent(self.completed_count, self.total_count)

    def to_payload(self) -> dict:
        """
        Serializable view for the presentation layer.

        Returns:
            {"paths": [...], "resumeCapsuleId": str | None, "progressPercent": int}
            where each capsule carries its fields plus isLocked / isCompleted
        """
        paths = []
        for path_status in self._statuses:
            path_data = path_status.path.model_dump(mode="json", exclude={"capsules"})
            path_data["capsules"] = [
                {
                    **status.capsule.model_dump(mode="json"),
                    "isLocked": status.is_locked,
                    "isCompleted": status.is_completed,
                }
                for status in path_status.capsules
            ]
            paths.append(path_data)

        return {
            "paths": paths,
            "resumeCapsuleId": self.resume_capsule_id,
            "progressPercent": self.course_progress(),
        }
