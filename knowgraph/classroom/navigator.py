"""
CourseNavigator - One path from stored data to a learner's course view.

Combines CourseLoader (content), ProgressTracker (learner state) and
ProgressionEngine (lock/resume/progress rules) for every consumer:
- Course detail preview (no learner)
- Learner classroom (enrollment-gated)
- Admin progress dashboard and enrollment decisions
- Learner dashboard (my courses)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from knowgraph.schemas import (
    Course,
    Enrollment,
    EnrollmentStatus,
    LearnerCourseSummary,
    StudentCourseProgress,
)

from .engine import CapsuleStatus, PathStatus, ProgressionEngine
from .enrollment import EnrollmentBook
from .loader import CourseLoader
from .prerequisites import build_prerequisite_map
from .progress import ProgressTracker
from .writer import CompletionResult, CompletionWriter

logger = logging.getLogger(__name__)


class EnrollmentRequiredError(PermissionError):
    """The learner has no approved enrollment for the course."""

    def __init__(self, user_id: str, course_id: str):
        self.user_id = user_id
        self.course_id = course_id
        super().__init__(f"User {user_id} is not enrolled in course {course_id}")


@dataclass
class CourseView:
    """Status-annotated course for one learner (or an anonymous visitor)."""
    course_id: str
    course: Optional[Course]
    user_id: Optional[str]
    paths: list[PathStatus]
    resume_capsule_id: Optional[str]
    progress_percent: int
    completed_count: int
    total_count: int
    total_duration_minutes: int
    engine: ProgressionEngine

    def get_status(self, capsule_id: str) -> Optional[CapsuleStatus]:
        return self.engine.get_status(capsule_id)

    def next_unlocked(self, capsule_id: str) -> Optional[CapsuleStatus]:
        return self.engine.next_unlocked(capsule_id)

    def previous_unlocked(self, capsule_id: str) -> Optional[CapsuleStatus]:
        return self.engine.previous_unlocked(capsule_id)

    def to_payload(self) -> dict:
        return self.engine.to_payload()


class CourseNavigator:
    """
    Build course views and record completions.

    Holds no per-learner state: every view is rebuilt from the stores, so
    a view fetched before a write has propagated simply shows the older
    lock state.
    """

    def __init__(
        self,
        loader: CourseLoader,
        progress: ProgressTracker,
        enrollments: Optional[EnrollmentBook] = None,
    ):
        """
        Initialize navigator.

        Args:
            loader: CourseLoader for content access
            progress: ProgressTracker for learner progress
            enrollments: Optional EnrollmentBook; when given, the classroom
                and completions require an approved enrollment
        """
        self.loader = loader
        self.progress = progress
        self.enrollments = enrollments
        self.writer = CompletionWriter(progress)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def build_engine(self, course_id: str, user_id: Optional[str] = None) -> ProgressionEngine:
        """Fetch paths, prerequisites and (for a learner) progress, then build the engine."""
        paths = self.loader.get_learning_paths(course_id)
        capsule_ids = [capsule.id for path in paths for capsule in path.capsules]

        prerequisites = build_prerequisite_map(self.loader.get_prerequisites(capsule_ids))
        completed = (
            self.progress.get_completed_capsule_ids(user_id, capsule_ids)
            if user_id else set()
        )
        return ProgressionEngine(paths, prerequisites, completed)

    def get_course_view(self, course_id: str, user_id: Optional[str] = None) -> CourseView:
        """Build the course view; user_id=None gives the public preview."""
        engine = self.build_engine(course_id, user_id)
        return CourseView(
            course_id=course_id,
            course=self.loader.get_course(course_id),
            user_id=user_id,
            paths=engine.compute_statuses(),
            resume_capsule_id=engine.resume_capsule_id,
            progress_percent=engine.course_progress(),
            completed_count=engine.completed_count,
            total_count=engine.total_count,
            total_duration_minutes=engine.total_duration_minutes,
            engine=engine,
        )

    def _require_enrollment(self, course_id: str, user_id: str):
        if self.enrollments and not self.enrollments.is_approved(user_id, course_id):
            raise EnrollmentRequiredError(user_id, course_id)

    def open_classroom(self, course_id: str, user_id: str) -> CourseView:
        """
        Course view for an enrolled learner.

        Raises:
            EnrollmentRequiredError: If the learner isn't approved for the course
        """
        self._require_enrollment(course_id, user_id)
        return self.get_course_view(course_id, user_id)

    def can_open_capsule(self, course_id: str, user_id: str, capsule_id: str) -> bool:
        """Check that the capsule belongs to the course and is unlocked for the learner."""
        status = self.build_engine(course_id, user_id).get_status(capsule_id)
        return status is not None and not status.is_locked

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def complete_capsule(
        self,
        user_id: str,
        course_id: str,
        capsule_id: str,
    ) -> tuple[CompletionResult, CourseView]:
        """
        Mark a capsule complete, then rebuild the learner's view.

        Only a capsule of this course that is unlocked for the learner can
        be completed; anything else gives a failed result and no write.
        The write and the rebuild are separate steps; on failure the view
        reflects only what is persisted.

        Returns:
            Tuple of (completion result, refreshed course view)

        Raises:
            EnrollmentRequiredError: If the learner isn't approved for the course
        """
        self._require_enrollment(course_id, user_id)

        status = self.build_engine(course_id, user_id).get_status(capsule_id)
        if status is None:
            owner = self.loader.get_capsule_course_id(capsule_id)
            logger.warning(
                f"User {user_id} tried to complete capsule {capsule_id} "
                f"(course {owner}) through course {course_id}"
            )
            result = CompletionResult(
                success=False,
                capsule_id=capsule_id,
                error=f"Capsule {capsule_id} is not part of course {course_id}",
            )
        elif status.is_locked:
            logger.warning(f"User {user_id} tried to complete locked capsule {capsule_id}")
            result = CompletionResult(
                success=False,
                capsule_id=capsule_id,
                error=f"Capsule {capsule_id} is locked: complete {', '.join(status.missing_prerequisites)} first",
            )
        else:
            result = self.writer.mark_complete(user_id, capsule_id)

        return result, self.get_course_view(course_id, user_id)

    # -------------------------------------------------------------------------
    # Admin
    # -------------------------------------------------------------------------

    def get_student_progress(self, course_id: Optional[str] = None) -> list[StudentCourseProgress]:
        """
        Progress of every approved learner, optionally for one course.

        Requires an EnrollmentBook; without one the report is empty.
        """
        if not self.enrollments:
            return []

        rows = []
        courses: dict[str, Optional[Course]] = {}
        for enrollment in self.enrollments.get_approved_enrollments(course_id):
            if enrollment.course_id not in courses:
                courses[enrollment.course_id] = self.loader.get_course(enrollment.course_id)
            course = courses[enrollment.course_id]

            engine = self.build_engine(enrollment.course_id, enrollment.user_id)
            capsule_ids = [
                status.id
                for path_status in engine.compute_statuses()
                for status in path_status.capsules
            ]
            rows.append(StudentCourseProgress(
                user_id=enrollment.user_id,
                course_id=enrollment.course_id,
                course_title=course.title if course else "Unknown",
                total_capsules=engine.total_count,
                completed_capsules=engine.completed_count,
                progress_percent=engine.course_progress(),
                last_activity=self.progress.get_last_activity(enrollment.user_id, capsule_ids),
            ))

        logger.debug(f"Built progress report with {len(rows)} rows")
        return rows

    def decide_enrollment(self, user_id: str, course_id: str, approve: bool) -> Optional[Enrollment]:
        """
        Approve or reject a pending enrollment request.

        Returns:
            The updated Enrollment, or None if there is no request

        Raises:
            ValueError: If the navigator has no EnrollmentBook
        """
        if not self.enrollments:
            raise ValueError("Enrollment decisions need an EnrollmentBook")

        status = EnrollmentStatus.APPROVED if approve else EnrollmentStatus.REJECTED
        enrollment = self.enrollments.set_status(user_id, course_id, status)
        if enrollment:
            logger.info(f"Enrollment of {user_id} in {course_id}: {status.value}")
        return enrollment

    # -------------------------------------------------------------------------
    # Learner dashboard
    # -------------------------------------------------------------------------

    def get_learner_dashboard(self, user_id: str) -> list[LearnerCourseSummary]:
        """
        A learner's enrollments, newest first, with progress for approved ones.

        Pending and rejected enrollments report zero progress and no
        resume point. Requires an EnrollmentBook; without one the list is empty.
        """
        if not self.enrollments:
            return []

        rows = []
        for enrollment in self.enrollments.get_user_enrollments(user_id):
            course = self.loader.get_course(enrollment.course_id)
            row = LearnerCourseSummary(
                course_id=enrollment.course_id,
                course_title=course.title if course else "Unknown",
                status=enrollment.status,
                enrolled_at=enrollment.enrolled_at,
            )
            if enrollment.status == EnrollmentStatus.APPROVED:
                engine = self.build_engine(enrollment.course_id, user_id)
                row.total_capsules = engine.total_count
                row.completed_capsules = engine.completed_count
                row.progress_percent = engine.course_progress()
                row.resume_capsule_id = engine.resume_capsule_id
            rows.append(row)
        return rows
