"""
KnowGraph Classroom - Runtime components for course progression.

This module provides:
- CourseLoader / CourseAuthor: read and write the content graph
- ProgressTracker / CompletionWriter: learner progress
- EnrollmentBook: course access
- ProgressionEngine: lock state, resume point, navigation, progress
- CourseNavigator: course views for preview, classroom and admin
"""

from .database import (
    SCHEMA,
    ensure_database,
)

from .loader import CourseLoader

from .authoring import (
    CourseAuthor,
    PrerequisiteCycleError,
)

from .progress import ProgressTracker

from .enrollment import EnrollmentBook

from .prerequisites import (
    build_prerequisite_map,
    missing_prerequisites,
    is_locked,
    build_prerequisite_graph,
    find_cycle_path,
    find_prerequisite_cycles,
)

from .engine import (
    ProgressionEngine,
    CapsuleStatus,
    PathStatus,
    progress_percent,
)

from .writer import (
    CompletionWriter,
    CompletionResult,
)

from .navigator import (
    CourseNavigator,
    CourseView,
    EnrollmentRequiredError,
)

__all__ = [
    # Database
    "SCHEMA",
    "ensure_database",
    # Content
    "CourseLoader",
    "CourseAuthor",
    "PrerequisiteCycleError",
    # Progress
    "ProgressTracker",
    "EnrollmentBook",
    # Prerequisites
    "build_prerequisite_map",
    "missing_prerequisites",
    "is_locked",
    "build_prerequisite_graph",
    "find_cycle_path",
    "find_prerequisite_cycles",
    # Engine
    "ProgressionEngine",
    "CapsuleStatus",
    "PathStatus",
    "progress_percent",
    # Writer
    "CompletionWriter",
    "CompletionResult",
    # Navigator
    "CourseNavigator",
    "CourseView",
    "EnrollmentRequiredError",
]
