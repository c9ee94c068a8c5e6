"""
KnowGraph Schemas - Pydantic models for the learning platform.

This module exports all schema classes for:
- Course: courses, learning paths, capsules, prerequisite edges, course files
- Progress: progress records, enrollments, admin and learner dashboard rows
"""

# Course schemas
from .course import (
    Course,
    Capsule,
    LearningPath,
    PrerequisiteEdge,
    CapsuleDefinition,
    LearningPathDefinition,
    CourseDefinition,
)

# Progress schemas
from .progress import (
    ProgressRecord,
    EnrollmentStatus,
    Enrollment,
    StudentCourseProgress,
    LearnerCourseSummary,
)

__all__ = [
    # Course
    'Course',
    'Capsule',
    'LearningPath',
    'PrerequisiteEdge',
    'CapsuleDefinition',
    'LearningPathDefinition',
    'CourseDefinition',
    # Progress
    'ProgressRecord',
    'EnrollmentStatus',
    'Enrollment',
    'StudentCourseProgress',
    'LearnerCourseSummary',
]
