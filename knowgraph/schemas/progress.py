"""
Progress tracking schemas for KnowGraph.

Defines Pydantic models for learner state including:
- Per-capsule progress records
- Course enrollments
- Admin progress dashboard rows
- Learner dashboard rows
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class ProgressRecord(BaseModel):
    """At most one record per (user_id, capsule_id)."""
    user_id: str
    capsule_id: str
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    watch_percentage: Optional[int] = Field(None, ge=0, le=100)
    last_watched_at: datetime


class EnrollmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Enrollment(BaseModel):
    user_id: str
    course_id: str
    status: EnrollmentStatus = EnrollmentStatus.PENDING
    payment_reference: Optional[str] = None
    enrolled_at: datetime
    approved_at: Optional[datetime] = None


class StudentCourseProgress(BaseModel):
    """One learner's standing in one course, as shown on the admin dashboard."""
    user_id: str
    course_id: str
    course_title: str
    total_capsules: int = 0
    completed_capsules: int = 0
    progress_percent: int = Field(0, ge=0, le=100)
    last_activity: Optional[datetime] = None


class LearnerCourseSummary(BaseModel):
    """One course on a learner's dashboard; progress only counts once approved."""
    course_id: str
    course_title: str
    status: EnrollmentStatus
    enrolled_at: datetime
    total_capsules: int = 0
    completed_capsules: int = 0
    progress_percent: int = Field(0, ge=0, le=100)
    resume_capsule_id: Optional[str] = None
