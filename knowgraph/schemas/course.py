"""
Course content schemas for KnowGraph.

Defines Pydantic models for the content graph:
- Courses, learning paths (modules) and capsules
- Prerequisite edges between capsules
- YAML course definition files used for seeding
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional

# -----------------------------------------------------------------------------
# Content graph
# -----------------------------------------------------------------------------


class Course(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    is_published: bool = False


class Capsule(BaseModel):
    """The atomic unit of learning and of locking."""
    id: str
    learning_path_id: str
    title: str
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=0)
    order_index: int = Field(..., ge=0)  # position within its learning path


class LearningPath(BaseModel):
    """An ordered module of capsules within a course."""
    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    order_index: int = Field(..., ge=0)  # module position within the course
    capsules: list[Capsule] = []


class PrerequisiteEdge(BaseModel):
    """capsule_id requires prerequisite_capsule_id to be completed first."""
    capsule_id: str
    prerequisite_capsule_id: str


# -----------------------------------------------------------------------------
# Course definition files (courses/*.yaml)
# -----------------------------------------------------------------------------


class CapsuleDefinition(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=0)
    requires: list[str] = []  # prerequisite capsule IDs


class LearningPathDefinition(BaseModel):
    id: Optional[str] = None  # generated when omitted
    title: str
    description: Optional[str] = None
    capsules: list[CapsuleDefinition] = []


class CourseDefinition(BaseModel):
    """A whole course as authored in a YAML file; list order is order_index."""
    id: Optional[str] = None
    title: str
    description: Optional[str] = None
    is_published: bool = False
    paths: list[LearningPathDefinition] = []

    @field_validator('paths')
    @classmethod
    def capsule_ids_unique(cls, v):
        seen = set()
        for path in v:
            for capsule in path.capsules:
                if capsule.id in seen:
                    raise ValueError(f'Duplicate capsule id: {capsule.id}')
                seen.add(capsule.id)
        return v

    def iter_edges(self) -> list[PrerequisiteEdge]:
        """All prerequisite edges declared in the file, in file order."""
        return [
            PrerequisiteEdge(capsule_id=capsule.id, prerequisite_capsule_id=prereq)
            for path in self.paths
            for capsule in path.capsules
            for prereq in capsule.requires
        ]
