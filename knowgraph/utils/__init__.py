"""KnowGraph utilities."""

from .course_files import (
    load_course_definition,
    get_available_courses,
    check_definition_cycles,
    seed_course,
)

__all__ = [
    "load_course_definition",
    "get_available_courses",
    "check_definition_cycles",
    "seed_course",
]
