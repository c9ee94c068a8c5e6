"""
KnowGraph - Prerequisite-gated course progression for the KnowGraph LMS.

Subpackages:
- schemas: Pydantic models for courses, capsules, progress and enrollments
- classroom: content/progress stores, progression engine, navigation
- viewer: HTML helpers for the classroom sidebar
- utils: YAML course definition loading and seeding
"""

__version__ = "0.1.0"
