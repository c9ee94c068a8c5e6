"""
KnowGraph Viewer - Rendering components for the course outline.

This module provides:
- Capsule status indicators
- Module headers and capsule rows
- Course outline and progress summary
"""

from .sidebar import (
    get_sidebar_css,
    get_status_indicator,
    format_duration,
    render_path_header,
    render_capsule_item,
    render_course_outline,
    render_progress_summary,
    STATUS_LOCKED,
    STATUS_COMPLETED,
    STATUS_CURRENT,
    STATUS_AVAILABLE,
)

__all__ = [
    "get_sidebar_css",
    "get_status_indicator",
    "format_duration",
    "render_path_header",
    "render_capsule_item",
    "render_course_outline",
    "render_progress_summary",
    "STATUS_LOCKED",
    "STATUS_COMPLETED",
    "STATUS_CURRENT",
    "STATUS_AVAILABLE",
]
