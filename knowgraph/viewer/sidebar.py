"""
Sidebar renderer - Course outline with lock and completion indicators.

Provides:
- Status indicators for capsules
- Module headers with completion counts
- Full course outline and progress summary HTML
"""

import html
from typing import Optional

from knowgraph.classroom import CapsuleStatus, CourseView, PathStatus


STATUS_LOCKED = "◌"
STATUS_COMPLETED = "✓"
STATUS_CURRENT = "→"
STATUS_AVAILABLE = "○"


def get_sidebar_css() -> str:
    """Get CSS styles for the course outline."""
    return """
    <style>
    .outline-module {
        margin: 1em 0 0.5em 0;
    }
    .outline-module-title {
        font-weight: 600;
        color: #1565C0;
        font-size: 0.95em;
    }
    .outline-module-count {
        color: #888;
        font-size: 0.85em;
        margin-left: 0.4em;
    }
    .outline-capsule {
        display: flex;
        align-items: center;
        gap: 0.6em;
        padding: 0.4em 0.6em;
        border-radius: 8px;
        font-size: 0.9em;
    }
    .outline-capsule.locked {
        color: #999;
        cursor: not-allowed;
    }
    .outline-capsule.completed .outline-indicator {
        color: #388E3C;
    }
    .outline-capsule.current {
        background: #e3f2fd;
        color: #1976D2;
        font-weight: 600;
    }
    .outline-duration {
        margin-left: auto;
        color: #888;
        font-size: 0.85em;
    }
    .outline-progress {
        background: #e8f5e9;
        border-radius: 8px;
        padding: 0.8em 1em;
        margin-bottom: 1em;
    }
    .outline-progress-value {
        font-size: 1.4em;
        font-weight: 700;
        color: #388E3C;
    }
    .outline-progress-label {
        color: #666;
        font-size: 0.85em;
    }
    </style>
    """


def get_status_indicator(status: CapsuleStatus, is_current: bool = False) -> str:
    """
    Get status indicator for sidebar display.

    Returns:
        ◌ for locked
        ✓ for completed
        → for current
        ○ for available
    """
    if status.is_locked:
        return STATUS_LOCKED
    if status.is_completed:
        return STATUS_COMPLETED
    if is_current:
        return STATUS_CURRENT
    return STATUS_AVAILABLE


def format_duration(minutes: Optional[int]) -> str:
    """Format a duration as '45 min' or '1h 30m'; empty for unknown."""
    if not minutes:
        return ""
    if minutes < 60:
        return f"{minutes} min"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m" if rest else f"{hours}h"


def render_path_header(index: int, path_status: PathStatus) -> str:
    """Render 'Module N: title (done/total)' for a learning path (index is 0-based)."""
    title = html.escape(path_status.path.title)
    count = f"({path_status.completed_count}/{path_status.total_count})"
    return (
        '<div class="outline-module">'
        f'<span class="outline-module-title">Module {index + 1}: {title}</span>'
        f'<span class="outline-module-count">{count}</span>'
        '</div>'
    )


def render_capsule_item(status: CapsuleStatus, is_current: bool = False) -> str:
    """Render one capsule row."""
    classes = ["outline-capsule"]
    if status.is_locked:
        classes.append("locked")
    elif status.is_completed:
        classes.append("completed")
    if is_current:
        classes.append("current")

    parts = [f'<div class="{" ".join(classes)}" id="capsule-{html.escape(status.id)}">']
    parts.append(f'<span class="outline-indicator">{get_status_indicator(status, is_current)}</span>')
    parts.append(f'<span class="outline-title">{html.escape(status.capsule.title)}</span>')

    duration = format_duration(status.capsule.duration_minutes)
    if duration:
        parts.append(f'<span class="outline-duration">{duration}</span>')

    parts.append('</div>')
    return ''.join(parts)


def render_course_outline(view: CourseView, current_id: Optional[str] = None) -> str:
    """
    Render the full course outline.

    Args:
        view: CourseView from CourseNavigator
        current_id: Capsule being viewed, highlighted in the outline

    Returns:
        HTML string for the outline
    """
    if not view.paths:
        return '<div class="outline-empty">This course has no modules yet.</div>'

    parts = [get_sidebar_css()]
    for index, path_status in enumerate(view.paths):
        parts.append(render_path_header(index, path_status))
        for status in path_status.capsules:
            parts.append(render_capsule_item(status, is_current=status.id == current_id))
    return ''.join(parts)


def render_progress_summary(view: CourseView) -> str:
    """Render overall course progress."""
    return f"""
    <div class="outline-progress">
        <div class="outline-progress-value">{view.progress_percent}%</div>
        <div class="outline-progress-label">{view.completed_count} of {view.total_count} capsules completed</div>
    </div>
    """
