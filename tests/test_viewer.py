"""
Course outline rendering tests.
"""

from knowgraph.classroom import CapsuleStatus
from knowgraph.schemas import Capsule
from knowgraph.viewer import (
    STATUS_AVAILABLE,
    STATUS_COMPLETED,
    STATUS_CURRENT,
    STATUS_LOCKED,
    format_duration,
    get_status_indicator,
    render_capsule_item,
    render_course_outline,
    render_path_header,
    render_progress_summary,
)


def make_status(is_locked=False, is_completed=False, title="Intro", duration=None):
    capsule = Capsule(id="cap", learning_path_id="p1", title=title, duration_minutes=duration, order_index=0)
    return CapsuleStatus(capsule=capsule, is_locked=is_locked, is_completed=is_completed)


class TestStatusIndicator:
    def test_priority(self):
        assert get_status_indicator(make_status(is_locked=True, is_completed=True), True) == STATUS_LOCKED
        assert get_status_indicator(make_status(is_completed=True), True) == STATUS_COMPLETED
        assert get_status_indicator(make_status(), True) == STATUS_CURRENT
        assert get_status_indicator(make_status()) == STATUS_AVAILABLE


class TestFormatDuration:
    def test_values(self):
        assert format_duration(None) == ""
        assert format_duration(0) == ""
        assert format_duration(45) == "45 min"
        assert format_duration(90) == "1h 30m"
        assert format_duration(120) == "2h"


class TestCapsuleItem:
    def test_locked_item(self):
        html = render_capsule_item(make_status(is_locked=True, duration=15))
        assert 'class="outline-capsule locked"' in html
        assert 'id="capsule-cap"' in html
        assert "15 min" in html

    def test_current_completed_item(self):
        html = render_capsule_item(make_status(is_completed=True), is_current=True)
        assert 'class="outline-capsule completed current"' in html

    def test_title_escaped(self):
        html = render_capsule_item(make_status(title="<b>Graphs & Trees</b>"))
        assert "&lt;b&gt;Graphs &amp; Trees&lt;/b&gt;" in html
        assert "outline-duration" not in html


class TestCourseOutline:
    def test_outline(self, chain_course, navigator):
        view = navigator.get_course_view(chain_course.id)
        html = render_course_outline(view, current_id="A")
        assert "Module 1: Basics" in html
        assert "(0/3)" in html
        assert html.count("outline-capsule locked") == 2
        assert "outline-capsule current" in html

    def test_path_header(self, chain_course, navigator, enrolled_learner):
        _, view = navigator.complete_capsule(enrolled_learner, chain_course.id, "A")
        assert "(1/3)" in render_path_header(0, view.paths[0])

    def test_empty_course(self, author, navigator):
        author.create_course("Empty", course_id="empty")
        html = render_course_outline(navigator.get_course_view("empty"))
        assert "This course has no modules yet." in html

    def test_progress_summary(self, navigator, enrolled_learner):
        _, view = navigator.complete_capsule(enrolled_learner, "chain", "A")
        html = render_progress_summary(view)
        assert "33%" in html
        assert "1 of 3 capsules completed" in html
