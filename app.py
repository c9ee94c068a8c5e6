"""
KnowGraph - Prerequisite-gated course player.

Streamlit application with a learner dashboard, a learner classroom, a
public course preview and an admin view for enrollments and progress.

Usage:
    streamlit run app.py
"""

import pandas as pd
import streamlit as st

from knowgraph.config import load_settings, setup_logging
from knowgraph.classroom import (
    CourseAuthor,
    CourseLoader,
    CourseNavigator,
    EnrollmentBook,
    EnrollmentRequiredError,
    ProgressTracker,
)
from knowgraph.schemas import EnrollmentStatus
from knowgraph.viewer import (
    format_duration,
    get_sidebar_css,
    get_status_indicator,
    render_course_outline,
    render_progress_summary,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

SETTINGS = load_settings()
setup_logging(SETTINGS.log_level)

st.set_page_config(
    page_title="KnowGraph",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "navigator" not in st.session_state:
        if SETTINGS.db_path.exists():
            progress = ProgressTracker(SETTINGS.db_path)
            st.session_state.navigator = CourseNavigator(
                CourseLoader(SETTINGS.db_path),
                progress,
                EnrollmentBook(SETTINGS.db_path),
            )
        else:
            st.session_state.navigator = None

    if "current_capsule_id" not in st.session_state:
        st.session_state.current_capsule_id = None

    if "view_mode" not in st.session_state:
        st.session_state.view_mode = "classroom"  # dashboard, classroom, preview, admin


# -----------------------------------------------------------------------------
# Sidebar
# -----------------------------------------------------------------------------

def render_sidebar() -> tuple[str | None, str | None]:
    """Render learner/course selection. Returns (user_id, course_id)."""
    st.sidebar.title("🧭 KnowGraph")

    nav = st.session_state.navigator
    if not nav:
        st.sidebar.error("Database not found. Run scripts/seed_courses.py first.")
        return None, None

    user_id = st.sidebar.text_input("Learner ID", value="").strip() or None

    courses = nav.loader.get_courses()
    if not courses:
        st.sidebar.info("No courses yet.")
        return user_id, None

    titles = {course.id: course.title for course in courses}
    course_id = st.sidebar.selectbox(
        "Course",
        list(titles),
        format_func=lambda cid: titles[cid],
    )

    view_mode = st.sidebar.radio(
        "View",
        ["Dashboard", "Classroom", "Preview", "Admin"],
        index=["dashboard", "classroom", "preview", "admin"].index(st.session_state.view_mode),
        horizontal=True,
    )
    st.session_state.view_mode = view_mode.lower()
    return user_id, course_id


def render_capsule_buttons(view, current_id: str | None):
    """Render one button per capsule; locked capsules can't be selected."""
    st.sidebar.divider()
    st.sidebar.markdown(render_progress_summary(view), unsafe_allow_html=True)
    st.sidebar.progress(view.progress_percent / 100)

    for index, path_status in enumerate(view.paths):
        header = f"Module {index + 1}: {path_status.path.title} ({path_status.completed_count}/{path_status.total_count})"
        expanded = any(status.id == current_id for status in path_status.capsules)
        with st.sidebar.expander(header, expanded=expanded):
            for status in path_status.capsules:
                indicator = get_status_indicator(status, status.id == current_id)
                label = f"{indicator} {status.capsule.title}"
                duration = format_duration(status.capsule.duration_minutes)
                if duration:
                    label += f" · {duration}"
                if st.button(
                    label,
                    key=f"capsule_{status.id}",
                    disabled=status.is_locked,
                    use_container_width=True,
                ):
                    select_capsule(status.id)


def select_capsule(capsule_id: str):
    """Select a capsule and rerun."""
    st.session_state.current_capsule_id = capsule_id
    st.rerun()


# -----------------------------------------------------------------------------
# Dashboard View
# -----------------------------------------------------------------------------

def render_dashboard(user_id: str | None):
    """Render the learner's enrollments with status and progress."""
    st.title("My Courses")
    if not user_id:
        st.info("Enter your learner ID in the sidebar to see your courses.")
        return

    rows = st.session_state.navigator.get_learner_dashboard(user_id)
    if not rows:
        st.info("You haven't requested any courses yet. Pick one in the sidebar.")
        return

    for status in (EnrollmentStatus.APPROVED, EnrollmentStatus.PENDING, EnrollmentStatus.REJECTED):
        group = [row for row in rows if row.status == status]
        if not group:
            continue
        st.subheader(f"{status.value.title()} ({len(group)})")
        for row in group:
            with st.container(border=True):
                st.markdown(f"**{row.course_title}**")
                if status == EnrollmentStatus.APPROVED:
                    st.progress(row.progress_percent / 100)
                    st.caption(
                        f"{row.progress_percent}% · "
                        f"{row.completed_capsules} of {row.total_capsules} capsules completed"
                    )
                elif status == EnrollmentStatus.PENDING:
                    st.caption("Waiting for payment verification.")
                else:
                    st.caption("Not approved. Contact the course admin.")


# -----------------------------------------------------------------------------
# Classroom View
# -----------------------------------------------------------------------------

def render_classroom(user_id: str | None, course_id: str):
    """Render the learner classroom."""
    nav = st.session_state.navigator
    if not user_id:
        st.info("Enter your learner ID in the sidebar to open the classroom.")
        return

    try:
        view = nav.open_classroom(course_id, user_id)
    except EnrollmentRequiredError:
        render_enrollment_request(user_id, course_id)
        return

    current_id = st.session_state.current_capsule_id
    current = view.get_status(current_id) if current_id else None
    if current is None or current.is_locked:
        current_id = view.resume_capsule_id
        st.session_state.current_capsule_id = current_id
        current = view.get_status(current_id) if current_id else None

    render_capsule_buttons(view, current_id)

    if current is None:
        st.info("This course has no capsules yet.")
        return

    render_navigation_bar(view, current.id)

    st.title(current.capsule.title)
    if current.capsule.description:
        st.markdown(current.capsule.description)

    render_completion_section(user_id, course_id, current)


def render_enrollment_request(user_id: str, course_id: str):
    """Show enrollment state and let the learner request access."""
    enrollment = st.session_state.navigator.enrollments.get_enrollment(user_id, course_id)
    if enrollment and enrollment.status == EnrollmentStatus.PENDING:
        st.warning("Your enrollment is pending approval.")
        return
    if enrollment and enrollment.status == EnrollmentStatus.REJECTED:
        st.error("Your enrollment was not approved. Contact the course admin.")
        return

    st.error("You need to be enrolled in this course to access it.")
    reference = st.text_input("Payment reference")
    if st.button("Request enrollment", type="primary"):
        st.session_state.navigator.enrollments.enroll(user_id, course_id, reference or None)
        st.rerun()


def render_navigation_bar(view, capsule_id: str):
    """Render navigation bar with prev/next buttons."""
    pos, total = view.engine.capsule_position(capsule_id)
    prev_status = view.previous_unlocked(capsule_id)
    next_status = view.next_unlocked(capsule_id)

    col1, col2, col3 = st.columns([1, 2, 1])

    with col1:
        if prev_status and st.button("← Previous", use_container_width=True):
            select_capsule(prev_status.id)

    with col2:
        st.markdown(f"<center>Capsule {pos} of {total}</center>", unsafe_allow_html=True)

    with col3:
        if next_status and st.button("Next →", use_container_width=True):
            select_capsule(next_status.id)

    st.divider()


def render_completion_section(user_id: str, course_id: str, status):
    """Render capsule completion section."""
    nav = st.session_state.navigator
    st.divider()

    if status.is_completed:
        st.success("Capsule completed!")
        return

    if st.button("Mark as complete", type="primary", use_container_width=True):
        result, view = nav.complete_capsule(user_id, course_id, status.id)
        if not result.success:
            st.error(f"Failed to mark capsule as complete: {result.error}")
            return
        next_status = view.next_unlocked(status.id)
        if next_status:
            st.session_state.current_capsule_id = next_status.id
        st.rerun()


# -----------------------------------------------------------------------------
# Preview View
# -----------------------------------------------------------------------------

def render_preview(course_id: str):
    """Render the public course outline (no learner progress)."""
    view = st.session_state.navigator.get_course_view(course_id)
    if view.course:
        st.title(view.course.title)
        if view.course.description:
            st.markdown(view.course.description)

    col1, col2, col3 = st.columns(3)
    col1.metric("Modules", len(view.paths))
    col2.metric("Capsules", view.total_count)
    col3.metric("Duration", format_duration(view.total_duration_minutes) or "-")

    st.markdown(get_sidebar_css(), unsafe_allow_html=True)
    st.markdown(render_course_outline(view), unsafe_allow_html=True)


# -----------------------------------------------------------------------------
# Admin View
# -----------------------------------------------------------------------------

def render_enrollment_requests(course_id: str):
    """List pending enrollment requests with approve/reject buttons."""
    nav = st.session_state.navigator
    st.title("Enrollment Requests")

    pending = nav.enrollments.get_pending_enrollments(course_id)
    if not pending:
        st.info("No pending enrollment requests.")
        return

    for enrollment in pending:
        col1, col2, col3 = st.columns([3, 1, 1])
        with col1:
            st.markdown(
                f"**{enrollment.user_id}** · payment ref `{enrollment.payment_reference or '-'}` · "
                f"{enrollment.enrolled_at:%Y-%m-%d %H:%M}"
            )
        key = f"{enrollment.user_id}_{enrollment.course_id}"
        with col2:
            if st.button("Approve", key=f"approve_{key}", type="primary", use_container_width=True):
                nav.decide_enrollment(enrollment.user_id, enrollment.course_id, approve=True)
                st.rerun()
        with col3:
            if st.button("Reject", key=f"reject_{key}", use_container_width=True):
                nav.decide_enrollment(enrollment.user_id, enrollment.course_id, approve=False)
                st.rerun()


def render_admin(course_id: str):
    """Render enrollment requests, learner progress and prerequisite health for admins."""
    nav = st.session_state.navigator
    render_enrollment_requests(course_id)

    st.title("Learner Progress")

    rows = nav.get_student_progress(course_id)
    if not rows:
        st.info("No approved enrollments for this course.")
    else:
        df = pd.DataFrame([row.model_dump() for row in rows])
        st.dataframe(df, use_container_width=True, hide_index=True)

    st.subheader("Prerequisite Health")
    cycles = CourseAuthor(SETTINGS.db_path).audit_prerequisite_cycles()
    if cycles:
        st.error(f"{len(cycles)} prerequisite cycle(s) keep capsules locked for everyone:")
        for cycle in cycles:
            st.code(" -> ".join(cycle + cycle[:1]))
    else:
        st.success("No prerequisite cycles.")


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    user_id, course_id = render_sidebar()
    if not course_id:
        return

    if st.session_state.view_mode == "dashboard":
        render_dashboard(user_id)
    elif st.session_state.view_mode == "classroom":
        render_classroom(user_id, course_id)
    elif st.session_state.view_mode == "preview":
        render_preview(course_id)
    elif st.session_state.view_mode == "admin":
        render_admin(course_id)


if __name__ == "__main__":
    main()
