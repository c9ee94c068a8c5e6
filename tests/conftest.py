"""
Shared fixtures: a temporary KnowGraph database with a small course.

The "chain" course has one module with capsules A -> B -> C
(B requires A, C requires B).
"""

import pytest

from knowgraph.classroom import (
    CourseAuthor,
    CourseLoader,
    CourseNavigator,
    EnrollmentBook,
    ProgressTracker,
)
from knowgraph.schemas import EnrollmentStatus


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "knowgraph.db"


@pytest.fixture
def author(db_path):
    return CourseAuthor(db_path)


@pytest.fixture
def chain_course(author):
    course = author.create_course("Chain", course_id="chain", is_published=True)
    path = author.add_learning_path(course.id, "Basics", path_id="chain-basics")
    for capsule_id, duration in (("A", 10), ("B", 20), ("C", None)):
        author.add_capsule(path.id, f"Capsule {capsule_id}", duration_minutes=duration, capsule_id=capsule_id)
    author.add_prerequisite("B", "A")
    author.add_prerequisite("C", "B")
    return course


@pytest.fixture
def loader(db_path, author):
    return CourseLoader(db_path)


@pytest.fixture
def progress(db_path):
    return ProgressTracker(db_path)


@pytest.fixture
def enrollments(db_path):
    return EnrollmentBook(db_path)


@pytest.fixture
def navigator(loader, progress, enrollments):
    return CourseNavigator(loader, progress, enrollments)


@pytest.fixture
def enrolled_learner(chain_course, enrollments):
    enrollments.enroll("learner-1", chain_course.id, payment_reference="KG-001")
    enrollments.set_status("learner-1", chain_course.id, EnrollmentStatus.APPROVED)
    return "learner-1"
