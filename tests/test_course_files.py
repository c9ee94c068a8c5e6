"""
Course file loading and seeding tests.
"""

import textwrap

import pytest
from pydantic import ValidationError

from knowgraph.config import DEFAULT_COURSES_DIR
from knowgraph.classroom import CourseLoader, CourseNavigator, PrerequisiteCycleError, ProgressTracker
from knowgraph.utils import get_available_courses, load_course_definition, seed_course


def write_course(directory, name, body):
    path = directory / f"{name}.yaml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


SMALL_COURSE = """
    id: small
    title: Small course
    paths:
      - title: Only module
        capsules:
          - id: s1
            title: First
            duration_minutes: 5
          - id: s2
            title: Second
            requires: [s1]
"""


LOOP_COURSE = """
    id: loop
    title: Loop
    paths:
      - title: Module
        capsules:
          - {id: x, title: X, requires: [y]}
          - {id: y, title: Y, requires: [x]}
"""


class TestLoadCourseDefinition:
    def test_bundled_course(self):
        definition = load_course_definition("graph_basics")
        assert definition.id == "graph-basics"
        assert len(definition.paths) == 3
        assert sum(len(p.capsules) for p in definition.paths) == 7
        assert len(definition.iter_edges()) == 8

    def test_by_name_in_directory(self, tmp_path):
        write_course(tmp_path, "small", SMALL_COURSE)
        definition = load_course_definition("small", tmp_path)
        assert definition.title == "Small course"

    def test_by_path(self, tmp_path):
        path = write_course(tmp_path, "small", SMALL_COURSE)
        assert load_course_definition(path).id == "small"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_course_definition("nope", tmp_path)

    def test_empty_file_invalid(self, tmp_path):
        write_course(tmp_path, "empty", "")
        with pytest.raises(ValidationError):
            load_course_definition("empty", tmp_path)

    def test_duplicate_ids_invalid(self, tmp_path):
        write_course(tmp_path, "dup", """
            title: Dup
            paths:
              - title: One
                capsules:
                  - {id: x, title: X}
              - title: Two
                capsules:
                  - {id: x, title: X again}
        """)
        with pytest.raises(ValidationError):
            load_course_definition("dup", tmp_path)


class TestAvailableCourses:
    def test_sorted_names(self, tmp_path):
        write_course(tmp_path, "zeta", SMALL_COURSE)
        write_course(tmp_path, "alpha", SMALL_COURSE)
        (tmp_path / "notes.txt").write_text("ignored")
        assert get_available_courses(tmp_path) == ["alpha", "zeta"]

    def test_missing_directory(self, tmp_path):
        assert get_available_courses(tmp_path / "missing") == []

    def test_bundled_courses(self):
        assert "graph_basics" in get_available_courses()

    def test_default_directory_from_settings(self):
        assert get_available_courses() == get_available_courses(DEFAULT_COURSES_DIR)
        assert (DEFAULT_COURSES_DIR / "graph_basics.yaml").exists()


class TestSeedCourse:
    def test_seed_bundled_course(self, author, db_path):
        course = seed_course(load_course_definition("graph_basics"), author)
        assert course.id == "graph-basics"
        assert course.is_published is True

        navigator = CourseNavigator(CourseLoader(db_path), ProgressTracker(db_path))
        view = navigator.get_course_view(course.id)
        assert [p.path.title for p in view.paths] == ["Foundations", "Traversal", "Project"]
        assert view.total_count == 7
        assert view.total_duration_minutes == 185

        unlocked = [s.id for p in view.paths for s in p.capsules if not s.is_locked]
        assert unlocked == ["gb-what-is-a-graph"]

    def test_seed_then_progress(self, author, db_path):
        seed_course(load_course_definition("graph_basics"), author)
        progress = ProgressTracker(db_path)
        navigator = CourseNavigator(CourseLoader(db_path), progress)
        progress.upsert_completion("u1", "gb-what-is-a-graph")

        view = navigator.get_course_view("graph-basics", "u1")
        unlocked = {s.id for p in view.paths for s in p.capsules if not s.is_locked}
        assert unlocked == {"gb-what-is-a-graph", "gb-representations", "gb-directed-graphs"}
        assert view.resume_capsule_id == "gb-representations"

    def test_cyclic_file_rejected(self, tmp_path, author, db_path):
        write_course(tmp_path, "loop", LOOP_COURSE)
        with pytest.raises(PrerequisiteCycleError) as exc_info:
            seed_course(load_course_definition("loop", tmp_path), author)
        assert exc_info.value.cycle == ["x", "y", "x"]

        loader = CourseLoader(db_path)
        assert loader.get_course("loop") is None
        assert loader.get_capsule("x") is None
        assert loader.get_all_prerequisites() == []

    def test_cyclic_file_can_be_reseeded_after_fix(self, tmp_path, author, db_path):
        write_course(tmp_path, "loop", LOOP_COURSE)
        with pytest.raises(PrerequisiteCycleError):
            seed_course(load_course_definition("loop", tmp_path), author)

        write_course(tmp_path, "loop", LOOP_COURSE.replace(", requires: [x]", ""))
        course = seed_course(load_course_definition("loop", tmp_path), author)
        assert course.id == "loop"
        assert len(CourseLoader(db_path).get_prerequisites(["x", "y"])) == 1

    def test_self_requirement_rejected(self, tmp_path, author, db_path):
        write_course(tmp_path, "selfish", """
            id: selfish
            title: Selfish
            paths:
              - title: Module
                capsules:
                  - {id: s, title: S, requires: [s]}
        """)
        with pytest.raises(PrerequisiteCycleError) as exc_info:
            seed_course(load_course_definition("selfish", tmp_path), author)
        assert exc_info.value.cycle == ["s", "s"]
        assert CourseLoader(db_path).get_course("selfish") is None

    def test_unknown_requirement_rejected(self, tmp_path, author, db_path):
        write_course(tmp_path, "dangling", """
            title: Dangling
            paths:
              - title: Module
                capsules:
                  - {id: d1, title: D1, requires: [not-a-capsule]}
        """)
        with pytest.raises(ValueError, match="Capsule not found"):
            seed_course(load_course_definition("dangling", tmp_path), author)
        assert CourseLoader(db_path).get_courses() == []
