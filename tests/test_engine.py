"""
Progression engine tests.

Covers lock resolution, resume point, next/previous navigation and
course progress on in-memory course graphs.
"""

import dataclasses
import json

import pytest

from knowgraph.classroom import ProgressionEngine, progress_percent
from knowgraph.schemas import Capsule, LearningPath


def make_path(path_id: str, order_index: int, capsule_ids: list[str], course_id: str = "course") -> LearningPath:
    return LearningPath(
        id=path_id,
        course_id=course_id,
        title=f"Path {path_id}",
        order_index=order_index,
        capsules=[
            Capsule(id=cid, learning_path_id=path_id, title=f"Capsule {cid}", order_index=idx)
            for idx, cid in enumerate(capsule_ids)
        ],
    )


CHAIN_PREREQS = {"B": ["A"], "C": ["B"]}


@pytest.fixture
def chain_paths():
    return [make_path("p1", 0, ["A", "B", "C"])]


def lock_map(engine: ProgressionEngine) -> dict[str, bool]:
    return {
        status.id: status.is_locked
        for path_status in engine.compute_statuses()
        for status in path_status.capsules
    }


class TestLockResolution:
    """Locking follows prerequisite completion only."""

    def test_no_prerequisites_never_locked(self):
        paths = [make_path("p1", 0, ["A", "B"])]
        for completed in (set(), {"A"}, {"A", "B"}, {"unrelated"}):
            engine = ProgressionEngine(paths, {}, completed)
            assert lock_map(engine) == {"A": False, "B": False}

    def test_and_semantics(self):
        paths = [make_path("p1", 0, ["P1", "P2", "C"])]
        prereqs = {"C": ["P1", "P2"]}
        assert lock_map(ProgressionEngine(paths, prereqs, set()))["C"] is True
        assert lock_map(ProgressionEngine(paths, prereqs, {"P1"}))["C"] is True
        assert lock_map(ProgressionEngine(paths, prereqs, {"P2"}))["C"] is True
        assert lock_map(ProgressionEngine(paths, prereqs, {"P1", "P2"}))["C"] is False

    def test_completion_not_reachability_unlocks(self, chain_paths):
        # B completed without A: C unlocks, B stays locked
        engine = ProgressionEngine(chain_paths, CHAIN_PREREQS, {"B"})
        assert lock_map(engine) == {"A": False, "B": True, "C": False}

    def test_completed_and_locked_reported_together(self, chain_paths):
        engine = ProgressionEngine(chain_paths, CHAIN_PREREQS, {"C"})
        status = engine.get_status("C")
        assert status.is_completed is True
        assert status.is_locked is True

    def test_missing_prerequisites_listed(self):
        paths = [make_path("p1", 0, ["P1", "P2", "C"])]
        engine = ProgressionEngine(paths, {"C": ["P1", "P2"]}, {"P2"})
        assert engine.get_status("C").missing_prerequisites == ["P1"]

    def test_dangling_prerequisite_stays_locked(self):
        paths = [make_path("p1", 0, ["D"])]
        prereqs = {"D": ["E"]}
        assert ProgressionEngine(paths, prereqs, set()).get_status("D").is_locked is True
        # Even a completed-set claiming E does not unlock D
        assert ProgressionEngine(paths, prereqs, {"E"}).get_status("D").is_locked is True

    def test_cycle_members_stay_locked(self):
        paths = [make_path("p1", 0, ["X", "Y", "Z"])]
        engine = ProgressionEngine(paths, {"X": ["Y"], "Y": ["X"]}, set())
        assert lock_map(engine) == {"X": True, "Y": True, "Z": False}
        assert engine.resume_capsule_id == "Z"


class TestConcreteScenarios:
    """The A -> B -> C walkthrough and the two-path crossing."""

    def test_nothing_completed(self, chain_paths):
        engine = ProgressionEngine(chain_paths, CHAIN_PREREQS, set())
        assert lock_map(engine) == {"A": False, "B": True, "C": True}
        assert engine.resume_capsule_id == "A"
        assert engine.course_progress() == 0

    def test_first_completed(self, chain_paths):
        engine = ProgressionEngine(chain_paths, CHAIN_PREREQS, {"A"})
        assert lock_map(engine) == {"A": False, "B": False, "C": True}
        assert engine.resume_capsule_id == "B"
        assert engine.course_progress() == 33

    def test_all_completed(self, chain_paths):
        engine = ProgressionEngine(chain_paths, CHAIN_PREREQS, {"A", "B", "C"})
        statuses = engine.compute_statuses()[0].capsules
        assert all(not s.is_locked and s.is_completed for s in statuses)
        assert engine.resume_capsule_id == "A"
        assert engine.course_progress() == 100

    def test_next_crosses_path_boundary(self):
        paths = [make_path("p1", 0, ["A"]), make_path("p2", 1, ["B"])]
        engine = ProgressionEngine(paths, {"B": ["A"]}, {"A"})
        assert engine.next_unlocked("A").id == "B"


class TestResumePoint:
    """Resume = first incomplete unlocked capsule, else first capsule."""

    def test_fallback_when_everything_completed_or_locked(self):
        paths = [make_path("p1", 0, ["A", "B"])]
        engine = ProgressionEngine(paths, {"B": ["missing"]}, {"A"})
        assert engine.find_resume_point().id == "A"

    def test_fallback_is_first_capsule_even_if_locked(self):
        paths = [make_path("p1", 0, ["A", "B"])]
        engine = ProgressionEngine(paths, {"A": ["B"], "B": ["A"]}, set())
        assert engine.resume_capsule_id == "A"

    def test_empty_course(self):
        engine = ProgressionEngine([], {}, set())
        assert engine.find_resume_point() is None
        assert engine.resume_capsule_id is None
        assert engine.course_progress() == 0

    def test_paths_without_capsules(self):
        engine = ProgressionEngine([make_path("p1", 0, []), make_path("p2", 1, [])], {}, set())
        assert engine.resume_capsule_id is None
        assert len(engine.compute_statuses()) == 2

    def test_resume_skips_into_later_path(self):
        paths = [make_path("p1", 0, ["A", "B"]), make_path("p2", 1, ["C"])]
        engine = ProgressionEngine(paths, {}, {"A", "B"})
        assert engine.resume_capsule_id == "C"


class TestNavigation:
    """Next/previous only move between unlocked capsules."""

    @pytest.fixture
    def engine(self):
        paths = [make_path("p1", 0, ["A", "B", "C", "D"])]
        return ProgressionEngine(paths, {"B": ["A"], "C": ["missing"]}, {"A"})

    def test_next_includes_completed_capsules(self):
        paths = [make_path("p1", 0, ["A", "B"])]
        engine = ProgressionEngine(paths, {}, {"A", "B"})
        assert engine.next_unlocked("A").id == "B"

    def test_next_skips_locked(self, engine):
        assert engine.next_unlocked("B").id == "D"

    def test_previous_skips_locked(self, engine):
        assert engine.previous_unlocked("D").id == "B"

    def test_previous_of_first_is_none(self, engine):
        assert engine.previous_unlocked("A") is None

    def test_next_of_last_is_none(self, engine):
        assert engine.next_unlocked("D") is None

    def test_next_when_only_locked_follow(self):
        paths = [make_path("p1", 0, ["A", "B"])]
        engine = ProgressionEngine(paths, {"B": ["A"]}, set())
        assert engine.next_unlocked("A") is None

    def test_unknown_current(self, engine):
        assert engine.next_unlocked("nope") is None
        assert engine.previous_unlocked("nope") is None

    def test_capsule_position(self, engine):
        assert engine.capsule_position("A") == (1, 4)
        assert engine.capsule_position("D") == (4, 4)
        assert engine.capsule_position("nope") == (0, 4)


class TestOrdering:
    """Ordering comes from order_index, never from input order."""

    def test_sorts_paths_and_capsules(self):
        later = make_path("p2", 1, ["C"])
        first = make_path("p1", 0, ["A", "B"])
        first.capsules.reverse()  # B (order 1) before A (order 0)

        engine = ProgressionEngine([later, first], {}, set())
        order = [s.id for p in engine.compute_statuses() for s in p.capsules]
        assert order == ["A", "B", "C"]
        assert engine.resume_capsule_id == "A"

    def test_input_not_mutated(self):
        path = make_path("p1", 0, ["A", "B"])
        path.capsules.reverse()
        ProgressionEngine([path], {}, set())
        assert [c.id for c in path.capsules] == ["B", "A"]

    def test_ties_keep_input_order(self):
        path = LearningPath(
            id="p1", course_id="course", title="Ties", order_index=0,
            capsules=[
                Capsule(id="X", learning_path_id="p1", title="X", order_index=0),
                Capsule(id="Y", learning_path_id="p1", title="Y", order_index=0),
            ],
        )
        engine = ProgressionEngine([path], {}, set())
        assert [s.id for s in engine.compute_statuses()[0].capsules] == ["X", "Y"]

    def test_repeated_computation_identical(self, chain_paths):
        engine = ProgressionEngine(chain_paths, CHAIN_PREREQS, {"A"})
        first = json.dumps(engine.to_payload(), sort_keys=True)
        second = json.dumps(engine.to_payload(), sort_keys=True)
        rebuilt = json.dumps(
            ProgressionEngine(chain_paths, CHAIN_PREREQS, {"A"}).to_payload(), sort_keys=True
        )
        assert first == second == rebuilt
        assert engine.compute_statuses() == engine.compute_statuses()

    def test_statuses_computed_once(self, chain_paths):
        engine = ProgressionEngine(chain_paths, CHAIN_PREREQS, {"A"})
        first = engine.compute_statuses()
        first[0].capsules.clear()
        first.clear()

        second = engine.compute_statuses()
        assert [s.id for s in second[0].capsules] == ["A", "B", "C"]
        assert second[0].capsules[1] is engine.get_status("B")
        assert engine.to_payload()["paths"][0]["capsules"][1]["isLocked"] is False

    def test_status_is_frozen(self, chain_paths):
        status = ProgressionEngine(chain_paths, CHAIN_PREREQS, set()).get_status("B")
        with pytest.raises(dataclasses.FrozenInstanceError):
            status.is_locked = False


class TestCourseProgress:
    """Progress percentage and counters."""

    def test_rounding(self):
        assert progress_percent(1, 3) == 33
        assert progress_percent(2, 3) == 67
        assert progress_percent(1, 8) == 13  # 12.5 rounds half-up
        assert progress_percent(0, 0) == 0
        assert progress_percent(5, 5) == 100

    def test_ignores_completions_outside_course(self):
        paths = [make_path("p1", 0, ["A", "B"])]
        engine = ProgressionEngine(paths, {}, {"A", "other-course-capsule"})
        assert engine.completed_count == 1
        assert engine.course_progress() == 50

    def test_path_counts(self):
        paths = [make_path("p1", 0, ["A", "B"]), make_path("p2", 1, ["C"])]
        p1, p2 = ProgressionEngine(paths, {}, {"A"}).compute_statuses()
        assert (p1.completed_count, p1.total_count) == (1, 2)
        assert (p2.completed_count, p2.total_count) == (0, 1)

    def test_total_duration(self):
        path = make_path("p1", 0, ["A", "B"])
        path.capsules[0].duration_minutes = 15
        engine = ProgressionEngine([path], {}, set())
        assert engine.total_duration_minutes == 15


class TestPayload:
    """Serializable view for the presentation layer."""

    def test_payload_shape(self, chain_paths):
        payload = ProgressionEngine(chain_paths, CHAIN_PREREQS, {"A"}).to_payload()
        assert payload["resumeCapsuleId"] == "B"
        assert payload["progressPercent"] == 33

        path = payload["paths"][0]
        assert path["id"] == "p1"
        assert path["order_index"] == 0
        first = path["capsules"][0]
        assert first["id"] == "A"
        assert first["title"] == "Capsule A"
        assert first["isLocked"] is False
        assert first["isCompleted"] is True
        assert path["capsules"][2]["isLocked"] is True

    def test_payload_empty_course(self):
        assert ProgressionEngine([], {}, set()).to_payload() == {
            "paths": [],
            "resumeCapsuleId": None,
            "progressPercent": 0,
        }
