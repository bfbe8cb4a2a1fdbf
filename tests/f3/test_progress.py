"""Tests for progress aggregation (pure, no store)."""

import pytest

from vectorlab.core.progress import (
    compute_progress,
    order_for_practice,
    profile_stats,
    round_percent,
    solved_exercise_ids,
)
from vectorlab.db.attempts_repository import AttemptRecord
from vectorlab.db.exercises_repository import ExerciseRecord
from vectorlab.db.structure_repository import SubthemeRecord, ThemeRecord, UnitRecord

TS = "2024-01-01T00:00:00+00:00"


def _exercise(exercise_id, subtheme_id, status="published"):
    return ExerciseRecord(
        id=exercise_id,
        subtheme_id=subtheme_id,
        title=exercise_id,
        type="short_answer",
        difficulty=1,
        prompt_md="Q?",
        solution_md="A.",
        prompt={"question": "Q?"},
        solution={"result": "A."},
        status=status,
        created_by=None,
        created_at=TS,
        updated_at=TS,
    )


def _attempt(exercise_id, is_correct, n=0):
    return AttemptRecord(
        id=f"att-{exercise_id}-{n}",
        user_id="stu",
        exercise_id=exercise_id,
        is_correct=is_correct,
        answer={"raw": ""},
        created_at=TS,
    )


@pytest.fixture
def tree():
    """Two units; u1 has themes t1 (s1, s2) and t2 (s3); u2 has t3 (s4)."""
    units = [
        UnitRecord(id="u1", slug="u1", title="Vectors", position=1, created_at=TS),
        UnitRecord(id="u2", slug="u2", title="Matrices", position=2, created_at=TS),
    ]
    themes = [
        ThemeRecord(id="t1", unit_id="u1", slug="t1", title="Basics", position=1, created_at=TS),
        ThemeRecord(id="t2", unit_id="u1", slug="t2", title="Operations", position=2, created_at=TS),
        ThemeRecord(id="t3", unit_id="u2", slug="t3", title="Products", position=1, created_at=TS),
    ]
    subthemes = [
        SubthemeRecord(id="s1", theme_id="t1", slug="s1", title="Components", position=1, created_at=TS),
        SubthemeRecord(id="s2", theme_id="t1", slug="s2", title="Norm", position=2, created_at=TS),
        SubthemeRecord(id="s3", theme_id="t2", slug="s3", title="Sum", position=1, created_at=TS),
        SubthemeRecord(id="s4", theme_id="t3", slug="s4", title="Dot", position=1, created_at=TS),
    ]
    return units, themes, subthemes


class TestSolvedIds:
    def test_any_correct_attempt_solves(self):
        attempts = [_attempt("e1", False), _attempt("e1", True, 1), _attempt("e2", False)]
        assert solved_exercise_ids(attempts) == {"e1"}

    def test_later_wrong_attempt_does_not_unsolve(self):
        attempts = [_attempt("e1", True), _attempt("e1", False, 1), _attempt("e1", False, 2)]
        assert solved_exercise_ids(attempts) == {"e1"}

    def test_restricted_to_given_ids(self):
        attempts = [_attempt("e1", True), _attempt("gone", True)]
        assert solved_exercise_ids(attempts, ["e1", "e2"]) == {"e1"}


class TestComputeProgress:
    def test_counts_per_level(self, tree):
        units, themes, subthemes = tree
        exercises = [
            _exercise("e1", "s1"),
            _exercise("e2", "s1"),
            _exercise("e3", "s2"),
            _exercise("e4", "s3"),
            _exercise("e5", "s4"),
        ]
        attempts = [_attempt("e1", True), _attempt("e3", True), _attempt("e5", False)]

        report = compute_progress(units, themes, subthemes, exercises, attempts)

        assert (report.subthemes["s1"].solved, report.subthemes["s1"].total) == (1, 2)
        assert (report.subthemes["s2"].solved, report.subthemes["s2"].total) == (1, 1)
        assert (report.themes["t1"].solved, report.themes["t1"].total) == (2, 3)
        assert (report.themes["t2"].solved, report.themes["t2"].total) == (0, 1)
        assert (report.units["u1"].solved, report.units["u1"].total) == (2, 4)
        assert (report.units["u2"].solved, report.units["u2"].total) == (0, 1)
        assert (report.solved, report.total) == (2, 5)

    def test_drafts_do_not_count(self, tree):
        units, themes, subthemes = tree
        exercises = [_exercise("e1", "s1"), _exercise("d1", "s1", status="draft")]
        attempts = [_attempt("d1", True)]

        report = compute_progress(units, themes, subthemes, exercises, attempts)

        assert report.subthemes["s1"].total == 1
        assert report.subthemes["s1"].solved == 0

    def test_empty_nodes_are_reported(self, tree):
        units, themes, subthemes = tree
        report = compute_progress(units, themes, subthemes, [], [])

        assert set(report.subthemes) == {"s1", "s2", "s3", "s4"}
        assert report.units["u1"].percent == 0

    def test_unknown_subtheme_ignored(self, tree):
        units, themes, subthemes = tree
        report = compute_progress(units, themes, subthemes, [_exercise("e1", "nowhere")], [])
        assert report.total == 0

    def test_to_dict(self, tree):
        units, themes, subthemes = tree
        report = compute_progress(units, themes, subthemes, [_exercise("e1", "s1")], [_attempt("e1", True)])
        data = report.to_dict()

        assert data["total"] == 1
        assert data["units"][0] == {"id": "u1", "title": "Vectors", "total": 1, "solved": 1, "percent": 100}
        assert [s["id"] for s in data["subthemes"]] == ["s1", "s2", "s3", "s4"]


class TestOrderForPractice:
    def test_unsolved_first_order_kept(self):
        exercises = [_exercise(f"e{i}", "s1") for i in range(1, 6)]
        ordered = order_for_practice(exercises, {"e1", "e4"})
        assert [e.id for e in ordered] == ["e2", "e3", "e5", "e1", "e4"]

    def test_nothing_solved(self):
        exercises = [_exercise("e1", "s1"), _exercise("e2", "s1")]
        assert order_for_practice(exercises, set()) == exercises


class TestProfileStats:
    def test_no_attempts(self):
        stats = profile_stats([])
        assert stats.to_dict() == {"total_attempts": 0, "correct_attempts": 0, "accuracy": 0}

    def test_accuracy_rounded(self):
        attempts = [_attempt("e1", True), _attempt("e1", False, 1), _attempt("e2", False, 2)]
        stats = profile_stats(attempts)
        assert stats.total_attempts == 3
        assert stats.correct_attempts == 1
        assert stats.accuracy == 33

    def test_halves_round_up(self):
        assert round_percent(1, 8) == 13
        assert round_percent(1, 2) == 50
        assert round_percent(2, 3) == 67
        assert round_percent(5, 0) == 0
