"""Progress aggregation.

Pure functions over already-fetched rows: no store access here, so the
join between hierarchy, exercises and attempts can be tested directly.

Rules:
- Only published exercises count
- An exercise is solved once the user has any correct attempt on it;
  later incorrect attempts never un-solve it
- Counts are computed independently per subtheme, theme and unit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence, TypeVar

from vectorlab.db.attempts_repository import AttemptRecord
from vectorlab.db.exercises_repository import ExerciseRecord
from vectorlab.db.structure_repository import SubthemeRecord, ThemeRecord, UnitRecord

E = TypeVar("E", bound=ExerciseRecord)


def round_percent(part: int, whole: int) -> int:
    """``part / whole`` as a percent, halves rounded up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class NodeProgress:
    """Solved/total counts for one hierarchy node."""

    id: str
    title: str
    total: int = 0
    solved: int = 0

    @property
    def percent(self) -> int:
        return round_percent(self.solved, self.total)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "total": self.total,
            "solved": self.solved,
            "percent": self.percent,
        }


@dataclass
class ProgressReport:
    """Progress for every node of the hierarchy, keyed by node id."""

    units: dict[str, NodeProgress] = field(default_factory=dict)
    themes: dict[str, NodeProgress] = field(default_factory=dict)
    subthemes: dict[str, NodeProgress] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(node.total for node in self.units.values())

    @property
    def solved(self) -> int:
        return sum(node.solved for node in self.units.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total": self.total,
            "solved": self.solved,
            "units": [node.to_dict() for node in self.units.values()],
            "themes": [node.to_dict() for node in self.themes.values()],
            "subthemes": [node.to_dict() for node in self.subthemes.values()],
        }


@dataclass(frozen=True)
class ProfileStats:
    """Attempt statistics shown on the profile page."""

    total_attempts: int
    correct_attempts: int
    accuracy: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_attempts": self.total_attempts,
            "correct_attempts": self.correct_attempts,
            "accuracy": self.accuracy,
        }


# =============================================================================
# AGGREGATION
# =============================================================================


def solved_exercise_ids(
    attempts: Iterable[AttemptRecord],
    exercise_ids: Iterable[str] | None = None,
) -> set[str]:
    """Ids of exercises with at least one correct attempt.

    Args:
        attempts: One user's attempts
        exercise_ids: If given, restrict the result to these ids

    Returns:
        Set of solved exercise ids
    """
    solved = {attempt.exercise_id for attempt in attempts if attempt.is_correct}
    if exercise_ids is not None:
        solved &= set(exercise_ids)
    return solved


def compute_progress(
    units: Sequence[UnitRecord],
    themes: Sequence[ThemeRecord],
    subthemes: Sequence[SubthemeRecord],
    exercises: Iterable[ExerciseRecord],
    attempts: Iterable[AttemptRecord],
) -> ProgressReport:
    """Count solved and total published exercises per hierarchy node.

    Every node appears in the report, with zero counts when it has no
    published exercises. Exercises whose subtheme is unknown are ignored.
    """
    report = ProgressReport(
        units={u.id: NodeProgress(id=u.id, title=u.title) for u in units},
        themes={t.id: NodeProgress(id=t.id, title=t.title) for t in themes},
        subthemes={s.id: NodeProgress(id=s.id, title=s.title) for s in subthemes},
    )

    theme_of_subtheme = {s.id: s.theme_id for s in subthemes}
    unit_of_theme = {t.id: t.unit_id for t in themes}

    published = [e for e in exercises if e.is_published]
    solved = solved_exercise_ids(attempts, (e.id for e in published))

    for exercise in published:
        if exercise.subtheme_id not in report.subthemes:
            continue

        theme_id = theme_of_subtheme.get(exercise.subtheme_id)
        unit_id = unit_of_theme.get(theme_id) if theme_id else None

        nodes = [report.subthemes[exercise.subtheme_id]]
        if theme_id in report.themes:
            nodes.append(report.themes[theme_id])
        if unit_id in report.units:
            nodes.append(report.units[unit_id])

        for node in nodes:
            node.total += 1
            if exercise.id in solved:
                node.solved += 1

    return report


def order_for_practice(exercises: Sequence[E], solved: set[str]) -> list[E]:
    """Unsolved exercises first, then solved; relative order is kept."""
    unsolved = [e for e in exercises if e.id not in solved]
    done = [e for e in exercises if e.id in solved]
    return unsolved + done


def profile_stats(attempts: Sequence[AttemptRecord]) -> ProfileStats:
    """Total/correct attempts and accuracy as a rounded percent."""
    total = len(attempts)
    correct = sum(1 for attempt in attempts if attempt.is_correct)
    accuracy = round_percent(correct, total)
    return ProfileStats(total_attempts=total, correct_attempts=correct, accuracy=accuracy)
