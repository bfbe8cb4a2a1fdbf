"""Answer submission for students.

Grades an answer and records the attempt. The verdict is always returned;
saving the attempt is best-effort and reported through a message.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any

import structlog

from vectorlab.core.auth import RequestContext
from vectorlab.core.grader import GradeVerdict, SubmittedAnswer, grade_stored
from vectorlab.db.attempts_repository import insert_attempt
from vectorlab.db.exercises_repository import ExerciseRecord
from vectorlab.db.profiles_repository import ensure_profile

logger = structlog.get_logger(__name__)

LOGIN_REQUIRED_MESSAGE = "Login required to save this attempt."
SAVED_MESSAGE = "Attempt saved."


@dataclass
class SubmissionResult:
    """Verdict plus the outcome of recording the attempt."""

    verdict: GradeVerdict
    saved: bool
    save_message: str
    attempt_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            **self.verdict.to_dict(),
            "saved": self.saved,
            "save_message": self.save_message,
            "attempt_id": self.attempt_id,
        }


def submit_answer(
    ctx: RequestContext,
    exercise: ExerciseRecord,
    answer: SubmittedAnswer,
) -> SubmissionResult:
    """Grade an answer and append the attempt for the caller.

    The caller's profile is created on first use (username derived from the
    id, role student).

    Args:
        ctx: Caller identity (anonymous callers are graded but not recorded)
        exercise: Exercise being answered
        answer: Submitted answer

    Returns:
        SubmissionResult with the verdict and the save outcome
    """
    verdict = grade_stored(exercise.prompt, exercise.solution, answer)

    if not ctx.is_authenticated:
        return SubmissionResult(verdict=verdict, saved=False, save_message=LOGIN_REQUIRED_MESSAGE)

    try:
        ensure_profile(ctx.user_id)
        attempt = insert_attempt(
            user_id=ctx.user_id,
            exercise_id=exercise.id,
            is_correct=verdict.is_correct,
            answer={"raw": verdict.raw_answer},
        )
    except sqlite3.Error as e:
        logger.warning(
            "practice.attempt_not_saved",
            user_id=ctx.user_id,
            exercise_id=exercise.id,
            error=str(e),
        )
        return SubmissionResult(
            verdict=verdict,
            saved=False,
            save_message=f"Attempt not saved: {e}",
        )

    logger.info(
        "practice.attempt_saved",
        user_id=ctx.user_id,
        exercise_id=exercise.id,
        is_correct=verdict.is_correct,
    )
    return SubmissionResult(
        verdict=verdict,
        saved=True,
        save_message=SAVED_MESSAGE,
        attempt_id=attempt.id,
    )
