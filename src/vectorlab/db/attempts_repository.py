"""Repository functions for attempts table.

Attempts are append-only: there is no update or delete path.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable

import structlog

from vectorlab.db.database import get_db

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AttemptRecord:
    """Attempt record from database."""

    id: str
    user_id: str
    exercise_id: str
    is_correct: bool
    answer: dict[str, Any]
    created_at: str


def insert_attempt(
    user_id: str,
    exercise_id: str,
    is_correct: bool,
    answer: dict[str, Any],
) -> AttemptRecord:
    """Append one attempt.

    Args:
        user_id: Profile ID (must exist)
        exercise_id: Exercise ID (must exist)
        is_correct: Grading verdict
        answer: JSON answer payload, e.g. {"raw": "(3, -2)"}

    Returns:
        The stored AttemptRecord

    Raises:
        sqlite3.IntegrityError: If the profile or exercise doesn't exist
    """
    record = AttemptRecord(
        id=str(uuid.uuid4()),
        user_id=user_id,
        exercise_id=exercise_id,
        is_correct=is_correct,
        answer=answer,
        created_at=datetime.now(timezone.utc).isoformat(),
    )

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO attempts (id, user_id, exercise_id, is_correct, answer, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.user_id,
                record.exercise_id,
                int(record.is_correct),
                json.dumps(record.answer),
                record.created_at,
            ),
        )

    logger.debug(
        "attempts.inserted",
        attempt_id=record.id,
        exercise_id=exercise_id,
        is_correct=is_correct,
    )
    return record


def list_attempts_for_user(user_id: str) -> list[AttemptRecord]:
    """Get all attempts of a user, oldest first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM attempts WHERE user_id = ? ORDER BY created_at, rowid",
            (user_id,),
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def list_correct_attempts(
    user_id: str, exercise_ids: Iterable[str]
) -> list[AttemptRecord]:
    """Get a user's correct attempts restricted to the given exercises."""
    ids = list(dict.fromkeys(exercise_ids))
    if not ids:
        return []

    placeholders = ", ".join("?" for _ in ids)
    with get_db() as conn:
        rows = conn.execute(
            f"""
            SELECT * FROM attempts
            WHERE user_id = ? AND is_correct = 1 AND exercise_id IN ({placeholders})
            ORDER BY created_at, rowid
            """,
            (user_id, *ids),
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def _row_to_record(row: sqlite3.Row) -> AttemptRecord:
    """Convert database row to AttemptRecord."""
    return AttemptRecord(
        id=row["id"],
        user_id=row["user_id"],
        exercise_id=row["exercise_id"],
        is_correct=bool(row["is_correct"]),
        answer=json.loads(row["answer"]) if row["answer"] else {},
        created_at=row["created_at"],
    )
