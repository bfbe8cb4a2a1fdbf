"""Repository functions for exercises table.

JSON columns (prompt, solution, choices, hints, tags) are stored as text and
decoded on read.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from vectorlab.db.database import get_db

logger = structlog.get_logger(__name__)


@dataclass
class ExerciseRecord:
    """Exercise record from database."""

    id: str
    subtheme_id: str
    title: str
    type: str
    difficulty: int
    prompt_md: str
    solution_md: str
    prompt: Any
    solution: Any
    status: str
    created_by: str | None
    created_at: str
    updated_at: str
    choices: Any = field(default_factory=list)
    hints: list[Any] = field(default_factory=list)
    tags: list[Any] = field(default_factory=list)

    @property
    def is_published(self) -> bool:
        return self.status == "published"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def insert_exercise(
    exercise_id: str,
    subtheme_id: str,
    title: str,
    exercise_type: str,
    difficulty: int,
    prompt_md: str,
    solution_md: str,
    prompt: Any,
    solution: Any,
    choices: Any,
    hints: list[Any],
    tags: list[Any],
    status: str,
    created_by: str | None,
) -> None:
    """Insert a new exercise.

    Raises:
        sqlite3.IntegrityError: If the subtheme doesn't exist
    """
    now = _now()
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO exercises (
                id, subtheme_id, title, type, difficulty,
                prompt_md, solution_md, prompt, solution,
                choices, hints, tags, status, created_by,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                exercise_id,
                subtheme_id,
                title,
                exercise_type,
                difficulty,
                prompt_md,
                solution_md,
                json.dumps(prompt),
                json.dumps(solution),
                json.dumps(choices),
                json.dumps(hints),
                json.dumps(tags),
                status,
                created_by,
                now,
                now,
            ),
        )

    logger.debug("exercises.inserted", exercise_id=exercise_id, type=exercise_type)


def update_exercise(
    exercise_id: str,
    subtheme_id: str,
    title: str,
    exercise_type: str,
    difficulty: int,
    prompt_md: str,
    solution_md: str,
    prompt: Any,
    solution: Any,
    choices: Any,
    hints: list[Any],
    tags: list[Any],
    status: str,
) -> bool:
    """Update an existing exercise (last write wins).

    Returns:
        True if updated, False if not found
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            UPDATE exercises SET
                subtheme_id = ?,
                title = ?,
                type = ?,
                difficulty = ?,
                prompt_md = ?,
                solution_md = ?,
                prompt = ?,
                solution = ?,
                choices = ?,
                hints = ?,
                tags = ?,
                status = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                subtheme_id,
                title,
                exercise_type,
                difficulty,
                prompt_md,
                solution_md,
                json.dumps(prompt),
                json.dumps(solution),
                json.dumps(choices),
                json.dumps(hints),
                json.dumps(tags),
                status,
                _now(),
                exercise_id,
            ),
        )

    updated = cursor.rowcount > 0
    if updated:
        logger.debug("exercises.updated", exercise_id=exercise_id)
    return updated


def set_exercise_status(exercise_id: str, status: str) -> bool:
    """Change exercise status ('draft' or 'published').

    Returns:
        True if updated, False if not found
    """
    with get_db() as conn:
        cursor = conn.execute(
            "UPDATE exercises SET status = ?, updated_at = ? WHERE id = ?",
            (status, _now(), exercise_id),
        )

    updated = cursor.rowcount > 0
    if updated:
        logger.debug("exercises.status_updated", exercise_id=exercise_id, status=status)
    return updated


def delete_exercise(exercise_id: str) -> bool:
    """Delete exercise by ID (its attempts go with it).

    Returns:
        True if deleted, False if not found
    """
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM exercises WHERE id = ?", (exercise_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("exercises.deleted", exercise_id=exercise_id)
    return deleted


def get_exercise(exercise_id: str) -> ExerciseRecord | None:
    """Get exercise by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM exercises WHERE id = ?", (exercise_id,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def list_published_exercises(subtheme_id: str | None = None) -> list[ExerciseRecord]:
    """Get published exercises ordered by creation time.

    Args:
        subtheme_id: Restrict to one subtheme (all subthemes if None)
    """
    with get_db() as conn:
        if subtheme_id is None:
            rows = conn.execute(
                """
                SELECT * FROM exercises WHERE status = 'published'
                ORDER BY created_at, rowid
                """
            ).fetchall()
        else:
            rows = conn.execute(
                """
                SELECT * FROM exercises
                WHERE status = 'published' AND subtheme_id = ?
                ORDER BY created_at, rowid
                """,
                (subtheme_id,),
            ).fetchall()

    return [_row_to_record(row) for row in rows]


def list_all_exercises() -> list[ExerciseRecord]:
    """Get every exercise, drafts included, most recently edited first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM exercises ORDER BY updated_at DESC, rowid DESC"
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def _loads(value: str | None, default: Any) -> Any:
    if not value:
        return default
    return json.loads(value)


def _row_to_record(row: sqlite3.Row) -> ExerciseRecord:
    """Convert database row to ExerciseRecord."""
    return ExerciseRecord(
        id=row["id"],
        subtheme_id=row["subtheme_id"],
        title=row["title"],
        type=row["type"],
        difficulty=row["difficulty"],
        prompt_md=row["prompt_md"],
        solution_md=row["solution_md"],
        prompt=_loads(row["prompt"], {}),
        solution=_loads(row["solution"], {}),
        status=row["status"],
        created_by=row["created_by"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        choices=_loads(row["choices"], []),
        hints=_loads(row["hints"], []),
        tags=_loads(row["tags"], []),
    )
