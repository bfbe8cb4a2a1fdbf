"""Repository functions for profiles table."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

import structlog

from vectorlab.db.database import get_db

logger = structlog.get_logger(__name__)

ROLES = ("student", "admin")


@dataclass
class ProfileRecord:
    """Profile record from database."""

    id: str
    username: str
    role: str
    created_at: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def fallback_username(user_id: str) -> str:
    """Username given to profiles created implicitly."""
    return f"user_{user_id[:8]}"


def get_profile(user_id: str) -> ProfileRecord | None:
    """Get profile by user ID."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM profiles WHERE id = ?", (user_id,)).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def ensure_profile(user_id: str, username: str | None = None) -> bool:
    """Create the profile if missing; an existing row is left untouched.

    Returns:
        True if a row was created
    """
    with get_db() as conn:
        cursor = conn.execute(
            "INSERT OR IGNORE INTO profiles (id, username) VALUES (?, ?)",
            (user_id, username or fallback_username(user_id)),
        )

    created = cursor.rowcount > 0
    if created:
        logger.debug("profiles.created", user_id=user_id)
    return created


def set_role(user_id: str, role: str) -> None:
    """Set a user's role, creating the profile if needed.

    Raises:
        ValueError: If role is not 'student' or 'admin'
    """
    if role not in ROLES:
        raise ValueError(f"Invalid role: {role}")

    ensure_profile(user_id)
    with get_db() as conn:
        conn.execute("UPDATE profiles SET role = ? WHERE id = ?", (role, user_id))

    logger.debug("profiles.role_updated", user_id=user_id, role=role)


def _row_to_record(row: sqlite3.Row) -> ProfileRecord:
    """Convert database row to ProfileRecord."""
    return ProfileRecord(
        id=row["id"],
        username=row["username"],
        role=row["role"],
        created_at=row["created_at"],
    )
