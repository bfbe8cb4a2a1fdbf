"""Repository functions for the content hierarchy.

Provides CRUD operations for the units, themes and subthemes tables.
Every level is ordered by its ``position`` within the parent.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

import structlog

from vectorlab.db.database import get_db

logger = structlog.get_logger(__name__)

# table -> parent foreign key column (None for the top level)
_PARENT_COLUMNS: dict[str, str | None] = {
    "units": None,
    "themes": "unit_id",
    "subthemes": "theme_id",
}


@dataclass
class UnitRecord:
    """Unit record from database."""

    id: str
    slug: str
    title: str
    position: int
    created_at: str


@dataclass
class ThemeRecord:
    """Theme record from database."""

    id: str
    unit_id: str
    slug: str
    title: str
    position: int
    created_at: str


@dataclass
class SubthemeRecord:
    """Subtheme record from database."""

    id: str
    theme_id: str
    slug: str
    title: str
    position: int
    created_at: str


def _check_table(table: str) -> str | None:
    if table not in _PARENT_COLUMNS:
        raise ValueError(f"Unknown hierarchy table: {table}")
    return _PARENT_COLUMNS[table]


def list_slugs(table: str, exclude_id: str | None = None) -> set[str]:
    """Get all slugs used in a hierarchy table.

    Args:
        table: 'units', 'themes' or 'subthemes'
        exclude_id: Row whose slug should not count (the row being updated)

    Returns:
        Set of slugs
    """
    _check_table(table)
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT slug FROM {table} WHERE id != ?", (exclude_id or "",)
        ).fetchall()
    return {row["slug"] for row in rows}


def get_slug(table: str, row_id: str) -> str | None:
    """Get the stored slug of a row, None if the row doesn't exist."""
    _check_table(table)
    with get_db() as conn:
        row = conn.execute(
            f"SELECT slug FROM {table} WHERE id = ?", (row_id,)
        ).fetchone()
    return row["slug"] if row else None


def _insert(
    table: str,
    row_id: str,
    slug: str,
    title: str,
    position: int,
    parent_id: str | None = None,
) -> None:
    parent_column = _check_table(table)
    columns = ["id", "slug", "title", "position"]
    values: list[object] = [row_id, slug, title, position]
    if parent_column:
        columns.append(parent_column)
        values.append(parent_id)

    placeholders = ", ".join("?" for _ in columns)
    with get_db() as conn:
        conn.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
            values,
        )

    logger.debug("structure.inserted", table=table, id=row_id, slug=slug)


def _update(
    table: str,
    row_id: str,
    slug: str,
    title: str,
    position: int,
    parent_id: str | None = None,
) -> bool:
    parent_column = _check_table(table)
    assignments = ["slug = ?", "title = ?", "position = ?"]
    values: list[object] = [slug, title, position]
    if parent_column:
        assignments.append(f"{parent_column} = ?")
        values.append(parent_id)
    values.append(row_id)

    with get_db() as conn:
        cursor = conn.execute(
            f"UPDATE {table} SET {', '.join(assignments)} WHERE id = ?",
            values,
        )

    updated = cursor.rowcount > 0
    if updated:
        logger.debug("structure.updated", table=table, id=row_id)
    return updated


def _delete(table: str, row_id: str) -> bool:
    _check_table(table)
    with get_db() as conn:
        cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (row_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("structure.deleted", table=table, id=row_id)
    return deleted


# =============================================================================
# UNITS
# =============================================================================


def list_units() -> list[UnitRecord]:
    """Get all units ordered by position."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM units ORDER BY position, rowid"
        ).fetchall()
    return [_row_to_unit(row) for row in rows]


def get_unit(unit_id: str) -> UnitRecord | None:
    """Get unit by ID."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM units WHERE id = ?", (unit_id,)).fetchone()
    return _row_to_unit(row) if row else None


def insert_unit(unit_id: str, slug: str, title: str, position: int) -> None:
    """Insert a new unit.

    Raises:
        sqlite3.IntegrityError: If id or slug already exists
    """
    _insert("units", unit_id, slug, title, position)


def update_unit(unit_id: str, slug: str, title: str, position: int) -> bool:
    """Update a unit. Returns False if it doesn't exist."""
    return _update("units", unit_id, slug, title, position)


def delete_unit(unit_id: str) -> bool:
    """Delete a unit and, by cascade, everything below it."""
    return _delete("units", unit_id)


# =============================================================================
# THEMES
# =============================================================================


def list_themes(unit_id: str | None = None) -> list[ThemeRecord]:
    """Get themes ordered by position, optionally for a single unit."""
    with get_db() as conn:
        if unit_id is None:
            rows = conn.execute(
                "SELECT * FROM themes ORDER BY position, rowid"
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM themes WHERE unit_id = ? ORDER BY position, rowid",
                (unit_id,),
            ).fetchall()
    return [_row_to_theme(row) for row in rows]


def get_theme(theme_id: str) -> ThemeRecord | None:
    """Get theme by ID."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM themes WHERE id = ?", (theme_id,)).fetchone()
    return _row_to_theme(row) if row else None


def insert_theme(
    theme_id: str, unit_id: str, slug: str, title: str, position: int
) -> None:
    """Insert a new theme.

    Raises:
        sqlite3.IntegrityError: If the unit doesn't exist or the slug is taken
    """
    _insert("themes", theme_id, slug, title, position, parent_id=unit_id)


def update_theme(
    theme_id: str, unit_id: str, slug: str, title: str, position: int
) -> bool:
    """Update a theme. Returns False if it doesn't exist."""
    return _update("themes", theme_id, slug, title, position, parent_id=unit_id)


def delete_theme(theme_id: str) -> bool:
    """Delete a theme and its subthemes."""
    return _delete("themes", theme_id)


# =============================================================================
# SUBTHEMES
# =============================================================================


def list_subthemes(theme_id: str | None = None) -> list[SubthemeRecord]:
    """Get subthemes ordered by position, optionally for a single theme."""
    with get_db() as conn:
        if theme_id is None:
            rows = conn.execute(
                "SELECT * FROM subthemes ORDER BY position, rowid"
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM subthemes WHERE theme_id = ? ORDER BY position, rowid",
                (theme_id,),
            ).fetchall()
    return [_row_to_subtheme(row) for row in rows]


def get_subtheme(subtheme_id: str) -> SubthemeRecord | None:
    """Get subtheme by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM subthemes WHERE id = ?", (subtheme_id,)
        ).fetchone()
    return _row_to_subtheme(row) if row else None


def insert_subtheme(
    subtheme_id: str, theme_id: str, slug: str, title: str, position: int
) -> None:
    """Insert a new subtheme.

    Raises:
        sqlite3.IntegrityError: If the theme doesn't exist or the slug is taken
    """
    _insert("subthemes", subtheme_id, slug, title, position, parent_id=theme_id)


def update_subtheme(
    subtheme_id: str, theme_id: str, slug: str, title: str, position: int
) -> bool:
    """Update a subtheme. Returns False if it doesn't exist."""
    return _update("subthemes", subtheme_id, slug, title, position, parent_id=theme_id)


def delete_subtheme(subtheme_id: str) -> bool:
    """Delete a subtheme and its exercises."""
    return _delete("subthemes", subtheme_id)


def _row_to_unit(row: sqlite3.Row) -> UnitRecord:
    return UnitRecord(
        id=row["id"],
        slug=row["slug"],
        title=row["title"],
        position=row["position"],
        created_at=row["created_at"],
    )


def _row_to_theme(row: sqlite3.Row) -> ThemeRecord:
    return ThemeRecord(
        id=row["id"],
        unit_id=row["unit_id"],
        slug=row["slug"],
        title=row["title"],
        position=row["position"],
        created_at=row["created_at"],
    )


def _row_to_subtheme(row: sqlite3.Row) -> SubthemeRecord:
    return SubthemeRecord(
        id=row["id"],
        theme_id=row["theme_id"],
        slug=row["slug"],
        title=row["title"],
        position=row["position"],
        created_at=row["created_at"],
    )
