"""Authoring actions for admins.

Responsibilities:
- Create/update/delete units, themes and subthemes (with unique slugs)
- Create/update exercises, autosave drafts, publish, delete

Every action returns an ActionResult instead of raising: validation,
authorization and store errors all become ``ok=False`` with a message the
caller can show as-is.
"""

from __future__ import annotations

import sqlite3
import uuid
from dataclasses import dataclass
from typing import Any, Callable

import structlog
from pydantic import ValidationError

from vectorlab.core.auth import AuthorizationError, RequestContext, assert_admin
from vectorlab.core.exercise_types import build_exercise_payload
from vectorlab.core.validation import (
    EXERCISE_FALLBACK_MESSAGE,
    STRUCTURE_FALLBACK_MESSAGE,
    ExerciseInput,
    SubthemeInput,
    ThemeInput,
    UnitInput,
    first_error_message,
)
from vectorlab.db import exercises_repository, structure_repository
from vectorlab.utils.text_utils import slugify, unique_slug

logger = structlog.get_logger(__name__)

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ActionResult:
    """Uniform outcome of an authoring action."""

    ok: bool
    message: str
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"ok": self.ok, "message": self.message}
        if self.id is not None:
            result["id"] = self.id
        return result


@dataclass(frozen=True)
class _Level:
    """How one hierarchy level is validated and stored."""

    label: str
    table: str
    model: type[UnitInput] | type[ThemeInput] | type[SubthemeInput]
    parent_field: str | None
    insert: Callable[[str, str | None, str, str, int], None]
    update: Callable[[str, str | None, str, str, int], bool]
    delete: Callable[[str], bool]


_UNIT = _Level(
    label="Unit",
    table="units",
    model=UnitInput,
    parent_field=None,
    insert=lambda i, p, s, t, pos: structure_repository.insert_unit(i, s, t, pos),
    update=lambda i, p, s, t, pos: structure_repository.update_unit(i, s, t, pos),
    delete=structure_repository.delete_unit,
)

_THEME = _Level(
    label="Theme",
    table="themes",
    model=ThemeInput,
    parent_field="unit_id",
    insert=lambda i, p, s, t, pos: structure_repository.insert_theme(i, p, s, t, pos),
    update=lambda i, p, s, t, pos: structure_repository.update_theme(i, p, s, t, pos),
    delete=structure_repository.delete_theme,
)

_SUBTHEME = _Level(
    label="Subtheme",
    table="subthemes",
    model=SubthemeInput,
    parent_field="theme_id",
    insert=lambda i, p, s, t, pos: structure_repository.insert_subtheme(i, p, s, t, pos),
    update=lambda i, p, s, t, pos: structure_repository.update_subtheme(i, p, s, t, pos),
    delete=structure_repository.delete_subtheme,
)


def _store_failure(exc: sqlite3.Error, fallback: str, **context: Any) -> ActionResult:
    logger.warning("authoring.store_error", error=str(exc), **context)
    return ActionResult(ok=False, message=str(exc) or fallback)


# =============================================================================
# HIERARCHY ACTIONS
# =============================================================================


def _write_with_free_slug(
    level: _Level,
    base: str,
    write: Callable[[str], Any],
    exclude_id: str | None = None,
) -> tuple[str, Any]:
    """Pick a free slug for ``base`` and run ``write(slug)``.

    The slug list is read before the write, so a concurrent writer can take
    the same slug in between. On that unique-slug conflict the slug is
    recomputed and the write retried once.
    """
    slug = unique_slug(base, structure_repository.list_slugs(level.table, exclude_id=exclude_id))
    try:
        return slug, write(slug)
    except sqlite3.IntegrityError as exc:
        if f"{level.table}.slug" not in str(exc):
            raise
        logger.info("authoring.slug_conflict", table=level.table, slug=slug)

    slug = unique_slug(base, structure_repository.list_slugs(level.table, exclude_id=exclude_id))
    return slug, write(slug)


def _upsert_node(level: _Level, ctx: RequestContext, raw: dict[str, Any]) -> ActionResult:
    try:
        data = level.model.model_validate(raw)
    except ValidationError as exc:
        return ActionResult(ok=False, message=first_error_message(exc, STRUCTURE_FALLBACK_MESSAGE))

    parent_id = getattr(data, level.parent_field) if level.parent_field else None
    fallback = "Update failed" if data.id else "Create failed"

    try:
        assert_admin(ctx)

        if data.id:
            stored_slug = structure_repository.get_slug(level.table, data.id)
            if stored_slug is None:
                return ActionResult(ok=False, message="Update failed")

            def update(slug: str) -> bool:
                return level.update(data.id, parent_id, slug, data.title, data.position)

            if data.slug:
                slug, updated = _write_with_free_slug(level, data.slug, update, exclude_id=data.id)
            else:
                slug, updated = stored_slug, update(stored_slug)

            if not updated:
                return ActionResult(ok=False, message="Update failed")

            logger.info(f"{level.table}.updated", id=data.id, slug=slug)
            return ActionResult(ok=True, message=f"{level.label} updated", id=data.id)

        new_id = str(uuid.uuid4())
        slug, _ = _write_with_free_slug(
            level,
            data.slug or slugify(data.title),
            lambda free_slug: level.insert(new_id, parent_id, free_slug, data.title, data.position),
        )

        logger.info(f"{level.table}.created", id=new_id, slug=slug)
        return ActionResult(ok=True, message=f"{level.label} created", id=new_id)

    except AuthorizationError as exc:
        return ActionResult(ok=False, message=str(exc))
    except sqlite3.Error as exc:
        return _store_failure(exc, fallback, table=level.table)


def _delete_node(level: _Level, ctx: RequestContext, node_id: str) -> ActionResult:
    try:
        assert_admin(ctx)
        level.delete(node_id)
    except AuthorizationError as exc:
        return ActionResult(ok=False, message=str(exc))
    except sqlite3.Error as exc:
        return _store_failure(exc, "Delete failed", table=level.table)

    logger.info(f"{level.table}.deleted", id=node_id)
    return ActionResult(ok=True, message=f"{level.label} deleted", id=node_id)


def upsert_unit(ctx: RequestContext, raw: dict[str, Any]) -> ActionResult:
    """Create a unit, or update it when ``raw["id"]`` is set."""
    return _upsert_node(_UNIT, ctx, raw)


def delete_unit(ctx: RequestContext, unit_id: str) -> ActionResult:
    """Delete a unit (themes, subthemes and exercises cascade)."""
    return _delete_node(_UNIT, ctx, unit_id)


def upsert_theme(ctx: RequestContext, raw: dict[str, Any]) -> ActionResult:
    """Create a theme, or update it when ``raw["id"]`` is set."""
    return _upsert_node(_THEME, ctx, raw)


def delete_theme(ctx: RequestContext, theme_id: str) -> ActionResult:
    return _delete_node(_THEME, ctx, theme_id)


def upsert_subtheme(ctx: RequestContext, raw: dict[str, Any]) -> ActionResult:
    """Create a subtheme, or update it when ``raw["id"]`` is set."""
    return _upsert_node(_SUBTHEME, ctx, raw)


def delete_subtheme(ctx: RequestContext, subtheme_id: str) -> ActionResult:
    return _delete_node(_SUBTHEME, ctx, subtheme_id)


# =============================================================================
# EXERCISE ACTIONS
# =============================================================================


def upsert_exercise(ctx: RequestContext, raw: dict[str, Any]) -> ActionResult:
    """Validate, shape and store an exercise.

    The stored prompt/solution are rebuilt from the markdown and the
    choices configuration on every save.

    Args:
        ctx: Caller identity (must be an admin)
        raw: Editor fields (see ExerciseInput)

    Returns:
        ActionResult with the exercise id on success
    """
    try:
        data = ExerciseInput.model_validate(raw)
    except ValidationError as exc:
        return ActionResult(ok=False, message=first_error_message(exc, EXERCISE_FALLBACK_MESSAGE))

    fallback = "Update failed" if data.id else "Create failed"

    try:
        profile = assert_admin(ctx)
        payload = build_exercise_payload(
            data.type, data.prompt_md, data.solution_md, data.choices_json
        )

        fields = dict(
            subtheme_id=data.subtheme_id,
            title=data.title,
            exercise_type=data.type,
            difficulty=data.difficulty,
            prompt_md=data.prompt_md,
            solution_md=data.solution_md,
            prompt=payload.prompt,
            solution=payload.solution,
            choices=data.choices_json,
            hints=data.hints_json,
            tags=data.tags_json,
            status=data.status,
        )

        if data.id:
            if not exercises_repository.update_exercise(data.id, **fields):
                return ActionResult(ok=False, message="Update failed")

            logger.info("exercises.updated", exercise_id=data.id, status=data.status)
            return ActionResult(ok=True, message="Exercise updated", id=data.id)

        new_id = str(uuid.uuid4())
        exercises_repository.insert_exercise(new_id, created_by=profile.id, **fields)

        logger.info("exercises.created", exercise_id=new_id, type=data.type)
        return ActionResult(ok=True, message="Exercise created", id=new_id)

    except AuthorizationError as exc:
        return ActionResult(ok=False, message=str(exc))
    except sqlite3.Error as exc:
        return _store_failure(exc, fallback, exercise_id=data.id)


def autosave_draft(ctx: RequestContext, raw: dict[str, Any]) -> ActionResult:
    """Save the editor state as a draft, whatever status it carried."""
    result = upsert_exercise(ctx, {**raw, "status": "draft"})
    if result.ok:
        return ActionResult(ok=True, message="Draft autosaved", id=result.id)
    return result


def publish_exercise(ctx: RequestContext, exercise_id: str) -> ActionResult:
    """Mark an exercise as published."""
    try:
        assert_admin(ctx)
        if not exercises_repository.set_exercise_status(exercise_id, "published"):
            return ActionResult(ok=False, message="Publish failed")
    except AuthorizationError as exc:
        return ActionResult(ok=False, message=str(exc))
    except sqlite3.Error as exc:
        return _store_failure(exc, "Publish failed", exercise_id=exercise_id)

    logger.info("exercises.published", exercise_id=exercise_id)
    return ActionResult(ok=True, message="Exercise published", id=exercise_id)


def delete_exercise(ctx: RequestContext, exercise_id: str) -> ActionResult:
    """Delete an exercise and its attempts."""
    try:
        assert_admin(ctx)
        exercises_repository.delete_exercise(exercise_id)
    except AuthorizationError as exc:
        return ActionResult(ok=False, message=str(exc))
    except sqlite3.Error as exc:
        return _store_failure(exc, "Delete failed", exercise_id=exercise_id)

    logger.info("exercises.deleted", exercise_id=exercise_id)
    return ActionResult(ok=True, message="Exercise deleted", id=exercise_id)
