"""Pydantic input models for authoring actions.

Validation failures are reported as the first non-empty field message.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vectorlab.core.exercise_types import SHORT_ANSWER
from vectorlab.utils.validators import is_uuid, is_valid_slug, parse_json_field

EXERCISE_FALLBACK_MESSAGE = "Please complete required fields before saving."
STRUCTURE_FALLBACK_MESSAGE = "Invalid input"


def first_error_message(exc: ValidationError, fallback: str) -> str:
    """First non-empty field error message, or ``fallback``."""
    for error in exc.errors():
        ctx_error = (error.get("ctx") or {}).get("error")
        if error.get("type") == "value_error" and ctx_error is not None:
            message = str(ctx_error)
        else:
            message = error.get("msg", "")
        if message:
            return message
    return fallback


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _check_optional_uuid(value: Any) -> str | None:
    value = _blank_to_none(value)
    if value is None:
        return None
    if not isinstance(value, str) or not is_uuid(value):
        raise ValueError("Invalid id")
    return value


def _check_parent_uuid(value: Any, message: str) -> str:
    if not isinstance(value, str) or not is_uuid(value.strip()):
        raise ValueError(message)
    return value.strip()


# =============================================================================
# HIERARCHY INPUTS
# =============================================================================


class _NodeInput(BaseModel):
    """Fields shared by units, themes and subthemes."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str | None = None
    slug: str | None = None
    title: str = Field(..., min_length=2, max_length=120)
    position: int = Field(default=1, ge=1)

    @field_validator("id", mode="before")
    @classmethod
    def _validate_id(cls, value: Any) -> str | None:
        return _check_optional_uuid(value)

    @field_validator("slug", mode="before")
    @classmethod
    def _validate_slug(cls, value: Any) -> str | None:
        value = _blank_to_none(value)
        if value is None:
            return None
        value = str(value).strip()
        if not is_valid_slug(value):
            raise ValueError("Use lowercase letters, numbers, and hyphens only")
        return value


class UnitInput(_NodeInput):
    """Create/update payload for a unit."""


class ThemeInput(_NodeInput):
    """Create/update payload for a theme."""

    unit_id: str = Field(default="", validate_default=True)

    @field_validator("unit_id", mode="before")
    @classmethod
    def _validate_unit_id(cls, value: Any) -> str:
        return _check_parent_uuid(value, "Select a unit")


class SubthemeInput(_NodeInput):
    """Create/update payload for a subtheme."""

    theme_id: str = Field(default="", validate_default=True)

    @field_validator("theme_id", mode="before")
    @classmethod
    def _validate_theme_id(cls, value: Any) -> str:
        return _check_parent_uuid(value, "Select a theme")


# =============================================================================
# EXERCISE INPUT
# =============================================================================


class ExerciseInput(BaseModel):
    """Exercise editor payload.

    choices_json carries the type-specific configuration (JSON array or
    object); hints_json and tags_json are JSON arrays. Each may be given as
    JSON text or already-parsed data.
    """

    id: str | None = None
    subtheme_id: str = Field(default="", validate_default=True)
    title: str = ""
    type: str = Field(default=SHORT_ANSWER, min_length=2, max_length=60)
    difficulty: int = Field(default=1, ge=1, le=5)
    status: Literal["draft", "published"] = "draft"
    prompt_md: str = Field(default="", validate_default=True)
    solution_md: str = Field(default="", validate_default=True)
    choices_json: Any = Field(default="[]", validate_default=True)
    hints_json: Any = Field(default="[]", validate_default=True)
    tags_json: Any = Field(default="[]", validate_default=True)

    @field_validator("id", mode="before")
    @classmethod
    def _validate_id(cls, value: Any) -> str | None:
        return _check_optional_uuid(value)

    @field_validator("subtheme_id", mode="before")
    @classmethod
    def _validate_subtheme_id(cls, value: Any) -> str:
        return _check_parent_uuid(value, "Select a subtheme")

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("prompt_md")
    @classmethod
    def _validate_prompt(cls, value: str) -> str:
        if len(value.strip()) < 3:
            raise ValueError("Prompt is required")
        return value

    @field_validator("solution_md")
    @classmethod
    def _validate_solution(cls, value: str) -> str:
        if len(value.strip()) < 3:
            raise ValueError("Solution is required")
        return value

    @field_validator("choices_json", mode="before")
    @classmethod
    def _parse_choices(cls, value: Any) -> Any:
        return parse_json_field(value, allow_object=True)

    @field_validator("hints_json", "tags_json", mode="before")
    @classmethod
    def _parse_array(cls, value: Any) -> Any:
        return parse_json_field(value)
