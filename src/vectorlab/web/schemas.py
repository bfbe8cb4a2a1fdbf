"""Pydantic schemas for the Web API.

Serialization models for the hierarchy, exercises, attempts, progress and
editor drafts. Authoring request bodies are plain JSON objects validated by
vectorlab.core.validation so that field messages reach the client as-is.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import Response, status
from pydantic import BaseModel, Field

from vectorlab.core.authoring import ActionResult


# =============================================================================
# HIERARCHY SCHEMAS
# =============================================================================


class UnitResponse(BaseModel):
    """Response for a unit."""

    id: str
    slug: str
    title: str
    position: int
    created_at: str

    model_config = {"from_attributes": True}


class ThemeResponse(UnitResponse):
    """Response for a theme."""

    unit_id: str


class SubthemeResponse(UnitResponse):
    """Response for a subtheme."""

    theme_id: str


# =============================================================================
# EXERCISE SCHEMAS
# =============================================================================


class ExerciseResponse(BaseModel):
    """Published exercise as shown to students (no solution)."""

    id: str
    subtheme_id: str
    title: str
    type: str
    difficulty: int
    prompt_md: str
    prompt: Any
    hints: list[Any] = Field(default_factory=list)
    tags: list[Any] = Field(default_factory=list)
    created_at: str
    solved: bool = False

    model_config = {"from_attributes": True}


class ExerciseListResponse(BaseModel):
    """Exercises of a subtheme, unsolved first."""

    subtheme: SubthemeResponse
    exercises: list[ExerciseResponse]
    count: int
    solved_count: int


class AdminExerciseResponse(BaseModel):
    """Full exercise row for the editor."""

    id: str
    subtheme_id: str
    title: str
    type: str
    difficulty: int
    prompt_md: str
    solution_md: str
    prompt: Any
    solution: Any
    choices: Any
    hints: list[Any]
    tags: list[Any]
    status: str
    created_by: str | None
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class AdminExerciseListResponse(BaseModel):
    """Response for the admin exercise list."""

    exercises: list[AdminExerciseResponse]
    count: int


# =============================================================================
# ATTEMPT SCHEMAS
# =============================================================================


class AttemptRequest(BaseModel):
    """Submitted answer; only the fields for the prompt kind are read."""

    text: str = ""
    x: Any = None
    y: Any = None
    choice: str = ""
    ids: list[str] = Field(default_factory=list)


class AttemptResultResponse(BaseModel):
    """Verdict for a submitted answer plus the save outcome."""

    is_correct: bool
    label: str
    raw_answer: str
    saved: bool
    save_message: str
    attempt_id: str | None = None
    solution_md: str


class AttemptResponse(BaseModel):
    """One stored attempt."""

    id: str
    exercise_id: str
    is_correct: bool
    answer: dict[str, Any]
    created_at: str

    model_config = {"from_attributes": True}


class AttemptListResponse(BaseModel):
    """Response for the caller's attempts."""

    attempts: list[AttemptResponse]
    count: int


# =============================================================================
# PROFILE AND PROGRESS SCHEMAS
# =============================================================================


class ProfileResponse(BaseModel):
    """Caller's profile with attempt statistics."""

    id: str
    username: str
    role: str
    total_attempts: int = 0
    correct_attempts: int = 0
    accuracy: int = 0


class NodeProgressResponse(BaseModel):
    """Solved/total counts for one hierarchy node."""

    id: str
    title: str
    total: int
    solved: int
    percent: int


class ProgressResponse(BaseModel):
    """Progress per unit, theme and subtheme."""

    total: int
    solved: int
    units: list[NodeProgressResponse]
    themes: list[NodeProgressResponse]
    subthemes: list[NodeProgressResponse]


# =============================================================================
# ACTION SCHEMAS
# =============================================================================


class ActionResponse(BaseModel):
    """Outcome of an authoring action."""

    ok: bool
    message: str
    id: str | None = None


class DraftStatusResponse(BaseModel):
    """State of one editor's autosave slot."""

    editor_id: str
    pending: bool
    exercise_id: str | None = None
    delay_seconds: float
    last_result: ActionResponse | None = None


def action_response(result: ActionResult, response: Response) -> ActionResponse:
    """Convert an ActionResult; failed actions answer 400."""
    if not result.ok:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return ActionResponse(ok=result.ok, message=result.message, id=result.id)


# =============================================================================
# HEALTH SCHEMA
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
