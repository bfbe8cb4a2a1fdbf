"""Admin exercise endpoints: listing, saving, publishing, editor drafts."""

from __future__ import annotations

import asyncio
from typing import Annotated, Any

from fastapi import APIRouter, Body, HTTPException, Response, status

from vectorlab.core import authoring
from vectorlab.core.autosave import AutosaveScheduler
from vectorlab.db.exercises_repository import list_all_exercises
from vectorlab.web.deps import Admin, Context
from vectorlab.web.drafts import get_draft_manager
from vectorlab.web.schemas import (
    ActionResponse,
    AdminExerciseListResponse,
    AdminExerciseResponse,
    DraftStatusResponse,
    action_response,
)

router = APIRouter(prefix="/api/admin", tags=["exercises"])

Payload = Annotated[dict[str, Any], Body()]


@router.get("/exercises", response_model=AdminExerciseListResponse)
async def list_exercises(admin: Admin) -> AdminExerciseListResponse:
    """List every exercise, drafts included, most recently edited first."""
    exercises = await asyncio.to_thread(list_all_exercises)
    return AdminExerciseListResponse(
        exercises=[AdminExerciseResponse.model_validate(e) for e in exercises],
        count=len(exercises),
    )


@router.post("/exercises", response_model=ActionResponse)
async def upsert_exercise(ctx: Context, payload: Payload, response: Response) -> ActionResponse:
    """Create an exercise, or update it when the body carries an id."""
    result = await asyncio.to_thread(authoring.upsert_exercise, ctx, payload)
    return action_response(result, response)


@router.post("/exercises/autosave", response_model=ActionResponse)
async def autosave_exercise(ctx: Context, payload: Payload, response: Response) -> ActionResponse:
    """Save the editor state as a draft immediately."""
    result = await asyncio.to_thread(authoring.autosave_draft, ctx, payload)
    return action_response(result, response)


@router.post("/exercises/{exercise_id}/publish", response_model=ActionResponse)
async def publish_exercise(ctx: Context, exercise_id: str, response: Response) -> ActionResponse:
    result = await asyncio.to_thread(authoring.publish_exercise, ctx, exercise_id)
    return action_response(result, response)


@router.delete("/exercises/{exercise_id}", response_model=ActionResponse)
async def delete_exercise(ctx: Context, exercise_id: str, response: Response) -> ActionResponse:
    result = await asyncio.to_thread(authoring.delete_exercise, ctx, exercise_id)
    return action_response(result, response)


# =============================================================================
# EDITOR DRAFTS (debounced autosave)
# =============================================================================


def _draft_status(editor_id: str, scheduler: AutosaveScheduler) -> DraftStatusResponse:
    last = scheduler.last_result
    return DraftStatusResponse(
        editor_id=editor_id,
        pending=scheduler.has_pending,
        exercise_id=scheduler.exercise_id,
        delay_seconds=scheduler.delay,
        last_result=ActionResponse(**last.to_dict()) if last is not None else None,
    )


def _editor_not_found(editor_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Editor '{editor_id}' has no draft",
    )


@router.put("/editors/{editor_id}/draft", response_model=DraftStatusResponse)
async def update_draft(
    admin: Admin, ctx: Context, editor_id: str, payload: Payload
) -> DraftStatusResponse:
    """Push the editor's current fields; saved after the idle delay."""
    scheduler = get_draft_manager().update(ctx, editor_id, payload)
    return _draft_status(editor_id, scheduler)


@router.get("/editors/{editor_id}/draft", response_model=DraftStatusResponse)
async def get_draft(admin: Admin, ctx: Context, editor_id: str) -> DraftStatusResponse:
    """Get the state of the editor's autosave slot."""
    scheduler = get_draft_manager().get(ctx, editor_id)
    if scheduler is None:
        raise _editor_not_found(editor_id)
    return _draft_status(editor_id, scheduler)


@router.post("/editors/{editor_id}/flush", response_model=DraftStatusResponse)
async def flush_draft(admin: Admin, ctx: Context, editor_id: str) -> DraftStatusResponse:
    """Save the editor's pending fields now."""
    manager = get_draft_manager()
    scheduler = manager.get(ctx, editor_id)
    if scheduler is None:
        raise _editor_not_found(editor_id)

    await manager.flush(ctx, editor_id)
    return _draft_status(editor_id, scheduler)


@router.delete("/editors/{editor_id}/draft", response_model=ActionResponse)
async def discard_draft(admin: Admin, ctx: Context, editor_id: str) -> ActionResponse:
    """Drop the editor's pending fields without saving."""
    if not get_draft_manager().discard(ctx, editor_id):
        raise _editor_not_found(editor_id)
    return ActionResponse(ok=True, message="Draft discarded")
