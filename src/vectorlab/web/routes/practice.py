"""Student practice endpoints: exercises, attempts, profile and progress."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException, status

from vectorlab.core.grader import SubmittedAnswer
from vectorlab.core.practice import submit_answer
from vectorlab.core.progress import (
    compute_progress,
    order_for_practice,
    profile_stats,
    solved_exercise_ids,
)
from vectorlab.db import attempts_repository, exercises_repository, structure_repository
from vectorlab.db.profiles_repository import fallback_username, get_profile
from vectorlab.web.deps import Context, UserId
from vectorlab.web.schemas import (
    AttemptListResponse,
    AttemptRequest,
    AttemptResponse,
    AttemptResultResponse,
    ExerciseListResponse,
    ExerciseResponse,
    ProfileResponse,
    ProgressResponse,
    SubthemeResponse,
)

router = APIRouter(prefix="/api", tags=["practice"])


@router.get("/subthemes/{subtheme_id}/exercises", response_model=ExerciseListResponse)
async def list_subtheme_exercises(ctx: Context, subtheme_id: str) -> ExerciseListResponse:
    """List published exercises of a subtheme; solved ones last."""
    subtheme, exercises = await asyncio.gather(
        asyncio.to_thread(structure_repository.get_subtheme, subtheme_id),
        asyncio.to_thread(exercises_repository.list_published_exercises, subtheme_id),
    )

    if subtheme is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Subtheme '{subtheme_id}' not found",
        )

    correct = []
    if ctx.is_authenticated and exercises:
        correct = await asyncio.to_thread(
            attempts_repository.list_correct_attempts,
            ctx.user_id,
            [e.id for e in exercises],
        )

    solved = solved_exercise_ids(correct)
    ordered = order_for_practice(exercises, solved)

    items = [
        ExerciseResponse.model_validate(e).model_copy(update={"solved": e.id in solved})
        for e in ordered
    ]
    return ExerciseListResponse(
        subtheme=SubthemeResponse.model_validate(subtheme),
        exercises=items,
        count=len(items),
        solved_count=len(solved),
    )


@router.post("/exercises/{exercise_id}/attempts", response_model=AttemptResultResponse)
async def submit_attempt(
    ctx: Context, exercise_id: str, request: AttemptRequest
) -> AttemptResultResponse:
    """Grade an answer; the attempt is recorded when the caller is known."""
    exercise = await asyncio.to_thread(exercises_repository.get_exercise, exercise_id)

    if exercise is None or not exercise.is_published:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Exercise '{exercise_id}' not found",
        )

    answer = SubmittedAnswer(
        text=request.text,
        x=request.x,
        y=request.y,
        choice=request.choice,
        ids=list(request.ids),
    )
    result = await asyncio.to_thread(submit_answer, ctx, exercise, answer)

    return AttemptResultResponse(
        is_correct=result.verdict.is_correct,
        label=result.verdict.label,
        raw_answer=result.verdict.raw_answer,
        saved=result.saved,
        save_message=result.save_message,
        attempt_id=result.attempt_id,
        solution_md=exercise.solution_md,
    )


@router.get("/me/attempts", response_model=AttemptListResponse)
async def list_my_attempts(user_id: UserId) -> AttemptListResponse:
    """List the caller's attempts, oldest first."""
    attempts = await asyncio.to_thread(attempts_repository.list_attempts_for_user, user_id)
    return AttemptListResponse(
        attempts=[AttemptResponse.model_validate(a) for a in attempts],
        count=len(attempts),
    )


@router.get("/me/profile", response_model=ProfileResponse)
async def get_my_profile(user_id: UserId) -> ProfileResponse:
    """Caller's profile and attempt statistics."""
    profile, attempts = await asyncio.gather(
        asyncio.to_thread(get_profile, user_id),
        asyncio.to_thread(attempts_repository.list_attempts_for_user, user_id),
    )
    stats = profile_stats(attempts)

    # Profiles are created on the first saved attempt
    if profile is None:
        return ProfileResponse(
            id=user_id,
            username=fallback_username(user_id),
            role="student",
            **stats.to_dict(),
        )

    return ProfileResponse(
        id=profile.id,
        username=profile.username,
        role=profile.role,
        **stats.to_dict(),
    )


@router.get("/me/progress", response_model=ProgressResponse)
async def get_my_progress(user_id: UserId) -> ProgressResponse:
    """Solved/total published exercises per unit, theme and subtheme."""
    units, themes, subthemes, exercises, attempts = await asyncio.gather(
        asyncio.to_thread(structure_repository.list_units),
        asyncio.to_thread(structure_repository.list_themes),
        asyncio.to_thread(structure_repository.list_subthemes),
        asyncio.to_thread(exercises_repository.list_published_exercises),
        asyncio.to_thread(attempts_repository.list_attempts_for_user, user_id),
    )

    report = compute_progress(units, themes, subthemes, exercises, attempts)
    return ProgressResponse(**report.to_dict())
