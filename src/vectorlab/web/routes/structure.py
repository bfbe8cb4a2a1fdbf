"""Hierarchy endpoints: student browsing and admin authoring."""

from __future__ import annotations

import asyncio
from typing import Annotated, Any

from fastapi import APIRouter, Body, HTTPException, Response, status

from vectorlab.core import authoring
from vectorlab.db import structure_repository
from vectorlab.web.deps import Context
from vectorlab.web.schemas import (
    ActionResponse,
    SubthemeResponse,
    ThemeResponse,
    UnitResponse,
    action_response,
)

router = APIRouter(prefix="/api", tags=["structure"])

Payload = Annotated[dict[str, Any], Body()]


# =============================================================================
# STUDENT READS
# =============================================================================


@router.get("/units", response_model=list[UnitResponse])
async def list_units() -> list[UnitResponse]:
    """List units ordered by position."""
    units = await asyncio.to_thread(structure_repository.list_units)
    return [UnitResponse.model_validate(u) for u in units]


@router.get("/units/{unit_id}/themes", response_model=list[ThemeResponse])
async def list_unit_themes(unit_id: str) -> list[ThemeResponse]:
    """List the themes of a unit ordered by position."""
    unit, themes = await asyncio.gather(
        asyncio.to_thread(structure_repository.get_unit, unit_id),
        asyncio.to_thread(structure_repository.list_themes, unit_id),
    )

    if unit is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unit '{unit_id}' not found",
        )

    return [ThemeResponse.model_validate(t) for t in themes]


@router.get("/themes/{theme_id}/subthemes", response_model=list[SubthemeResponse])
async def list_theme_subthemes(theme_id: str) -> list[SubthemeResponse]:
    """List the subthemes of a theme ordered by position."""
    theme, subthemes = await asyncio.gather(
        asyncio.to_thread(structure_repository.get_theme, theme_id),
        asyncio.to_thread(structure_repository.list_subthemes, theme_id),
    )

    if theme is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Theme '{theme_id}' not found",
        )

    return [SubthemeResponse.model_validate(s) for s in subthemes]


# =============================================================================
# ADMIN ACTIONS
# =============================================================================


@router.post("/admin/units", response_model=ActionResponse)
async def upsert_unit(ctx: Context, payload: Payload, response: Response) -> ActionResponse:
    """Create a unit, or update it when the body carries an id."""
    result = await asyncio.to_thread(authoring.upsert_unit, ctx, payload)
    return action_response(result, response)


@router.delete("/admin/units/{unit_id}", response_model=ActionResponse)
async def delete_unit(ctx: Context, unit_id: str, response: Response) -> ActionResponse:
    """Delete a unit and everything below it."""
    result = await asyncio.to_thread(authoring.delete_unit, ctx, unit_id)
    return action_response(result, response)


@router.post("/admin/themes", response_model=ActionResponse)
async def upsert_theme(ctx: Context, payload: Payload, response: Response) -> ActionResponse:
    """Create a theme, or update it when the body carries an id."""
    result = await asyncio.to_thread(authoring.upsert_theme, ctx, payload)
    return action_response(result, response)


@router.delete("/admin/themes/{theme_id}", response_model=ActionResponse)
async def delete_theme(ctx: Context, theme_id: str, response: Response) -> ActionResponse:
    result = await asyncio.to_thread(authoring.delete_theme, ctx, theme_id)
    return action_response(result, response)


@router.post("/admin/subthemes", response_model=ActionResponse)
async def upsert_subtheme(ctx: Context, payload: Payload, response: Response) -> ActionResponse:
    """Create a subtheme, or update it when the body carries an id."""
    result = await asyncio.to_thread(authoring.upsert_subtheme, ctx, payload)
    return action_response(result, response)


@router.delete("/admin/subthemes/{subtheme_id}", response_model=ActionResponse)
async def delete_subtheme(ctx: Context, subtheme_id: str, response: Response) -> ActionResponse:
    result = await asyncio.to_thread(authoring.delete_subtheme, ctx, subtheme_id)
    return action_response(result, response)
