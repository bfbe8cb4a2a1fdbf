"""FastAPI dependencies for caller identity."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from vectorlab.core.auth import (
    NOT_LOGGED_IN,
    AuthorizationError,
    RequestContext,
    assert_admin,
)
from vectorlab.db.profiles_repository import ProfileRecord


def get_request_context(
    x_user_id: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Build the caller's context from the X-User-Id header."""
    user_id = x_user_id.strip() if x_user_id else ""
    return RequestContext(user_id=user_id or None)


Context = Annotated[RequestContext, Depends(get_request_context)]


def require_user_id(ctx: Context) -> str:
    """Caller's user id, or 401."""
    if not ctx.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_LOGGED_IN)
    return ctx.user_id


async def require_admin(ctx: Context) -> ProfileRecord:
    """Caller's profile if admin; 401 when anonymous, 403 otherwise."""
    try:
        return await asyncio.to_thread(assert_admin, ctx)
    except AuthorizationError as e:
        code = status.HTTP_403_FORBIDDEN if ctx.is_authenticated else status.HTTP_401_UNAUTHORIZED
        raise HTTPException(status_code=code, detail=str(e))


UserId = Annotated[str, Depends(require_user_id)]
Admin = Annotated[ProfileRecord, Depends(require_admin)]
