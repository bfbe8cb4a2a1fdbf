"""Request-scoped identity and role checks.

The current user is never global state: every handler receives a
RequestContext built from the incoming request.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from vectorlab.db.profiles_repository import ProfileRecord, get_profile

logger = structlog.get_logger(__name__)

NOT_LOGGED_IN = "You must be logged in"
ADMIN_REQUIRED = "Admin access required"


class AuthorizationError(Exception):
    """Caller is not logged in or lacks the required role."""

    pass


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller for one request."""

    user_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)


def require_user(ctx: RequestContext) -> str:
    """Get the caller's user id.

    Raises:
        AuthorizationError: If nobody is logged in
    """
    if not ctx.is_authenticated:
        raise AuthorizationError(NOT_LOGGED_IN)
    return ctx.user_id


def assert_admin(ctx: RequestContext) -> ProfileRecord:
    """Check that the caller is an admin.

    Returns:
        The caller's profile

    Raises:
        AuthorizationError: If not logged in or not an admin
    """
    user_id = require_user(ctx)
    profile = get_profile(user_id)

    if profile is None or not profile.is_admin:
        logger.warning("auth.admin_refused", user_id=user_id)
        raise AuthorizationError(ADMIN_REQUIRED)

    return profile
