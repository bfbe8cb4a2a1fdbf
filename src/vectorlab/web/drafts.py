"""Editor draft management for the Web API.

Keeps one AutosaveScheduler per (user, editor) pair. Each edit pushed by an
editor restarts that editor's idle timer; the draft is stored through
authoring.autosave_draft once the editor goes quiet.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import structlog

from vectorlab.config import load_app_config
from vectorlab.core.auth import RequestContext
from vectorlab.core.authoring import ActionResult, autosave_draft
from vectorlab.core.autosave import AutosaveScheduler

logger = structlog.get_logger(__name__)


class DraftManager:
    """Registry of autosave schedulers keyed by user and editor id."""

    def __init__(self, delay: float | None = None, idle_ttl: float | None = None):
        editor_config = load_app_config().editor
        self._delay = editor_config.autosave_delay_seconds if delay is None else delay
        self._idle_ttl = editor_config.draft_idle_seconds if idle_ttl is None else idle_ttl
        self._schedulers: dict[tuple[str, str], AutosaveScheduler] = {}
        self._contexts: dict[tuple[str, str], RequestContext] = {}

    @property
    def delay(self) -> float:
        return self._delay

    def _make_save(self, key: tuple[str, str]):
        async def save(fields: dict[str, Any]) -> ActionResult:
            return await asyncio.to_thread(autosave_draft, self._contexts[key], fields)

        return save

    def update(
        self, ctx: RequestContext, editor_id: str, fields: dict[str, Any]
    ) -> AutosaveScheduler:
        """Record the editor's latest state and restart its idle timer."""
        self.evict_idle()

        key = (ctx.user_id or "", editor_id)
        self._contexts[key] = ctx

        scheduler = self._schedulers.get(key)
        if scheduler is None:
            scheduler = AutosaveScheduler(self._make_save(key), delay=self._delay)
            self._schedulers[key] = scheduler
            logger.debug("drafts.editor_opened", editor_id=editor_id, user_id=ctx.user_id)

        scheduler.schedule(fields)
        return scheduler

    def get(self, ctx: RequestContext, editor_id: str) -> AutosaveScheduler | None:
        """Get the editor's scheduler, if it has ever been updated."""
        return self._schedulers.get((ctx.user_id or "", editor_id))

    async def flush(self, ctx: RequestContext, editor_id: str) -> ActionResult | None:
        """Save the editor's pending state now."""
        scheduler = self.get(ctx, editor_id)
        if scheduler is None:
            return None
        return await scheduler.flush()

    def discard(self, ctx: RequestContext, editor_id: str) -> bool:
        """Drop the editor's pending state and forget the editor.

        Returns:
            True if the editor was known
        """
        key = (ctx.user_id or "", editor_id)
        scheduler = self._schedulers.pop(key, None)
        self._contexts.pop(key, None)
        if scheduler is None:
            return False

        scheduler.cancel()
        logger.debug("drafts.editor_closed", editor_id=editor_id, user_id=ctx.user_id)
        return True

    def evict_idle(self, now: float | None = None) -> int:
        """Forget editors whose last save finished more than idle_ttl ago.

        Editors with pending state, a running timer or a save in progress
        are kept.

        Returns:
            Number of editors evicted
        """
        if now is None:
            now = time.monotonic()

        stale = [
            key
            for key, scheduler in self._schedulers.items()
            if scheduler.is_idle and now - scheduler.last_activity >= self._idle_ttl
        ]
        for key in stale:
            del self._schedulers[key]
            self._contexts.pop(key, None)

        if stale:
            logger.debug("drafts.evicted", count=len(stale))
        return len(stale)

    def cancel_all(self) -> None:
        """Cancel every pending save (shutdown)."""
        for scheduler in self._schedulers.values():
            scheduler.cancel()
        self._schedulers.clear()
        self._contexts.clear()


# Global instance
_draft_manager: DraftManager | None = None


def get_draft_manager() -> DraftManager:
    """Get the global draft manager instance."""
    global _draft_manager
    if _draft_manager is None:
        _draft_manager = DraftManager()
    return _draft_manager


def reset_draft_manager() -> None:
    """Reset the draft manager (for testing)."""
    global _draft_manager
    if _draft_manager is not None:
        _draft_manager.cancel_all()
    _draft_manager = None
