"""Debounced draft autosave.

One pending save per editor: every edit cancels the waiting save and
schedules a new one, so only the state after the last edit is stored,
once the editor has been idle for the configured delay.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable

import structlog

from vectorlab.core.authoring import ActionResult

logger = structlog.get_logger(__name__)

DEFAULT_DELAY_SECONDS = 1.2
MIN_FIELD_LENGTH = 3

SaveFunc = Callable[[dict[str, Any]], Awaitable[ActionResult]]


def is_saveable(fields: dict[str, Any]) -> bool:
    """Title, prompt and solution all have at least 3 non-blank characters."""
    for key in ("title", "prompt_md", "solution_md"):
        value = fields.get(key)
        if not isinstance(value, str) or len(value.strip()) < MIN_FIELD_LENGTH:
            return False
    return True


class AutosaveScheduler:
    """Single-slot debouncer around an async save function.

    The id returned by the first successful save is remembered and sent
    with later saves, so they update the same exercise instead of creating
    new ones.
    """

    def __init__(self, save: SaveFunc, delay: float = DEFAULT_DELAY_SECONDS):
        self._save = save
        self._delay = delay
        self._task: asyncio.Task[ActionResult | None] | None = None
        self._pending: dict[str, Any] | None = None
        self._lock = asyncio.Lock()
        self.exercise_id: str | None = None
        self.last_result: ActionResult | None = None
        self.last_activity = time.monotonic()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def is_idle(self) -> bool:
        """No pending state, no timer and no save in progress."""
        return self._pending is None and self._task is None and not self._lock.locked()

    def schedule(self, fields: dict[str, Any]) -> None:
        """Replace the pending state and restart the idle timer.

        Must be called from a running event loop.
        """
        self._cancel_timer()
        self._pending = dict(fields)
        self.last_activity = time.monotonic()
        self._task = asyncio.create_task(self._save_after_delay())

    async def flush(self) -> ActionResult | None:
        """Save the pending state now.

        Returns:
            The save result, or None if nothing was saved
        """
        self._cancel_timer()
        return await self._save_pending()

    def cancel(self) -> None:
        """Drop the pending state without saving."""
        self._cancel_timer()
        self._pending = None

    async def _save_after_delay(self) -> ActionResult | None:
        await asyncio.sleep(self._delay)
        # Detach so a flush arriving mid-save doesn't cancel it.
        self._task = None
        return await self._save_pending()

    def _cancel_timer(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _save_pending(self) -> ActionResult | None:
        try:
            return await self._save_locked()
        finally:
            self.last_activity = time.monotonic()

    async def _save_locked(self) -> ActionResult | None:
        async with self._lock:
            fields, self._pending = self._pending, None
            if fields is None:
                return None

            if not is_saveable(fields):
                logger.debug("autosave.skipped", reason="fields_too_short")
                return None

            if self.exercise_id and not fields.get("id"):
                fields["id"] = self.exercise_id

            result = await self._save(fields)
            self.last_result = result

            if result.ok and result.id:
                self.exercise_id = result.id
                logger.info("autosave.saved", exercise_id=result.id)
            else:
                logger.warning("autosave.failed", message=result.message)

            return result
