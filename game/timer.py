"""Cancellable one-shot timer for the guess timeout."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class GuessTimeout:
    """
    Runs a callback once after a delay unless cancelled first.

    Only one timer is armed at a time; starting it again replaces the old one.
    """

    def __init__(self):
        self._task: Optional[asyncio.Task] = None

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, delay: float, callback: Callable[[], Awaitable[None]]):
        self.cancel()
        self._task = asyncio.create_task(self._run(delay, callback))

    def cancel(self):
        """Disarm the timer. Safe to call from inside the callback itself."""
        task, self._task = self._task, None
        if task is None or task.done():
            return

        if task is asyncio.current_task():
            # The callback is running; cancelling it would abort its own work
            return

        task.cancel()

    async def _run(self, delay: float, callback: Callable[[], Awaitable[None]]):
        await asyncio.sleep(delay)
        try:
            await callback()
        except Exception:
            logger.exception("Guess timeout callback failed")
