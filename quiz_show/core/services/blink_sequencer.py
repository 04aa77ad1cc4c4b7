"""Ping-pong highlight shown across the answers during the suspense step."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging

from quiz_show.constants.show_constants import BLINK_INTERVAL_MS

logger = logging.getLogger(__name__)


class BlinkSequencer:
    """Cancelable periodic task moving a lit index back and forth.

    Starts with nothing lit; each tick moves one answer forward until the
    last one, then reverses. With a single answer index 0 stays lit.
    """

    def __init__(
        self,
        interval_ms: int = BLINK_INTERVAL_MS,
        on_change: Callable[[int | None], None] | None = None,
    ) -> None:
        self._interval_seconds = interval_ms / 1000
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None
        self._answer_count: int = 0
        self._lit_index: int | None = None
        self._forward: bool = True
        self._tick_count: int = 0

    @property
    def lit_index(self) -> int | None:
        return self._lit_index

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, answer_count: int) -> None:
        """Start ticking in the running event loop; restarting resets the sweep."""
        self.stop()
        self._answer_count = answer_count
        self._lit_index = None
        self._forward = True
        if answer_count <= 0:
            logger.debug("Blink not started: no answers to sweep")
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="blink-sequencer"
        )

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._lit_index = None

    def tick(self) -> int | None:
        """Advance the sweep by one position and return the new lit index."""
        if self._answer_count <= 0:
            return None
        if self._answer_count == 1:
            next_index = 0
        elif self._lit_index is None:
            next_index = 0
        elif self._forward:
            next_index = self._lit_index + 1
            if next_index >= self._answer_count:
                next_index = self._answer_count - 2
                self._forward = False
        else:
            next_index = self._lit_index - 1
            if next_index < 0:
                next_index = 1
                self._forward = True
        self._lit_index = next_index
        self._tick_count += 1
        if self._on_change is not None:
            self._on_change(next_index)
        return next_index

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_seconds)
            self.tick()
