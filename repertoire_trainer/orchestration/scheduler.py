# repertoire_trainer/orchestration/scheduler.py
"""
Delayed, cancellable callbacks for pacing a practice session on asyncio.

The session only needs "run this once after a delay, unless cancelled";
`AsyncioScheduler` maps that onto `loop.call_later`, which keeps every
callback on the event loop thread and therefore serialized with user input.
"""
import asyncio
from typing import Any, Callable, Optional, Set

import structlog

logger = structlog.get_logger(__name__)


class AsyncioScheduler:
    """A `Scheduler` that runs callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Args:
            loop: The loop to schedule on. Defaults to the loop running at the
                  time `schedule` is called.
        """
        self._loop = loop
        self._handles: Set[asyncio.TimerHandle] = set()

    def schedule(self, delay_s: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        # Handles cancelled by the session never reach `_run`; forget them here.
        self._handles = {h for h in self._handles if not h.cancelled()}
        handle: Optional[asyncio.TimerHandle] = None

        def _run() -> None:
            self._handles.discard(handle)
            try:
                callback()
            except Exception:
                # A failing scheduled action must not take the event loop down with it.
                logger.error("Scheduled session action failed.", exc_info=True)

        handle = loop.call_later(max(0.0, delay_s), _run)
        self._handles.add(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for handle in self._handles if not handle.cancelled())
