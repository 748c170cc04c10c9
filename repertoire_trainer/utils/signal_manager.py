# repertoire_trainer/utils/signal_manager.py
"""
Provides an asynchronous context manager for graceful shutdown signal handling.

The terminal drill reads standard input through an event-loop pipe reader and
races every read against a shared `asyncio.Event`. `AsyncSignalManager` sets
that event on SIGINT (Ctrl+C) or SIGTERM, so the drill stops its session and
prints the practice summary before exiting.
"""

import asyncio
import signal
from typing import Set

import structlog

logger = structlog.get_logger(__name__)


class AsyncSignalManager:
    """
    An async context manager that listens for shutdown signals and sets an event.

    Usage:
        shutdown_event = asyncio.Event()
        async with AsyncSignalManager(shutdown_event):
            await run_drill(shutdown_event)
    """

    def __init__(self, shutdown_event: asyncio.Event):
        self._shutdown_event = shutdown_event
        self._signals_to_catch: Set[signal.Signals] = {signal.SIGINT, signal.SIGTERM}
        self._registered: Set[signal.Signals] = set()

    def _signal_handler(self, sig: signal.Signals) -> None:
        """Sets the shutdown event once; later signals are only logged."""
        if not self._shutdown_event.is_set():
            logger.warning("Shutdown signal received. Ending the practice session.", signal_name=sig.name)
            self._shutdown_event.set()
        else:
            logger.info("Multiple shutdown signals received, already shutting down.", signal_name=sig.name)

    async def __aenter__(self) -> "AsyncSignalManager":
        loop = asyncio.get_running_loop()
        for sig in self._signals_to_catch:
            try:
                loop.add_signal_handler(sig, self._signal_handler, sig)
                self._registered.add(sig)
                logger.debug("Registered signal handler.", signal_name=sig.name)
            except (ValueError, AttributeError, RuntimeError, NotImplementedError) as e:
                # Non-Unix event loops do not support signal handlers.
                logger.warning("Could not register signal handler.", signal_name=sig.name, error=str(e))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        loop = asyncio.get_running_loop()
        for sig in self._registered:
            loop.remove_signal_handler(sig)
            logger.debug("Removed signal handler.", signal_name=sig.name)
        self._registered.clear()
