"""Periodic expiry sweeper."""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import timedelta

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Runs a sweep callback on a fixed interval as an asyncio task.

    The sweeper reclaims entries that expire without ever being read
    again, which lazy expiry alone cannot do. A failing sweep is logged
    and the loop carries on with the next tick.
    """

    def __init__(self, sweep: Callable[[], int], interval: timedelta) -> None:
        """Initialize the sweeper.

        Args:
            sweep: Callback removing expired entries, returning the count.
            interval: Time between two sweeps.
        """
        self._sweep = sweep
        self._interval = interval.total_seconds()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        """Whether the sweep task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep task on the running event loop.

        Calling ``start`` on a running sweeper does nothing.

        Raises:
            RuntimeError: If no event loop is running.
        """
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="tagcache-expiry-sweeper"
        )
        logger.info(
            "Cache sweeper started", extra={"interval_seconds": self._interval}
        )

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Cache sweeper stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._sweep()
            except Exception:
                logger.exception("Cache sweep failed")
