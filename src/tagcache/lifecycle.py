"""Startup and shutdown wiring for a process-wide cache."""

import asyncio
import logging
import signal
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import Any

from tagcache.core.entities.cache_config import CacheConfig
from tagcache.core.services.cache_service import Cache

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)

# Strong references to pending close tasks started from signal handlers.
_shutdown_tasks: set[asyncio.Task[None]] = set()


@asynccontextmanager
async def cache_lifespan(
    config: CacheConfig | None = None,
    **kwargs: Any,
) -> AsyncIterator[Cache[Any]]:
    """Create a cache, start its sweeper and close it on exit.

    Meant for application lifespans, e.g. FastAPI::

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            async with cache_lifespan(CacheConfig.from_env()) as cache:
                app.state.cache = cache
                yield

    Args:
        config: Cache configuration. Uses defaults if not provided.
        **kwargs: Passed on to ``Cache`` (backend, key_builder, clock).

    Yields:
        The running cache.
    """
    cache: Cache[Any] = Cache(config, **kwargs)
    await cache.start()
    try:
        yield cache
    finally:
        await cache.close()


def install_shutdown_handlers(
    cache: Cache[Any],
    loop: asyncio.AbstractEventLoop | None = None,
    signals: Iterable[signal.Signals] = DEFAULT_SHUTDOWN_SIGNALS,
    redeliver: bool = True,
) -> list[signal.Signals]:
    """Close the cache when the process receives a shutdown signal.

    With ``redeliver`` the handler removes itself once the cache is
    closed and raises the signal again, so the process still gets the
    signal's default behavior (exit, KeyboardInterrupt).

    Args:
        cache: The cache to close.
        loop: Event loop to install on. Defaults to the running loop.
        signals: Signals to handle.
        redeliver: Whether to re-raise the signal after closing.

    Returns:
        The signals a handler was installed for. Platforms without loop
        signal support (e.g. Windows) get none.
    """
    loop = loop or asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in signals:
        try:
            loop.add_signal_handler(
                sig, _on_shutdown_signal, cache, loop, sig, redeliver
            )
        except (NotImplementedError, RuntimeError, ValueError):
            logger.warning(
                "Cannot install cache shutdown handler for %s",
                sig.name,
                extra={"signal_name": sig.name},
            )
            continue
        installed.append(sig)
    return installed


def _on_shutdown_signal(
    cache: Cache[Any],
    loop: asyncio.AbstractEventLoop,
    sig: signal.Signals,
    redeliver: bool,
) -> asyncio.Task[None]:
    logger.info("Received %s, closing cache", sig.name)
    task = loop.create_task(_close_cache(cache, loop, sig, redeliver))
    _shutdown_tasks.add(task)
    task.add_done_callback(_shutdown_tasks.discard)
    return task


async def _close_cache(
    cache: Cache[Any],
    loop: asyncio.AbstractEventLoop,
    sig: signal.Signals,
    redeliver: bool,
) -> None:
    try:
        await cache.close()
    finally:
        if redeliver:
            loop.remove_signal_handler(sig)
            signal.raise_signal(sig)
