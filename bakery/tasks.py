"""
Periodic background sweeps run on the application's event loop.
"""
import asyncio
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


async def run_periodic(name: str, interval_seconds: float, fn: Callable[[], None]) -> None:
    """
    Call fn every interval_seconds until cancelled.
    Errors from fn are logged and the loop keeps going.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            fn()
        except Exception as e:
            logger.error(f"Periodic task {name} failed: {str(e)}", exc_info=True)


def start_sweeps(storage, interval_seconds: float) -> List[asyncio.Task]:
    """Start the session-cache and admin-session sweeps."""
    tasks = [
        asyncio.create_task(run_periodic("cache-sweep", interval_seconds, storage.cache.sweep)),
        asyncio.create_task(run_periodic("admin-session-sweep", interval_seconds, storage.sessions.sweep)),
    ]
    logger.info(f"Started {len(tasks)} background sweeps (interval: {interval_seconds:.0f}s)")
    return tasks


async def stop_sweeps(tasks: List[asyncio.Task]) -> None:
    for task in tasks:
        task.cancel()
    for task in tasks:
        try:
            await task
        except asyncio.CancelledError:
            pass
