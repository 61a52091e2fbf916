import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from src.config.settings import settings
from src.modules.fetcher.service import Sleep

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    concurrency: int | None = None,
    inter_batch_delay: float | None = None,
    sleep: Sleep = asyncio.sleep,
) -> list[R]:
    """Run ``worker`` over ``items`` in chunks of ``concurrency``.

    Each chunk runs concurrently and is awaited in full before the next one
    starts, with ``inter_batch_delay`` seconds between chunks. Results come
    back in input order. Workers are expected to handle their own errors; an
    exception escaping a worker aborts the whole run.
    """
    size = settings.concurrency if concurrency is None else concurrency
    delay = settings.inter_batch_delay if inter_batch_delay is None else inter_batch_delay
    if size < 1:
        raise ValueError(f"concurrency must be at least 1, got {size}")

    total_batches = (len(items) + size - 1) // size
    results: list[R] = []

    for start in range(0, len(items), size):
        batch = items[start : start + size]
        logger.info("Processing batch %d/%d (%d items)", start // size + 1, total_batches, len(batch))
        results.extend(await asyncio.gather(*(worker(item) for item in batch)))

        if start + size < len(items):
            await sleep(delay)

    return results
