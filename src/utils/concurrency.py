import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def gather_bounded(
    items: Iterable[T],
    fn: Callable[[T], Awaitable[R]],
    limit: int = 0,
) -> list[R]:
    """Run ``fn`` over ``items`` concurrently, at most ``limit`` in flight.

    ``limit <= 0`` starts every call at once. Results keep input order.
    Exceptions propagate like ``asyncio.gather``, so callers that must not
    fail should catch inside ``fn``.
    """
    if limit <= 0:
        return list(await asyncio.gather(*(fn(item) for item in items)))

    semaphore = asyncio.Semaphore(limit)

    async def _run(item: T) -> R:
        async with semaphore:
            return await fn(item)

    return list(await asyncio.gather(*(_run(item) for item in items)))
