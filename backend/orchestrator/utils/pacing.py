"""Rate-limited sequential iteration for upstream calls"""
import asyncio
from typing import AsyncIterator, Awaitable, Callable, Iterable, Tuple, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FixedDelayPolicy:
    """Wait a fixed number of seconds between consecutive calls"""

    def __init__(
        self,
        delay_seconds: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    async def wait(self) -> None:
        if self.delay_seconds > 0:
            await self._sleep(self.delay_seconds)


async def paced(items: Iterable[T], policy: FixedDelayPolicy) -> AsyncIterator[Tuple[int, T]]:
    """
    Yield (index, item) in order, applying the policy between items

    The policy is applied before every item except the first, so N items
    incur N - 1 waits.
    """
    for index, item in enumerate(items):
        if index > 0:
            logger.debug(f"Pacing: waiting {policy.delay_seconds}s before item {index + 1}")
            await policy.wait()
        yield index, item
