"""
Rate-limit gate for external catalog calls.

One gate instance is created at application startup and shared by every
caller that talks to Scryfall. Calls run one at a time in strict FIFO order.
Each call starts no sooner than `min_interval` seconds after the previous
call started, and is abandoned with RateLimitTimeoutError if it runs longer
than `timeout` seconds. The queue advances whether a call succeeds, fails
or times out.

Scryfall asks clients to keep 50-100ms between requests:
https://scryfall.com/docs/api#rate-limits-and-good-citizenship
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from manavault.models.failure import RateLimitTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MIN_INTERVAL = 0.1
DEFAULT_TIMEOUT = 30.0


class RateLimitGate:
    """
    Serializes calls with a minimum start-to-start spacing and a timeout.

    Args:
        min_interval: Seconds between the start of consecutive calls
        timeout: Seconds a single call may run before it is rejected
        clock: Monotonic clock (injectable for tests)
        sleep: Async sleep (injectable for tests)
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval = min_interval
        self.timeout = timeout
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_request_time: float | None = None
        self._waiting = 0

    @property
    def queue_length(self) -> int:
        """Number of calls waiting for their turn."""
        return self._waiting

    @property
    def last_request_time(self) -> float | None:
        return self._last_request_time

    async def run(self, call: Callable[[], Awaitable[T]]) -> T:
        """
        Run `call` when the gate allows it and return its result.

        Exceptions raised by `call` propagate to this caller only.

        Raises:
            RateLimitTimeoutError: If the call exceeds the gate timeout
        """
        ahead = self._waiting + (1 if self._lock.locked() else 0)
        if ahead:
            logger.debug(
                "Catalog request queued behind %d request(s), estimated wait %.0fms",
                ahead,
                ahead * self.min_interval * 1000,
            )

        self._waiting += 1
        try:
            await self._lock.acquire()
        finally:
            self._waiting -= 1

        try:
            await self._wait_for_slot()
            self._last_request_time = self._clock()
            try:
                return await asyncio.wait_for(call(), timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.warning("Catalog request timed out after %.1fs", self.timeout)
                raise RateLimitTimeoutError(self.timeout) from None
        finally:
            self._lock.release()

    async def _wait_for_slot(self) -> None:
        if self._last_request_time is None:
            return
        elapsed = self._clock() - self._last_request_time
        wait = self.min_interval - elapsed
        if wait > 0:
            logger.debug("Delaying catalog request %.0fms to respect rate limit", wait * 1000)
            await self._sleep(wait)

    def reset(self) -> None:
        """
        Forget the last request time and start with a fresh lock.

        WARNING: Only safe when no calls are in flight. Use only for testing.
        """
        self._lock = asyncio.Lock()
        self._last_request_time = None
        self._waiting = 0
