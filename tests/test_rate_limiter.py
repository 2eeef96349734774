"""Tests for the catalog rate-limit gate."""

import asyncio

import pytest

from manavault.models.failure import RateLimitTimeoutError
from manavault.services.rate_limiter import RateLimitGate


class FakeClock:
    """Manual clock whose sleep advances time instead of waiting."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate(clock: FakeClock) -> RateLimitGate:
    return RateLimitGate(min_interval=0.1, timeout=5.0, clock=clock, sleep=clock.sleep)


async def _value(value: int) -> int:
    return value


class TestSpacing:
    async def test_first_call_not_delayed(self, gate: RateLimitGate, clock: FakeClock) -> None:
        assert await gate.run(lambda: _value(1)) == 1
        assert clock.sleeps == []
        assert gate.last_request_time == 100.0

    async def test_back_to_back_calls_are_spaced(
        self, gate: RateLimitGate, clock: FakeClock
    ) -> None:
        """Second call waits out the rest of the interval."""
        await gate.run(lambda: _value(1))
        clock.now += 0.04
        await gate.run(lambda: _value(2))

        assert clock.sleeps == [pytest.approx(0.06)]

    async def test_no_delay_after_interval_elapsed(
        self, gate: RateLimitGate, clock: FakeClock
    ) -> None:
        await gate.run(lambda: _value(1))
        clock.now += 0.5
        await gate.run(lambda: _value(2))

        assert clock.sleeps == []

    async def test_reset_forgets_last_call(self, gate: RateLimitGate, clock: FakeClock) -> None:
        await gate.run(lambda: _value(1))
        gate.reset()
        await gate.run(lambda: _value(2))

        assert clock.sleeps == []


class TestOrdering:
    async def test_calls_run_in_fifo_order(self, gate: RateLimitGate) -> None:
        order: list[int] = []

        async def record(value: int) -> int:
            order.append(value)
            await asyncio.sleep(0)
            return value

        results = await asyncio.gather(*(gate.run(lambda v=v: record(v)) for v in range(5)))

        assert order == [0, 1, 2, 3, 4]
        assert results == [0, 1, 2, 3, 4]

    async def test_queue_length_counts_waiters(self, gate: RateLimitGate) -> None:
        release = asyncio.Event()
        started = asyncio.Event()

        async def blocking() -> int:
            started.set()
            await release.wait()
            return 1

        first = asyncio.create_task(gate.run(blocking))
        await started.wait()
        second = asyncio.create_task(gate.run(lambda: _value(2)))
        await asyncio.sleep(0)

        assert gate.queue_length == 1

        release.set()
        assert await first == 1
        assert await second == 2
        assert gate.queue_length == 0


class TestFailures:
    async def test_timeout_raises_rate_limit_error(self, clock: FakeClock) -> None:
        gate = RateLimitGate(min_interval=0.0, timeout=0.01, clock=clock, sleep=clock.sleep)

        async def slow() -> int:
            await asyncio.sleep(1)
            return 1

        with pytest.raises(RateLimitTimeoutError) as exc_info:
            await gate.run(slow)

        assert exc_info.value.status_code == 503

    async def test_queue_advances_after_failure(self, gate: RateLimitGate) -> None:
        """A failing call propagates its error and frees the gate."""

        async def boom() -> int:
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await gate.run(boom)

        assert await gate.run(lambda: _value(7)) == 7

    async def test_queue_advances_after_timeout(self, clock: FakeClock) -> None:
        gate = RateLimitGate(min_interval=0.0, timeout=0.01, clock=clock, sleep=clock.sleep)

        async def slow() -> int:
            await asyncio.sleep(1)
            return 1

        results = await asyncio.gather(
            gate.run(slow), gate.run(lambda: _value(2)), return_exceptions=True
        )

        assert isinstance(results[0], RateLimitTimeoutError)
        assert results[1] == 2
