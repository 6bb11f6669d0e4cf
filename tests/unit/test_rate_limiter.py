"""Tests for the sliding-window rate limiter (fake clock, no real sleeping)."""

import asyncio

import pytest

from src.pipeline.rate_limiter import SlidingWindowRateLimiter


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _limiter(clock: FakeClock, max_calls: int = 5, window: float = 60.0) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(max_calls, window, clock=clock, sleep=clock.sleep)


class TestSlidingWindowRateLimiter:
    async def test_first_calls_do_not_wait(self) -> None:
        clock = FakeClock()
        limiter = _limiter(clock)
        for _ in range(5):
            await limiter.acquire()
        assert clock.sleeps == []
        assert limiter.in_window == 5

    async def test_sixth_call_waits_for_oldest_to_age_out(self) -> None:
        clock = FakeClock()
        limiter = _limiter(clock)
        for _ in range(5):
            await limiter.acquire()
            clock.now += 10

        # Calls at 1000, 1010, ..., 1040; now is 1050.
        await limiter.acquire()

        assert clock.sleeps == [pytest.approx(10.0)]
        assert clock.now == pytest.approx(1060.0)
        assert limiter.in_window == 5

    async def test_window_expiry_frees_slots(self) -> None:
        clock = FakeClock()
        limiter = _limiter(clock, max_calls=2)
        await limiter.acquire()
        await limiter.acquire()
        clock.now += 60
        assert limiter.in_window == 0
        await limiter.acquire()
        assert clock.sleeps == []

    async def test_concurrent_callers_serialized(self) -> None:
        clock = FakeClock()
        limiter = _limiter(clock, max_calls=2, window=30.0)
        await asyncio.gather(*(limiter.acquire() for _ in range(4)))
        assert clock.sleeps == [pytest.approx(30.0)]
        assert limiter.in_window == 2

    def test_rejects_zero_calls(self) -> None:
        with pytest.raises(ValueError, match="max_calls"):
            SlidingWindowRateLimiter(max_calls=0)
