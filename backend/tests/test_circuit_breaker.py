"""
Unit tests for the provider circuit breaker.

A fake clock drives the sliding window and the open duration so no test
sleeps.
"""
import pytest

from siska.core.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError, CircuitState


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


async def succeed():
    return "ok"


async def fail():
    raise ValueError("upstream error")


async def run(cb, func):
    try:
        return await cb.call_async(func)
    except ValueError:
        return None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def breaker(clock):
    return CircuitBreaker(
        "test_provider",
        failure_threshold=0.5,
        time_window_seconds=60,
        open_duration_seconds=30,
        min_requests_for_threshold=4,
        clock=clock,
    )


@pytest.mark.asyncio
async def test_closed_state_passes_calls(breaker):
    assert breaker.state == CircuitState.CLOSED
    assert await breaker.call_async(succeed) == "ok"


@pytest.mark.asyncio
async def test_failures_propagate(breaker):
    with pytest.raises(ValueError):
        await breaker.call_async(fail)


@pytest.mark.asyncio
async def test_stays_closed_below_min_requests(breaker):
    for _ in range(3):
        await run(breaker, fail)

    assert breaker.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_opens_at_threshold(breaker):
    await run(breaker, succeed)
    await run(breaker, succeed)
    await run(breaker, fail)
    await run(breaker, fail)

    assert breaker.state == CircuitState.OPEN


@pytest.mark.asyncio
async def test_stays_closed_under_threshold(breaker):
    for _ in range(3):
        await run(breaker, succeed)
    await run(breaker, fail)

    assert breaker.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_open_rejects_without_calling(breaker):
    for _ in range(4):
        await run(breaker, fail)

    called = []

    async def tracked():
        called.append(True)
        return "ok"

    with pytest.raises(CircuitBreakerOpenError) as exc_info:
        await breaker.call_async(tracked)

    assert called == []
    assert exc_info.value.state == CircuitState.OPEN
    assert "test_provider" in str(exc_info.value)


@pytest.mark.asyncio
async def test_old_failures_leave_the_window(breaker, clock):
    for _ in range(3):
        await run(breaker, fail)
    clock.advance(61)
    await run(breaker, fail)

    assert breaker.state == CircuitState.CLOSED
    assert breaker.snapshot()["recent_requests"] == 1


@pytest.mark.asyncio
async def test_half_open_probe_success_closes(breaker, clock):
    for _ in range(4):
        await run(breaker, fail)
    clock.advance(30)

    assert breaker.state == CircuitState.HALF_OPEN
    assert await breaker.call_async(succeed) == "ok"
    assert breaker.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_half_open_probe_failure_reopens(breaker, clock):
    for _ in range(4):
        await run(breaker, fail)
    clock.advance(30)

    await run(breaker, fail)

    assert breaker.state == CircuitState.OPEN
    with pytest.raises(CircuitBreakerOpenError):
        await breaker.call_async(succeed)


@pytest.mark.asyncio
async def test_half_open_allows_single_probe(breaker, clock):
    for _ in range(4):
        await run(breaker, fail)
    clock.advance(30)

    breaker._acquire()  # probe in flight
    with pytest.raises(CircuitBreakerOpenError) as exc_info:
        await breaker.call_async(succeed)

    assert exc_info.value.state == CircuitState.HALF_OPEN


def test_snapshot_shape(breaker):
    snapshot = breaker.snapshot()

    assert snapshot == {
        "name": "test_provider",
        "state": "closed",
        "recent_requests": 0,
        "recent_failures": 0,
        "opened_at": None,
    }
