"""Test the circuit breaker used around promotion sources."""
import pytest

from core.resilience import CircuitBreaker, CircuitOpenError, CircuitState


def test_circuit_breaker_initial_state():
    cb = CircuitBreaker()
    assert cb.state == CircuitState.CLOSED
    assert cb.failure_count == 0


@pytest.mark.asyncio
async def test_circuit_breaker_success():
    cb = CircuitBreaker()
    result = await cb.call(lambda: "ok")
    assert result == "ok"
    assert cb.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_circuit_breaker_awaits_coroutines():
    async def fetch(value):
        return value * 2

    cb = CircuitBreaker()
    assert await cb.call(fetch, 21) == 42


@pytest.mark.asyncio
async def test_circuit_breaker_retries():
    attempt = 0

    def failing_then_ok():
        nonlocal attempt
        attempt += 1
        if attempt < 3:
            raise RuntimeError("fail")
        return "success"

    cb = CircuitBreaker(max_retries=3, backoff_base=0.01)
    result = await cb.call(failing_then_ok)
    assert result == "success"
    assert attempt == 3
    assert cb.failure_count == 0


@pytest.mark.asyncio
async def test_circuit_breaker_raises_last_error_after_retries():
    def always_fails():
        raise ValueError("still broken")

    cb = CircuitBreaker(max_retries=1, backoff_base=0.001)
    with pytest.raises(ValueError, match="still broken"):
        await cb.call(always_fails)
    assert cb.failure_count == 1
    assert cb.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_circuit_breaker_opens_at_threshold():
    def always_fails():
        raise ConnectionError("down")

    cb = CircuitBreaker(name="catalog", failure_threshold=2, max_retries=0, recovery_timeout=60)
    for _ in range(2):
        with pytest.raises(ConnectionError):
            await cb.call(always_fails)
    assert cb.state == CircuitState.OPEN

    with pytest.raises(CircuitOpenError, match="catalog"):
        await cb.call(always_fails)


@pytest.mark.asyncio
async def test_circuit_breaker_fallback_when_open():
    def always_fails():
        raise ConnectionError("down")

    cb = CircuitBreaker(failure_threshold=1, max_retries=0, recovery_timeout=60)
    assert await cb.call(always_fails, fallback=lambda: "stale") == "stale"
    assert cb.state == CircuitState.OPEN
    assert await cb.call(always_fails, fallback=lambda: "stale") == "stale"


@pytest.mark.asyncio
async def test_circuit_breaker_half_open_recovers():
    calls = 0

    def recovers():
        nonlocal calls
        calls += 1
        if calls == 1:
            raise ConnectionError("down")
        return "back"

    cb = CircuitBreaker(failure_threshold=1, max_retries=0, recovery_timeout=0)
    with pytest.raises(ConnectionError):
        await cb.call(recovers)
    assert cb.state == CircuitState.HALF_OPEN

    assert await cb.call(recovers) == "back"
    assert cb.state == CircuitState.CLOSED


def test_circuit_breaker_reset():
    cb = CircuitBreaker()
    cb._state = CircuitState.OPEN
    cb._failure_count = 9
    cb.reset()
    assert cb.state == CircuitState.CLOSED
    assert cb.failure_count == 0
