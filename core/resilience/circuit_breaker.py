"""
Circuit Breaker: resilience for calls to external collaborators.

Protects against:
- Flaky upstreams (retry with exponential backoff)
- Cascading failures (stop calling once the failure threshold is reached)
- Total failure (optional fallback instead of an exception)
"""
from __future__ import annotations
from typing import Callable, Optional, Any
from enum import Enum
import asyncio
import time

from core.logging import get_logger

logger = get_logger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"      # Normal operation
    OPEN = "open"          # Failing, reject calls
    HALF_OPEN = "half_open"  # Testing recovery


class CircuitOpenError(RuntimeError):
    """Raised when a call is refused because the circuit is open."""

    def __init__(self, name: str, retry_after: float):
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit breaker '{name}' OPEN. Retry after {retry_after:.1f}s")


class CircuitBreaker:
    """
    Circuit breaker with exponential backoff and optional fallback.
    """

    def __init__(
        self,
        name: str = "default",
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        backoff_max: float = 30.0,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None

    @property
    def state(self) -> CircuitState:
        if self._state == CircuitState.OPEN and self._opened_at is not None:
            if time.monotonic() - self._opened_at >= self.recovery_timeout:
                self._state = CircuitState.HALF_OPEN
                logger.info("Circuit half-open", extra={"circuit": self.name})
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def reset(self) -> None:
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = None

    async def call(
        self,
        func: Callable,
        *args,
        fallback: Optional[Callable] = None,
        **kwargs,
    ) -> Any:
        """Execute function with circuit breaker protection."""

        if self.state == CircuitState.OPEN:
            if fallback:
                return await _invoke(fallback, *args, **kwargs)
            elapsed = time.monotonic() - (self._opened_at or 0.0)
            raise CircuitOpenError(self.name, max(self.recovery_timeout - elapsed, 0.0))

        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            try:
                result = await _invoke(func, *args, **kwargs)
            except Exception as e:
                last_error = e
                if attempt < self.max_retries:
                    backoff = min(
                        self.backoff_base * (2 ** attempt),
                        self.backoff_max,
                    )
                    logger.warning(
                        "Call failed, retrying",
                        extra={
                            "circuit": self.name,
                            "attempt": attempt + 1,
                            "backoff_seconds": backoff,
                            "error": str(e),
                        },
                    )
                    await asyncio.sleep(backoff)
                continue

            if self._state != CircuitState.CLOSED:
                logger.info("Circuit closed", extra={"circuit": self.name})
            self._failure_count = 0
            self._state = CircuitState.CLOSED
            self._opened_at = None
            return result

        # All retries failed
        self._failure_count += 1
        if self._failure_count >= self.failure_threshold:
            self._state = CircuitState.OPEN
            self._opened_at = time.monotonic()
            logger.error(
                "Circuit opened",
                extra={"circuit": self.name, "failures": self._failure_count},
            )

        if fallback:
            return await _invoke(fallback, *args, **kwargs)

        raise last_error


async def _invoke(func: Callable, *args, **kwargs) -> Any:
    if asyncio.iscoroutinefunction(func):
        return await func(*args, **kwargs)
    return func(*args, **kwargs)
