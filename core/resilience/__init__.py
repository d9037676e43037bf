"""
Core Resilience: fault tolerance primitives.

Provides reliability patterns for calls to external collaborators:
- CircuitBreaker: retry with backoff, stop calling a failing upstream
"""
from core.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitOpenError,
    CircuitState,
)

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
]
