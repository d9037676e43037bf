"""Promotion sources: where the engine's catalog snapshot comes from.

Every source exposes ``name`` and ``async fetch() -> list`` returning flat
promotion records (mappings or Promotion objects). Sources raise on
failure; the engine turns that into a LoadFailed result.
"""
from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import get_session_factory, session_scope
from core.logging import get_logger
from core.resilience import CircuitBreaker
from patterns.domain_config import PromotionEngineConfig
from promotions.exceptions import MalformedInputError
from promotions.repository import PromotionRepository
from promotions.seed import SEED_PROMOTIONS

logger = get_logger(__name__)


@runtime_checkable
class PromotionSource(Protocol):
    name: str

    async def fetch(self) -> Sequence[Any]:
        ...


def records_from_payload(payload: Any, origin: str) -> list[Any]:
    """Accept either a bare list of records or ``{"promotions": [...]}``."""
    if isinstance(payload, dict) and "promotions" in payload:
        payload = payload["promotions"]
    if not isinstance(payload, list):
        raise MalformedInputError(
            f"{origin} returned {type(payload).__name__}, expected a list of promotions"
        )
    return payload


# ---------------------------------------------------------------------------
# Static / seed
# ---------------------------------------------------------------------------

class StaticPromotionSource:
    """A fixed in-memory record set (the seed catalog by default)."""

    name = "static"

    def __init__(self, records: Sequence[Any] = SEED_PROMOTIONS, latency_seconds: float = 0.0):
        self._records = tuple(records)
        self.latency_seconds = latency_seconds

    async def fetch(self) -> list[Any]:
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)
        return [dict(r) if isinstance(r, dict) else r for r in self._records]


# ---------------------------------------------------------------------------
# JSON file
# ---------------------------------------------------------------------------

class JsonFilePromotionSource:
    """Reads records from a JSON file on every fetch."""

    name = "file"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def fetch(self) -> list[Any]:
        text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedInputError(f"{self.path} is not valid JSON: {exc}") from exc
        return records_from_payload(payload, str(self.path))


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

class HttpPromotionSource:
    """GETs the catalog from a marketing/back-office endpoint.

    Pass ``client`` to share a connection pool (or a MockTransport in
    tests); otherwise a short-lived client is opened per fetch.
    """

    name = "http"

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        headers: Optional[dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.headers = headers or {}
        self._client = client

    async def fetch(self) -> list[Any]:
        if self._client is not None:
            response = await self._client.get(self.url, headers=self.headers, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.url, headers=self.headers)
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedInputError(f"{self.url} did not return JSON") from exc
        return records_from_payload(payload, self.url)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

class SqlPromotionSource:
    """Reads the promotions table through PromotionRepository."""

    name = "database"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def fetch(self) -> list[Any]:
        async with session_scope(self._session_factory) as session:
            return await PromotionRepository(session).list_records()


# ---------------------------------------------------------------------------
# Resilience wrapper
# ---------------------------------------------------------------------------

class ResilientPromotionSource:
    """Retries a flaky source with backoff and stops calling it once it keeps failing."""

    def __init__(self, inner: PromotionSource, breaker: Optional[CircuitBreaker] = None):
        self.inner = inner
        self.breaker = breaker or CircuitBreaker(name=f"promotions.{inner.name}")
        self.name = f"resilient:{inner.name}"

    async def fetch(self) -> list[Any]:
        return await self.breaker.call(self.inner.fetch)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def build_source(config: PromotionEngineConfig) -> PromotionSource:
    """Build the source described by ``config``."""
    source_config = config.source
    source: PromotionSource
    if source_config.kind == "seed":
        source = StaticPromotionSource(latency_seconds=source_config.simulated_latency_seconds)
    elif source_config.kind == "file":
        if not source_config.path:
            raise ValueError("File promotion source needs a path")
        source = JsonFilePromotionSource(source_config.path)
    elif source_config.kind == "http":
        if not source_config.url:
            raise ValueError("HTTP promotion source needs a url")
        source = HttpPromotionSource(source_config.url, timeout=source_config.http_timeout_seconds)
    else:
        source = SqlPromotionSource(get_session_factory(source_config.database_url))

    retry = config.retry
    if retry.enabled:
        source = ResilientPromotionSource(
            source,
            CircuitBreaker(
                name=f"promotions.{source.name}",
                failure_threshold=retry.failure_threshold,
                recovery_timeout=retry.recovery_timeout_seconds,
                max_retries=retry.max_retries,
                backoff_base=retry.backoff_base_seconds,
                backoff_max=retry.backoff_max_seconds,
            ),
        )

    logger.info("Promotion source configured", extra={"source": source.name})
    return source
