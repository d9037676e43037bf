"""Dataclass-based domain configuration pattern.

Each section of the configuration is a frozen dataclass. This gives you:
- Type safety (IDE autocompletion, mypy checking)
- Default values (sensible out-of-the-box)
- Immutability (frozen=True prevents accidental mutation)
- Easy overrides (from env vars)

Domain: where the promotion engine loads its catalog from, and how hard it
tries when that source misbehaves.
"""

import os
from dataclasses import dataclass, field


SOURCE_KINDS = ("seed", "file", "http", "database")


# ---------------------------------------------------------------------------
# Nested config sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceConfig:
    """Where promotion records come from."""

    kind: str = "seed"
    path: str | None = None  # file source
    url: str | None = None  # http source
    database_url: str | None = None  # database source; falls back to DATABASE_URL
    http_timeout_seconds: float = 10.0
    simulated_latency_seconds: float = 0.0  # seed source only

    def __post_init__(self):
        if self.kind not in SOURCE_KINDS:
            raise ValueError(
                f"Unknown promotion source kind {self.kind!r}. Allowed: {list(SOURCE_KINDS)}"
            )


@dataclass(frozen=True)
class RetryConfig:
    """Circuit breaker settings applied around the source."""

    enabled: bool = False
    max_retries: int = 2
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 10.0
    failure_threshold: int = 5
    recovery_timeout_seconds: float = 30.0


# ---------------------------------------------------------------------------
# Top-level domain config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PromotionEngineConfig:
    """Complete configuration for the promotion engine.

    Usage::

        config = PromotionEngineConfig.from_env()
        engine = PromotionEngine(build_source(config), config=config)
    """

    source: SourceConfig = field(default_factory=SourceConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    log_level: str = "INFO"

    @classmethod
    def default(cls) -> "PromotionEngineConfig":
        """Create config with all defaults."""
        return cls()

    @classmethod
    def from_env(cls, prefix: str = "PROMOTIONS_") -> "PromotionEngineConfig":
        """Create config from environment variables.

        Example: PROMOTIONS_SOURCE=http PROMOTIONS_SOURCE_URL=https://...
        """

        def env(name: str) -> str | None:
            value = os.getenv(f"{prefix}{name}")
            return value if value not in (None, "") else None

        source_overrides: dict = {}
        if env("SOURCE"):
            source_overrides["kind"] = env("SOURCE").lower()
        if env("SOURCE_PATH"):
            source_overrides["path"] = env("SOURCE_PATH")
        if env("SOURCE_URL"):
            source_overrides["url"] = env("SOURCE_URL")
        if env("DATABASE_URL"):
            source_overrides["database_url"] = env("DATABASE_URL")
        if env("HTTP_TIMEOUT"):
            source_overrides["http_timeout_seconds"] = float(env("HTTP_TIMEOUT"))
        if env("SIMULATED_LATENCY"):
            source_overrides["simulated_latency_seconds"] = float(env("SIMULATED_LATENCY"))

        retry_overrides: dict = {}
        if env("RETRY_ENABLED"):
            retry_overrides["enabled"] = env("RETRY_ENABLED").lower() == "true"
        if env("MAX_RETRIES"):
            retry_overrides["max_retries"] = int(env("MAX_RETRIES"))
        if env("FAILURE_THRESHOLD"):
            retry_overrides["failure_threshold"] = int(env("FAILURE_THRESHOLD"))
        if env("RECOVERY_TIMEOUT"):
            retry_overrides["recovery_timeout_seconds"] = float(env("RECOVERY_TIMEOUT"))

        overrides: dict = {
            "source": SourceConfig(**source_overrides),
            "retry": RetryConfig(**retry_overrides),
        }
        if env("LOG_LEVEL"):
            overrides["log_level"] = env("LOG_LEVEL").upper()

        return cls(**overrides)
