"""Promotion engine configuration.

Re-exports the PromotionEngineConfig from the patterns module; the default
instance honours PROMOTIONS_* environment overrides.
"""

from patterns.domain_config import PromotionEngineConfig, RetryConfig, SourceConfig

# Default configuration instance
config = PromotionEngineConfig.from_env()

__all__ = ["PromotionEngineConfig", "RetryConfig", "SourceConfig", "config"]
