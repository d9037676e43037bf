"""Promotion engine: owns the promotion snapshot and answers checkout questions.

The engine holds exactly two pieces of mutable state: the current snapshot
(a tuple of immutable Promotion objects) and the in-flight load task. Loads
replace the snapshot in a single assignment, so readers always see either
the old catalog or the new one. Concurrent loads join the in-flight task.

Usage::

    engine = PromotionEngine()          # seed catalog
    await engine.load_promotions()
    result = engine.validate_promo_code("welcome15", cart.total, cart.items)
    if result.valid:
        discount = engine.calculate_discount(result.promotion, cart.total, cart.items)
"""
from __future__ import annotations

import asyncio
from collections import Counter
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from core.logging import get_logger, setup_logging
from patterns.domain_config import PromotionEngineConfig
from promotions.discounts import calculate_discount
from promotions.exceptions import LoadFailure
from promotions.models.schemas import (
    Cart,
    CartItem,
    DiscountType,
    Promotion,
    coerce_as_of,
    coerce_cart,
    parse_promotion,
)
from promotions.results import (
    AppliedPromotion,
    Invalid,
    Loaded,
    LoadFailed,
    LoadResult,
    ValidationResult,
)
from promotions.rules import active_promotions, validate_promo_code
from promotions.sources import PromotionSource, StaticPromotionSource, build_source

logger = get_logger(__name__)


class PromotionEngine:
    """Snapshot holder plus the four engine operations."""

    def __init__(
        self,
        source: Optional[PromotionSource] = None,
        config: Optional[PromotionEngineConfig] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.config = config or PromotionEngineConfig.default()
        self.source = source or StaticPromotionSource(
            latency_seconds=self.config.source.simulated_latency_seconds
        )
        self._clock = clock
        self._snapshot: tuple[Promotion, ...] = ()
        self._inflight: Optional[asyncio.Task] = None
        self._last_error: Optional[LoadFailure] = None
        self._loaded_at: Optional[datetime] = None

    @classmethod
    def from_promotions(
        cls,
        promotions: Iterable[Promotion | Mapping[str, Any]],
        clock: Callable[[], date] = date.today,
    ) -> "PromotionEngine":
        """An engine whose snapshot is already populated, without a load."""
        records = tuple(promotions)
        engine = cls(source=StaticPromotionSource(records), clock=clock)
        engine._snapshot = tuple(parse_promotion(r) for r in records)
        engine._loaded_at = datetime.now(timezone.utc)
        return engine

    # -- State accessors --

    @property
    def promotions(self) -> tuple[Promotion, ...]:
        return self._snapshot

    @property
    def loading(self) -> bool:
        return self._inflight is not None

    @property
    def last_error(self) -> Optional[LoadFailure]:
        return self._last_error

    @property
    def loaded_at(self) -> Optional[datetime]:
        return self._loaded_at

    def today(self) -> date:
        return coerce_as_of(self._clock())

    # -- Loading --

    async def load_promotions(self) -> LoadResult:
        """Replace the snapshot from the source.

        Returns Loaded on success. On failure returns LoadFailed and keeps
        the previous snapshot. Calls made while a load is running share its
        result instead of starting another one.
        """
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._load())
        else:
            logger.debug("Joining in-flight promotion load", extra={"source": self.source.name})
        return await asyncio.shield(self._inflight)

    refresh_promotions = load_promotions

    async def _load(self) -> LoadResult:
        logger.info("Loading promotions", extra={"source": self.source.name})
        try:
            records = await self.source.fetch()
            promotions = tuple(parse_promotion(record) for record in records)
        except Exception as exc:
            failure = LoadFailure(f"Failed to load promotions: {exc}", source=self.source.name)
            failure.__cause__ = exc
            self._last_error = failure
            logger.warning(
                "Promotion load failed, keeping previous snapshot",
                exc_info=True,
                extra={"source": self.source.name, "retained": len(self._snapshot)},
            )
            return LoadFailed(error=failure, promotions=self._snapshot)
        finally:
            self._inflight = None

        self._snapshot = promotions
        self._last_error = None
        self._loaded_at = datetime.now(timezone.utc)
        self._warn_duplicate_codes(promotions)
        logger.info(
            "Promotions loaded",
            extra={"source": self.source.name, "count": len(promotions)},
        )
        return Loaded(promotions=promotions)

    def _warn_duplicate_codes(self, promotions: Sequence[Promotion]) -> None:
        codes = Counter(p.code.lower() for p in promotions if p.is_active)
        duplicates = sorted(code for code, count in codes.items() if count > 1)
        if duplicates:
            logger.warning(
                "Several enabled promotions share a code; the first one wins",
                extra={"codes": duplicates},
            )

    # -- Reads --

    def get_promotion(self, promotion_id: int) -> Optional[Promotion]:
        for promo in self._snapshot:
            if promo.id == promotion_id:
                return promo
        return None

    def get_active_promotions(self, as_of: Optional[date] = None) -> list[Promotion]:
        """Promotions active on ``as_of`` (default today), in snapshot order."""
        return active_promotions(self._snapshot, as_of or self.today())

    def validate_promo_code(
        self,
        code: str,
        cart_total: Any,
        cart_items: Iterable[CartItem | Mapping[str, Any]],
        as_of: Optional[date] = None,
    ) -> ValidationResult:
        return validate_promo_code(
            self._snapshot, code, cart_total, cart_items, as_of or self.today()
        )

    def calculate_discount(
        self,
        promotion: Promotion | Mapping[str, Any],
        cart_total: Any,
        cart_items: Iterable[CartItem | Mapping[str, Any]],
    ) -> Decimal:
        return calculate_discount(promotion, cart_total, cart_items)

    def apply_promo_code(
        self,
        code: str,
        cart: Cart | Mapping[str, Any],
        as_of: Optional[date] = None,
    ) -> AppliedPromotion | Invalid:
        """Validate ``code`` against ``cart`` and price it in one step (checkout flow).

        ``cart`` is a Cart or a ``{"total": ..., "items": [...]}`` mapping.
        """
        cart = coerce_cart(cart)
        # Read the snapshot once so validation and pricing see the same catalog.
        snapshot = self._snapshot
        result = validate_promo_code(snapshot, code, cart.total, cart.items, as_of or self.today())
        if isinstance(result, Invalid):
            return result
        promotion = result.promotion
        return AppliedPromotion(
            promotion=promotion,
            discount=calculate_discount(promotion, cart.total, cart.items),
            free_shipping=promotion.discount_type is DiscountType.FREE_SHIPPING,
        )


def build_engine(
    config: Optional[PromotionEngineConfig] = None,
    clock: Callable[[], date] = date.today,
    configure_logging: bool = False,
) -> PromotionEngine:
    """An engine wired to the source described by ``config`` (default: environment).

    Host processes that own their logging leave ``configure_logging`` off;
    scripts turn it on to get JSON log lines at ``config.log_level``.
    """
    from promotions.config import config as default_config

    config = config or default_config
    if configure_logging:
        setup_logging(config.log_level)
    return PromotionEngine(build_source(config), config=config, clock=clock)
