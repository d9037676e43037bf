"""Promo code validation rules: pure functions over a promotion snapshot.

Checks run in a fixed order and stop at the first failure:
code lookup -> minimum order -> category match.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping, Sequence

from core.logging import get_logger
from patterns.rules_engine import RuleResult, evaluate_in_order
from promotions.exceptions import MalformedInputError
from promotions.models.schemas import (
    CartItem,
    Promotion,
    coerce_amount,
    coerce_cart_items,
)
from promotions.results import Invalid, InvalidReason, Valid, ValidationResult

logger = get_logger(__name__)

INVALID_CODE_MESSAGE = "Invalid or expired promo code"


def format_amount(value: Decimal) -> str:
    """Print an amount at its stored precision: 30 -> "30", 12.50 -> "12.5"."""
    return format(value.normalize(), "f")


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def active_promotions(promotions: Iterable[Promotion], as_of: date) -> list[Promotion]:
    """Promotions active on ``as_of``, in snapshot order."""
    return [promo for promo in promotions if promo.is_active_on(as_of)]


def find_promotion_by_code(
    promotions: Iterable[Promotion], code: str, as_of: date
) -> Promotion | None:
    """First promotion in snapshot order with this code that is active on ``as_of``."""
    for promo in promotions:
        if promo.matches_code(code) and promo.is_active_on(as_of):
            return promo
    return None


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def check_minimum_order(promotion: Promotion, cart_total: Decimal) -> RuleResult:
    passed = cart_total >= promotion.min_order_amount
    return RuleResult(
        passed=passed,
        rule_name=InvalidReason.MINIMUM_NOT_MET.value,
        message=(
            "Minimum order met"
            if passed
            else f"Minimum order amount of ${format_amount(promotion.min_order_amount)} required"
        ),
        details={"cart_total": cart_total, "min_order_amount": promotion.min_order_amount},
    )


def check_category_match(promotion: Promotion, cart_items: Sequence[CartItem]) -> RuleResult:
    """At least one cart item must fall in the promotion's categories, if it has any."""
    categories = promotion.applicable_categories
    passed = not categories or any(item.category in categories for item in cart_items)
    return RuleResult(
        passed=passed,
        rule_name=InvalidReason.CATEGORY_MISMATCH.value,
        message=(
            "Cart has eligible items"
            if passed
            else f"This code only applies to {', '.join(categories)} books"
        ),
        details={"applicable_categories": list(categories)},
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_promo_code(
    promotions: Iterable[Promotion],
    code: str,
    cart_total: Any,
    cart_items: Iterable[CartItem | Mapping[str, Any]],
    as_of: date,
) -> ValidationResult:
    """Decide whether ``code`` can be redeemed against this cart on ``as_of``."""
    if not isinstance(code, str):
        raise MalformedInputError(f"Promo code must be a string, got {type(code).__name__}")
    total = coerce_amount(cart_total, "cart_total")
    items = coerce_cart_items(cart_items)

    promotion = find_promotion_by_code(promotions, code, as_of)
    if promotion is None:
        logger.debug("Promo code rejected", extra={"code": code, "reason": "invalid_code"})
        return Invalid(InvalidReason.INVALID_CODE, INVALID_CODE_MESSAGE)

    outcome = evaluate_in_order([
        lambda: check_minimum_order(promotion, total),
        lambda: check_category_match(promotion, items),
    ])
    failure = outcome.first_failure
    if failure is not None:
        logger.debug(
            "Promo code rejected",
            extra={"code": code, "promotion_id": promotion.id, "reason": failure.rule_name},
        )
        return Invalid(InvalidReason(failure.rule_name), failure.message)

    logger.debug("Promo code accepted", extra={"code": code, "promotion_id": promotion.id})
    return Valid(promotion)
