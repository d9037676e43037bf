"""Discount computation: one handler per discount kind, then the caps.

Every handler is pure: (discount, promotion, cart_total, items) -> Decimal.
"""

from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping

from promotions.exceptions import MalformedInputError
from promotions.models.schemas import (
    BuyXGetYDiscount,
    CartItem,
    FixedDiscount,
    FreeShippingDiscount,
    PercentageDiscount,
    Promotion,
    coerce_amount,
    coerce_cart_items,
    parse_promotion,
)

# buy_x_get_y always counts bundles of three and prices every free unit at the
# cheapest eligible item. Mixed-price bundles are not priced individually.
BUNDLE_SIZE = 3

ZERO = Decimal("0")


def _percentage(discount: PercentageDiscount, promotion, cart_total, items) -> Decimal:
    return cart_total * discount.percent / 100


def _fixed(discount: FixedDiscount, promotion, cart_total, items) -> Decimal:
    return discount.amount


def _free_shipping(discount: FreeShippingDiscount, promotion, cart_total, items) -> Decimal:
    # The shipping fee waiver is applied by the caller.
    return ZERO


def _buy_x_get_y(
    discount: BuyXGetYDiscount,
    promotion: Promotion,
    cart_total: Decimal,
    items: tuple[CartItem, ...],
) -> Decimal:
    eligible = [item for item in items if promotion.applies_to_category(item.category)]
    if not eligible:
        return ZERO
    total_quantity = sum(item.quantity for item in eligible)
    free_units = (total_quantity // BUNDLE_SIZE) * discount.free_units
    cheapest = min(item.unit_price for item in eligible)
    return free_units * cheapest


_HANDLERS: dict[type, Callable[..., Decimal]] = {
    PercentageDiscount: _percentage,
    FixedDiscount: _fixed,
    FreeShippingDiscount: _free_shipping,
    BuyXGetYDiscount: _buy_x_get_y,
}


def apply_caps(promotion: Promotion, discount: Decimal, cart_total: Decimal) -> Decimal:
    """Clamp to max_discount (when positive), then to the cart total, never below zero."""
    cap = promotion.discount_cap
    if cap is not None and discount > cap:
        discount = cap
    if discount > cart_total:
        discount = cart_total
    return max(discount, ZERO)


def calculate_discount(
    promotion: Promotion | Mapping[str, Any],
    cart_total: Any,
    cart_items: Iterable[CartItem | Mapping[str, Any]],
) -> Decimal:
    """Monetary discount ``promotion`` grants on this cart.

    Does not check eligibility; run validate_promo_code() first. Raises
    MalformedInputError for negative amounts, bad cart lines or an
    unknown discount kind.
    """
    promotion = parse_promotion(promotion)
    total = coerce_amount(cart_total, "cart_total")
    items = coerce_cart_items(cart_items)

    handler = _HANDLERS.get(type(promotion.discount))
    if handler is None:
        raise MalformedInputError(
            f"Unknown discount kind {type(promotion.discount).__name__} on promotion {promotion.id}"
        )

    raw = handler(promotion.discount, promotion, total, items)
    return apply_caps(promotion, raw, total)
