"""Bookstore promotions: the discount evaluation engine behind checkout.

Pieces, bottom-up:
- models.schemas: Promotion (discount kinds as a tagged union), CartItem, Cart
- seed / sources: where the catalog snapshot comes from
- rules: promo code validation (code -> minimum order -> category)
- discounts: discount computation per kind, with caps
- engine: PromotionEngine, the snapshot holder tying it all together
"""

from promotions.engine import PromotionEngine, build_engine
from promotions.exceptions import LoadFailure, MalformedInputError, PromotionError
from promotions.models.schemas import (
    BuyXGetYDiscount,
    Cart,
    CartItem,
    DiscountType,
    FixedDiscount,
    FreeShippingDiscount,
    PercentageDiscount,
    Promotion,
    parse_promotion,
)
from promotions.results import (
    AppliedPromotion,
    Invalid,
    InvalidReason,
    Loaded,
    LoadFailed,
    Valid,
)

__all__ = [
    "PromotionEngine",
    "build_engine",
    # Errors
    "LoadFailure",
    "MalformedInputError",
    "PromotionError",
    # Schemas
    "BuyXGetYDiscount",
    "Cart",
    "CartItem",
    "DiscountType",
    "FixedDiscount",
    "FreeShippingDiscount",
    "PercentageDiscount",
    "Promotion",
    "parse_promotion",
    # Results
    "AppliedPromotion",
    "Invalid",
    "InvalidReason",
    "Loaded",
    "LoadFailed",
    "Valid",
]
