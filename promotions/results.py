"""Tagged result values returned by the engine.

Expected, user-facing outcomes (bad code, cart too small, wrong category)
and load failures are returned as values rather than raised.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

from promotions.exceptions import LoadFailure
from promotions.models.schemas import Promotion


class InvalidReason(str, Enum):
    INVALID_CODE = "invalid_code"
    MINIMUM_NOT_MET = "minimum_not_met"
    CATEGORY_MISMATCH = "category_mismatch"


# ---------------------------------------------------------------------------
# Promo code validation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Valid:
    promotion: Promotion

    @property
    def valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid:
    reason: InvalidReason
    message: str

    @property
    def valid(self) -> bool:
        return False


ValidationResult = Union[Valid, Invalid]


@dataclass(frozen=True)
class AppliedPromotion:
    """A validated code together with what it is worth for this cart."""

    promotion: Promotion
    discount: Decimal
    free_shipping: bool = False

    @property
    def valid(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Catalog loading
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Loaded:
    promotions: tuple[Promotion, ...]

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class LoadFailed:
    error: LoadFailure
    promotions: tuple[Promotion, ...]  # the snapshot that stayed in place

    @property
    def ok(self) -> bool:
        return False


LoadResult = Union[Loaded, LoadFailed]
