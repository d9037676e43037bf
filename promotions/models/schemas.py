"""Pydantic schemas for promotions, carts and the flat promotion record."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Iterable, Literal, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from promotions.exceptions import MalformedInputError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_SHIPPING = "free_shipping"
    BUY_X_GET_Y = "buy_x_get_y"


# ---------------------------------------------------------------------------
# Discount variants
# ---------------------------------------------------------------------------

class PercentageDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["percentage"] = "percentage"
    percent: Decimal = Field(..., ge=0, le=100)

    @property
    def value(self) -> Decimal:
        return self.percent


class FixedDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["fixed"] = "fixed"
    amount: Decimal = Field(..., ge=0)

    @property
    def value(self) -> Decimal:
        return self.amount


class FreeShippingDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["free_shipping"] = "free_shipping"

    @property
    def value(self) -> Decimal:
        return Decimal("0")


class BuyXGetYDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["buy_x_get_y"] = "buy_x_get_y"
    free_units: int = Field(..., ge=0)  # free items per completed bundle

    @property
    def value(self) -> Decimal:
        return Decimal(self.free_units)


Discount = Annotated[
    Union[PercentageDiscount, FixedDiscount, FreeShippingDiscount, BuyXGetYDiscount],
    Field(discriminator="type"),
]


def build_discount(discount_type: DiscountType, value: Decimal) -> Discount:
    """Build the discount variant for a flat (type, value) pair."""
    discount_type = DiscountType(discount_type)
    if discount_type is DiscountType.PERCENTAGE:
        return PercentageDiscount(percent=value)
    if discount_type is DiscountType.FIXED:
        return FixedDiscount(amount=value)
    if discount_type is DiscountType.FREE_SHIPPING:
        return FreeShippingDiscount()
    if value != value.to_integral_value():
        raise MalformedInputError(
            f"buy_x_get_y needs a whole number of free units, got {value}"
        )
    return BuyXGetYDiscount(free_units=int(value))


# ---------------------------------------------------------------------------
# Promotion
# ---------------------------------------------------------------------------

class Promotion(BaseModel):
    """An immutable promotion rule as held in the engine's snapshot."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str = ""
    discount: Discount
    code: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    is_active: bool = True
    min_order_amount: Decimal = Field(Decimal("0"), ge=0)
    max_discount: Optional[Decimal] = Field(None, ge=0)
    applicable_categories: tuple[str, ...] = ()
    image: Optional[str] = None

    @property
    def discount_type(self) -> DiscountType:
        return DiscountType(self.discount.type)

    @property
    def discount_value(self) -> Decimal:
        return self.discount.value

    @property
    def discount_cap(self) -> Optional[Decimal]:
        """The max_discount when it is a real cap; None and 0 both mean uncapped."""
        if self.max_discount is None or self.max_discount <= 0:
            return None
        return self.max_discount

    def is_active_on(self, as_of: date) -> bool:
        """Enabled and inside the inclusive [start_date, end_date] window."""
        as_of = coerce_as_of(as_of)
        return self.is_active and self.start_date <= as_of <= self.end_date

    def matches_code(self, code: str) -> bool:
        return self.code.lower() == code.lower()

    def applies_to_category(self, category: str) -> bool:
        return not self.applicable_categories or category in self.applicable_categories

    def to_record(self) -> dict[str, Any]:
        """Flat camelCase shape, the inverse of parse_promotion()."""
        record = PromotionRecord(
            id=self.id,
            title=self.title,
            description=self.description,
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            code=self.code,
            start_date=self.start_date,
            end_date=self.end_date,
            is_active=self.is_active,
            min_order_amount=self.min_order_amount,
            max_discount=self.max_discount,
            applicable_categories=list(self.applicable_categories),
            image=self.image,
        )
        return record.model_dump(by_alias=True, mode="json")


class PromotionRecord(BaseModel):
    """Flat promotion shape used by seed data, JSON files, HTTP and SQL rows.

    Field names are accepted in snake_case or camelCase (``discountType``).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int
    title: str
    description: str = ""
    discount_type: DiscountType
    discount_value: Decimal = Decimal("0")
    code: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    is_active: bool = True
    min_order_amount: Decimal = Field(Decimal("0"), ge=0)
    max_discount: Optional[Decimal] = Field(None, ge=0)
    applicable_categories: list[str] = Field(default_factory=list)
    image: Optional[str] = None

    def to_promotion(self) -> Promotion:
        return Promotion(
            id=self.id,
            title=self.title,
            description=self.description,
            discount=build_discount(self.discount_type, self.discount_value),
            code=self.code,
            start_date=self.start_date,
            end_date=self.end_date,
            is_active=self.is_active,
            min_order_amount=self.min_order_amount,
            max_discount=self.max_discount,
            applicable_categories=tuple(self.applicable_categories),
            image=self.image,
        )


def parse_promotion(record: Promotion | Mapping[str, Any]) -> Promotion:
    """Turn a flat record (or an existing Promotion) into a Promotion.

    Raises MalformedInputError for unknown discount types, negative amounts,
    missing fields and anything else the record schema rejects.
    """
    if isinstance(record, Promotion):
        return record
    if not isinstance(record, Mapping):
        raise MalformedInputError(
            f"Promotion record must be a mapping, got {type(record).__name__}"
        )
    try:
        return PromotionRecord.model_validate(record).to_promotion()
    except ValidationError as exc:
        raise MalformedInputError(
            f"Malformed promotion record {record.get('id', '?')}: {exc}"
        ) from exc


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------

class CartItem(BaseModel):
    """One cart line as supplied by the checkout UI."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: str
    unit_price: Decimal = Field(
        ..., ge=0, validation_alias=AliasChoices("unit_price", "unitPrice", "price")
    )
    quantity: int = Field(..., ge=1)
    title: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Decimal = Field(..., ge=0)
    items: tuple[CartItem, ...] = ()

    @classmethod
    def from_items(cls, items: Iterable[CartItem | Mapping[str, Any]]) -> "Cart":
        """Build a cart whose total is the sum of its line totals."""
        lines = coerce_cart_items(items)
        return cls(total=sum((line.line_total for line in lines), Decimal("0")), items=lines)


# ---------------------------------------------------------------------------
# Input coercion
# ---------------------------------------------------------------------------

def coerce_amount(value: Any, name: str = "amount") -> Decimal:
    """Convert a caller-supplied money amount to a non-negative Decimal."""
    if isinstance(value, bool):
        raise MalformedInputError(f"{name} must be a number, got bool")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise MalformedInputError(f"{name} must be a number, got {value!r}") from exc
    if not amount.is_finite():
        raise MalformedInputError(f"{name} must be finite, got {value!r}")
    if amount < 0:
        raise MalformedInputError(f"{name} must not be negative, got {value!r}")
    return amount


def coerce_cart_items(items: Iterable[CartItem | Mapping[str, Any]]) -> tuple[CartItem, ...]:
    if items is None:
        raise MalformedInputError("cart items must be a sequence, got None")
    lines = []
    for index, item in enumerate(items):
        if isinstance(item, CartItem):
            lines.append(item)
            continue
        if not isinstance(item, Mapping):
            raise MalformedInputError(
                f"Cart item {index} must be a mapping, got {type(item).__name__}"
            )
        try:
            lines.append(CartItem.model_validate(item))
        except ValidationError as exc:
            raise MalformedInputError(f"Malformed cart item {index}: {exc}") from exc
    return tuple(lines)


def coerce_cart(cart: Cart | Mapping[str, Any]) -> Cart:
    """Accept a Cart or a ``{"total": ..., "items": [...]}`` mapping."""
    if isinstance(cart, Cart):
        return cart
    if not isinstance(cart, Mapping):
        raise MalformedInputError(f"Cart must be a mapping, got {type(cart).__name__}")
    if "total" not in cart:
        raise MalformedInputError("Cart mapping needs a total")
    return Cart(
        total=coerce_amount(cart["total"], "cart total"),
        items=coerce_cart_items(cart.get("items", ())),
    )


def coerce_as_of(as_of: date) -> date:
    """Reduce a datetime to its calendar date; promotion windows have no time of day."""
    if isinstance(as_of, datetime):
        return as_of.date()
    if not isinstance(as_of, date):
        raise MalformedInputError(f"as_of must be a date, got {type(as_of).__name__}")
    return as_of
