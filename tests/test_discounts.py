"""Test discount computation per discount kind."""
from decimal import Decimal

import pytest

from promotions.discounts import apply_caps, calculate_discount
from promotions.exceptions import MalformedInputError
from promotions.models.schemas import CartItem, parse_promotion


def make_promotion(**overrides):
    record = {
        "id": 1,
        "title": "Test promotion",
        "discountType": "percentage",
        "discountValue": 10,
        "code": "TEST10",
        "startDate": "2024-01-01",
        "endDate": "2024-12-31",
        "isActive": True,
        "minOrderAmount": 0,
        "maxDiscount": None,
        "applicableCategories": [],
    }
    record.update(overrides)
    return parse_promotion(record)


def mystery_bundle():
    return [
        CartItem(category="Mystery", unit_price=Decimal("10"), quantity=3),
        CartItem(category="Mystery", unit_price=Decimal("8"), quantity=3),
        CartItem(category="Mystery", unit_price=Decimal("12"), quantity=3),
    ]


def test_percentage_is_share_of_cart_total():
    promo = make_promotion(discountValue=15)
    assert calculate_discount(promo, 40, []) == Decimal("6.00")


def test_percentage_clamped_to_max_discount():
    promo = make_promotion(discountValue=25, maxDiscount=50)
    items = [CartItem(category="Fiction", unit_price=Decimal("100"), quantity=3)]
    assert calculate_discount(promo, 300, items) == Decimal("50")


def test_zero_max_discount_means_uncapped():
    promo = make_promotion(discountValue=25, maxDiscount=0)
    assert calculate_discount(promo, 300, []) == Decimal("75")


def test_fixed_is_flat_amount():
    promo = make_promotion(discountType="fixed", discountValue=5)
    assert calculate_discount(promo, 40, []) == Decimal("5")


def test_fixed_never_exceeds_cart_total():
    promo = make_promotion(discountType="fixed", discountValue=20)
    assert calculate_discount(promo, 12, []) == Decimal("12")


def test_free_shipping_is_always_zero():
    promo = make_promotion(discountType="free_shipping", discountValue=0, maxDiscount=15)
    assert calculate_discount(promo, 500, mystery_bundle()) == Decimal("0")
    assert calculate_discount(promo, 0, []) == Decimal("0")


def test_buy_x_get_y_uses_cheapest_eligible_price():
    promo = make_promotion(
        discountType="buy_x_get_y", discountValue=1, applicableCategories=["Mystery"]
    )
    assert calculate_discount(promo, 90, mystery_bundle()) == Decimal("24")


def test_buy_x_get_y_ignores_other_categories():
    promo = make_promotion(
        discountType="buy_x_get_y", discountValue=1, applicableCategories=["Mystery"]
    )
    items = mystery_bundle() + [CartItem(category="Fiction", unit_price=Decimal("2"), quantity=6)]
    assert calculate_discount(promo, 102, items) == Decimal("24")


def test_buy_x_get_y_without_category_restriction_counts_everything():
    promo = make_promotion(discountType="buy_x_get_y", discountValue=2)
    items = [
        CartItem(category="Fiction", unit_price=Decimal("9.99"), quantity=2),
        CartItem(category="History", unit_price=Decimal("15"), quantity=2),
    ]
    # 4 units -> one bundle -> 2 free units at 9.99
    assert calculate_discount(promo, Decimal("49.98"), items) == Decimal("19.98")


def test_buy_x_get_y_incomplete_bundle_gives_nothing():
    promo = make_promotion(discountType="buy_x_get_y", discountValue=1)
    items = [CartItem(category="Mystery", unit_price=Decimal("10"), quantity=2)]
    assert calculate_discount(promo, 20, items) == Decimal("0")


def test_buy_x_get_y_with_no_eligible_items_is_zero():
    promo = make_promotion(
        discountType="buy_x_get_y", discountValue=1, applicableCategories=["Mystery"]
    )
    items = [CartItem(category="Fiction", unit_price=Decimal("10"), quantity=9)]
    assert calculate_discount(promo, 90, items) == Decimal("0")
    assert calculate_discount(promo, 0, []) == Decimal("0")


def test_buy_x_get_y_respects_max_discount():
    promo = make_promotion(
        discountType="buy_x_get_y",
        discountValue=1,
        maxDiscount=20,
        applicableCategories=["Mystery"],
    )
    assert calculate_discount(promo, 90, mystery_bundle()) == Decimal("20")


def test_accepts_flat_record_and_item_mappings():
    record = {
        "id": 9,
        "title": "Flat",
        "discountType": "fixed",
        "discountValue": 3,
        "code": "FLAT3",
        "startDate": "2024-01-01",
        "endDate": "2024-12-31",
    }
    items = [{"category": "Fiction", "price": 10, "quantity": 1}]
    assert calculate_discount(record, 10, items) == Decimal("3")


def test_apply_caps_never_negative():
    promo = make_promotion()
    assert apply_caps(promo, Decimal("-5"), Decimal("10")) == Decimal("0")


def test_negative_cart_total_is_rejected():
    with pytest.raises(MalformedInputError, match="cart_total"):
        calculate_discount(make_promotion(), -1, [])


def test_negative_item_price_is_rejected():
    with pytest.raises(MalformedInputError, match="cart item 0"):
        calculate_discount(make_promotion(), 10, [{"category": "Fiction", "price": -3, "quantity": 1}])


def test_zero_quantity_is_rejected():
    with pytest.raises(MalformedInputError):
        calculate_discount(make_promotion(), 10, [{"category": "Fiction", "price": 3, "quantity": 0}])


def test_non_promotion_is_rejected():
    with pytest.raises(MalformedInputError, match="must be a mapping"):
        calculate_discount("SUMMER25", 10, [])
