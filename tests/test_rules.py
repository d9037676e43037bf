"""Test promo code validation rules."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from patterns.rules_engine import RuleResult, evaluate_in_order
from promotions.exceptions import MalformedInputError
from promotions.models.schemas import CartItem, parse_promotion
from promotions.results import Invalid, InvalidReason, Valid
from promotions.rules import (
    active_promotions,
    check_category_match,
    check_minimum_order,
    find_promotion_by_code,
    format_amount,
    validate_promo_code,
)
from promotions.seed import SEED_PROMOTIONS

MID_JULY = date(2024, 7, 21)  # every seed promotion is live


def seed():
    return [parse_promotion(r) for r in SEED_PROMOTIONS]


def fiction(price="20", quantity=1):
    return CartItem(category="Fiction", unit_price=Decimal(price), quantity=quantity)


def mystery(price="10", quantity=1):
    return CartItem(category="Mystery", unit_price=Decimal(price), quantity=quantity)


# -- Rules engine composition --

def test_evaluate_in_order_stops_at_first_failure():
    called = []

    def rule(name, passed):
        def run():
            called.append(name)
            return RuleResult(passed=passed, rule_name=name, message=name)
        return run

    result = evaluate_in_order([rule("a", True), rule("b", False), rule("c", False)])
    assert not result.all_passed
    assert result.first_failure.rule_name == "b"
    assert called == ["a", "b"]


def test_evaluate_in_order_all_passing():
    result = evaluate_in_order([
        lambda: RuleResult(passed=True, rule_name="a", message="a"),
        lambda: RuleResult(passed=True, rule_name="b", message="b"),
    ])
    assert result.all_passed
    assert result.failed == []
    assert result.first_failure is None
    assert [r.rule_name for r in result.results] == ["a", "b"]


# -- Active window --

def test_inactive_flag_excludes_promotion_inside_window():
    promos = seed()
    disabled = promos[1].model_copy(update={"is_active": False})
    active = active_promotions([promos[0], disabled], MID_JULY)
    assert active == [promos[0]]


def test_expired_promotion_is_excluded():
    today = date(2025, 3, 10)
    expired = parse_promotion({
        **SEED_PROMOTIONS[1],
        "startDate": "2025-01-01",
        "endDate": (today - timedelta(days=1)).isoformat(),
    })
    assert active_promotions([expired], today) == []


def test_window_bounds_are_inclusive():
    promo = seed()[2]  # FREESHIP, 2024-07-20 .. 2024-07-22
    assert promo.is_active_on(date(2024, 7, 20))
    assert promo.is_active_on(date(2024, 7, 22))
    assert not promo.is_active_on(date(2024, 7, 19))
    assert not promo.is_active_on(date(2024, 7, 23))


def test_active_promotions_keep_snapshot_order():
    ids = [p.id for p in active_promotions(seed(), MID_JULY)]
    assert ids == [1, 2, 3, 4]


# -- Code lookup --

def test_code_lookup_is_case_insensitive():
    items = [fiction("40")]
    upper = validate_promo_code(seed(), "SUMMER25", 40, items, MID_JULY)
    lower = validate_promo_code(seed(), "summer25", 40, items, MID_JULY)
    assert upper == lower
    assert isinstance(upper, Valid)
    assert upper.promotion.code == "SUMMER25"


def test_unknown_code_is_invalid():
    result = validate_promo_code(seed(), "NOPE", 100, [fiction()], MID_JULY)
    assert result == Invalid(InvalidReason.INVALID_CODE, "Invalid or expired promo code")
    assert not result.valid


def test_expired_code_reads_as_invalid():
    result = validate_promo_code(seed(), "FREESHIP", 100, [fiction()], date(2024, 7, 23))
    assert result.reason is InvalidReason.INVALID_CODE


def test_first_active_match_wins():
    promos = seed()
    clone = promos[1].model_copy(update={"id": 99})
    found = find_promotion_by_code([promos[1], clone], "welcome15", MID_JULY)
    assert found.id == 2


def test_disabled_duplicate_is_skipped():
    promos = seed()
    disabled = promos[1].model_copy(update={"id": 98, "is_active": False})
    found = find_promotion_by_code([disabled, promos[1]], "WELCOME15", MID_JULY)
    assert found.id == 2


# -- Minimum order & categories --

def test_minimum_order_message_embeds_threshold():
    result = validate_promo_code(seed(), "SUMMER25", 20, [fiction()], MID_JULY)
    assert result.reason is InvalidReason.MINIMUM_NOT_MET
    assert result.message == "Minimum order amount of $30 required"


def test_minimum_checked_before_category():
    result = validate_promo_code(seed(), "SUMMER25", 20, [mystery()], MID_JULY)
    assert result.reason is InvalidReason.MINIMUM_NOT_MET
    assert result.message == "Minimum order amount of $30 required"


def test_cart_total_equal_to_minimum_passes():
    result = validate_promo_code(seed(), "WELCOME15", 25, [mystery()], MID_JULY)
    assert isinstance(result, Valid)


def test_category_mismatch_lists_categories():
    result = validate_promo_code(seed(), "SUMMER25", 100, [mystery("100")], MID_JULY)
    assert result.reason is InvalidReason.CATEGORY_MISMATCH
    assert result.message == "This code only applies to Fiction books"


def test_category_message_joins_several_categories():
    promo = parse_promotion({**SEED_PROMOTIONS[0], "applicableCategories": ["Fiction", "Poetry"]})
    outcome = check_category_match(promo, [mystery()])
    assert not outcome.passed
    assert outcome.message == "This code only applies to Fiction, Poetry books"


def test_unrestricted_promotion_accepts_empty_cart():
    promo = seed()[1]
    assert check_category_match(promo, []).passed


def test_minimum_rule_details():
    outcome = check_minimum_order(seed()[0], Decimal("29.99"))
    assert not outcome.passed
    assert outcome.details["min_order_amount"] == Decimal("30")


def test_format_amount_drops_trailing_zeros():
    assert format_amount(Decimal("30.00")) == "30"
    assert format_amount(Decimal("12.50")) == "12.5"
    assert format_amount(Decimal("0")) == "0"


# -- Contract violations --

def test_non_string_code_is_rejected():
    with pytest.raises(MalformedInputError):
        validate_promo_code(seed(), None, 10, [], MID_JULY)


def test_negative_cart_total_is_rejected():
    with pytest.raises(MalformedInputError):
        validate_promo_code(seed(), "WELCOME15", -10, [], MID_JULY)
