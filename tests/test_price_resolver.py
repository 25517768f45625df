from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from backoffice.schemas.pricing_schemas import (
    LegacyDiscountConfig,
    PriceOverrideSnapshot,
    PricingProduct,
    PromotionSnapshot,
)
from backoffice.services.catalog_services.price_resolver import (
    PriceContext,
    apply_discount,
    is_promotion_valid,
    local_day,
    resolve_price,
    select_override,
)

TODAY = date(2024, 6, 15)
BOGOTA = ZoneInfo("America/Bogota")

BRANCH_A, BRANCH_B = 1, 2
CHANNEL_X, CHANNEL_Y = 10, 20

BURGER = PricingProduct(id=1, name="Burger", category="Burgers", base_price=1000)
FRIES = PricingProduct(id=2, name="Fries", category="Sides", base_price=400)


def promo(**fields):
    data = {
        "id": 1,
        "name": "Promo",
        "type": "global_discount",
        "value": 10,
        "config": {"discount_type": "percentage"},
        "start_date": TODAY - timedelta(days=5),
        "end_date": None,
        "priority": 0,
        "is_active": True,
    }
    data.update(fields)
    return PromotionSnapshot.model_validate(data)


def override(**fields):
    return PriceOverrideSnapshot(**{"product_id": BURGER.id, **fields})


def ctx(branch_id=BRANCH_A, channel_id=CHANNEL_X, today=TODAY):
    return PriceContext(branch_id=branch_id, channel_id=channel_id, today=today)


# --------------------------
# Base price and overrides
# --------------------------
def test_base_price_without_overrides_or_promotions():
    result = resolve_price(BURGER, [], [], ctx())
    assert result.price == 1000
    assert result.applied_promotion is None
    assert result.has_override is False
    assert result.is_active_in_channel is True


def test_inactive_or_out_of_date_promotions_leave_base_price():
    promotions = [
        promo(is_active=False),
        promo(start_date=TODAY + timedelta(days=1)),
        promo(end_date=TODAY - timedelta(days=1)),
    ]
    result = resolve_price(BURGER, [], promotions, ctx())
    assert result.price == 1000
    assert result.applied_promotion is None


@pytest.mark.parametrize(
    "branch_id, channel_id, expected",
    [
        (BRANCH_A, CHANNEL_X, 150),
        (BRANCH_A, CHANNEL_Y, 100),
        (BRANCH_B, CHANNEL_X, 200),
        (BRANCH_B, CHANNEL_Y, 1000),
    ],
)
def test_override_specificity(branch_id, channel_id, expected):
    overrides = [
        override(id=1, branch_id=BRANCH_A, channel_id=None, price=100),
        override(id=2, branch_id=None, channel_id=CHANNEL_X, price=200),
        override(id=3, branch_id=BRANCH_A, channel_id=CHANNEL_X, price=150),
    ]
    result = resolve_price(BURGER, overrides, [], ctx(branch_id, channel_id))
    assert result.price == expected


def test_overrides_of_other_products_are_ignored():
    overrides = [PriceOverrideSnapshot(product_id=FRIES.id, channel_id=CHANNEL_X, price=1)]
    assert select_override(BURGER.id, overrides, BRANCH_A, CHANNEL_X) is None


def test_hidden_override_reports_inactive_in_channel():
    overrides = [override(channel_id=CHANNEL_X, price=900, is_active=False)]
    result = resolve_price(BURGER, overrides, [], ctx())
    assert result.is_active_in_channel is False
    assert result.override_price == 900


def test_missing_prices_default_to_zero():
    product = PricingProduct(id=3, name="Water", base_price=None)
    assert resolve_price(product, [], [], ctx()).price == 0


# --------------------------
# Promotion validity
# --------------------------
def test_promotion_ending_today_is_valid():
    assert is_promotion_valid(promo(end_date=TODAY), ctx())


def test_promotion_ended_yesterday_is_not_valid():
    assert not is_promotion_valid(promo(end_date=TODAY - timedelta(days=1)), ctx())


def test_promotion_starting_today_is_valid():
    assert is_promotion_valid(promo(start_date=TODAY), ctx())


def test_channel_and_branch_scope():
    scoped = promo(scope_channels=[CHANNEL_Y], scope_branches=[BRANCH_B])
    assert not is_promotion_valid(scoped, ctx(BRANCH_A, CHANNEL_Y))
    assert not is_promotion_valid(scoped, ctx(BRANCH_B, CHANNEL_X))
    assert is_promotion_valid(scoped, ctx(BRANCH_B, CHANNEL_Y))


def test_missing_branch_in_context_skips_branch_scope():
    scoped = promo(scope_branches=[BRANCH_B])
    assert is_promotion_valid(scoped, ctx(branch_id=None))


def test_local_day_uses_business_timezone():
    # 02:00 UTC on the 16th is still the 15th in Bogota (UTC-5)
    late_evening = datetime(2024, 6, 16, 2, 0, tzinfo=timezone.utc)
    assert local_day(late_evening, BOGOTA) == date(2024, 6, 15)
    assert local_day(None) is None
    assert local_day(TODAY) == TODAY


def test_timestamp_end_date_compared_by_local_day():
    ends = promo(end_date=datetime(2024, 6, 16, 2, 0, tzinfo=timezone.utc))
    tomorrow = PriceContext(branch_id=BRANCH_A, channel_id=CHANNEL_X, today=date(2024, 6, 16), tz=BOGOTA)
    assert not is_promotion_valid(ends, tomorrow)


# --------------------------
# Discount application
# --------------------------
def test_percentage_discount():
    result = resolve_price(BURGER, [], [promo(value=25)], ctx())
    assert result.price == pytest.approx(750)
    assert result.applied_promotion.id == 1


def test_fixed_amount_discount_is_clamped_at_zero():
    product = PricingProduct(id=1, name="Burger", base_price=5000)
    discount = promo(config={"discount_type": "fixed_amount"}, value=8000)
    assert resolve_price(product, [], [discount], ctx()).price == 0


def test_fixed_amount_on_zero_override_stays_at_zero():
    overrides = [override(channel_id=CHANNEL_X, price=0)]
    discount = promo(config={"discount_type": "fixed_amount"}, value=500)
    result = resolve_price(BURGER, overrides, [discount], ctx())
    assert result.price == 0
    assert result.override_price == 0


def test_percentage_over_100_is_clamped_at_zero():
    assert apply_discount(1000, promo(value=150)) == 0


def test_discount_applies_on_top_of_override():
    overrides = [override(channel_id=CHANNEL_X, price=2000)]
    result = resolve_price(BURGER, overrides, [promo(value=50)], ctx())
    assert result.override_price == 2000
    assert result.price == pytest.approx(1000)


def test_ignore_promotions_keeps_override_price():
    overrides = [override(channel_id=CHANNEL_X, price=2000, ignore_promotions=True)]
    result = resolve_price(BURGER, overrides, [promo(value=50)], ctx())
    assert result.price == 2000
    assert result.applied_promotion is None
    assert result.ignore_promotions is True


def test_highest_priority_wins_without_stacking():
    promotions = [
        promo(id=1, value=10, priority=1),
        promo(id=2, value=30, priority=5),
        promo(id=3, value=50, priority=2),
    ]
    result = resolve_price(BURGER, [], promotions, ctx())
    assert result.applied_promotion.id == 2
    assert result.price == pytest.approx(700)


def test_equal_priority_keeps_input_order():
    promotions = [promo(id=7, value=10), promo(id=3, value=40)]
    assert resolve_price(BURGER, [], promotions, ctx()).applied_promotion.id == 7


def test_malformed_discount_type_reports_promotion_without_changing_price():
    broken = promo(config={"discount_type": "bogus"})
    result = resolve_price(BURGER, [], [broken], ctx())
    assert result.applied_promotion is not None
    assert result.price == 1000


def test_null_config_entries_fall_back_to_defaults():
    stored = promo(type="combo", config={"target_product_ids": None})
    assert stored.config.target_product_ids == ()
    assert resolve_price(BURGER, [], [stored], ctx()).applied_promotion.id == stored.id


def test_legacy_type_is_its_own_discount_kind():
    legacy = promo(type="fixed_amount", config={}, value=300)
    assert isinstance(legacy.config, LegacyDiscountConfig)
    assert legacy.discount_type == "fixed_amount"
    assert resolve_price(BURGER, [], [legacy], ctx()).price == 700


def test_buy_x_get_y_is_reported_but_leaves_unit_price():
    two_for_one = promo(
        type="buy_x_get_y", value=0,
        config={"buy_qty": 1, "get_qty": 2, "target_product_ids": [BURGER.id]},
    )
    result = resolve_price(BURGER, [], [two_for_one], ctx())
    assert result.applied_promotion.type.value == "buy_x_get_y"
    assert result.price == 1000


# --------------------------
# Targeting
# --------------------------
def test_product_discount_only_targets_listed_products():
    targeted = promo(type="product_discount", config={"discount_type": "percentage", "target_product_ids": [FRIES.id]})
    assert resolve_price(BURGER, [], [targeted], ctx()).applied_promotion is None
    assert resolve_price(FRIES, [], [targeted], ctx()).price == pytest.approx(360)


def test_category_discount_matches_by_category_name():
    targeted = promo(type="category_discount", config={"discount_type": "fixed_amount", "target_categories": ["Sides"]}, value=100)
    assert resolve_price(BURGER, [], [targeted], ctx()).applied_promotion is None
    assert resolve_price(FRIES, [], [targeted], ctx()).price == 300


def test_untargeted_promotion_does_not_hide_lower_priority_match():
    promotions = [
        promo(id=1, type="product_discount", priority=9,
              config={"discount_type": "percentage", "target_product_ids": [FRIES.id]}),
        promo(id=2, value=20, priority=1),
    ]
    assert resolve_price(BURGER, [], promotions, ctx()).applied_promotion.id == 2


# --------------------------
# Purity
# --------------------------
def test_resolve_price_is_idempotent():
    overrides = [override(channel_id=CHANNEL_X, price=1200)]
    promotions = [promo(value=15), promo(id=2, value=5, priority=3)]
    first = resolve_price(BURGER, overrides, promotions, ctx())
    second = resolve_price(BURGER, overrides, promotions, ctx())
    assert first == second
    assert [p.id for p in promotions] == [1, 2]
