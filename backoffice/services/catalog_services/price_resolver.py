# backoffice/services/catalog_services/price_resolver.py
"""
Effective price of a product for a branch/channel context.

Two steps:

1. Override resolution, most specific first:
   (branch, channel) -> (channel, any branch) -> (branch, any channel) -> base price.
2. Promotion application, skipped when the chosen override has
   ``ignore_promotions``. The highest-priority currently valid promotion wins
   (a single winner, no stacking); equal priorities keep input order.

Everything here is pure: no session, no clock unless ``today`` is omitted,
no mutation of the inputs.
"""
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Iterable, List, Optional, Sequence

from backoffice.models.catalog_models import PromotionType
from backoffice.schemas.pricing_schemas import (
    BuyXGetYConfig,
    CategoryDiscountConfig,
    ComboConfig,
    PriceOverrideSnapshot,
    PricingProduct,
    ProductDiscountConfig,
    PromotionSnapshot,
)
from backoffice.utils.decimal_utils import as_number

# types that change bundle economics at the point of sale, not the unit price
NON_PRICING_TYPES = {PromotionType.buy_x_get_y, PromotionType.combo}


@dataclass(frozen=True)
class PriceContext:
    branch_id: Optional[int] = None
    channel_id: Optional[int] = None
    today: Optional[date] = None
    tz: Optional[tzinfo] = None

    def local_today(self) -> date:
        if self.today is not None:
            return self.today
        return datetime.now(self.tz).date() if self.tz else datetime.now().date()


@dataclass(frozen=True)
class PriceResolution:
    price: float
    applied_promotion: Optional[PromotionSnapshot]
    override: Optional[PriceOverrideSnapshot]
    override_price: float
    is_active_in_channel: bool
    ignore_promotions: bool

    @property
    def has_override(self) -> bool:
        return self.override is not None


def local_day(value, tz: Optional[tzinfo] = None) -> Optional[date]:
    """Calendar day of a date/datetime in the evaluator's timezone."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz).date()
    return value


def select_override(
    product_id: int,
    overrides: Iterable[PriceOverrideSnapshot],
    branch_id: Optional[int],
    channel_id: Optional[int],
) -> Optional[PriceOverrideSnapshot]:
    candidates = [o for o in overrides if o.product_id == product_id]

    specificity = (
        lambda o: o.branch_id == branch_id and o.channel_id == channel_id,
        lambda o: o.channel_id == channel_id and o.branch_id is None,
        lambda o: o.branch_id == branch_id and o.channel_id is None,
    )
    for matches in specificity:
        for override in candidates:
            if matches(override):
                return override
    return None


def is_promotion_valid(promotion: PromotionSnapshot, ctx: PriceContext) -> bool:
    """
    Active, started on or before today, not ended before today, and in scope.
    A None branch/channel in the context means "all", so that scope does not filter.
    """
    if not promotion.is_active:
        return False

    today = ctx.local_today()
    start = local_day(promotion.start_date, ctx.tz)
    end = local_day(promotion.end_date, ctx.tz)
    if start is not None and start > today:
        return False
    if end is not None and end < today:
        return False

    if ctx.channel_id is not None and promotion.scope_channels:
        if ctx.channel_id not in promotion.scope_channels:
            return False
    if ctx.branch_id is not None and promotion.scope_branches:
        if ctx.branch_id not in promotion.scope_branches:
            return False
    return True


def promotion_targets(promotion: PromotionSnapshot, product: PricingProduct) -> bool:
    config = promotion.config
    if isinstance(config, (ProductDiscountConfig, BuyXGetYConfig)):
        return product.id in config.target_product_ids
    if isinstance(config, CategoryDiscountConfig):
        return product.category is not None and product.category in config.target_categories
    if isinstance(config, ComboConfig):
        return not config.target_product_ids or product.id in config.target_product_ids
    return True


def applicable_promotions(
    product: PricingProduct,
    promotions: Iterable[PromotionSnapshot],
    ctx: PriceContext,
) -> List[PromotionSnapshot]:
    """Valid promotions for the product, best first. sorted() is stable so ties keep input order."""
    valid = [
        p for p in promotions
        if is_promotion_valid(p, ctx) and promotion_targets(p, product)
    ]
    return sorted(valid, key=lambda p: p.priority, reverse=True)


def apply_discount(price: float, promotion: PromotionSnapshot) -> float:
    if promotion.type in NON_PRICING_TYPES:
        return price

    value = as_number(promotion.value)
    discount_type = promotion.discount_type
    if discount_type == "percentage":
        return max(0.0, price * (1 - value / 100))
    if discount_type == "fixed_amount":
        return max(0.0, price - value)
    # malformed config: promotion is reported but the price is untouched
    return price


def resolve_price(
    product: PricingProduct,
    overrides: Sequence[PriceOverrideSnapshot],
    promotions: Sequence[PromotionSnapshot],
    ctx: PriceContext,
) -> PriceResolution:
    override = select_override(product.id, overrides, ctx.branch_id, ctx.channel_id)

    if override is not None:
        price = as_number(override.price)
        is_active = override.is_active is not False
        ignore_promotions = bool(override.ignore_promotions)
    else:
        price = as_number(product.base_price)
        is_active = True
        ignore_promotions = False

    override_price = price
    applied = None
    if not ignore_promotions:
        ranked = applicable_promotions(product, promotions, ctx)
        if ranked:
            applied = ranked[0]
            price = apply_discount(price, applied)

    return PriceResolution(
        price=price,
        applied_promotion=applied,
        override=override,
        override_price=override_price,
        is_active_in_channel=is_active,
        ignore_promotions=ignore_promotions,
    )
