# backoffice/services/catalog_services/channel_catalog_service.py
"""
Per-channel product listing: effective price, promotion, theoretical stock and
recipe cost for each product, as shown on the channel manager screen.
"""
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from backoffice.core.config import CURRENCY_CODE
from backoffice.models.catalog_models import Branch, Category, Product, ProductPrice
from backoffice.models.inventory_models import BranchIngredient, InventoryItem, ProductRecipe
from backoffice.schemas.catalog_schemas import AppliedPromotionOut, BranchPriceOut, ChannelProductOut
from backoffice.schemas.pricing_schemas import PriceOverrideSnapshot, PricingProduct
from backoffice.services.catalog_services.channel_service import get_branch_or_404, get_channel_or_404
from backoffice.services.catalog_services.price_resolver import PriceContext, resolve_price
from backoffice.services.catalog_services.product_service import get_product_or_404
from backoffice.services.catalog_services.promotion_service import BUSINESS_TZ, load_promotion_snapshots
from backoffice.services.inventory_services.stock_calculator import RecipeLine, recipe_cost, theoretical_stock
from backoffice.utils.decimal_utils import round2
from backoffice.utils.formatters import format_currency

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"


async def _load_overrides(db: AsyncSession, channel_id: int, product_id: Optional[int] = None) -> List[PriceOverrideSnapshot]:
    query = select(ProductPrice).where(
        or_(ProductPrice.channel_id == channel_id, ProductPrice.channel_id.is_(None))
    )
    if product_id is not None:
        query = query.where(ProductPrice.product_id == product_id)
    result = await db.execute(query.order_by(ProductPrice.id))
    return [PriceOverrideSnapshot.model_validate(row) for row in result.scalars().all()]


async def _load_stock(db: AsyncSession, branch_id: Optional[int]) -> Dict[int, float]:
    """Usage-unit stock per ingredient for one branch, or summed across branches."""
    query = select(BranchIngredient.ingredient_id, BranchIngredient.current_stock).where(
        BranchIngredient.is_active == True
    )
    if branch_id is not None:
        query = query.where(BranchIngredient.branch_id == branch_id)
    result = await db.execute(query)

    stock: Dict[int, float] = defaultdict(float)
    for ingredient_id, current_stock in result.all():
        stock[ingredient_id] += current_stock or 0.0
    return dict(stock)


async def _load_recipes(db: AsyncSession):
    result = await db.execute(
        select(ProductRecipe.product_id, ProductRecipe.ingredient_id, ProductRecipe.quantity_required, InventoryItem.unit_cost)
        .join(InventoryItem, InventoryItem.id == ProductRecipe.ingredient_id)
    )
    lines: Dict[int, List[RecipeLine]] = defaultdict(list)
    unit_costs: Dict[int, float] = {}
    for product_id, ingredient_id, quantity, unit_cost in result.all():
        lines[product_id].append(RecipeLine(ingredient_id, quantity))
        unit_costs[ingredient_id] = unit_cost or 0.0
    return lines, unit_costs


def _applied_out(promotion) -> Optional[AppliedPromotionOut]:
    if promotion is None:
        return None
    return AppliedPromotionOut(
        id=promotion.id,
        name=promotion.name,
        type=promotion.type.value,
        value=promotion.value,
        discount_type=promotion.discount_type,
    )


# ---------------------------------------------------
# CHANNEL PRODUCT LISTING
# ---------------------------------------------------
async def get_channel_products(
    db: AsyncSession,
    channel_id: int,
    branch_id: int | None = None,
    include_inactive: bool = True,
    category: str | None = None,
):
    await get_channel_or_404(db, channel_id)
    if branch_id is not None:
        await get_branch_or_404(db, branch_id)

    result = await db.execute(
        select(Product, Category.name)
        .outerjoin(Category, Category.id == Product.category_id)
        .where(Product.is_deleted == False)
        .order_by(Product.name)
    )
    rows = result.all()

    overrides = await _load_overrides(db, channel_id)
    promotions = await load_promotion_snapshots(db)
    stock = await _load_stock(db, branch_id)
    recipes, unit_costs = await _load_recipes(db)
    ctx = PriceContext(branch_id=branch_id, channel_id=channel_id, tz=BUSINESS_TZ)

    data = []
    for product, category_name in rows:
        category_key = category_name or UNCATEGORIZED
        if category and category_key != category:
            continue

        lines = recipes.get(product.id, [])
        cost = recipe_cost(lines, unit_costs)
        pricing_product = PricingProduct(
            id=product.id, name=product.name, category=category_name, base_price=product.price, cost=cost
        )
        resolution = resolve_price(pricing_product, overrides, promotions, ctx)
        if not include_inactive and not resolution.is_active_in_channel:
            continue

        data.append(
            ChannelProductOut(
                id=product.id,
                name=product.name,
                category=category_key,
                base_price=product.price,
                override_price=resolution.override_price,
                current_price=resolution.price,
                formatted_price=format_currency(resolution.price),
                currency=CURRENCY_CODE,
                has_override=resolution.has_override,
                is_active_in_channel=resolution.is_active_in_channel,
                ignore_promotions=resolution.ignore_promotions,
                stock=theoretical_stock(lines, stock),
                cost=round2(cost),
                applied_promotion=_applied_out(resolution.applied_promotion),
            )
        )

    logger.debug("Channel %s listing: %d products (branch=%s)", channel_id, len(data), branch_id)
    return {"message": "Channel products fetched successfully", "data": data}


# ---------------------------------------------------
# PRICE OF ONE PRODUCT ACROSS BRANCHES
# ---------------------------------------------------
async def get_branch_prices(db: AsyncSession, channel_id: int, product_id: int):
    await get_channel_or_404(db, channel_id)
    product = await get_product_or_404(db, product_id)

    branches = (await db.execute(
        select(Branch).where(Branch.is_active == True).order_by(Branch.name)
    )).scalars().all()
    overrides = await _load_overrides(db, channel_id, product_id)
    promotions = await load_promotion_snapshots(db)
    pricing_product = PricingProduct(
        id=product.id, name=product.name, category=product.category_name, base_price=product.price
    )

    data = []
    for branch in branches:
        ctx = PriceContext(branch_id=branch.id, channel_id=channel_id, tz=BUSINESS_TZ)
        resolution = resolve_price(pricing_product, overrides, promotions, ctx)
        data.append(
            BranchPriceOut(
                branch_id=branch.id,
                branch_name=branch.name,
                price=resolution.price,
                is_promotion=resolution.applied_promotion is not None,
            )
        )
    return {"message": "Branch prices fetched successfully", "data": data}
