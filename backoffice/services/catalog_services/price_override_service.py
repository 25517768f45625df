# backoffice/services/catalog_services/price_override_service.py
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from backoffice.models.catalog_models import ProductPrice
from backoffice.schemas.catalog_schemas import (
    PriceOverrideOut,
    PriceOverrideUpsert,
    PriceVisibilityUpdate,
)
from backoffice.services.catalog_services.channel_service import get_branch_or_404, get_channel_or_404
from backoffice.services.catalog_services.product_service import get_product_or_404
from backoffice.utils.activity_helpers import log_actor_activity
from backoffice.utils.formatters import format_currency

logger = logging.getLogger(__name__)


def _nullable_eq(column, value):
    return column.is_(None) if value is None else column == value


async def _find_override(db: AsyncSession, product_id: int, channel_id: Optional[int], branch_id: Optional[int]):
    result = await db.execute(
        select(ProductPrice)
        .where(and_(
            ProductPrice.product_id == product_id,
            _nullable_eq(ProductPrice.channel_id, channel_id),
            _nullable_eq(ProductPrice.branch_id, branch_id),
        ))
        .order_by(ProductPrice.id)
    )
    return result.scalars().first()


async def _validate_context(db: AsyncSession, product_id: int, channel_id, branch_id):
    product = await get_product_or_404(db, product_id)
    if channel_id is not None:
        await get_channel_or_404(db, channel_id)
    if branch_id is not None:
        await get_branch_or_404(db, branch_id)
    return product


def _scope_label(channel_id, branch_id) -> str:
    channel = f"channel {channel_id}" if channel_id is not None else "all channels"
    branch = f"branch {branch_id}" if branch_id is not None else "all branches"
    return f"{channel}, {branch}"


# ---------------------------------------------------
# UPSERT OVERRIDE
# ---------------------------------------------------
async def upsert_price_override(db: AsyncSession, data: PriceOverrideUpsert, current_user):
    """
    Set the manual price of a product for a (channel, branch) scope.
    One row per scope: an existing row is updated in place.
    """
    try:
        product = await _validate_context(db, data.product_id, data.channel_id, data.branch_id)

        override = await _find_override(db, data.product_id, data.channel_id, data.branch_id)
        if override:
            old_price = override.price
            override.price = data.price
            override.ignore_promotions = data.ignore_promotions
            if data.is_active is not None:
                override.is_active = data.is_active
            action = f"changed price of '{product.name}' from {format_currency(old_price)} to {format_currency(data.price)}"
        else:
            override = ProductPrice(
                product_id=data.product_id,
                channel_id=data.channel_id,
                branch_id=data.branch_id,
                price=data.price,
                ignore_promotions=data.ignore_promotions,
                is_active=True if data.is_active is None else data.is_active,
            )
            db.add(override)
            action = f"set price of '{product.name}' to {format_currency(data.price)}"

        await db.flush()
        await log_actor_activity(db, current_user, f"{action} ({_scope_label(data.channel_id, data.branch_id)})")
        await db.commit()
        await db.refresh(override)
        return {"message": "Price saved successfully", "data": PriceOverrideOut.model_validate(override)}

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Price override upsert failed")
        raise HTTPException(status_code=500, detail=f"Error saving price: {e}")


# ---------------------------------------------------
# VISIBILITY (sellable in channel or not)
# ---------------------------------------------------
async def set_price_visibility(db: AsyncSession, data: PriceVisibilityUpdate, current_user):
    try:
        product = await _validate_context(db, data.product_id, data.channel_id, data.branch_id)

        override = await _find_override(db, data.product_id, data.channel_id, data.branch_id)
        if override:
            override.is_active = data.is_active
        else:
            # hiding a product without a manual price keeps its base price
            override = ProductPrice(
                product_id=data.product_id,
                channel_id=data.channel_id,
                branch_id=data.branch_id,
                price=product.price,
                is_active=data.is_active,
            )
            db.add(override)

        await db.flush()
        state = "enabled" if data.is_active else "disabled"
        await log_actor_activity(
            db, current_user, f"{state} '{product.name}' in {_scope_label(data.channel_id, data.branch_id)}"
        )
        await db.commit()
        await db.refresh(override)
        return {"message": "Visibility updated successfully", "data": PriceOverrideOut.model_validate(override)}

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Price visibility update failed")
        raise HTTPException(status_code=500, detail=f"Error updating visibility: {e}")


# ---------------------------------------------------
# DELETE OVERRIDE (back to base price)
# ---------------------------------------------------
async def delete_price_override(db: AsyncSession, override_id: int, current_user):
    override = await db.get(ProductPrice, override_id)
    if not override:
        raise HTTPException(status_code=404, detail="Price override not found")

    await db.delete(override)
    await log_actor_activity(
        db, current_user,
        f"removed price override {override_id} of product {override.product_id} "
        f"({_scope_label(override.channel_id, override.branch_id)})"
    )
    await db.commit()
    return {"message": "Price override deleted successfully"}


# ---------------------------------------------------
# LIST
# ---------------------------------------------------
async def list_price_overrides(db: AsyncSession, product_id: int | None = None, channel_id: int | None = None):
    query = select(ProductPrice)
    if product_id is not None:
        query = query.where(ProductPrice.product_id == product_id)
    if channel_id is not None:
        query = query.where(ProductPrice.channel_id == channel_id)
    result = await db.execute(query.order_by(ProductPrice.product_id, ProductPrice.id))
    return {
        "message": "Price overrides fetched successfully",
        "data": [PriceOverrideOut.model_validate(o) for o in result.scalars().all()],
    }
