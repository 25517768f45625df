# backoffice/services/catalog_services/promotion_service.py
import logging
from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from backoffice.core.config import BUSINESS_TIMEZONE
from backoffice.models.catalog_models import DiscountType, Promotion, PromotionType
from backoffice.schemas.pricing_schemas import PromotionSnapshot
from backoffice.schemas.promotion_schemas import PromotionCreate, PromotionOut, PromotionUpdate
from backoffice.services.catalog_services.price_resolver import local_day
from backoffice.utils.activity_helpers import log_actor_activity

logger = logging.getLogger(__name__)

BUSINESS_TZ = ZoneInfo(BUSINESS_TIMEZONE)

DISCOUNT_TYPES = {t.value for t in DiscountType}
CONFIG_DISCOUNT_TYPES = {
    PromotionType.global_discount,
    PromotionType.product_discount,
    PromotionType.category_discount,
}


def business_today() -> date:
    return datetime.now(BUSINESS_TZ).date()


def promotion_status(promotion, today: Optional[date] = None) -> str:
    """inactive | scheduled | expired | active, by calendar day."""
    if not promotion.is_active:
        return "inactive"
    today = today or business_today()
    start = local_day(promotion.start_date, BUSINESS_TZ)
    end = local_day(promotion.end_date, BUSINESS_TZ)
    if start and start > today:
        return "scheduled"
    if end and end < today:
        return "expired"
    return "active"


def _promotion_out(promotion: Promotion) -> PromotionOut:
    return PromotionOut(
        id=promotion.id,
        name=promotion.name,
        type=promotion.type,
        value=promotion.value,
        config=promotion.config or {},
        start_date=promotion.start_date,
        end_date=promotion.end_date,
        scope_channels=promotion.scope_channels or [],
        scope_branches=promotion.scope_branches or [],
        priority=promotion.priority,
        is_active=promotion.is_active,
        status=promotion_status(promotion),
    )


def normalize_promotion(fields: dict) -> dict:
    """
    Validate a promotion payload per type and return the fields to persist.
    Raises 400 with the first problem found.
    """
    promo_type = PromotionType(fields["type"])
    value = float(fields.get("value") or 0)
    config = dict(fields.get("config") or {})
    start_date = fields.get("start_date")
    end_date = fields.get("end_date")

    if end_date is not None and start_date is not None and end_date < start_date:
        raise HTTPException(status_code=400, detail="End date must be on or after start date")

    if promo_type in CONFIG_DISCOUNT_TYPES:
        if config.get("discount_type") not in DISCOUNT_TYPES:
            raise HTTPException(status_code=400, detail="config.discount_type must be 'percentage' or 'fixed_amount'")
    discount_type = promo_type.value if promo_type.value in DISCOUNT_TYPES else config.get("discount_type")

    if promo_type == PromotionType.buy_x_get_y:
        buy_qty, get_qty = config.get("buy_qty"), config.get("get_qty")
        if not isinstance(buy_qty, int) or not isinstance(get_qty, int) or buy_qty < 1:
            raise HTTPException(status_code=400, detail="buy_qty and get_qty are required")
        if buy_qty >= get_qty:
            raise HTTPException(status_code=400, detail="get_qty must be greater than buy_qty (e.g. take 2, pay 1)")
        if not config.get("target_product_ids"):
            raise HTTPException(status_code=400, detail="Select at least one product")
        value = 0.0
    elif promo_type != PromotionType.combo and value <= 0:
        raise HTTPException(status_code=400, detail="Discount value must be greater than 0")

    if promo_type == PromotionType.product_discount and not config.get("target_product_ids"):
        raise HTTPException(status_code=400, detail="Select at least one product")
    if promo_type == PromotionType.category_discount and not config.get("target_categories"):
        raise HTTPException(status_code=400, detail="Select at least one category")

    if discount_type == "percentage" and value > 100:
        raise HTTPException(status_code=400, detail="Percentage discount must be between 0 and 100")

    normalized = {**fields, "type": promo_type.value, "value": value, "config": config}
    try:
        PromotionSnapshot.model_validate(normalized)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid promotion config: {e.errors()[0]['msg']}")
    return normalized


async def load_promotion_snapshots(db: AsyncSession, only_active: bool = True) -> List[PromotionSnapshot]:
    """
    Promotions ready for the price resolver, best priority first.
    A broken row is skipped with a warning so one record cannot take down a listing.
    """
    query = select(Promotion).order_by(Promotion.priority.desc(), Promotion.id)
    if only_active:
        query = query.where(Promotion.is_active == True)
    result = await db.execute(query)

    snapshots = []
    for row in result.scalars().all():
        try:
            snapshots.append(PromotionSnapshot.model_validate(row))
        except ValidationError as e:
            logger.warning("Skipping promotion %s (%s): %s", row.id, row.type, e.errors()[0]["msg"])
    return snapshots


async def get_promotion_or_404(db: AsyncSession, promotion_id: int) -> Promotion:
    promotion = await db.get(Promotion, promotion_id)
    if not promotion:
        raise HTTPException(status_code=404, detail="Promotion not found")
    return promotion


# ---------------------------------------------------
# CREATE
# ---------------------------------------------------
async def create_promotion(db: AsyncSession, payload: PromotionCreate, current_user):
    fields = normalize_promotion(payload.model_dump())

    promotion = Promotion(**fields)
    db.add(promotion)
    await db.flush()

    await log_actor_activity(db, current_user, f"created promotion '{promotion.name}' ({promotion.type})")
    await db.commit()
    await db.refresh(promotion)
    return {"message": "Promotion created successfully", "data": _promotion_out(promotion)}


# ---------------------------------------------------
# READ
# ---------------------------------------------------
async def get_all_promotions(
    db: AsyncSession,
    is_active: bool | None = None,
    channel_id: int | None = None,
    branch_id: int | None = None,
    status: str | None = None,
):
    query = select(Promotion).order_by(Promotion.priority.desc(), Promotion.id)
    if is_active is not None:
        query = query.where(Promotion.is_active == is_active)
    result = await db.execute(query)
    promotions = result.scalars().all()

    # scope lists live in JSON columns, filtered here to stay portable across backends
    if channel_id is not None:
        promotions = [p for p in promotions if not p.scope_channels or channel_id in p.scope_channels]
    if branch_id is not None:
        promotions = [p for p in promotions if not p.scope_branches or branch_id in p.scope_branches]

    data = [_promotion_out(p) for p in promotions]
    if status:
        data = [p for p in data if p.status == status.lower()]
    return {"message": "Promotions fetched successfully", "data": data}


async def get_promotion(db: AsyncSession, promotion_id: int):
    promotion = await get_promotion_or_404(db, promotion_id)
    return {"message": "Promotion fetched successfully", "data": _promotion_out(promotion)}


# ---------------------------------------------------
# UPDATE
# ---------------------------------------------------
async def update_promotion(db: AsyncSession, promotion_id: int, payload: PromotionUpdate, current_user):
    promotion = await get_promotion_or_404(db, promotion_id)

    update_data = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k == "end_date"}
    merged = {
        "name": promotion.name,
        "type": promotion.type,
        "value": promotion.value,
        "config": promotion.config or {},
        "start_date": promotion.start_date,
        "end_date": promotion.end_date,
        "scope_channels": promotion.scope_channels or [],
        "scope_branches": promotion.scope_branches or [],
        "priority": promotion.priority,
        **update_data,
    }
    fields = normalize_promotion(merged)

    changed = [key for key in fields if getattr(promotion, key) != fields[key]]
    for key in changed:
        setattr(promotion, key, fields[key])

    if changed:
        await log_actor_activity(
            db, current_user, f"updated promotion '{promotion.name}' (ID: {promotion.id}) — {', '.join(changed)}"
        )
        await db.commit()
        await db.refresh(promotion)
    return {"message": "Promotion updated successfully", "data": _promotion_out(promotion)}


# ---------------------------------------------------
# TOGGLE ACTIVE
# ---------------------------------------------------
async def toggle_promotion(db: AsyncSession, promotion_id: int, current_user):
    promotion = await get_promotion_or_404(db, promotion_id)
    promotion.is_active = not promotion.is_active

    state = "activated" if promotion.is_active else "deactivated"
    await log_actor_activity(db, current_user, f"{state} promotion '{promotion.name}' (ID: {promotion.id})")
    await db.commit()
    await db.refresh(promotion)
    return {"message": f"Promotion {state}", "data": _promotion_out(promotion)}


# ---------------------------------------------------
# DELETE (only inactive promotions)
# ---------------------------------------------------
async def delete_promotion(db: AsyncSession, promotion_id: int, current_user):
    promotion = await get_promotion_or_404(db, promotion_id)
    if promotion.is_active:
        raise HTTPException(status_code=400, detail="Deactivate the promotion before deleting it")

    name = promotion.name
    await db.delete(promotion)
    await log_actor_activity(db, current_user, f"deleted promotion '{name}' (ID: {promotion_id})")
    await db.commit()
    return {"message": "Promotion deleted successfully"}
