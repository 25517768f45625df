from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.db import get_db
from backoffice.services.catalog_services.promotion_service import (
    create_promotion,
    get_all_promotions,
    get_promotion,
    update_promotion,
    toggle_promotion,
    delete_promotion,
)
from backoffice.schemas.promotion_schemas import PromotionCreate, PromotionUpdate, PromotionResponse, PromotionListResponse
from backoffice.schemas.response_schemas import MessageResponse
from backoffice.utils.get_user import get_current_user, require_pin
from backoffice.utils.check_roles import require_role

router = APIRouter(prefix="/promotions", tags=["Promotions"])

@router.post("", response_model=PromotionResponse)
@require_role(["admin", "manager"])
async def create_promotion_route(data: PromotionCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_promotion(db, data, _user)

@router.get("", response_model=PromotionListResponse)
@require_role(["admin", "manager", "cashier"])
async def list_promotions_route(
    is_active: Optional[bool] = Query(None),
    channel_id: Optional[int] = Query(None),
    branch_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None, description="active | scheduled | expired | inactive"),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await get_all_promotions(db, is_active, channel_id, branch_id, status)

@router.get("/{promotion_id}", response_model=PromotionResponse)
@require_role(["admin", "manager", "cashier"])
async def get_promotion_route(promotion_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_promotion(db, promotion_id)

@router.put("/{promotion_id}", response_model=PromotionResponse)
@require_role(["admin", "manager"])
async def update_promotion_route(promotion_id: int, data: PromotionUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await update_promotion(db, promotion_id, data, _user)

@router.patch("/{promotion_id}/toggle", response_model=PromotionResponse)
@require_role(["admin", "manager"])
async def toggle_promotion_route(promotion_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await toggle_promotion(db, promotion_id, _user)

@router.delete("/{promotion_id}", response_model=MessageResponse)
@require_role(["admin", "manager"])
async def delete_promotion_route(
    promotion_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    _pin: bool = Depends(require_pin),
):
    """
    Permanently remove an inactive promotion. Requires the X-Auth-Pin header.
    """
    return await delete_promotion(db, promotion_id, _user)
