from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.db import get_db
from backoffice.services.catalog_services.price_override_service import (
    upsert_price_override,
    set_price_visibility,
    delete_price_override,
    list_price_overrides,
)
from backoffice.schemas.catalog_schemas import PriceOverrideUpsert, PriceVisibilityUpdate, PriceOverrideOut
from backoffice.schemas.response_schemas import ResponseMessage, MessageResponse
from backoffice.utils.get_user import get_current_user, require_pin
from backoffice.utils.check_roles import require_role

router = APIRouter(prefix="/prices", tags=["Prices"])

@router.put("", response_model=ResponseMessage[PriceOverrideOut])
@require_role(["admin", "manager"])
async def upsert_price_route(
    data: PriceOverrideUpsert,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    _pin: bool = Depends(require_pin),
):
    """
    Set the manual price of a product for a channel and/or branch.
    Requires the X-Auth-Pin header.
    """
    return await upsert_price_override(db, data, _user)

@router.patch("/visibility", response_model=ResponseMessage[PriceOverrideOut])
@require_role(["admin", "manager"])
async def price_visibility_route(data: PriceVisibilityUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await set_price_visibility(db, data, _user)

@router.get("", response_model=ResponseMessage[List[PriceOverrideOut]])
@require_role(["admin", "manager"])
async def list_prices_route(
    product_id: Optional[int] = Query(None),
    channel_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await list_price_overrides(db, product_id, channel_id)

@router.delete("/{override_id}", response_model=MessageResponse)
@require_role(["admin", "manager"])
async def delete_price_route(
    override_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    _pin: bool = Depends(require_pin),
):
    return await delete_price_override(db, override_id, _user)
