from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.db import get_db
from backoffice.services.catalog_services.channel_service import create_channel, list_channels, get_channel, update_channel
from backoffice.services.catalog_services.channel_catalog_service import get_channel_products, get_branch_prices
from backoffice.schemas.catalog_schemas import ChannelCreate, ChannelUpdate, ChannelOut, ChannelProductOut, BranchPriceOut
from backoffice.schemas.response_schemas import ResponseMessage
from backoffice.utils.get_user import get_current_user
from backoffice.utils.check_roles import require_role

router = APIRouter(prefix="/channels", tags=["Sales Channels"])

@router.post("", response_model=ResponseMessage[ChannelOut])
@require_role(["admin"])
async def create_channel_route(data: ChannelCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_channel(db, data, _user)

@router.get("", response_model=ResponseMessage[List[ChannelOut]])
@require_role(["admin", "manager", "cashier"])
async def list_channels_route(
    include_inactive: bool = Query(True),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await list_channels(db, include_inactive)

@router.get("/{channel_id}", response_model=ResponseMessage[ChannelOut])
@require_role(["admin", "manager", "cashier"])
async def get_channel_route(channel_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_channel(db, channel_id)

@router.put("/{channel_id}", response_model=ResponseMessage[ChannelOut])
@require_role(["admin"])
async def update_channel_route(channel_id: int, data: ChannelUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await update_channel(db, channel_id, data, _user)

# -----------------------------------------------------------
# CHANNEL CATALOG
# -----------------------------------------------------------
@router.get("/{channel_id}/products", response_model=ResponseMessage[List[ChannelProductOut]])
@require_role(["admin", "manager", "cashier"])
async def channel_products_route(
    channel_id: int,
    branch_id: Optional[int] = Query(None, description="Omit to sum stock across branches"),
    include_inactive: bool = Query(True),
    category: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """
    Products as sold in this channel: resolved price, applied promotion,
    theoretical stock and recipe cost.
    """
    return await get_channel_products(db, channel_id, branch_id, include_inactive, category)

@router.get("/{channel_id}/products/{product_id}/branch-prices", response_model=ResponseMessage[List[BranchPriceOut]])
@require_role(["admin", "manager"])
async def branch_prices_route(channel_id: int, product_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_branch_prices(db, channel_id, product_id)
