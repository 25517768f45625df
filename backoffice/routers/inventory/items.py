from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.db import get_db
from backoffice.services.inventory_services.inventory_item_service import (
    create_item,
    get_all_items,
    get_item,
    update_item,
    delete_item,
)
from backoffice.services.inventory_services.branch_stock_service import receive_stock
from backoffice.schemas.inventory_schemas import (
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryItemOut,
    StockReceive,
    StockReceiveOut,
)
from backoffice.schemas.response_schemas import ResponseMessage, MessageResponse
from backoffice.utils.get_user import get_current_user
from backoffice.utils.check_roles import require_role

router = APIRouter(prefix="/items", tags=["Inventory Items"])

@router.post("", response_model=ResponseMessage[InventoryItemOut])
@require_role(["admin", "inventory"])
async def create_item_route(data: InventoryItemCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_item(db, data, _user)

@router.get("", response_model=ResponseMessage[List[InventoryItemOut]])
@require_role(["admin", "inventory", "manager"])
async def list_items_route(
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await get_all_items(db, search)

@router.get("/{item_id}", response_model=ResponseMessage[InventoryItemOut])
@require_role(["admin", "inventory", "manager"])
async def get_item_route(item_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_item(db, item_id)

@router.put("/{item_id}", response_model=ResponseMessage[InventoryItemOut])
@require_role(["admin", "inventory"])
async def update_item_route(item_id: int, data: InventoryItemUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await update_item(db, item_id, data, _user)

@router.delete("/{item_id}", response_model=MessageResponse)
@require_role(["admin"])
async def delete_item_route(item_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await delete_item(db, item_id, _user)

@router.post("/{item_id}/receive", response_model=ResponseMessage[StockReceiveOut])
@require_role(["admin", "inventory"])
async def receive_stock_route(item_id: int, data: StockReceive, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    """
    Receive purchased presentations into a branch. Quantity and price are per
    presentation (e.g. 2 sacks at 100.000 each).
    """
    return await receive_stock(db, item_id, data, _user)
