from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.db import get_db
from backoffice.services.inventory_services.branch_stock_service import list_stock, get_stock_alerts, list_movements
from backoffice.schemas.inventory_schemas import BranchStockOut, StockAlert, MovementOut
from backoffice.schemas.response_schemas import ResponseMessage
from backoffice.utils.get_user import get_current_user
from backoffice.utils.check_roles import require_role

router = APIRouter(tags=["Branch Stock"])

@router.get("/stock", response_model=ResponseMessage[List[BranchStockOut]])
@require_role(["admin", "inventory", "manager"])
async def list_stock_route(
    branch_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await list_stock(db, branch_id)

@router.get("/alerts", response_model=ResponseMessage[List[StockAlert]])
@require_role(["admin", "inventory", "manager"])
async def stock_alerts_route(
    branch_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await get_stock_alerts(db, branch_id)

@router.get("/movements", response_model=ResponseMessage[List[MovementOut]])
@require_role(["admin", "inventory"])
async def list_movements_route(
    ingredient_id: Optional[int] = Query(None),
    branch_id: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await list_movements(db, ingredient_id, branch_id, limit)
