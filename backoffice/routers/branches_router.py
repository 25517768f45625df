# backoffice/routers/branches_router.py
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.db import get_db
from backoffice.services.catalog_services.channel_service import create_branch, list_branches
from backoffice.schemas.catalog_schemas import BranchCreate, BranchOut
from backoffice.schemas.response_schemas import ResponseMessage
from backoffice.utils.get_user import get_current_user
from backoffice.utils.check_roles import require_role

router = APIRouter(prefix="/branches", tags=["Branches"])

@router.post("", response_model=ResponseMessage[BranchOut])
@require_role(["admin"])
async def create_branch_route(data: BranchCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_branch(db, data, _user)

@router.get("", response_model=ResponseMessage[List[BranchOut]])
@require_role(["admin", "manager", "inventory", "cashier"])
async def list_branches_route(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await list_branches(db, include_inactive)
