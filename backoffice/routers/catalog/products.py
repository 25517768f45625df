from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.db import get_db
from backoffice.services.catalog_services.product_service import (
    create_category,
    list_categories,
    create_product,
    get_all_products,
    get_product,
    update_product,
    delete_product,
    get_recipe,
    set_recipe,
)
from backoffice.schemas.catalog_schemas import (
    CategoryCreate,
    CategoryOut,
    ProductCreate,
    ProductUpdate,
    ProductOut,
    RecipeLineIn,
    RecipeOut,
)
from backoffice.schemas.response_schemas import ResponseMessage, MessageResponse
from backoffice.utils.get_user import get_current_user
from backoffice.utils.check_roles import require_role

router = APIRouter(tags=["Products"])

# -----------------------------------------------------------
# CATEGORIES
# -----------------------------------------------------------
@router.post("/categories", response_model=ResponseMessage[CategoryOut])
@require_role(["admin", "manager"])
async def create_category_route(data: CategoryCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_category(db, data, _user)

@router.get("/categories", response_model=ResponseMessage[List[CategoryOut]])
@require_role(["admin", "manager", "cashier"])
async def list_categories_route(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await list_categories(db)

# -----------------------------------------------------------
# PRODUCTS
# -----------------------------------------------------------
@router.post("/products", response_model=ResponseMessage[ProductOut])
@require_role(["admin", "manager"])
async def create_product_route(data: ProductCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_product(db, data, _user)

@router.get("/products", response_model=ResponseMessage[List[ProductOut]])
@require_role(["admin", "manager", "cashier"])
async def list_products_route(
    search: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await get_all_products(db, search, category_id)

@router.get("/products/{product_id}", response_model=ResponseMessage[ProductOut])
@require_role(["admin", "manager", "cashier"])
async def get_product_route(product_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_product(db, product_id)

@router.put("/products/{product_id}", response_model=ResponseMessage[ProductOut])
@require_role(["admin", "manager"])
async def update_product_route(product_id: int, data: ProductUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await update_product(db, product_id, data, _user)

@router.delete("/products/{product_id}", response_model=MessageResponse)
@require_role(["admin"])
async def delete_product_route(product_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await delete_product(db, product_id, _user)

# -----------------------------------------------------------
# RECIPE (quantities in usage units)
# -----------------------------------------------------------
@router.get("/products/{product_id}/recipe", response_model=ResponseMessage[RecipeOut])
@require_role(["admin", "manager", "inventory"])
async def get_recipe_route(product_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_recipe(db, product_id)

@router.put("/products/{product_id}/recipe", response_model=ResponseMessage[RecipeOut])
@require_role(["admin", "manager"])
async def set_recipe_route(
    product_id: int,
    lines: List[RecipeLineIn],
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await set_recipe(db, product_id, lines, _user)
