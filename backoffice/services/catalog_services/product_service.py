# backoffice/services/catalog_services/product_service.py
import logging
from typing import List

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from backoffice.models.catalog_models import Category, Product
from backoffice.models.inventory_models import InventoryItem, ProductRecipe
from backoffice.schemas.catalog_schemas import (
    CategoryCreate,
    CategoryOut,
    ProductCreate,
    ProductOut,
    ProductUpdate,
    RecipeLineIn,
    RecipeLineOut,
    RecipeOut,
)
from backoffice.services.inventory_services.stock_calculator import RecipeLine, recipe_cost
from backoffice.utils.activity_helpers import log_actor_activity
from backoffice.utils.decimal_utils import round2

logger = logging.getLogger(__name__)


# ---------------------------------------------------
# CATEGORIES
# ---------------------------------------------------
async def create_category(db: AsyncSession, data: CategoryCreate, current_user):
    existing = await db.execute(select(Category).where(Category.name == data.name))
    if existing.scalars().first():
        raise HTTPException(status_code=400, detail=f"Category '{data.name}' already exists")

    category = Category(name=data.name)
    db.add(category)
    await db.flush()
    await log_actor_activity(db, current_user, f"created category '{category.name}'")
    await db.commit()
    await db.refresh(category)
    return {"message": "Category created successfully", "data": CategoryOut.model_validate(category)}


async def list_categories(db: AsyncSession):
    result = await db.execute(select(Category).order_by(Category.name))
    return {
        "message": "Categories fetched successfully",
        "data": [CategoryOut.model_validate(c) for c in result.scalars().all()],
    }


async def _category_name(db: AsyncSession, category_id):
    if category_id is None:
        return None
    category = await db.get(Category, category_id)
    if not category:
        raise HTTPException(status_code=404, detail=f"Category {category_id} not found")
    return category.name


async def _product_out(db: AsyncSession, product: Product) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        category_id=product.category_id,
        category_name=await _category_name(db, product.category_id),
        price=product.price,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


async def get_product_or_404(db: AsyncSession, product_id: int) -> Product:
    result = await db.execute(
        select(Product).where(Product.id == product_id, Product.is_deleted == False)
    )
    product = result.scalars().first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# ---------------------------------------------------
# CREATE PRODUCT
# ---------------------------------------------------
async def create_product(db: AsyncSession, data: ProductCreate, current_user):
    """
    Create a new product and log the creation in the activity log.
    """
    try:
        existing = await db.execute(
            select(Product).where(Product.name == data.name, Product.is_deleted == False)
        )
        if existing.scalars().first():
            raise HTTPException(status_code=400, detail=f"Product '{data.name}' already exists")
        await _category_name(db, data.category_id)

        product = Product(**data.model_dump())
        db.add(product)
        await db.flush()

        await log_actor_activity(db, current_user, f"created product '{product.name}' (ID: {product.id})")

        await db.commit()
        await db.refresh(product)
        return {"message": "Product created successfully", "data": await _product_out(db, product)}

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Product creation failed")
        raise HTTPException(status_code=500, detail=f"Error creating product: {e}")


# ---------------------------------------------------
# LIST / GET PRODUCTS
# ---------------------------------------------------
async def get_all_products(db: AsyncSession, search: str | None = None, category_id: int | None = None) -> dict:
    query = select(Product).where(Product.is_deleted == False)
    if search:
        query = query.where(Product.name.ilike(f"%{search}%"))
    if category_id is not None:
        query = query.where(Product.category_id == category_id)
    result = await db.execute(query.order_by(Product.name))
    products = result.scalars().all()
    return {
        "message": "Products fetched successfully",
        "data": [await _product_out(db, p) for p in products],
    }


async def get_product(db: AsyncSession, product_id: int) -> dict:
    product = await get_product_or_404(db, product_id)
    return {"message": "Product fetched successfully", "data": await _product_out(db, product)}


# ---------------------------------------------------
# UPDATE PRODUCT
# ---------------------------------------------------
async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate, current_user):
    """
    Update product details and log the changes.
    """
    try:
        product = await get_product_or_404(db, product_id)

        if data.price is not None and data.price < 0:
            raise HTTPException(status_code=400, detail="Price must be non-negative")

        changes = []

        if data.name and data.name != product.name:
            existing = await db.execute(
                select(Product).where(
                    Product.name == data.name,
                    Product.id != product_id,
                    Product.is_deleted == False,
                )
            )
            if existing.scalars().first():
                raise HTTPException(status_code=400, detail=f"Product '{data.name}' already exists")
            changes.append(f"name: {product.name} → {data.name}")
            product.name = data.name

        if "category_id" in data.model_fields_set:
            await _category_name(db, data.category_id)

        for key, value in data.model_dump(exclude_unset=True).items():
            if key == "name" or (value is None and key != "category_id"):
                continue
            old_val = getattr(product, key)
            if old_val != value:
                changes.append(f"{key}: {old_val} → {value}")
                setattr(product, key, value)

        if changes:
            await log_actor_activity(
                db, current_user,
                f"updated product '{product.name}' (ID: {product.id}) — {', '.join(changes)}"
            )
            await db.commit()
            await db.refresh(product)

        return {"message": "Product updated successfully", "data": await _product_out(db, product)}

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Product update failed")
        raise HTTPException(status_code=500, detail=f"Error updating product: {e}")


# ---------------------------------------------------
# DELETE PRODUCT (Soft Delete)
# ---------------------------------------------------
async def delete_product(db: AsyncSession, product_id: int, current_user):
    try:
        product = await get_product_or_404(db, product_id)
        product.is_deleted = True

        await log_actor_activity(db, current_user, f"deleted product '{product.name}' (ID: {product.id})")
        await db.commit()
        return {"message": "Product deleted successfully"}

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Product deletion failed")
        raise HTTPException(status_code=500, detail=f"Error deleting product: {e}")


# ---------------------------------------------------
# RECIPE
# ---------------------------------------------------
async def _recipe_out(db: AsyncSession, product_id: int) -> RecipeOut:
    result = await db.execute(
        select(ProductRecipe, InventoryItem)
        .join(InventoryItem, InventoryItem.id == ProductRecipe.ingredient_id)
        .where(ProductRecipe.product_id == product_id)
        .order_by(ProductRecipe.id)
    )
    rows = result.all()

    lines: List[RecipeLineOut] = []
    unit_costs = {}
    for recipe, item in rows:
        unit_costs[item.id] = item.unit_cost
        lines.append(
            RecipeLineOut(
                ingredient_id=item.id,
                ingredient_name=item.name,
                quantity_required=recipe.quantity_required,
                usage_unit=item.usage_unit.value if item.usage_unit else None,
                line_cost=round2(item.unit_cost * recipe.quantity_required),
            )
        )
    total = recipe_cost(
        [RecipeLine(line.ingredient_id, line.quantity_required) for line in lines], unit_costs
    )
    return RecipeOut(product_id=product_id, lines=lines, total_cost=round2(total))


async def get_recipe(db: AsyncSession, product_id: int):
    await get_product_or_404(db, product_id)
    return {"message": "Recipe fetched successfully", "data": await _recipe_out(db, product_id)}


async def set_recipe(db: AsyncSession, product_id: int, lines: List[RecipeLineIn], current_user):
    """Replace the whole recipe of a product. Quantities are in usage units."""
    try:
        product = await get_product_or_404(db, product_id)

        ingredient_ids = {line.ingredient_id for line in lines}
        if len(ingredient_ids) != len(lines):
            raise HTTPException(status_code=400, detail="Each ingredient may appear only once in a recipe")
        if ingredient_ids:
            found = await db.execute(
                select(InventoryItem.id).where(
                    InventoryItem.id.in_(ingredient_ids), InventoryItem.is_deleted == False
                )
            )
            missing = ingredient_ids - set(found.scalars().all())
            if missing:
                raise HTTPException(status_code=404, detail=f"Ingredients not found: {sorted(missing)}")

        # delete-orphan cascade removes the previous lines
        product.recipe_lines = [
            ProductRecipe(ingredient_id=line.ingredient_id, quantity_required=line.quantity_required)
            for line in lines
        ]

        await log_actor_activity(
            db, current_user, f"set recipe of product '{product.name}' ({len(lines)} ingredients)"
        )
        await db.commit()
        return {"message": "Recipe saved successfully", "data": await _recipe_out(db, product_id)}

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Recipe update failed")
        raise HTTPException(status_code=500, detail=f"Error saving recipe: {e}")
