# backoffice/services/inventory_services/inventory_item_service.py
import logging
from typing import List

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from backoffice.models.catalog_models import Branch
from backoffice.models.inventory_models import (
    BranchIngredient,
    InventoryItem,
    InventoryMovement,
    MovementType,
)
from backoffice.schemas.inventory_schemas import (
    BranchStockOut,
    InventoryItemCreate,
    InventoryItemOut,
    InventoryItemUpdate,
)
from backoffice.services.inventory_services.unit_conversion import (
    Presentation,
    compute_unit_conversion,
    parse_buying_unit,
    presentation_cost,
    to_usage_quantity,
)
from backoffice.utils.activity_helpers import log_actor_activity
from backoffice.utils.decimal_utils import round2

logger = logging.getLogger(__name__)


def _presentation(item: InventoryItem) -> Presentation:
    if item.presentation_name and item.presentation_content is not None:
        return Presentation(
            name=item.presentation_name,
            content=item.presentation_content,
            unit=item.presentation_unit or "unidad",
        )
    # rows created before the structured columns existed
    return parse_buying_unit(item.buying_unit)


async def _item_out(db: AsyncSession, item: InventoryItem) -> InventoryItemOut:
    result = await db.execute(
        select(BranchIngredient)
        .where(BranchIngredient.ingredient_id == item.id)
        .order_by(BranchIngredient.branch_id)
    )
    stock_rows = result.scalars().all()
    presentation = _presentation(item)

    return InventoryItemOut(
        id=item.id,
        sku=item.sku,
        name=item.name,
        item_type=item.item_type,
        usage_unit=item.usage_unit,
        buying_unit=item.buying_unit,
        conversion_factor=item.conversion_factor,
        unit_cost=item.unit_cost,
        presentation_name=presentation.name,
        presentation_content=presentation.content,
        presentation_unit=presentation.unit,
        presentation_cost=presentation_cost(item.unit_cost, item.conversion_factor),
        total_stock=round2(sum((row.current_stock or 0.0 for row in stock_rows), 0.0)),
        branch_stock=[BranchStockOut.model_validate(row) for row in stock_rows],
        updated_at=item.updated_at,
    )


async def get_item_or_404(db: AsyncSession, item_id: int) -> InventoryItem:
    result = await db.execute(
        select(InventoryItem).where(InventoryItem.id == item_id, InventoryItem.is_deleted == False)
    )
    item = result.scalars().first()
    if not item:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return item


# ---------------------------------------------------
# CREATE ITEM
# ---------------------------------------------------
async def create_item(db: AsyncSession, data: InventoryItemCreate, current_user):
    """
    Create an ingredient from its purchase presentation. The per-usage-unit
    cost comes from the package cost when given, otherwise from unit_cost.
    Initial branch stock and alerts arrive in presentation units.
    """
    try:
        existing = await db.execute(select(InventoryItem).where(InventoryItem.sku == data.sku))
        if existing.scalars().first():
            raise HTTPException(status_code=400, detail=f"SKU '{data.sku}' already exists")

        branch_ids = [row.branch_id for row in data.branch_stock]
        if len(set(branch_ids)) != len(branch_ids):
            raise HTTPException(status_code=400, detail="Each branch may appear only once")
        if branch_ids:
            found = await db.execute(select(Branch.id).where(Branch.id.in_(branch_ids)))
            missing = set(branch_ids) - set(found.scalars().all())
            if missing:
                raise HTTPException(status_code=404, detail=f"Branches not found: {sorted(missing)}")

        conversion = compute_unit_conversion(
            data.presentation_name,
            data.presentation_content,
            data.presentation_unit,
            package_cost=data.presentation_cost,
            current_unit_cost=data.unit_cost,
        )

        item = InventoryItem(
            sku=data.sku,
            name=data.name,
            item_type=data.item_type,
            usage_unit=conversion.usage_unit,
            buying_unit=conversion.buying_unit,
            conversion_factor=conversion.conversion_factor,
            unit_cost=conversion.unit_cost or 0.0,
            presentation_name=data.presentation_name,
            presentation_content=data.presentation_content,
            presentation_unit=data.presentation_unit,
        )
        db.add(item)
        await db.flush()

        for row in data.branch_stock:
            stock = to_usage_quantity(row.stock, item.conversion_factor)
            db.add(BranchIngredient(
                branch_id=row.branch_id,
                ingredient_id=item.id,
                current_stock=stock,
                min_stock_alert=to_usage_quantity(row.alert, item.conversion_factor),
            ))
            if stock > 0:
                db.add(InventoryMovement(
                    ingredient_id=item.id,
                    branch_id=row.branch_id,
                    movement_type=MovementType.adjustment,
                    quantity=stock,
                    unit_cost=item.unit_cost,
                    reason="Initial stock",
                    created_by=current_user.id if current_user else None,
                ))

        await log_actor_activity(
            db, current_user,
            f"created inventory item '{item.name}' (SKU: {item.sku}, {item.buying_unit})"
        )
        await db.commit()
        await db.refresh(item)
        return {"message": "Inventory item created successfully", "data": await _item_out(db, item)}

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Inventory item creation failed")
        raise HTTPException(status_code=500, detail=f"Error creating inventory item: {e}")


# ---------------------------------------------------
# LIST / GET
# ---------------------------------------------------
async def get_all_items(db: AsyncSession, search: str | None = None) -> dict:
    query = select(InventoryItem).where(InventoryItem.is_deleted == False)
    if search:
        query = query.where(InventoryItem.name.ilike(f"%{search}%"))
    result = await db.execute(query.order_by(InventoryItem.name))
    items: List[InventoryItem] = result.scalars().all()
    return {
        "message": "Inventory items fetched successfully",
        "data": [await _item_out(db, item) for item in items],
    }


async def get_item(db: AsyncSession, item_id: int) -> dict:
    item = await get_item_or_404(db, item_id)
    return {"message": "Inventory item fetched successfully", "data": await _item_out(db, item)}


# ---------------------------------------------------
# UPDATE
# ---------------------------------------------------
async def update_item(db: AsyncSession, item_id: int, data: InventoryItemUpdate, current_user):
    try:
        item = await get_item_or_404(db, item_id)
        changes = []
        updates = {
            "name": data.name,
            "item_type": data.item_type,
            "unit_cost": data.unit_cost,
        }

        sent = {"presentation_name", "presentation_content", "presentation_unit"} & data.model_fields_set
        if sent:
            current = _presentation(item)
            name = data.presentation_name if data.presentation_name is not None else current.name
            content = data.presentation_content if data.presentation_content is not None else current.content
            unit = data.presentation_unit if data.presentation_unit is not None else current.unit
            stored_cost = data.unit_cost if data.unit_cost is not None else item.unit_cost

            conversion = compute_unit_conversion(
                name, content, unit,
                package_cost=data.presentation_cost,
                current_unit_cost=stored_cost,
            )
            updates.update({
                "usage_unit": conversion.usage_unit,
                "buying_unit": conversion.buying_unit,
                "conversion_factor": conversion.conversion_factor,
                "unit_cost": conversion.unit_cost or 0.0,
                "presentation_name": name,
                "presentation_content": content,
                "presentation_unit": unit,
            })
        elif data.presentation_cost and item.conversion_factor and item.conversion_factor > 0:
            # package unchanged: stock and recipes keep their usage units
            updates["unit_cost"] = round2(data.presentation_cost / item.conversion_factor)

        for key, value in updates.items():
            if value is not None and getattr(item, key) != value:
                changes.append(f"{key}: {getattr(item, key)} → {value}")
                setattr(item, key, value)

        if changes:
            await log_actor_activity(
                db, current_user,
                f"updated inventory item '{item.name}' (ID: {item.id}) — {', '.join(changes)}"
            )
            await db.commit()
            await db.refresh(item)

        return {"message": "Inventory item updated successfully", "data": await _item_out(db, item)}

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Inventory item update failed")
        raise HTTPException(status_code=500, detail=f"Error updating inventory item: {e}")


# ---------------------------------------------------
# DELETE (Soft Delete)
# ---------------------------------------------------
async def delete_item(db: AsyncSession, item_id: int, current_user):
    item = await get_item_or_404(db, item_id)
    item.is_deleted = True

    await log_actor_activity(db, current_user, f"deleted inventory item '{item.name}' (ID: {item.id})")
    await db.commit()
    return {"message": "Inventory item deleted successfully"}
