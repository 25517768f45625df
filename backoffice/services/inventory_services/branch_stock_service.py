# backoffice/services/inventory_services/branch_stock_service.py
import logging

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from backoffice.models.inventory_models import (
    BranchIngredient,
    InventoryItem,
    InventoryMovement,
    MovementType,
)
from backoffice.schemas.inventory_schemas import (
    BranchStockOut,
    MovementOut,
    StockAlert,
    StockReceive,
    StockReceiveOut,
)
from backoffice.services.catalog_services.channel_service import get_branch_or_404
from backoffice.services.inventory_services.inventory_item_service import get_item_or_404
from backoffice.services.inventory_services.unit_conversion import (
    to_usage_quantity,
    weighted_average_cost,
)
from backoffice.utils.activity_helpers import log_actor_activity
from backoffice.utils.decimal_utils import round2

logger = logging.getLogger(__name__)


# ---------------------------------------------------
# RECEIVE STOCK (purchase)
# ---------------------------------------------------
async def receive_stock(db: AsyncSession, item_id: int, data: StockReceive, current_user):
    """
    Register a purchase of `quantity` presentations at `price` each into a branch.
    Stock grows in usage units and the item cost becomes the weighted average
    of what was on hand (all branches) and what was received.
    """
    try:
        item = await get_item_or_404(db, item_id)
        branch = await get_branch_or_404(db, data.branch_id)

        if not item.conversion_factor or item.conversion_factor <= 0:
            raise HTTPException(
                status_code=400,
                detail=f"Item '{item.name}' has no conversion factor; fix its presentation first",
            )

        received = to_usage_quantity(data.quantity, item.conversion_factor)
        received_unit_cost = data.price / item.conversion_factor

        total_on_hand = (await db.execute(
            select(func.coalesce(func.sum(BranchIngredient.current_stock), 0.0))
            .where(BranchIngredient.ingredient_id == item.id)
        )).scalar_one()

        new_cost = weighted_average_cost(total_on_hand, item.unit_cost, received, received_unit_cost)
        logger.info(
            "Receiving %s x%s into branch %s: cost %s -> %s",
            item.sku, data.quantity, branch.id, item.unit_cost, new_cost,
        )
        item.unit_cost = new_cost

        result = await db.execute(
            select(BranchIngredient).where(
                BranchIngredient.ingredient_id == item.id,
                BranchIngredient.branch_id == branch.id,
            )
        )
        stock_row = result.scalars().first()
        if stock_row:
            stock_row.current_stock = (stock_row.current_stock or 0.0) + received
        else:
            stock_row = BranchIngredient(
                branch_id=branch.id,
                ingredient_id=item.id,
                current_stock=received,
                min_stock_alert=0.0,
            )
            db.add(stock_row)

        db.add(InventoryMovement(
            ingredient_id=item.id,
            branch_id=branch.id,
            movement_type=MovementType.purchase,
            quantity=received,
            unit_cost=round2(received_unit_cost),
            reason=data.reason or "Purchase",
            created_by=current_user.id if current_user else None,
        ))
        await db.flush()

        await log_actor_activity(
            db, current_user,
            f"received {data.quantity} x {item.buying_unit} of '{item.name}' into branch '{branch.name}'"
        )
        current_stock = stock_row.current_stock
        await db.commit()

        return {
            "message": "Stock received successfully",
            "data": StockReceiveOut(
                ingredient_id=item.id,
                branch_id=branch.id,
                received_usage_quantity=round2(received),
                current_stock=round2(current_stock),
                unit_cost=new_cost,
            ),
        }

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Stock reception failed")
        raise HTTPException(status_code=500, detail=f"Error receiving stock: {e}")


# ---------------------------------------------------
# STOCK / ALERTS / MOVEMENTS
# ---------------------------------------------------
async def list_stock(db: AsyncSession, branch_id: int | None = None):
    query = select(BranchIngredient).order_by(BranchIngredient.branch_id, BranchIngredient.ingredient_id)
    if branch_id is not None:
        query = query.where(BranchIngredient.branch_id == branch_id)
    result = await db.execute(query)
    return {
        "message": "Stock fetched successfully",
        "data": [BranchStockOut.model_validate(row) for row in result.scalars().all()],
    }


async def get_stock_alerts(db: AsyncSession, branch_id: int | None = None):
    """Active rows at or under their alert level. A zero alert means no alert configured."""
    query = (
        select(BranchIngredient, InventoryItem)
        .join(InventoryItem, InventoryItem.id == BranchIngredient.ingredient_id)
        .where(
            InventoryItem.is_deleted == False,
            BranchIngredient.is_active == True,
            BranchIngredient.min_stock_alert > 0,
            BranchIngredient.current_stock <= BranchIngredient.min_stock_alert,
        )
        .order_by(BranchIngredient.branch_id, InventoryItem.name)
    )
    if branch_id is not None:
        query = query.where(BranchIngredient.branch_id == branch_id)
    result = await db.execute(query)

    alerts = [
        StockAlert(
            ingredient_id=item.id,
            ingredient_name=item.name,
            branch_id=row.branch_id,
            current_stock=row.current_stock,
            min_stock_alert=row.min_stock_alert,
            usage_unit=item.usage_unit,
        )
        for row, item in result.all()
    ]
    return {"message": "Stock alerts fetched successfully", "data": alerts}


async def list_movements(
    db: AsyncSession,
    ingredient_id: int | None = None,
    branch_id: int | None = None,
    limit: int = 100,
):
    query = select(InventoryMovement).order_by(InventoryMovement.created_at.desc(), InventoryMovement.id.desc())
    if ingredient_id is not None:
        query = query.where(InventoryMovement.ingredient_id == ingredient_id)
    if branch_id is not None:
        query = query.where(InventoryMovement.branch_id == branch_id)
    result = await db.execute(query.limit(limit))
    return {
        "message": "Movements fetched successfully",
        "data": [MovementOut.model_validate(m) for m in result.scalars().all()],
    }
