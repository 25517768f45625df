# backoffice/schemas/inventory_schemas.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from backoffice.models.inventory_models import UsageUnit, MovementType


# --------------------------
# Inventory item
# --------------------------
class BranchStockIn(BaseModel):
    """Initial stock and alert for a branch, in presentation units (e.g. 2 sacks)."""
    branch_id: int
    stock: float = Field(default=0, ge=0)
    alert: float = Field(default=0, ge=0)

class InventoryItemCreate(BaseModel):
    sku: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    item_type: str = "raw_material"
    presentation_name: str = "Unidad"
    presentation_content: float = Field(default=1, ge=0)
    presentation_unit: str = "unidad"
    presentation_cost: float = Field(default=0, ge=0)
    unit_cost: float = Field(default=0, ge=0)
    branch_stock: List[BranchStockIn] = Field(default_factory=list)

class InventoryItemUpdate(BaseModel):
    name: Optional[str] = None
    item_type: Optional[str] = None
    presentation_name: Optional[str] = None
    presentation_content: Optional[float] = Field(default=None, ge=0)
    presentation_unit: Optional[str] = None
    presentation_cost: Optional[float] = Field(default=None, ge=0)
    unit_cost: Optional[float] = Field(default=None, ge=0)

class BranchStockOut(BaseModel):
    branch_id: int
    current_stock: float
    min_stock_alert: float
    is_active: bool

    class Config:
        from_attributes = True

class InventoryItemOut(BaseModel):
    id: int
    sku: str
    name: str
    item_type: str
    usage_unit: UsageUnit
    buying_unit: Optional[str] = None
    conversion_factor: float
    unit_cost: float
    presentation_name: str
    presentation_content: float
    presentation_unit: str
    presentation_cost: float
    total_stock: float = 0.0
    branch_stock: List[BranchStockOut] = Field(default_factory=list)
    updated_at: Optional[datetime] = None


# --------------------------
# Stock
# --------------------------
class StockReceive(BaseModel):
    branch_id: int
    quantity: float = Field(..., gt=0)  # presentation units
    price: float = Field(..., ge=0)  # cost per presentation unit
    reason: Optional[str] = None

class StockReceiveOut(BaseModel):
    ingredient_id: int
    branch_id: int
    received_usage_quantity: float
    current_stock: float
    unit_cost: float

class StockAlert(BaseModel):
    ingredient_id: int
    ingredient_name: str
    branch_id: int
    current_stock: float
    min_stock_alert: float
    usage_unit: UsageUnit

class MovementOut(BaseModel):
    id: int
    ingredient_id: int
    branch_id: int
    movement_type: MovementType
    quantity: float
    unit_cost: Optional[float] = None
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
