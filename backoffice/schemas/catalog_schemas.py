# backoffice/schemas/catalog_schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from backoffice.models.catalog_models import SalesChannelType


# --------------------------
# Branch
# --------------------------
class BranchCreate(BaseModel):
    name: str = Field(..., min_length=1)
    address: Optional[str] = None

class BranchOut(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


# --------------------------
# Sales Channel
# --------------------------
class ChannelCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: SalesChannelType = SalesChannelType.retail
    is_active: bool = True

class ChannelUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[SalesChannelType] = None
    is_active: Optional[bool] = None

class ChannelOut(BaseModel):
    id: int
    name: str
    type: SalesChannelType
    is_active: bool

    class Config:
        from_attributes = True


# --------------------------
# Category / Product
# --------------------------
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)

class CategoryOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category_id: Optional[int] = None
    price: float

    @field_validator("price")
    def non_negative_price(cls, value):
        if value < 0:
            raise ValueError("Must be non-negative")
        return value

class ProductUpdate(BaseModel):
    """All fields optional for partial updates."""
    name: Optional[str] = None
    category_id: Optional[int] = None
    price: Optional[float] = None

class ProductOut(BaseModel):
    id: int
    name: str
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    price: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecipeLineIn(BaseModel):
    ingredient_id: int
    quantity_required: float = Field(..., gt=0)

class RecipeLineOut(BaseModel):
    ingredient_id: int
    ingredient_name: Optional[str] = None
    quantity_required: float
    usage_unit: Optional[str] = None
    line_cost: float = 0.0

class RecipeOut(BaseModel):
    product_id: int
    lines: List[RecipeLineOut]
    total_cost: float


# --------------------------
# Price overrides
# --------------------------
class PriceOverrideUpsert(BaseModel):
    product_id: int
    channel_id: Optional[int] = None
    branch_id: Optional[int] = None
    price: float = Field(..., ge=0)
    ignore_promotions: bool = False
    is_active: Optional[bool] = None

class PriceVisibilityUpdate(BaseModel):
    product_id: int
    channel_id: int
    branch_id: Optional[int] = None
    is_active: bool

class PriceOverrideOut(BaseModel):
    id: int
    product_id: int
    channel_id: Optional[int] = None
    branch_id: Optional[int] = None
    price: float
    is_active: bool
    ignore_promotions: bool

    class Config:
        from_attributes = True


# --------------------------
# Channel catalog listing
# --------------------------
class AppliedPromotionOut(BaseModel):
    id: Optional[int] = None
    name: str
    type: str
    value: float
    discount_type: Optional[str] = None

class ChannelProductOut(BaseModel):
    id: int
    name: str
    category: str
    base_price: float
    override_price: float
    current_price: float
    formatted_price: str
    currency: str
    has_override: bool
    is_active_in_channel: bool
    ignore_promotions: bool
    stock: int
    cost: float
    applied_promotion: Optional[AppliedPromotionOut] = None

class BranchPriceOut(BaseModel):
    branch_id: int
    branch_name: str
    price: float
    is_promotion: bool
