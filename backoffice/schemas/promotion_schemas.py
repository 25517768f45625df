# backoffice/schemas/promotion_schemas.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import date
from backoffice.models.catalog_models import PromotionType


class PromotionBase(BaseModel):
    name: str = Field(..., min_length=1)
    type: PromotionType
    value: float = Field(default=0, ge=0)
    config: Dict[str, Any] = Field(default_factory=dict)
    start_date: date
    end_date: Optional[date] = None
    scope_channels: List[int] = Field(default_factory=list)
    scope_branches: List[int] = Field(default_factory=list)
    priority: int = 0

class PromotionCreate(PromotionBase):
    is_active: bool = True

class PromotionUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[PromotionType] = None
    value: Optional[float] = Field(default=None, ge=0)
    config: Optional[Dict[str, Any]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    scope_channels: Optional[List[int]] = None
    scope_branches: Optional[List[int]] = None
    priority: Optional[int] = None

class PromotionOut(PromotionBase):
    id: int
    is_active: bool
    status: str = "active"  # active | scheduled | expired | inactive

    class Config:
        from_attributes = True

class PromotionResponse(BaseModel):
    message: str
    data: Optional[PromotionOut] = None

class PromotionListResponse(BaseModel):
    message: str
    data: List[PromotionOut]
