from sqlalchemy import (
    Column, Integer, String, Float, ForeignKey, DateTime, Text,
    CheckConstraint, Index, Boolean, Enum, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from backoffice.core.db import Base
import enum

# --------------------------
# Enums
# --------------------------
class UsageUnit(str, enum.Enum):
    g = "g"
    ml = "ml"
    unidad = "unidad"


class MovementType(str, enum.Enum):
    adjustment = "adjustment"
    purchase = "purchase"
    sale = "sale"
    waste = "waste"


# --------------------------
# Inventory item (ingredient / raw material)
# --------------------------
class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(60), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    item_type = Column(String(40), default="raw_material", nullable=False)
    usage_unit = Column(Enum(UsageUnit), default=UsageUnit.unidad, nullable=False)
    buying_unit = Column(String(120), nullable=True)  # display only, e.g. "Saco 50kg"
    conversion_factor = Column(Float, default=1.0, nullable=False)  # purchase unit -> usage unit
    unit_cost = Column(Float, default=0.0, nullable=False)  # cost per usage unit

    # structured presentation, persisted alongside buying_unit
    presentation_name = Column(String(80), nullable=True)
    presentation_content = Column(Float, nullable=True)
    presentation_unit = Column(String(20), nullable=True)

    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    branch_stock = relationship("BranchIngredient", back_populates="ingredient", lazy="selectin")

    __table_args__ = (
        CheckConstraint(conversion_factor >= 0, name="check_item_conversion_factor_non_negative"),
        CheckConstraint(unit_cost >= 0, name="check_item_unit_cost_non_negative"),
    )


# --------------------------
# Per-branch stock
# --------------------------
class BranchIngredient(Base):
    __tablename__ = "branch_ingredients"

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True)
    current_stock = Column(Float, default=0.0, nullable=False)  # usage units
    min_stock_alert = Column(Float, default=0.0, nullable=False)  # usage units
    is_active = Column(Boolean, default=True, nullable=False)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    ingredient = relationship("InventoryItem", back_populates="branch_stock")
    branch = relationship("Branch", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("branch_id", "ingredient_id", name="uq_branch_ingredient"),
    )


# --------------------------
# Recipe line: product consumes ingredient (usage units)
# --------------------------
class ProductRecipe(Base):
    __tablename__ = "product_recipes"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity_required = Column(Float, nullable=False)

    product = relationship("Product", back_populates="recipe_lines")
    ingredient = relationship("InventoryItem", lazy="selectin")

    __table_args__ = (
        CheckConstraint(quantity_required > 0, name="check_recipe_quantity_positive"),
    )


# --------------------------
# Stock movement (traceability)
# --------------------------
class InventoryMovement(Base):
    __tablename__ = "inventory_movements"

    id = Column(Integer, primary_key=True, index=True)
    ingredient_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="CASCADE"), nullable=False, index=True)
    movement_type = Column(Enum(MovementType), nullable=False)
    quantity = Column(Float, nullable=False)  # usage units
    unit_cost = Column(Float, nullable=True)
    reason = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


Index("ix_movement_ingredient_branch", InventoryMovement.ingredient_id, InventoryMovement.branch_id)
