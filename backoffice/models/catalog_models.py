from sqlalchemy import (
    Column, Integer, String, Float, Boolean, CheckConstraint, Index,
    ForeignKey, DateTime, Date, JSON, Enum, func
)
from sqlalchemy.orm import relationship
from backoffice.core.db import Base
import enum

# --------------------------
# Enums
# --------------------------
class SalesChannelType(str, enum.Enum):
    retail = "retail"
    delivery = "delivery"
    wholesale = "wholesale"
    ecommerce = "ecommerce"


class PromotionType(str, enum.Enum):
    global_discount = "global_discount"
    product_discount = "product_discount"
    category_discount = "category_discount"
    buy_x_get_y = "buy_x_get_y"
    combo = "combo"
    # legacy rows: the type itself is the discount kind
    percentage = "percentage"
    fixed_amount = "fixed_amount"


class DiscountType(str, enum.Enum):
    percentage = "percentage"
    fixed_amount = "fixed_amount"


# --------------------------
# Branch
# --------------------------
class Branch(Base):
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False, unique=True)
    address = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Branch(id={self.id}, name='{self.name}')>"


# --------------------------
# Sales Channel
# --------------------------
class SalesChannel(Base):
    __tablename__ = "sales_channels"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False, unique=True)
    type = Column(Enum(SalesChannelType), nullable=False, default=SalesChannelType.retail)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    prices = relationship("ProductPrice", back_populates="channel")


# --------------------------
# Category / Product
# --------------------------
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)

    products = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), index=True, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    price = Column(Float, default=0.0, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    category = relationship("Category", back_populates="products", lazy="selectin")
    recipe_lines = relationship(
        "ProductRecipe",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    prices = relationship("ProductPrice", back_populates="product", cascade="all, delete-orphan")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(price >= 0, name="check_product_price_non_negative"),
    )

    @property
    def category_name(self):
        return self.category.name if self.category else None

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}')>"


# --------------------------
# Price override (per branch and/or channel)
# --------------------------
class ProductPrice(Base):
    __tablename__ = "product_prices"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(Integer, ForeignKey("sales_channels.id", ondelete="CASCADE"), nullable=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="CASCADE"), nullable=True, index=True)
    price = Column(Float, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)  # False = hidden in channel
    ignore_promotions = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    product = relationship("Product", back_populates="prices")
    channel = relationship("SalesChannel", back_populates="prices")

    __table_args__ = (
        CheckConstraint(price >= 0, name="check_override_price_non_negative"),
    )


# --------------------------
# Promotion
# --------------------------
class Promotion(Base):
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    type = Column(String(30), nullable=False)
    value = Column(Float, default=0.0, nullable=False)
    config = Column(JSON, nullable=False, default=dict)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)  # open-ended
    scope_channels = Column(JSON, nullable=False, default=list)  # [] = all channels
    scope_branches = Column(JSON, nullable=False, default=list)  # [] = all branches
    priority = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


Index("ix_product_price_context", ProductPrice.product_id, ProductPrice.channel_id, ProductPrice.branch_id)
Index("ix_promotion_active_priority", Promotion.is_active, Promotion.priority)
