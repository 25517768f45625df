# backoffice/schemas/pricing_schemas.py
"""
Immutable snapshots handed to the price resolver.

Services load rows from the database and convert them into these models, so
the resolver never touches the ORM or the session.
"""
from datetime import date, datetime
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from backoffice.models.catalog_models import PromotionType

DiscountKind = Literal["percentage", "fixed_amount"]


def _lenient_discount_type(value):
    # a bad record degrades to "no discount" instead of failing validation
    if isinstance(value, str) and value in ("percentage", "fixed_amount"):
        return value
    return None


# --------------------------
# Promotion config variants
# --------------------------
class _ConfigBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class GlobalDiscountConfig(_ConfigBase):
    kind: Literal["global_discount"] = "global_discount"
    discount_type: Optional[DiscountKind] = None

    lenient_discount_type = field_validator("discount_type", mode="before")(_lenient_discount_type)


class ProductDiscountConfig(_ConfigBase):
    kind: Literal["product_discount"] = "product_discount"
    discount_type: Optional[DiscountKind] = None
    target_product_ids: Tuple[int, ...] = ()

    lenient_discount_type = field_validator("discount_type", mode="before")(_lenient_discount_type)


class CategoryDiscountConfig(_ConfigBase):
    kind: Literal["category_discount"] = "category_discount"
    discount_type: Optional[DiscountKind] = None
    target_categories: Tuple[str, ...] = ()

    lenient_discount_type = field_validator("discount_type", mode="before")(_lenient_discount_type)


class BuyXGetYConfig(_ConfigBase):
    """Customer takes get_qty units and pays for buy_qty ("2x1" -> get 2, buy 1)."""
    kind: Literal["buy_x_get_y"] = "buy_x_get_y"
    buy_qty: Optional[int] = None
    get_qty: Optional[int] = None
    target_product_ids: Tuple[int, ...] = ()


class ComboConfig(_ConfigBase):
    kind: Literal["combo"] = "combo"
    target_product_ids: Tuple[int, ...] = ()


class LegacyDiscountConfig(_ConfigBase):
    """Old rows whose promotion type is itself the discount kind."""
    kind: Literal["percentage", "fixed_amount"]

    @property
    def discount_type(self) -> DiscountKind:
        return self.kind


PromotionConfig = Annotated[
    Union[
        GlobalDiscountConfig,
        ProductDiscountConfig,
        CategoryDiscountConfig,
        BuyXGetYConfig,
        ComboConfig,
        LegacyDiscountConfig,
    ],
    Field(discriminator="kind"),
]

_PROMOTION_FIELDS = (
    "id", "name", "type", "value", "config", "start_date", "end_date",
    "scope_channels", "scope_branches", "priority", "is_active",
)


# --------------------------
# Snapshots
# --------------------------
class PromotionSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str = ""
    type: PromotionType
    value: float = 0.0
    config: PromotionConfig
    start_date: Union[datetime, date]
    end_date: Optional[Union[datetime, date]] = None
    scope_channels: Tuple[int, ...] = ()
    scope_branches: Tuple[int, ...] = ()
    priority: int = 0
    is_active: bool = True

    @model_validator(mode="before")
    @classmethod
    def tag_config(cls, data):
        if not isinstance(data, dict):
            data = {f: getattr(data, f, None) for f in _PROMOTION_FIELDS}
        data = {k: v for k, v in data.items() if v is not None or k == "end_date"}
        config = data.get("config")
        if not isinstance(config, dict):
            config = {}
        promo_type = data.get("type")
        if isinstance(promo_type, PromotionType):
            promo_type = promo_type.value
        config = {k: v for k, v in config.items() if v is not None}
        data["config"] = {**config, "kind": promo_type}
        return data

    @field_validator("value", mode="before")
    @classmethod
    def default_value(cls, value):
        return 0.0 if value is None else value

    @property
    def discount_type(self) -> Optional[str]:
        return getattr(self.config, "discount_type", None)


class PriceOverrideSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: Optional[int] = None
    product_id: int
    branch_id: Optional[int] = None
    channel_id: Optional[int] = None
    price: float = 0.0
    is_active: bool = True
    ignore_promotions: bool = False

    @field_validator("price", mode="before")
    @classmethod
    def default_price(cls, value):
        return 0.0 if value is None else value


class PricingProduct(BaseModel):
    """Product as seen by pricing. `category` is the canonical category key (its name)."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    category: Optional[str] = None
    base_price: float = 0.0
    cost: float = 0.0

    @field_validator("base_price", "cost", mode="before")
    @classmethod
    def default_zero(cls, value):
        return 0.0 if value is None else value
