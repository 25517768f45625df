# backoffice/models/__init__.py
from backoffice.models.user_models import User
from backoffice.models.activity_models import UserActivity
from backoffice.models.catalog_models import (
    Branch,
    SalesChannel,
    Category,
    Product,
    ProductPrice,
    Promotion,
)
from backoffice.models.inventory_models import (
    InventoryItem,
    BranchIngredient,
    ProductRecipe,
    InventoryMovement,
)
