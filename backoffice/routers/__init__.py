# backoffice/routers/__init__.py

from .auth_router import router as auth_router
from .branches_router import router as branches_router
from .catalog import router as catalog_router
from .inventory import router as inventory_router

__all__ = [
    "auth_router",
    "branches_router",
    "catalog_router",
    "inventory_router",
]
