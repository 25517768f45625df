from fastapi import APIRouter

from .channels import router as channels_router
from .products import router as products_router
from .prices import router as prices_router
from .promotions import router as promotions_router

router = APIRouter(prefix="/catalog")

router.include_router(channels_router)
router.include_router(products_router)
router.include_router(prices_router)
router.include_router(promotions_router)
