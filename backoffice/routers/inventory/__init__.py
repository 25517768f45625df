from fastapi import APIRouter

from .items import router as items_router
from .stock import router as stock_router

router = APIRouter(prefix="/inventory")

router.include_router(items_router)
router.include_router(stock_router)
