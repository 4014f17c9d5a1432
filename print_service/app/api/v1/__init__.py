from fastapi import APIRouter

from .adjustments import router as adjustments_router
from .catalog import router as catalog_router
from .dashboard import router as dashboard_router
from .earnings import router as earnings_router
from .orders import router as orders_router
from .photographers import router as photographers_router
from .photos import router as photos_router
from .redeems import router as redeems_router

api_router = APIRouter()
api_router.include_router(
    photographers_router, prefix="/photographers", tags=["photographers"]
)
api_router.include_router(orders_router, prefix="/orders", tags=["orders"])
api_router.include_router(redeems_router, prefix="/redeems", tags=["redeems"])
api_router.include_router(
    adjustments_router, prefix="/adjustments", tags=["adjustments"]
)
api_router.include_router(earnings_router, prefix="/earnings", tags=["earnings"])
api_router.include_router(catalog_router, prefix="/catalog", tags=["catalog"])
api_router.include_router(photos_router, prefix="/photos", tags=["photos"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
