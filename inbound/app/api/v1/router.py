from fastapi import APIRouter

from inbound.app.api.v1.endpoints.health import router as health_router
from inbound.app.api.v1.endpoints.shipments import router as shipments_router
from inbound.app.api.v1.endpoints.acceptances import router as acceptances_router
from inbound.app.api.v1.endpoints.rejections import router as rejections_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(shipments_router, tags=["shipments"])
router.include_router(acceptances_router, tags=["acceptances"])
router.include_router(rejections_router, tags=["rejections"])
