from fastapi import APIRouter

from app.api.v1.endpoints.health import router as health_router
from app.api.v1.endpoints.me import router as me_router
from app.api.v1.endpoints.listings import router as listings_router
from app.api.v1.endpoints.approvals import router as approvals_router
from app.api.v1.endpoints.entitlements import router as entitlements_router


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(me_router, tags=["me"])
router.include_router(listings_router, tags=["listings"])
router.include_router(approvals_router, tags=["approvals"])
router.include_router(entitlements_router, tags=["entitlements"])
