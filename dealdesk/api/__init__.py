"""API router aggregation."""

from fastapi import APIRouter

from dealdesk.api.attachments import router as attachments_router
from dealdesk.api.deals import router as deals_router
from dealdesk.api.health import router as health_router
from dealdesk.api.payments import router as payments_router
from dealdesk.api.products import router as products_router
from dealdesk.api.schedules import router as schedules_router
from dealdesk.api.search import router as search_router

# Main API router (for /api/* endpoints)
api_router = APIRouter(prefix="/api")

api_router.include_router(health_router)
api_router.include_router(deals_router)
api_router.include_router(products_router)
api_router.include_router(schedules_router)
api_router.include_router(payments_router)
api_router.include_router(attachments_router)
api_router.include_router(search_router)

__all__ = ["api_router"]
