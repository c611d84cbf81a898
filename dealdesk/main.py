"""
DealDesk - Talent & Brand Deal CRM backend

Main FastAPI application with:
- Deal, product, schedule and commission split endpoints
- Activity feed, notes and attachments
- CSV/PDF deal export
- Global search
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import text

from dealdesk import __version__
from dealdesk.api import api_router
from dealdesk.config import settings
from dealdesk.db import get_db_context

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup checks database connectivity; schema changes go through Alembic.
    """
    logger.info("Starting DealDesk...")

    async with get_db_context() as db:
        await db.execute(text("SELECT 1"))

    logger.info(
        "DealDesk started (split over-allocation policy: %s, paid split lock: %s)",
        settings.split_over_allocation_policy,
        settings.enforce_paid_split_lock,
    )

    yield

    logger.info("Shutting down DealDesk...")


# Create FastAPI application
app = FastAPI(
    title="DealDesk",
    description="Talent & brand deal CRM with commission split allocation",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

app.include_router(api_router)  # /api/* endpoints


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "dealdesk.main:app",
        host="0.0.0.0",
        port=3001,
        reload=not settings.is_production,
    )
