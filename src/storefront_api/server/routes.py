"""Service info and health endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_api.core.logger import setup_logger
from storefront_api.server.dependencies import get_db_session

logger = setup_logger(__name__)
router = APIRouter()


@router.get("/")
async def root() -> dict:
    """Root endpoint with basic service info."""
    return {
        "service": "Storefront API",
        "version": "1.0.0",
        "endpoints": {
            "cashier_orders": "POST/GET /cashier/orders",
            "customer_orders": "POST/GET /customer/orders",
            "admin_orders": "GET /admin/orders",
            "health": "GET /health",
            "docs": "GET /docs",
        },
    }


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_db_session)) -> dict:
    """Health check endpoint for monitoring."""
    health_status = {
        "status": "healthy",
        "service": "storefront-api",
        "checks": {},
    }

    try:
        await session.execute(text("SELECT 1"))
        health_status["checks"]["database"] = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        health_status["checks"]["database"] = "unreachable"
        health_status["status"] = "degraded"

    return health_status
