"""Health check endpoints for monitoring."""

from fastapi import APIRouter
from sqlalchemy import text

from aidreams.api.core.dependencies import AsyncSessionDep
from aidreams.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check(db: AsyncSessionDep) -> dict:
    """Report database connectivity."""
    try:
        await db.execute(text("SELECT 1"))
        database = "healthy"
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        database = "unhealthy"
    return {
        "status": "ok" if database == "healthy" else "degraded",
        "database": database,
    }


@router.get("/liveness")
async def liveness_check():
    """Simple liveness check - indicates if service is running."""
    return {"status": "alive", "service": "aidreams-api"}
