"""
Health check routes for monitoring and service discovery.
Provides endpoints to verify service health and database connectivity.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from realty.api.deps import SessionDep
from realty.core.config import settings
from realty.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict:
    """
    Basic health check endpoint.
    Returns service status and version information.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
    }


@router.get("/health/database")
def database_health_check(session: SessionDep) -> JSONResponse:
    """
    Database health check endpoint.
    Answers 503 when the database cannot run a trivial query.
    """
    try:
        result = session.connection().execute(text("SELECT 1")).scalar()
        return JSONResponse(
            {
                "healthy": True,
                "status": "healthy",
                "database": "ok",
                "result": int(result) if result is not None else 1,
            }
        )
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            {"healthy": False, "status": "unhealthy", "database": "error", "message": str(e)},
            status_code=503,
        )
