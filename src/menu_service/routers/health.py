import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from menu_service.db import get_db
from menu_service.dependencies.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level dependency objects to avoid calling Depends() in function defaults
db_dependency = Depends(get_db)
settings_dependency = Depends(get_settings)


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check(db: Session = db_dependency, settings: Settings = settings_dependency):
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        - status: overall health status
        - timestamp: current server time
        - database: database connection status
        - service: application name
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": settings.app_name,
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception as e:
        logger.error(f"Health check database probe failed: {e}", exc_info=True)
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        health_status["error"] = str(e)
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health_status)

    return health_status


@router.get("/readiness", status_code=status.HTTP_200_OK)
async def readiness_check():
    """Returns 200 once the service is ready to accept traffic."""
    return {"ready": True}


@router.get("/liveness", status_code=status.HTTP_200_OK)
async def liveness_check():
    return {"alive": True}
