"""
Health check and metrics endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
import structlog

from ..config import Settings
from ..infrastructure import FirestoreService
from ..middleware.monitoring import prometheus_response
from ..utils.dependencies import get_app_settings, get_firestore
from ..utils.exceptions import DatabaseError

logger = structlog.get_logger()
router = APIRouter(tags=["Health Checks"])


@router.get(
    "/health",
    summary="Health Check",
    description="Service status including database connectivity"
)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    firestore: FirestoreService = Depends(get_firestore)
) -> JSONResponse:
    """
    **Health check endpoint**
    
    Returns 200 while the document store answers and 503 when it does not,
    so load balancers can route around a degraded instance.
    """
    database: Dict[str, Any] = {"status": "healthy"}
    try:
        await firestore.ping()
    except DatabaseError as e:
        logger.warning("Health check database probe failed", error=e.message)
        database = {"status": "unhealthy", "error": e.message}
    
    healthy = database["status"] == "healthy"
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.version,
            "environment": settings.environment,
            "app_name": settings.app_name,
            "checks": {"database": database}
        }
    )


@router.get(
    "/metrics",
    summary="Prometheus Metrics",
    description="Metrics in the Prometheus text exposition format"
)
async def metrics() -> Response:
    return prometheus_response()
