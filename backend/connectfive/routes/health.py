import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from connectfive.core.config import settings
from connectfive.core.dependencies import get_stats_service
from connectfive.schemas.health import HealthCheckResult, HealthResponse
from connectfive.services.stats_service import StatsAggregationService

router = APIRouter()
logger = logging.getLogger(__name__)

STORAGE_COMPONENT = "Stat Store"


def _storage_check(stats: StatsAggregationService) -> HealthCheckResult:
    health = stats.check_connection()
    return HealthCheckResult(
        component=STORAGE_COMPONENT,
        is_healthy=health.ok,
        error=health.error,
        response_time_ms=round(health.response_time_ms, 3),
    )


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.get("", response_model=HealthResponse)
def check_health(
    request: Request, stats: StatsAggregationService = Depends(get_stats_service)
):
    """Overall health: 200 when every dependency answers, 503 otherwise."""
    logger.info("Health check requested", extra={"client_ip": _client_ip(request)})

    checks = [_storage_check(stats)]
    all_healthy = all(check.is_healthy for check in checks)
    body = HealthResponse(
        status="Healthy" if all_healthy else "Unhealthy",
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )

    if not all_healthy:
        unhealthy = ", ".join(c.component for c in checks if not c.is_healthy)
        logger.warning(f"Health check failed. Unhealthy components: {unhealthy}")
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))
    return body


@router.get("/ping")
def ping():
    return {
        "status": "healthy",
        "service": "connectfive-api",
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/checks/storage")
def check_storage(
    request: Request, stats: StatsAggregationService = Depends(get_stats_service)
):
    logger.info("Storage check requested", extra={"client_ip": _client_ip(request)})

    result = _storage_check(stats)
    timestamp = datetime.now(timezone.utc).isoformat()
    if not result.is_healthy:
        logger.warning(f"Storage check failed: {result.error}")
        return JSONResponse(
            status_code=503,
            content={"status": "Unhealthy", "error": result.error, "timestamp": timestamp},
        )
    return {"status": "Healthy", "timestamp": timestamp}
