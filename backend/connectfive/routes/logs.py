"""
Client-side log, telemetry and diagnostics ingestion.

Browsers post what they saw; the API writes it to the server log so
everything lands in one place.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from connectfive.core.config import settings
from connectfive.core.limiter import limiter
from connectfive.schemas.logs import (
    ClientLogEntry,
    DiagnosticsLog,
    PerformanceMetric,
    TelemetryEvent,
)

router = APIRouter()
logger = logging.getLogger("connectfive.client")

_CLIENT_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "information": logging.INFO,
    "info": logging.INFO,
}


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/log/client")
@limiter.limit(settings.CLIENT_LOG_RATE_LIMIT)
def log_from_client(request: Request, entry: ClientLogEntry):
    level = _CLIENT_LEVELS.get(entry.level.lower(), logging.DEBUG)
    message = f"[Client] {entry.message} | Category: {entry.category}"
    if entry.additional_data:
        message += f" | Data: {entry.additional_data}"
    if entry.exception and level >= logging.ERROR:
        message += f" | Exception: {entry.exception}"
    logger.log(level, message, extra={"client_ip": _client_ip(request)})
    return {"status": "logged", "timestamp": _now()}


@router.post("/log/event")
@limiter.limit(settings.CLIENT_LOG_RATE_LIMIT)
def log_event(request: Request, event: TelemetryEvent):
    logger.info(
        f"[Client Event] {event.event_name} | Properties: {event.properties} "
        f"| Metrics: {event.metrics}",
        extra={"client_ip": _client_ip(request)},
    )
    return {"status": "tracked", "event_name": event.event_name, "timestamp": _now()}


@router.post("/log/performance")
@limiter.limit(settings.CLIENT_LOG_RATE_LIMIT)
def log_performance(request: Request, metric: PerformanceMetric):
    logger.info(
        f"[Client Performance] {metric.metric_name}: {metric.value}ms "
        f"| Component: {metric.component}",
        extra={"client_ip": _client_ip(request)},
    )
    return {"status": "tracked", "timestamp": _now()}


@router.post("/diagnostics")
@limiter.limit(settings.CLIENT_LOG_RATE_LIMIT)
def log_diagnostics(request: Request, report: DiagnosticsLog):
    client_ip = _client_ip(request)
    referer = request.headers.get("referer", "")
    logger.info(
        f"Received diagnostics log from {referer or 'unknown page'}",
        extra={"client_ip": client_ip},
    )
    for result in report.results:
        if not result.is_healthy:
            logger.warning(
                f"Unhealthy diagnostic result: {result.component} - {result.error}",
                extra={"client_ip": client_ip},
            )
    return {"status": "logged", "timestamp": _now()}
