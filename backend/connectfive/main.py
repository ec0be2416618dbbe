import logging
import json
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from connectfive.core.database import engine, Base
from connectfive.core.config import settings
from connectfive.core.limiter import limiter
from connectfive.models import player_stat  # noqa: F401  register the table
from connectfive.routes import health, leaderboard, logs
from connectfive.services.notifications import StatsChanged, stats_changes

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(message)s",
)
logger = logging.getLogger(__name__)

_EXTRA_FIELDS = (
    "player_name",
    "difficulty",
    "game_result",
    "attempt",
    "client_ip",
    "request_path",
    "response_time",
)


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
        }
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


# Apply JSON formatter to root logger
handler = logging.StreamHandler()
handler.setFormatter(JSONFormatter())
logging.getLogger().handlers = [handler]


def _log_stats_change(event: StatsChanged) -> None:
    logger.info(
        "Leaderboard changed",
        extra={
            "player_name": event.player_name,
            "difficulty": event.difficulty.value,
            "game_result": event.result.value,
        },
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Connect Five API")
    if settings.is_dev_environment():
        # NOTE: create_all is acceptable for local and test workflows.
        Base.metadata.create_all(bind=engine)
    else:
        logger.info(
            "Skipping schema auto-creation in non-dev environment; run migrations instead"
        )
    unsubscribe = stats_changes.subscribe(_log_stats_change)
    yield
    # Shutdown
    unsubscribe()
    logger.info("Shutting down Connect Five API")


app = FastAPI(
    title="Connect Five Statistics API",
    description="Leaderboards and player statistics for Connect Five",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate limiting: per-IP throttle on write and log ingestion endpoints
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware: origins driven by CORS_ORIGINS env var
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} {response.status_code}",
        extra={
            "request_path": str(request.url.path),
            "response_time": f"{process_time:.3f}s",
        },
    )

    return response


# Include routers
app.include_router(leaderboard.router, prefix="/api/leaderboard", tags=["Leaderboard"])
app.include_router(health.router, prefix="/api/health", tags=["Health"])
app.include_router(logs.router, prefix="/api", tags=["Client Logs"])


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
