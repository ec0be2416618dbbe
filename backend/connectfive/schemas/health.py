from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class HealthCheckResult(BaseModel):
    component: str
    is_healthy: bool
    error: Optional[str] = None
    response_time_ms: float = 0.0


class HealthResponse(BaseModel):
    # Healthy | Unhealthy
    status: str
    timestamp: datetime
    checks: List[HealthCheckResult] = []
