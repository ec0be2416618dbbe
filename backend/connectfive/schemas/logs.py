from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ClientLogEntry(BaseModel):
    level: str = "Information"
    message: str = Field(min_length=1, max_length=5000)
    category: Optional[str] = Field(default=None, max_length=200)
    exception: Optional[str] = Field(default=None, max_length=10000)
    additional_data: Optional[Dict[str, Any]] = None


class TelemetryEvent(BaseModel):
    event_name: str = Field(min_length=1, max_length=200)
    properties: Optional[Dict[str, Any]] = None
    metrics: Optional[Dict[str, float]] = None


class PerformanceMetric(BaseModel):
    metric_name: str = Field(min_length=1, max_length=200)
    value: float = Field(ge=0)
    component: Optional[str] = Field(default=None, max_length=200)


class DiagnosticResult(BaseModel):
    component: str = ""
    is_healthy: bool
    error: Optional[str] = None


class DiagnosticsLog(BaseModel):
    results: List[DiagnosticResult] = []
