from typing import Any

from pydantic import BaseModel, Field


class CacheHealthResponse(BaseModel):
    """Cache health (nested in HealthCheckResponse)."""

    backend: str
    status: str
    statistics: dict[str, Any] = Field(default_factory=dict)
    info: dict[str, Any] | None = None
    error: str | None = None


class HealthCheckResponse(BaseModel):
    """Health check response model."""

    version: str = Field(description="API version")
    status: str = Field(description="Overall health status")
    timestamp: str = Field(description="Current timestamp")
    storage: str = Field(description="Configured cover storage provider")
    cache: CacheHealthResponse | None = Field(default=None, description="Cache health information")
