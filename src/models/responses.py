"""
Pydantic response models for the service surface.

Defines the error body returned by HTTP routes and the health check
structure returned by the health_check tool.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response structure.

    Attributes:
        code: Error code (HTTP status for routes)
        message: Human-readable error message
        data: Optional additional error context
    """

    code: int = Field(
        ...,
        description="Error code",
    )
    message: str = Field(
        ...,
        min_length=1,
        description="Human-readable error message",
    )
    data: dict[str, Any] | None = Field(
        None,
        description="Additional error context",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": 400,
                "message": "Liveness check failed",
                "data": {"error_type": "RuntimeError"},
            }
        }
    )


class HealthCheckResponse(BaseModel):
    """
    Health check response.

    Used to verify the server is running and the backend is reachable.
    """

    status: str = Field(
        ...,
        description="Overall health status (healthy, degraded, unhealthy)",
    )
    version: str = Field(
        ...,
        description="Server version",
    )
    components: dict[str, str] = Field(
        ...,
        description="Health status of individual components",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "components": {
                    "server": "healthy",
                    "redis_primary": "healthy",
                    "redis_reader": "healthy",
                },
            }
        }
    )
