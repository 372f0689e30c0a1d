"""Error response schema shared by every exception handler.

All timestamps are timezone-aware (UTC).
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    """Identifies the service instance that produced an error."""

    name: str = Field(..., description="Name of the service", examples=["Autorest"])
    version: str = Field(..., description="Version of the service", examples=["0.1.0"])
    environment: str = Field(
        ...,
        description="Environment where the service is running",
        examples=["development", "production"],
    )


class ErrorResponse(BaseModel):
    """Standardized error body returned for every failed request."""

    error_code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["VALIDATION_ERROR", "NOT_FOUND", "CONFLICT"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Cat with ID 7 not found"],
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details such as field validation errors",
        examples=[{"validation_errors": {"name": ["Field required"]}}],
    )
    correlation_id: str | None = Field(
        default=None,
        description="Correlation ID of the request, also sent as X-Correlation-ID",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the error occurred",
    )
    severity: str | None = Field(
        default=None,
        description="Error severity (LOW, MEDIUM, HIGH, CRITICAL)",
        examples=["LOW"],
    )
    service_info: ServiceInfo | None = Field(
        default=None,
        description="Service that generated the error",
    )
    request_id: str | None = Field(
        default=None,
        description="Unique identifier of this error response",
        examples=["req-660e8400-e29b-41d4-a716-446655440000"],
    )
    debug_info: dict[str, Any] | None = Field(
        default=None,
        description="Stack trace and context, only populated in development",
    )
