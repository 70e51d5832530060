"""Health check response schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(..., description="Health status (ok, error)")


class ReadinessResponse(BaseModel):
    """Readiness with per-dependency results."""

    status: str = Field(..., description="Overall status (ok, degraded)")
    checks: dict[str, str] = Field(
        default_factory=dict,
        description="Results for the database and the collection cache",
    )
