"""Health check response models."""

from pydantic import BaseModel, ConfigDict, Field


class HealthCheckResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str | None = None
    auth_configured: bool = Field(False, alias="authConfigured", description="Whether an API token is set")
    message: str = "API is healthy"

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "status": "ok",
                "version": "0.1.0",
                "environment": "development",
                "authConfigured": True,
                "message": "API is healthy",
            }
        },
    )
