"""
Core schemas - shared Pydantic models for API responses.
"""

from typing import Any

from pydantic import BaseModel, Field


class GatewayErrorResponse(BaseModel):
    """Error body returned by every gateway route."""

    error: str = Field(..., description="Human-readable error message")
    action: str | None = Field(default=None, description="Gateway action being attempted")
    details: Any = Field(default=None, description="Structured details, e.g. validation errors")

    model_config = {
        "json_schema_extra": {
            "example": {"error": "User request limit reached.", "action": "agents.list"}
        }
    }
