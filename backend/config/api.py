"""
Django Ninja API configuration.
"""

from django.http import HttpRequest
from ninja import NinjaAPI

from apps.gateway.api import router as gateway_router

api = NinjaAPI(
    title="Voice Agent Gateway API",
    version="1.0.0",
    description="Tenant-scoped gateway in front of the voice-AI provider.",
    openapi_extra={
        "tags": [
            {
                "name": "gateway",
                "description": "Origin-checked, rate-limited and audited tenant operations",
            },
            {
                "name": "health",
                "description": "Service health and readiness checks",
            },
        ],
    },
)

# Register routers
api.add_router("/ev", gateway_router)


@api.get("/health", tags=["health"], operation_id="healthCheck", summary="Health check")
def health_check(request: HttpRequest) -> dict:
    """Health check endpoint for load balancer."""
    return {"status": "ok"}
