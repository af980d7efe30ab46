"""
Origin guard and CORS headers.

Browser requests must come from an allow-listed Origin; non-browser clients
omit the header and pass through. Every gateway response, error or not, gets
the same CORS header set.
"""

from django.http import HttpRequest, HttpResponse
from django.utils.cache import patch_vary_headers

from apps.core.logging import get_logger
from apps.gateway.config import GatewayConfig
from apps.gateway.constants import CORS_ALLOW_HEADERS, CORS_ALLOW_METHODS
from apps.gateway.exceptions import ForbiddenOrigin

logger = get_logger(__name__)


def assert_allowed_origin(request: HttpRequest, config: GatewayConfig) -> str | None:
    """
    Validate the Origin header.

    Returns:
        The origin when allow-listed, None when the header is absent.

    Raises:
        ForbiddenOrigin: The request carries an origin not on the allow-list.
    """
    origin = request.headers.get("Origin")
    if not origin:
        return None

    if origin not in config.allowed_origins:
        logger.warning("origin_rejected", origin=origin)
        raise ForbiddenOrigin()

    return origin


def with_cors(response: HttpResponse, origin: str | None, config: GatewayConfig) -> HttpResponse:
    """Stamp CORS headers, echoing the origin only when it is allow-listed."""
    if origin and origin in config.allowed_origins:
        allow_origin = origin
    elif config.allowed_origins:
        allow_origin = config.allowed_origins[0]
    else:
        allow_origin = "*"

    response["Access-Control-Allow-Origin"] = allow_origin
    response["Access-Control-Allow-Credentials"] = "true"
    response["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    response["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    patch_vary_headers(response, ("Origin",))
    return response


def preflight(origin: str | None, config: GatewayConfig) -> HttpResponse:
    """Empty 204 answer to an OPTIONS request."""
    return with_cors(HttpResponse(status=204), origin, config)
