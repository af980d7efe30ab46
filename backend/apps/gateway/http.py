"""
JSON response helpers for gateway routes.

Success bodies are whatever the business handler returns; error bodies are
always {"error", "action", "details"}. Both carry the CORS header set.
"""

from typing import Any

from django.http import Http404, JsonResponse
from ninja.errors import HttpError
from pydantic import ValidationError

from apps.core.schemas import GatewayErrorResponse
from apps.gateway.config import GatewayConfig
from apps.gateway.cors import with_cors
from apps.gateway.exceptions import GatewayError


def ok_json(payload: Any, origin: str | None, config: GatewayConfig, status: int = 200) -> JsonResponse:
    """CORS-stamped JSON success response."""
    return with_cors(JsonResponse(payload, status=status, safe=False), origin, config)


def error_status(error: BaseException, fallback: int = 500) -> int:
    """HTTP status an exception maps to."""
    if isinstance(error, GatewayError):
        return error.status
    if isinstance(error, HttpError):
        return error.status_code
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, Http404):
        return 404
    return _declared_status(error) or fallback


def _declared_status(error: BaseException) -> int | None:
    """HTTP status carried by a business error object, if any."""
    status = getattr(error, "status", None)
    if isinstance(status, int) and not isinstance(status, bool) and 400 <= status < 600:
        return status
    return None


def error_body(error: BaseException, action: str | None = None) -> dict[str, Any]:
    """
    Client-facing error body.

    Gateway errors, HttpError, validation errors and business errors that
    declare an HTTP status (with optional message and details attributes)
    expose their message; anything else is reported as an unexpected
    gateway error so internals never reach the client.
    """
    details = None
    if isinstance(error, GatewayError):
        message = error.message
        details = error.details
    elif isinstance(error, HttpError):
        message = str(error)
    elif isinstance(error, ValidationError):
        message = "Invalid request."
        details = error.errors(include_url=False, include_context=False)
    elif isinstance(error, Http404):
        message = str(error) or "Not found."
    elif _declared_status(error) is not None:
        message = str(getattr(error, "message", None) or error) or GatewayError.default_message
        details = getattr(error, "details", None)
    else:
        message = GatewayError.default_message

    body = GatewayErrorResponse(error=message, action=action, details=details)
    return body.model_dump(mode="json", exclude_none=True)


def error_json(
    error: BaseException,
    origin: str | None,
    config: GatewayConfig,
    fallback_status: int = 500,
    action: str | None = None,
) -> JsonResponse:
    """CORS-stamped JSON error response."""
    status = error_status(error, fallback_status)
    return with_cors(JsonResponse(error_body(error, action), status=status), origin, config)
