"""
Request orchestrator - the single entry point every gateway route calls.

Per request::

    origin guard -> tenant resolver -> rate limiter -> business handler -> audit

Failures before a tenant is resolved (forbidden origin, cross-tenant
headers) are answered without a tenant audit entry. From the rate check
onwards every outcome, success or failure, is audited exactly once with the
status the client receives.

Usage::

    @router.get("/agents")
    def list_agents(request: HttpRequest) -> HttpResponse:
        return run_gateway_handler(request, GatewayAction.AGENTS_LIST, _list_agents)
"""

import time
from collections.abc import Callable
from typing import Any

from django.http import HttpRequest, HttpResponse

from apps.core.logging import bind_contextvars, get_logger
from apps.core.utils import get_client_ip
from apps.gateway.audit import write_anonymous_audit_log, write_audit_log
from apps.gateway.config import GatewayConfig, get_gateway_config
from apps.gateway.constants import GatewayAction
from apps.gateway.cors import assert_allowed_origin, preflight
from apps.gateway.http import error_json, error_status, ok_json
from apps.gateway.rate_limit import enforce_rate_limit
from apps.gateway.tenant import resolve_tenant
from apps.gateway.types import GatewayRequestContext, HandlerResult

logger = get_logger(__name__)

GatewayHandler = Callable[[GatewayRequestContext], HandlerResult | Any]


def authorize_gateway_request(request: HttpRequest, config: GatewayConfig) -> GatewayRequestContext:
    """
    Check the origin and resolve the tenant.

    Raises:
        ForbiddenOrigin: Origin header not allow-listed.
        InvalidGatewayRequest: Malformed X-Org-Id / X-User-Id.
        CrossTenantViolation: X-User-Id belongs to another org.
    """
    origin = assert_allowed_origin(request, config)
    tenant = resolve_tenant(request, config)

    bind_contextvars(
        **{
            "organization.id": tenant.org.id,
            "usr.id": tenant.user.id,
        }
    )

    return GatewayRequestContext(
        tenant=tenant,
        origin=origin,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )


def run_gateway_handler(
    request: HttpRequest,
    action: str,
    handler: GatewayHandler,
    config: GatewayConfig | None = None,
) -> HttpResponse:
    """
    Run a business handler behind the gateway checks.

    The handler receives the GatewayRequestContext and returns a
    HandlerResult (or a bare payload, treated as a 200). Errors it raises
    are converted to JSON error responses; see apps.gateway.http.

    Raises:
        ValueError: action is not a GatewayAction value.
    """
    config = config or get_gateway_config()
    # Unknown tags are a routing bug, not a client error
    action = GatewayAction(action).value
    started = time.monotonic()
    bind_contextvars(**{"gateway.action": action})

    ctx: GatewayRequestContext | None = None
    try:
        ctx = authorize_gateway_request(request, config)
        enforce_rate_limit(ctx.tenant, config)
        result = _as_result(handler(ctx))
        # Serialized before the audit write: audited status equals response status
        response = ok_json(result.payload, ctx.origin, config, result.status)
    except Exception as error:
        status = error_status(error)
        _log_failure(error, action, status)

        if ctx is not None:
            write_audit_log(
                context=ctx.tenant,
                action=action,
                method=request.method or "",
                path=request.path,
                status_code=status,
                ip_address=ctx.ip_address,
                user_agent=ctx.user_agent,
                duration_ms=_elapsed_ms(started),
            )
        elif config.audit_anonymous_rejections:
            write_anonymous_audit_log(
                action=action,
                method=request.method or "",
                path=request.path,
                status_code=status,
                ip_address=get_client_ip(request),
                user_agent=request.headers.get("User-Agent"),
                duration_ms=_elapsed_ms(started),
            )

        return error_json(error, ctx.origin if ctx else None, config, status, action)

    write_audit_log(
        context=ctx.tenant,
        action=action,
        method=request.method or "",
        path=request.path,
        status_code=result.status,
        resource_id=result.resource_id,
        ip_address=ctx.ip_address,
        user_agent=ctx.user_agent,
        duration_ms=_elapsed_ms(started),
    )
    logger.info("gateway_request_completed", status=result.status, duration_ms=_elapsed_ms(started))
    return response


def run_gateway_options(request: HttpRequest, config: GatewayConfig | None = None) -> HttpResponse:
    """Answer a CORS preflight."""
    config = config or get_gateway_config()
    return preflight(request.headers.get("Origin"), config)


def _as_result(value: Any) -> HandlerResult:
    if isinstance(value, HandlerResult):
        return value
    return HandlerResult(payload=value)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _log_failure(error: Exception, action: str, status: int) -> None:
    if status >= 500:
        logger.exception("gateway_request_failed", action=action, status=status)
    else:
        logger.info(
            "gateway_request_denied",
            action=action,
            status=status,
            error_type=type(error).__name__,
        )
