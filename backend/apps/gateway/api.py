"""
Gateway API endpoints.

Tenant-scoped operational views. Every route runs through
run_gateway_handler, so each one is origin-checked, tenant-resolved,
rate-limited and audited, and has an OPTIONS preflight companion.
"""

from datetime import timedelta

from django.http import HttpRequest, HttpResponse
from django.utils import timezone
from ninja import Router

from apps.core.schemas import GatewayErrorResponse
from apps.gateway.audit import get_last_audit_at, list_recent_audit_logs, summarize_org_activity
from apps.gateway.config import get_gateway_config
from apps.gateway.constants import GatewayAction
from apps.gateway.handler import run_gateway_handler, run_gateway_options
from apps.gateway.schemas import (
    ActivitySummary,
    AuditLogEntry,
    AuditLogListResponse,
    AuditLogQuery,
    DashboardOverviewResponse,
    GatewayStatus,
    OrgSummary,
    RateLimitStatus,
    SettingsStatusResponse,
)
from apps.gateway.types import GatewayRequestContext, HandlerResult

router = Router(tags=["gateway"])

ERROR_RESPONSES = {
    400: GatewayErrorResponse,
    403: GatewayErrorResponse,
    429: GatewayErrorResponse,
    500: GatewayErrorResponse,
}

ACTIVITY_WINDOW = timedelta(hours=24)


def _org_summary(ctx: GatewayRequestContext) -> OrgSummary:
    org = ctx.tenant.org
    return OrgSummary(id=org.id, name=org.name, slug=org.slug)


@router.get(
    "/settings/status",
    response={200: SettingsStatusResponse, **ERROR_RESPONSES},
    operation_id="getSettingsStatus",
    summary="Gateway settings status",
)
def settings_status(request: HttpRequest) -> HttpResponse:
    """Resolved org, origin allow-list, last audit time and active rate limits."""
    config = get_gateway_config()

    def handle(ctx: GatewayRequestContext) -> HandlerResult:
        status = SettingsStatusResponse(
            org=_org_summary(ctx),
            gateway=GatewayStatus(
                allowed_origins=list(config.allowed_origins),
                last_audit_at=get_last_audit_at(ctx.tenant.org.id),
            ),
            rate_limits=RateLimitStatus(
                user_per_minute=config.rate_limit_user_per_minute,
                org_per_minute=config.rate_limit_org_per_minute,
                failed_per_10_min=config.rate_limit_failed_per_10_min,
                org_failed_per_10_min=config.rate_limit_org_failed_per_10_min,
            ),
        )
        return HandlerResult(payload=status.model_dump(mode="json"))

    return run_gateway_handler(request, GatewayAction.SETTINGS_STATUS, handle, config)


@router.api_operation(["OPTIONS"], "/settings/status", include_in_schema=False)
def settings_status_options(request: HttpRequest) -> HttpResponse:
    return run_gateway_options(request)


@router.get(
    "/audit",
    response={200: AuditLogListResponse, **ERROR_RESPONSES},
    operation_id="listAuditLog",
    summary="Recent gateway audit entries",
)
def list_audit_log(request: HttpRequest) -> HttpResponse:
    """
    Most recent gateway audit entries for the resolved org, newest first.

    Accepts ?limit=1..200 (default 50).
    """

    def handle(ctx: GatewayRequestContext) -> HandlerResult:
        query = AuditLogQuery.model_validate(request.GET.dict())
        entries = [
            AuditLogEntry(
                id=entry.id,
                request_type=entry.request_type,
                method=entry.method,
                path=entry.path,
                status_code=entry.status_code,
                success=entry.success,
                user_id=entry.user_id,
                resource_id=entry.resource_id,
                ip_address=entry.ip_address,
                duration_ms=entry.duration_ms,
                created_at=entry.created_at,
            )
            for entry in list_recent_audit_logs(ctx.tenant.org.id, limit=query.limit)
        ]
        response = AuditLogListResponse(entries=entries, count=len(entries))
        return HandlerResult(payload=response.model_dump(mode="json"))

    return run_gateway_handler(request, GatewayAction.AUDIT_LIST, handle)


@router.api_operation(["OPTIONS"], "/audit", include_in_schema=False)
def list_audit_log_options(request: HttpRequest) -> HttpResponse:
    return run_gateway_options(request)


@router.get(
    "/dashboard/overview",
    response={200: DashboardOverviewResponse, **ERROR_RESPONSES},
    operation_id="getDashboardOverview",
    summary="Gateway traffic for the last 24 hours",
)
def dashboard_overview(request: HttpRequest) -> HttpResponse:
    """Request totals, failures and per-action counts for the resolved org."""

    def handle(ctx: GatewayRequestContext) -> HandlerResult:
        since = timezone.now() - ACTIVITY_WINDOW
        summary = summarize_org_activity(ctx.tenant.org.id, since)
        overview = DashboardOverviewResponse(
            org=_org_summary(ctx),
            activity=ActivitySummary(since=since, **summary),
        )
        return HandlerResult(payload=overview.model_dump(mode="json"))

    return run_gateway_handler(request, GatewayAction.DASHBOARD_OVERVIEW, handle)


@router.api_operation(["OPTIONS"], "/dashboard/overview", include_in_schema=False)
def dashboard_overview_options(request: HttpRequest) -> HttpResponse:
    return run_gateway_options(request)
