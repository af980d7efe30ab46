"""
Gateway audit recorder.

Appends one GatewayAuditLog row per gateway request, on the success path and
on the failure path alike, with the status actually returned to the client.
The rows double as the rate limiter's history.

A failed audit write is logged and does not fail the response: the client
still gets the outcome of its request.
"""

from datetime import datetime
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.db import DatabaseError, transaction
from django.db.models import Count, Q

from apps.core.logging import get_logger
from apps.gateway.models import GatewayAuditLog, is_success_status
from apps.gateway.types import TenantContext

logger = get_logger(__name__)


def write_audit_log(
    *,
    context: TenantContext,
    action: str,
    method: str,
    path: str,
    status_code: int,
    resource_id: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    duration_ms: int | None = None,
) -> GatewayAuditLog | None:
    """
    Record a request made on behalf of a resolved tenant.

    Returns:
        The stored entry, or None when nothing could be stored (fallback
        tenant, or the write failed).
    """
    if context.is_fallback:
        logger.warning(
            "audit_write_skipped",
            reason="fallback_tenant",
            action=action,
            status_code=status_code,
        )
        return None

    return _append(
        organization=context.org,
        user=context.user,
        request_type=action,
        method=method,
        path=path,
        status_code=status_code,
        resource_id=resource_id,
        ip_address=ip_address,
        user_agent=user_agent,
        duration_ms=duration_ms,
    )


def write_anonymous_audit_log(
    *,
    action: str,
    method: str,
    path: str,
    status_code: int,
    ip_address: str | None = None,
    user_agent: str | None = None,
    duration_ms: int | None = None,
) -> GatewayAuditLog | None:
    """Record a request rejected before any tenant was resolved."""
    return _append(
        organization=None,
        user=None,
        request_type=action,
        method=method,
        path=path,
        status_code=status_code,
        ip_address=ip_address,
        user_agent=user_agent,
        duration_ms=duration_ms,
    )


def _append(**fields: Any) -> GatewayAuditLog | None:
    fields["success"] = is_success_status(fields["status_code"])
    fields["ip_address"] = _clean_ip(fields.get("ip_address"))
    if fields.get("resource_id") is not None:
        fields["resource_id"] = str(fields["resource_id"])

    try:
        with transaction.atomic():
            entry = GatewayAuditLog.objects.create(**fields)
    except DatabaseError:
        logger.exception(
            "audit_write_failed",
            action=fields["request_type"],
            status_code=fields["status_code"],
        )
        return None

    logger.debug(
        "audit_entry_created",
        audit_id=entry.pk,
        action=entry.request_type,
        status_code=entry.status_code,
    )
    return entry


def _clean_ip(value: str | None) -> str | None:
    """Keep only well-formed IPv4/IPv6 addresses; X-Forwarded-For is client-controlled."""
    if not value:
        return None
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return None
    return value


def list_recent_audit_logs(org_id: str, limit: int = 50) -> list[GatewayAuditLog]:
    """Newest-first audit entries for an org."""
    return list(
        GatewayAuditLog.objects.filter(organization_id=org_id)
        .select_related("user")
        .order_by("-created_at", "-id")[:limit]
    )


def get_last_audit_at(org_id: str) -> datetime | None:
    """Timestamp of the org's most recent audit entry."""
    latest = (
        GatewayAuditLog.objects.filter(organization_id=org_id)
        .order_by("-created_at")
        .values_list("created_at", flat=True)
        .first()
    )
    return latest


def summarize_org_activity(org_id: str, since: datetime) -> dict[str, Any]:
    """
    Aggregate an org's gateway traffic since a point in time.

    Returns:
        {"total": int, "failed": int, "by_action": {action: count}}
    """
    entries = GatewayAuditLog.objects.filter(organization_id=org_id, created_at__gte=since)
    totals = entries.aggregate(total=Count("id"), failed=Count("id", filter=Q(success=False)))
    by_action = {
        row["request_type"]: row["count"]
        for row in entries.values("request_type").annotate(count=Count("id")).order_by("request_type")
    }
    return {"total": totals["total"], "failed": totals["failed"], "by_action": by_action}
