"""
Sliding-window rate limiting over the gateway audit log.

Four counts are taken against "now" for the resolved tenant:

    - user requests in the last minute
    - org requests in the last minute
    - user failed requests in the last ten minutes
    - org failed requests in the last ten minutes

They are independent reads, issued as one conditional aggregate over the
org's last ten minutes of audit rows. The first breached threshold, checked
in the order above, decides the response. Windows are relative to request
time, so there is no fixed-bucket boundary burst.

Usage::

    verdict = check_rate_limit(org.id, user.id, config)
    if not verdict.allowed:
        return verdict.status, verdict.message
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from django.db import DatabaseError
from django.db.models import Count, Q
from django.utils import timezone

from apps.core.logging import get_logger
from apps.gateway.config import GatewayConfig
from apps.gateway.constants import FAILURE_WINDOW_MINUTES, REQUEST_WINDOW_MINUTES
from apps.gateway.exceptions import (
    GatewayError,
    OrgRateLimitExceeded,
    SuspiciousActivity,
    UserRateLimitExceeded,
)
from apps.gateway.models import GatewayAuditLog
from apps.gateway.types import TenantContext

logger = get_logger(__name__)


@dataclass(frozen=True)
class RequestCounts:
    """Audit counts inside the rate-limit windows."""

    user_per_minute: int = 0
    org_per_minute: int = 0
    user_failed_recent: int = 0
    org_failed_recent: int = 0


@dataclass(frozen=True)
class RateLimitVerdict:
    """Outcome of a rate-limit check."""

    allowed: bool
    error: type[GatewayError] | None = None

    @classmethod
    def allow(cls) -> "RateLimitVerdict":
        return cls(allowed=True)

    @classmethod
    def deny(cls, error: type[GatewayError]) -> "RateLimitVerdict":
        return cls(allowed=False, error=error)

    @property
    def status(self) -> int | None:
        return self.error.status if self.error else None

    @property
    def message(self) -> str | None:
        return self.error.default_message if self.error else None


def count_recent_requests(org_id: str, user_id: str, now: datetime) -> RequestCounts:
    """Take the four window counts in a single query."""
    minute_ago = now - timedelta(minutes=REQUEST_WINDOW_MINUTES)
    window_start = now - timedelta(minutes=FAILURE_WINDOW_MINUTES)

    in_last_minute = Q(created_at__gte=minute_ago)
    by_user = Q(user_id=user_id)
    failed = Q(success=False)

    totals = GatewayAuditLog.objects.filter(
        organization_id=org_id,
        created_at__gte=window_start,
    ).aggregate(
        user_per_minute=Count("id", filter=by_user & in_last_minute),
        org_per_minute=Count("id", filter=in_last_minute),
        user_failed_recent=Count("id", filter=by_user & failed),
        org_failed_recent=Count("id", filter=failed),
    )
    return RequestCounts(**totals)


def evaluate_rate_limit(counts: RequestCounts, config: GatewayConfig) -> RateLimitVerdict:
    """Apply the thresholds to already-taken counts."""
    if counts.user_per_minute >= config.rate_limit_user_per_minute:
        return RateLimitVerdict.deny(UserRateLimitExceeded)

    if counts.org_per_minute >= config.rate_limit_org_per_minute:
        return RateLimitVerdict.deny(OrgRateLimitExceeded)

    if counts.user_failed_recent >= config.rate_limit_failed_per_10_min:
        return RateLimitVerdict.deny(SuspiciousActivity)

    if counts.org_failed_recent >= config.rate_limit_org_failed_per_10_min:
        return RateLimitVerdict.deny(SuspiciousActivity)

    return RateLimitVerdict.allow()


def check_rate_limit(
    org_id: str,
    user_id: str,
    config: GatewayConfig,
    *,
    now: datetime | None = None,
) -> RateLimitVerdict:
    """
    Decide whether a tenant may make another request.

    Fails open when the audit table cannot be read: the gateway prefers
    availability while storage is down.
    """
    now = now or timezone.now()

    try:
        counts = count_recent_requests(org_id, user_id, now)
    except DatabaseError:
        logger.exception("rate_limit_check_failed", org_id=org_id, user_id=user_id)
        return RateLimitVerdict.allow()

    verdict = evaluate_rate_limit(counts, config)
    if not verdict.allowed:
        logger.warning(
            "rate_limit_exceeded",
            org_id=org_id,
            user_id=user_id,
            status=verdict.status,
            reason=verdict.message,
            user_per_minute=counts.user_per_minute,
            org_per_minute=counts.org_per_minute,
            user_failed_recent=counts.user_failed_recent,
            org_failed_recent=counts.org_failed_recent,
        )
    return verdict


def enforce_rate_limit(
    tenant: TenantContext,
    config: GatewayConfig,
    *,
    now: datetime | None = None,
) -> None:
    """
    Raise the matching GatewayError when the tenant is over a limit.

    Fallback tenants have no persisted history to count, so they pass.
    """
    if tenant.is_fallback:
        logger.warning("rate_limit_skipped", reason="fallback_tenant", org_id=tenant.org.id)
        return

    verdict = check_rate_limit(tenant.org.id, tenant.user.id, config, now=now)
    if verdict.error is not None:
        raise verdict.error()
