"""
Gateway schemas - request and response models for gateway routes.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class AuditLogQuery(BaseModel):
    """Query parameters for the audit listing."""

    limit: int = Field(default=50, ge=1, le=200, description="Maximum entries to return")


class OrgSummary(BaseModel):
    """Resolved organization."""

    id: str
    name: str
    slug: str


class GatewayStatus(BaseModel):
    """Gateway configuration as seen by the tenant."""

    allowed_origins: list[str]
    last_audit_at: datetime | None = None


class RateLimitStatus(BaseModel):
    """Active rate-limit thresholds."""

    user_per_minute: int
    org_per_minute: int
    failed_per_10_min: int
    org_failed_per_10_min: int


class SettingsStatusResponse(BaseModel):
    """Response for GET /ev/settings/status."""

    org: OrgSummary
    gateway: GatewayStatus
    rate_limits: RateLimitStatus


class AuditLogEntry(BaseModel):
    """A single gateway audit record."""

    id: int
    request_type: str
    method: str
    path: str
    status_code: int
    success: bool
    user_id: str | None = None
    resource_id: str | None = None
    ip_address: str | None = None
    duration_ms: int | None = None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    """Response for GET /ev/audit."""

    entries: list[AuditLogEntry]
    count: int


class ActivitySummary(BaseModel):
    """Gateway traffic totals for a time window."""

    since: datetime
    total: int
    failed: int
    by_action: dict[str, int] = Field(default_factory=dict)


class DashboardOverviewResponse(BaseModel):
    """Response for GET /ev/dashboard/overview."""

    org: OrgSummary
    activity: ActivitySummary
