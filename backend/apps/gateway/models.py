"""
Gateway models - append-only request audit log.
"""

from django.db import models
from django.utils import timezone

from apps.gateway.constants import GatewayAction


def is_success_status(status_code: int) -> bool:
    """2xx and 3xx count as success for audit and failure-rate purposes."""
    return 200 <= status_code < 400


class GatewayAuditLog(models.Model):
    """
    One immutable record per gateway-handled request.

    Doubles as the rate limiter's data source: per-minute volume and
    ten-minute failure counts are computed from these rows, so entries are
    never updated or deleted by the running system.

    organization is NULL only for anonymous entries written for requests
    rejected before a tenant could be resolved.
    """

    id = models.BigAutoField(primary_key=True)

    # Who
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="gateway_audit_logs",
    )
    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="gateway_audit_logs",
        help_text="NULL for system-originated calls, e.g. webhooks",
    )

    # What
    request_type = models.CharField(
        max_length=64,
        choices=GatewayAction.choices,
        db_index=True,
        help_text="Gateway action tag, e.g. 'agents.create'",
    )
    method = models.CharField(max_length=10)
    path = models.CharField(max_length=2048)
    status_code = models.PositiveSmallIntegerField()
    success = models.BooleanField(help_text="200 <= status_code < 400")
    resource_id = models.CharField(max_length=255, null=True, blank=True)

    # Context
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(null=True, blank=True)
    duration_ms = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Wall-clock time spent in the gateway",
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True, editable=False)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            # Rate limiter: org-wide windows
            models.Index(fields=["organization", "created_at"], name="gateway_audit_org_time_idx"),
            # Rate limiter: per-user windows
            models.Index(
                fields=["organization", "user", "created_at"], name="gateway_audit_user_time_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.request_type} {self.method} {self.path} -> {self.status_code}"

    def save(self, *args, **kwargs) -> None:
        self.success = is_success_status(self.status_code)
        super().save(*args, **kwargs)
