"""Admin configuration for gateway app."""

from django.contrib import admin

from apps.gateway.models import GatewayAuditLog


@admin.register(GatewayAuditLog)
class GatewayAuditLogAdmin(admin.ModelAdmin):
    """Read-only admin for the append-only audit log."""

    list_display = [
        "created_at",
        "request_type",
        "method",
        "path",
        "status_code",
        "success",
        "organization",
        "user",
    ]
    list_filter = ["success", "request_type", "method"]
    search_fields = ["path", "organization__slug", "user__email", "ip_address"]
    ordering = ["-created_at"]
    date_hierarchy = "created_at"

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
