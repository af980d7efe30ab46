"""Admin configuration for accounts app."""

from django.contrib import admin

from apps.accounts.models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin for org-scoped User model."""

    list_display = ["email", "display_name", "organization", "created_at"]
    list_filter = ["organization"]
    search_fields = ["email", "display_name", "id"]
    readonly_fields = ["id", "created_at", "updated_at"]
    ordering = ["-created_at"]
