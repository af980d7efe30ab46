"""Gateway app configuration."""

from django.apps import AppConfig


class GatewayAppConfig(AppConfig):
    """Configuration for gateway app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.gateway"
    verbose_name = "API Gateway"
