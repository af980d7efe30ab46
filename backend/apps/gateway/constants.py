"""
Constants for gateway app.
"""

from django.db import models

# Providers whose hosted dashboards call the gateway directly.
PROVIDER_DASHBOARD_ORIGINS: tuple[str, ...] = (
    "https://vapi.ai",
    "https://www.vapi.ai",
    "https://dashboard.vapi.ai",
    "https://app.vapi.ai",
    "https://api.vapi.ai",
)

CORS_ALLOW_HEADERS = "Content-Type, Authorization, X-Org-Id, X-User-Id"
CORS_ALLOW_METHODS = "GET, POST, PATCH, OPTIONS"

DEFAULT_USER_DISPLAY_NAME = "Workspace Owner"

# Sliding windows, in minutes
REQUEST_WINDOW_MINUTES = 1
FAILURE_WINDOW_MINUTES = 10

# Org-wide failure threshold is this multiple of the per-user threshold
ORG_FAILURE_MULTIPLIER = 3


class GatewayAction(models.TextChoices):
    """
    Closed set of action tags recorded on every audit entry.

    Values are the wire strings returned in error bodies and stored in
    GatewayAuditLog.request_type.
    """

    AGENTS_CREATE = "agents.create", "Create agent"
    AGENTS_UPDATE = "agents.update", "Update agent"
    AGENTS_LIST = "agents.list", "List agents"
    AGENTS_DEPLOY = "agents.deploy", "Deploy agent"
    SESSION_CONFIG_GET = "session-config.get", "Get session config"
    PREVIEW_UPDATE = "preview.update", "Update preview session"
    VOICES_LIST = "voices.list", "List voices"
    VOICES_SYNC = "voices.sync", "Sync voices"
    VOICES_PREVIEW = "voices.preview", "Preview voice"
    CALLS_CREATE = "calls.create", "Create call"
    CALLS_LIST = "calls.list", "List calls"
    CALLS_SYNC = "calls.sync", "Sync calls"
    CALLS_OUTBOUND = "calls.outbound", "Outbound call"
    CALLS_BULK = "calls.bulk", "Bulk calls"
    PHONE_NUMBERS_LIST = "phone-numbers.list", "List phone numbers"
    PHONE_NUMBERS_CREATE = "phone-numbers.create", "Create phone number"
    CONTACTS_LIST = "contacts.list", "List contacts"
    CONTACTS_CREATE = "contacts.create", "Create contact"
    CRM_PROJECTS_LIST = "crm.projects.list", "List CRM projects"
    CRM_PROJECTS_CREATE = "crm.projects.create", "Create CRM project"
    CRM_PROJECTS_GET = "crm.projects.get", "Get CRM project"
    CRM_PROJECTS_UPDATE = "crm.projects.update", "Update CRM project"
    INTEGRATIONS_PROVIDERS = "settings.integrations.providers", "List integration providers"
    INTEGRATIONS_LIST = "settings.integrations.list", "List integrations"
    INTEGRATIONS_CREATE = "settings.integrations.create", "Create integration"
    INTEGRATIONS_UPDATE = "settings.integrations.update", "Update integration"
    INTEGRATIONS_DELETE = "settings.integrations.delete", "Delete integration"
    DASHBOARD_OVERVIEW = "dashboard.overview", "Dashboard overview"
    SETTINGS_STATUS = "settings.status", "Settings status"
    WEBHOOKS_RECEIVE = "webhooks.receive", "Receive webhook"
    AUDIT_LIST = "audit.list", "List audit log"
