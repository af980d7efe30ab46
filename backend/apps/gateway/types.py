"""
Typed containers passed between the gateway steps.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from apps.accounts.models import User
    from apps.organizations.models import Organization


@dataclass(frozen=True)
class TenantContext:
    """
    Resolved org/user pair for one request.

    is_fallback marks the unsaved stand-in built from configuration when the
    database could not be reached during resolution.
    """

    org: "Organization"
    user: "User"
    is_fallback: bool = False


@dataclass(frozen=True)
class GatewayRequestContext:
    """Everything a business handler gets after the gateway checks pass."""

    tenant: TenantContext
    origin: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass
class HandlerResult:
    """
    Business handler return value.

    payload is serialized as the JSON body; resource_id lands on the audit
    entry.
    """

    payload: Any
    status: int = 200
    resource_id: str | None = None
