"""
Exceptions for gateway app.

Every error the policy core raises carries the HTTP status it maps to, so the
orchestrator can turn it into a JSON error body without a lookup table.
Business handlers may raise these too.
"""

from typing import Any


class GatewayError(Exception):
    """Base exception for gateway errors."""

    status: int = 500
    default_message: str = "Unexpected gateway error."

    def __init__(
        self,
        message: str | None = None,
        *,
        status: int | None = None,
        details: Any = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if status is not None:
            self.status = status
        self.details = details


class ForbiddenOrigin(GatewayError):
    """Browser Origin header is not on the allow-list."""

    status = 403
    default_message = "Origin is not allowed."


class CrossTenantViolation(GatewayError):
    """Resolved user belongs to a different org than the resolved org."""

    status = 403
    default_message = "User does not belong to this org."


class RateLimitExceeded(GatewayError):
    """Base for per-minute volume limits."""

    status = 429
    default_message = "Request limit reached."


class UserRateLimitExceeded(RateLimitExceeded):
    """Per-user per-minute limit reached."""

    default_message = "User request limit reached."


class OrgRateLimitExceeded(RateLimitExceeded):
    """Per-org per-minute limit reached."""

    default_message = "Org request limit reached."


class SuspiciousActivity(GatewayError):
    """
    Failure-rate threshold breached.

    Shares 403 with hard authorization failures so callers cannot tell which
    check tripped.
    """

    status = 403
    default_message = "Suspicious activity detected."


class InvalidGatewayRequest(GatewayError):
    """Request parameters failed validation."""

    status = 400
    default_message = "Invalid request."
