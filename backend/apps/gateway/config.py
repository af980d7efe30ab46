"""
Gateway policy configuration.

Thresholds and allow-lists are passed around as an immutable GatewayConfig
instead of being read from settings deep inside the policy code, so tests can
exercise any threshold without touching process state.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from django.conf import settings

from apps.gateway.constants import ORG_FAILURE_MULTIPLIER, PROVIDER_DASHBOARD_ORIGINS


def parse_allowed_origins(
    raw: str | Iterable[str],
    extra: Iterable[str] = PROVIDER_DASHBOARD_ORIGINS,
) -> tuple[str, ...]:
    """
    Build the origin allow-list.

    Accepts a comma-separated string or an iterable, appends the provider
    dashboard origins, drops blanks and duplicates, and keeps first-seen
    order (the first entry is the CORS fallback origin).
    """
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    origins: dict[str, None] = {}
    for item in [*items, *extra]:
        origin = item.strip()
        if origin:
            origins.setdefault(origin, None)
    return tuple(origins)


@dataclass(frozen=True)
class GatewayConfig:
    """Policy inputs for origin guard, tenant resolver and rate limiter."""

    allowed_origins: tuple[str, ...] = field(default_factory=tuple)
    default_org_slug: str = "eburon-demo"
    default_org_name: str = "Eburon Demo"
    default_user_email: str = "owner@eburon.local"
    rate_limit_user_per_minute: int = 60
    rate_limit_org_per_minute: int = 300
    rate_limit_failed_per_10_min: int = 30
    audit_anonymous_rejections: bool = False

    def __post_init__(self) -> None:
        for name in (
            "rate_limit_user_per_minute",
            "rate_limit_org_per_minute",
            "rate_limit_failed_per_10_min",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be a positive integer")

    @property
    def rate_limit_org_failed_per_10_min(self) -> int:
        """Org-wide failure threshold."""
        return self.rate_limit_failed_per_10_min * ORG_FAILURE_MULTIPLIER

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> "GatewayConfig":
        """Build from the EV_GATEWAY settings mapping."""
        defaults = cls()
        return cls(
            allowed_origins=parse_allowed_origins(values.get("ALLOWED_ORIGINS", "")),
            default_org_slug=values.get("DEFAULT_ORG_SLUG", defaults.default_org_slug),
            default_org_name=values.get("DEFAULT_ORG_NAME", defaults.default_org_name),
            default_user_email=values.get("DEFAULT_USER_EMAIL", defaults.default_user_email),
            rate_limit_user_per_minute=int(
                values.get("RATE_LIMIT_USER_PER_MINUTE", defaults.rate_limit_user_per_minute)
            ),
            rate_limit_org_per_minute=int(
                values.get("RATE_LIMIT_ORG_PER_MINUTE", defaults.rate_limit_org_per_minute)
            ),
            rate_limit_failed_per_10_min=int(
                values.get("RATE_LIMIT_FAILED_PER_10_MIN", defaults.rate_limit_failed_per_10_min)
            ),
            audit_anonymous_rejections=bool(
                values.get("AUDIT_ANONYMOUS_REJECTIONS", defaults.audit_anonymous_rejections)
            ),
        )


def get_gateway_config() -> GatewayConfig:
    """Read the gateway policy from Django settings."""
    return GatewayConfig.from_mapping(getattr(settings, "EV_GATEWAY", {}))
