"""
Shared pytest fixtures for all tests.

This module provides common fixtures used across multiple test modules.
Individual test modules can override these fixtures if needed.

Factories
---------
Import factories directly from their modules:

    from tests.accounts.factories import OrganizationFactory, UserFactory
    from tests.gateway.factories import GatewayAuditLogFactory

Example usage:

    @pytest.mark.django_db
    def test_something():
        org = OrganizationFactory.create(slug="acme")
        user = UserFactory.create(organization=org)
        GatewayAuditLogFactory.create(organization=org, user=user, status_code=500)
"""

from collections.abc import Callable
from typing import Any

import pytest
from django.http import HttpRequest
from django.test import Client, RequestFactory

from apps.core.logging import clear_contextvars
from apps.gateway.config import GatewayConfig

ALLOWED_ORIGIN = "https://app.example.com"


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Keep structlog context from leaking between tests."""
    clear_contextvars()
    yield
    clear_contextvars()


@pytest.fixture
def request_factory() -> RequestFactory:
    """
    Django request factory for unit testing views.

    Use this when you need to call the gateway orchestrator or a helper
    directly without going through middleware and URL routing.
    """
    return RequestFactory()


@pytest.fixture
def api_client() -> Client:
    """
    Django test client for full HTTP request/response cycle tests.

    Example:
        def test_api_returns_200(api_client):
            response = api_client.get("/api/v1/health")
            assert response.status_code == 200
    """
    return Client()


@pytest.fixture
def gateway_config() -> GatewayConfig:
    """
    Gateway policy with small thresholds so limits are cheap to reach.

    Override per test with dataclasses.replace(gateway_config, ...).
    """
    return GatewayConfig(
        allowed_origins=(ALLOWED_ORIGIN, "https://admin.example.com"),
        default_org_slug="test-org",
        default_org_name="Test Org",
        default_user_email="owner@test.local",
        rate_limit_user_per_minute=5,
        rate_limit_org_per_minute=10,
        rate_limit_failed_per_10_min=3,
    )


@pytest.fixture
def gateway_request(request_factory: RequestFactory) -> Callable[..., HttpRequest]:
    """
    Factory fixture for gateway requests.

    Example:
        def test_denied(gateway_request):
            request = gateway_request(origin="https://evil.example.com")
    """

    def _make_request(
        method: str = "get",
        path: str = "/api/v1/ev/settings/status",
        origin: str | None = ALLOWED_ORIGIN,
        org_id: str | None = None,
        user_id: str | None = None,
        **extra_headers: str,
    ) -> HttpRequest:
        headers: dict[str, Any] = {"User-Agent": "pytest-gateway", **extra_headers}
        if origin is not None:
            headers["Origin"] = origin
        if org_id is not None:
            headers["X-Org-Id"] = org_id
        if user_id is not None:
            headers["X-User-Id"] = user_id
        return getattr(request_factory, method.lower())(path, headers=headers)

    return _make_request
