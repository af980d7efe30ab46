"""
Tests for the gateway request orchestrator.

Covers the end-to-end guarantees of run_gateway_handler: which requests are
audited, with which status, and what the client sees.
"""

import json
from dataclasses import replace
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from django.db import DatabaseError
from django.utils import timezone

from apps.accounts.models import User
from apps.gateway.constants import GatewayAction
from apps.gateway.exceptions import GatewayError, InvalidGatewayRequest
from apps.gateway.handler import run_gateway_handler, run_gateway_options
from apps.gateway.models import GatewayAuditLog
from apps.gateway.types import HandlerResult
from apps.organizations.models import Organization
from tests.accounts.factories import OrganizationFactory, UserFactory
from tests.gateway.factories import GatewayAuditLogFactory

ACTION = GatewayAction.AGENTS_LIST


def _ok(ctx):
    return HandlerResult(payload={"agents": [], "org": ctx.tenant.org.id})


def _body(response) -> dict:
    return json.loads(response.content)


@pytest.mark.django_db
class TestSuccessfulRequests:
    """Allowed requests run the handler and are audited once."""

    def test_handler_payload_returned(self, gateway_request, gateway_config):
        response = run_gateway_handler(gateway_request(), ACTION, _ok, gateway_config)

        assert response.status_code == 200
        org = Organization.objects.get(slug="test-org")
        assert _body(response) == {"agents": [], "org": org.id}
        assert response["Access-Control-Allow-Origin"] == "https://app.example.com"

    def test_single_audit_entry_with_returned_status(self, gateway_request, gateway_config):
        run_gateway_handler(
            gateway_request(path="/api/v1/ev/agents"),
            ACTION,
            lambda ctx: HandlerResult(payload={"id": "a1"}, status=201, resource_id="a1"),
            gateway_config,
        )

        entry = GatewayAuditLog.objects.get()
        assert entry.request_type == "agents.list"
        assert entry.method == "GET"
        assert entry.path == "/api/v1/ev/agents"
        assert entry.status_code == 201
        assert entry.success is True
        assert entry.resource_id == "a1"
        assert entry.ip_address == "127.0.0.1"
        assert entry.user_agent == "pytest-gateway"
        assert entry.duration_ms is not None

    def test_fresh_tenant_no_headers(self, gateway_request, gateway_config):
        """First request provisions exactly one org, one user and one audit row."""
        response = run_gateway_handler(
            gateway_request(), GatewayAction.SETTINGS_STATUS, lambda ctx: {"ok": True}, gateway_config
        )

        assert response.status_code == 200
        assert _body(response) == {"ok": True}
        assert list(Organization.objects.values_list("slug", flat=True)) == ["test-org"]
        assert User.objects.count() == 1
        entry = GatewayAuditLog.objects.get()
        assert entry.request_type == "settings.status"
        assert entry.success is True

    def test_bare_payload_treated_as_200(self, gateway_request, gateway_config):
        response = run_gateway_handler(gateway_request(), ACTION, lambda ctx: [1, 2], gateway_config)

        assert response.status_code == 200
        assert _body(response) == [1, 2]

    def test_request_without_origin_allowed(self, gateway_request, gateway_config):
        response = run_gateway_handler(gateway_request(origin=None), ACTION, _ok, gateway_config)

        assert response.status_code == 200
        assert GatewayAuditLog.objects.count() == 1

    def test_handler_sees_resolved_tenant(self, gateway_request, gateway_config):
        user = UserFactory.create()
        seen = {}

        def handler(ctx):
            seen["org"] = ctx.tenant.org
            seen["user"] = ctx.tenant.user
            seen["origin"] = ctx.origin
            return {}

        run_gateway_handler(
            gateway_request(org_id=user.organization_id, user_id=user.id),
            ACTION,
            handler,
            gateway_config,
        )

        assert seen == {"org": user.organization, "user": user, "origin": "https://app.example.com"}


@pytest.mark.django_db
class TestRejectedBeforeTenant:
    """Origin and cross-tenant rejections never reach the handler or the audit log."""

    def test_forbidden_origin(self, gateway_request, gateway_config):
        handler = MagicMock()

        response = run_gateway_handler(
            gateway_request(origin="https://evil.example.com"), ACTION, handler, gateway_config
        )

        assert response.status_code == 403
        assert _body(response) == {"error": "Origin is not allowed.", "action": "agents.list"}
        handler.assert_not_called()
        assert not GatewayAuditLog.objects.exists()
        assert not Organization.objects.exists()
        # Rejected origin is not echoed back
        assert response["Access-Control-Allow-Origin"] == "https://app.example.com"

    def test_cross_tenant_user(self, gateway_request, gateway_config):
        org = OrganizationFactory.create()
        outsider = UserFactory.create()
        handler = MagicMock()

        response = run_gateway_handler(
            gateway_request(org_id=org.id, user_id=outsider.id), ACTION, handler, gateway_config
        )

        assert response.status_code == 403
        assert _body(response)["error"] == "User does not belong to this org."
        handler.assert_not_called()
        assert not GatewayAuditLog.objects.exists()

    def test_over_long_tenant_header_rejected(self, gateway_request, gateway_config):
        """An id the key column cannot hold is a 400, not a degraded fallback tenant."""
        handler = MagicMock()

        response = run_gateway_handler(
            gateway_request(org_id="o" * 65), ACTION, handler, gateway_config
        )

        assert response.status_code == 400
        assert _body(response)["details"] == {"header": "X-Org-Id"}
        handler.assert_not_called()
        assert not Organization.objects.exists()
        assert not GatewayAuditLog.objects.exists()

    def test_anonymous_rejection_recorded_when_enabled(self, gateway_request, gateway_config):
        config = replace(gateway_config, audit_anonymous_rejections=True)

        run_gateway_handler(
            gateway_request(origin="https://evil.example.com"), ACTION, _ok, config
        )

        entry = GatewayAuditLog.objects.get()
        assert entry.organization_id is None
        assert entry.status_code == 403
        assert entry.success is False


@pytest.mark.django_db
class TestRateLimitedRequests:
    """Denials from the rate limiter are answered and audited with their status."""

    def test_user_limit(self, gateway_request, gateway_config):
        user = UserFactory.create()
        GatewayAuditLogFactory.create_batch(5, user=user, created_at=timezone.now())
        handler = MagicMock()

        response = run_gateway_handler(
            gateway_request(org_id=user.organization_id, user_id=user.id),
            ACTION,
            handler,
            gateway_config,
        )

        assert response.status_code == 429
        assert _body(response) == {"error": "User request limit reached.", "action": "agents.list"}
        handler.assert_not_called()
        latest = GatewayAuditLog.objects.order_by("-id").first()
        assert latest.status_code == 429
        assert latest.success is False
        assert GatewayAuditLog.objects.count() == 6

    def test_one_below_user_limit_allowed(self, gateway_request, gateway_config):
        user = UserFactory.create()
        GatewayAuditLogFactory.create_batch(4, user=user, created_at=timezone.now())

        response = run_gateway_handler(
            gateway_request(org_id=user.organization_id, user_id=user.id),
            ACTION,
            _ok,
            gateway_config,
        )

        assert response.status_code == 200

    def test_org_limit_applies_to_every_user(self, gateway_request, gateway_config):
        """Ten requests from other users in the org block a user with no history."""
        org = OrganizationFactory.create()
        for _ in range(5):
            colleague = UserFactory.create(organization=org)
            GatewayAuditLogFactory.create_batch(2, user=colleague, created_at=timezone.now())
        newcomer = UserFactory.create(organization=org)

        response = run_gateway_handler(
            gateway_request(org_id=org.id, user_id=newcomer.id), ACTION, _ok, gateway_config
        )

        assert response.status_code == 429
        assert _body(response)["error"] == "Org request limit reached."

    def test_suspicious_activity(self, gateway_request, gateway_config):
        user = UserFactory.create()
        GatewayAuditLogFactory.create_batch(
            3, user=user, status_code=403, created_at=timezone.now() - timedelta(minutes=5)
        )

        response = run_gateway_handler(
            gateway_request(org_id=user.organization_id, user_id=user.id),
            ACTION,
            _ok,
            gateway_config,
        )

        assert response.status_code == 403
        assert _body(response)["error"] == "Suspicious activity detected."

    def test_limit_reached_by_own_traffic(self, gateway_request, gateway_config):
        """The sixth request inside a minute is refused with a 5/min limit."""
        statuses = [
            run_gateway_handler(gateway_request(), ACTION, _ok, gateway_config).status_code
            for _ in range(6)
        ]

        assert statuses == [200, 200, 200, 200, 200, 429]
        assert GatewayAuditLog.objects.count() == 6


@pytest.mark.django_db
class TestHandlerErrors:
    """Errors raised by the business handler."""

    def test_gateway_error_status_and_message(self, gateway_request, gateway_config):
        def handler(ctx):
            raise InvalidGatewayRequest("Agent name is required.", details={"field": "name"})

        response = run_gateway_handler(gateway_request(), ACTION, handler, gateway_config)

        assert response.status_code == 400
        assert _body(response) == {
            "error": "Agent name is required.",
            "action": "agents.list",
            "details": {"field": "name"},
        }
        assert GatewayAuditLog.objects.get().status_code == 400

    def test_custom_status(self, gateway_request, gateway_config):
        def handler(ctx):
            raise GatewayError("Provider unavailable.", status=502)

        response = run_gateway_handler(gateway_request(), ACTION, handler, gateway_config)

        assert response.status_code == 502
        assert GatewayAuditLog.objects.get().status_code == 502

    def test_unexpected_error_hides_internals(self, gateway_request, gateway_config):
        def handler(ctx):
            raise RuntimeError("password=hunter2")

        response = run_gateway_handler(gateway_request(), ACTION, handler, gateway_config)

        assert response.status_code == 500
        assert _body(response) == {"error": "Unexpected gateway error.", "action": "agents.list"}
        assert b"hunter2" not in response.content
        entry = GatewayAuditLog.objects.get()
        assert entry.status_code == 500
        assert entry.success is False

    def test_unserializable_payload_audited_as_500(self, gateway_request, gateway_config):
        """The audit row carries the status the client gets, not the handler's 200."""
        response = run_gateway_handler(
            gateway_request(),
            ACTION,
            lambda ctx: HandlerResult(payload={"ids": {1, 2}}),
            gateway_config,
        )

        assert response.status_code == 500
        assert _body(response) == {"error": "Unexpected gateway error.", "action": "agents.list"}
        assert list(GatewayAuditLog.objects.values_list("status_code", flat=True)) == [500]

    def test_business_error_with_status_keeps_message_and_details(
        self, gateway_request, gateway_config
    ):
        class PhoneNumberRejected(Exception):
            status = 422
            message = "Phone number is not dialable."
            details = {"field": "phone"}

        def handler(ctx):
            raise PhoneNumberRejected()

        response = run_gateway_handler(
            gateway_request(), GatewayAction.CALLS_CREATE, handler, gateway_config
        )

        assert response.status_code == 422
        assert _body(response) == {
            "error": "Phone number is not dialable.",
            "action": "calls.create",
            "details": {"field": "phone"},
        }
        assert GatewayAuditLog.objects.get().status_code == 422

    def test_business_error_with_status_falls_back_to_str(self, gateway_request, gateway_config):
        class QuotaError(Exception):
            status = 409

        def handler(ctx):
            raise QuotaError("Agent limit reached.")

        response = run_gateway_handler(gateway_request(), ACTION, handler, gateway_config)

        assert response.status_code == 409
        assert _body(response) == {"error": "Agent limit reached.", "action": "agents.list"}

    def test_error_response_has_cors_headers(self, gateway_request, gateway_config):
        def handler(ctx):
            raise RuntimeError("boom")

        response = run_gateway_handler(
            gateway_request(origin="https://admin.example.com"), ACTION, handler, gateway_config
        )

        assert response["Access-Control-Allow-Origin"] == "https://admin.example.com"


@pytest.mark.django_db
class TestDegradedStorage:
    """Storage outages degrade instead of failing requests."""

    def test_tenant_fallback_serves_request(self, gateway_request, gateway_config):
        with patch.object(Organization.objects, "filter", side_effect=DatabaseError("down")):
            response = run_gateway_handler(gateway_request(), ACTION, _ok, gateway_config)

        assert response.status_code == 200
        assert _body(response)["org"] == "test-org"
        assert not GatewayAuditLog.objects.exists()

    def test_audit_failure_does_not_fail_response(self, gateway_request, gateway_config):
        with patch.object(GatewayAuditLog.objects, "create", side_effect=DatabaseError("down")):
            response = run_gateway_handler(gateway_request(), ACTION, _ok, gateway_config)

        assert response.status_code == 200


class TestActionTags:
    def test_unknown_action_rejected(self, gateway_request, gateway_config):
        with pytest.raises(ValueError):
            run_gateway_handler(gateway_request(), "not.an.action", _ok, gateway_config)

    @pytest.mark.django_db
    def test_plain_string_of_known_action_accepted(self, gateway_request, gateway_config):
        run_gateway_handler(gateway_request(), "voices.list", _ok, gateway_config)

        assert GatewayAuditLog.objects.get().request_type == GatewayAction.VOICES_LIST


class TestRunGatewayOptions:
    def test_preflight(self, request_factory, gateway_config):
        request = request_factory.options("/api/v1/ev/audit", headers={"Origin": "https://app.example.com"})

        response = run_gateway_options(request, gateway_config)

        assert response.status_code == 204
        assert response["Access-Control-Allow-Origin"] == "https://app.example.com"
        assert "X-Org-Id" in response["Access-Control-Allow-Headers"]
