"""
Tenant resolution.

Maps X-Org-Id / X-User-Id headers to persisted Organization and User rows,
provisioning the configured default tenant on first use. Storage outages
degrade to an in-memory tenant built from configuration instead of failing
every request.
"""

import re
from typing import TypeVar

from django.db import DatabaseError, IntegrityError, models, transaction
from django.http import HttpRequest
from django.utils.text import slugify

from apps.accounts.models import User
from apps.core.logging import get_logger
from apps.core.utils import get_header
from apps.gateway.config import GatewayConfig
from apps.gateway.constants import DEFAULT_USER_DISPLAY_NAME
from apps.gateway.exceptions import CrossTenantViolation, InvalidGatewayRequest
from apps.gateway.types import TenantContext
from apps.organizations.models import Organization

logger = get_logger(__name__)

ORG_ID_HEADER = "X-Org-Id"
USER_ID_HEADER = "X-User-Id"

# Org and User primary keys are CharField(max_length=64)
TENANT_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")

ModelT = TypeVar("ModelT", bound=models.Model)


def resolve_tenant(request: HttpRequest, config: GatewayConfig) -> TenantContext:
    """
    Resolve (and lazily create) the org and user for a request.

    Raises:
        InvalidGatewayRequest: A tenant header is not a valid id.
        CrossTenantViolation: The user resolved from X-User-Id belongs to a
            different org than the one resolved from X-Org-Id.
    """
    org_id = _tenant_id_header(request, ORG_ID_HEADER)
    user_id = _tenant_id_header(request, USER_ID_HEADER)

    try:
        org = _resolve_org(org_id, config)
        user = _resolve_user(user_id, org, config)
    except DatabaseError:
        logger.exception("tenant_resolution_degraded", org_id=org_id, user_id=user_id)
        return build_fallback_tenant(config)

    if user.organization_id != org.id:
        logger.warning(
            "cross_tenant_violation",
            org_id=org.id,
            user_id=user.id,
            user_org_id=user.organization_id,
        )
        raise CrossTenantViolation()

    return TenantContext(org=org, user=user)


def build_fallback_tenant(config: GatewayConfig) -> TenantContext:
    """Unsaved tenant built purely from configuration defaults."""
    org = Organization(
        id=config.default_org_slug,
        slug=config.default_org_slug,
        name=config.default_org_name,
    )
    user = User(
        id=f"{config.default_org_slug}-owner",
        organization=org,
        email=config.default_user_email,
        display_name=DEFAULT_USER_DISPLAY_NAME,
    )
    return TenantContext(org=org, user=user, is_fallback=True)


def _tenant_id_header(request: HttpRequest, name: str) -> str | None:
    """
    Read a tenant id header, rejecting values the key columns cannot hold.

    A value the database would refuse must not be mistaken for a storage
    outage, which would hand out the unmetered fallback tenant.
    """
    value = get_header(request, name)
    if value is not None and not TENANT_ID_PATTERN.fullmatch(value):
        logger.warning("tenant_header_rejected", header=name, length=len(value))
        raise InvalidGatewayRequest(
            f"{name} must be 1-64 letters, digits, '-' or '_'.",
            details={"header": name},
        )
    return value


def _resolve_org(org_id: str | None, config: GatewayConfig) -> Organization:
    lookup = {"pk": org_id} if org_id else {"slug": config.default_org_slug}
    org = Organization.objects.filter(**lookup).first()
    if org is not None:
        return org

    slug = config.default_org_slug
    fields: dict = {"name": config.default_org_name}
    if org_id:
        fields["id"] = org_id
        # The default slug may already belong to the header-less default org
        if Organization.objects.filter(slug=slug).exists():
            slug = slugify(f"{slug}-{org_id}")[:255]
    fields["slug"] = slug

    return _create_or_fetch(Organization, lookup, fields)


def _resolve_user(user_id: str | None, org: Organization, config: GatewayConfig) -> User:
    lookup = {"pk": user_id} if user_id else {"organization": org, "email": config.default_user_email}
    user = User.objects.filter(**lookup).first()
    if user is not None:
        return user

    email = config.default_user_email
    fields: dict = {"organization": org, "display_name": DEFAULT_USER_DISPLAY_NAME}
    if user_id:
        fields["id"] = user_id
        if User.objects.filter(organization=org, email=email).exists():
            local, _, domain = email.partition("@")
            email = f"{local}+{user_id}@{domain}"
    fields["email"] = email

    return _create_or_fetch(User, lookup, fields)


def _create_or_fetch(model: type[ModelT], lookup: dict, fields: dict) -> ModelT:
    """
    Create a row, treating a uniqueness conflict as a concurrent create.

    Two first requests for the same new tenant can race; the loser re-reads
    and uses the winner's row.
    """
    try:
        with transaction.atomic():
            obj = model._default_manager.create(**fields)
    except IntegrityError:
        obj = model._default_manager.filter(**lookup).first()
        if obj is None:
            raise
        logger.info("tenant_create_conflict_resolved", model=model.__name__, id=obj.pk)
        return obj

    logger.info("tenant_created", model=model.__name__, id=obj.pk)
    return obj
