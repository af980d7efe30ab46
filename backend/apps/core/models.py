"""
Core models - shared base classes and utilities.
"""

from django.db import models

from apps.core.utils import generate_id


class TimestampedModel(models.Model):
    """
    Abstract base model with created_at/updated_at timestamps.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class TenantScopedModel(TimestampedModel):
    """
    Abstract base model for organization-scoped entities with string keys.

    Keys are opaque strings so tenants can be addressed by ids minted
    elsewhere (e.g. the X-Org-Id / X-User-Id request headers).
    """

    id = models.CharField(primary_key=True, max_length=64, default=generate_id, editable=False)
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="%(class)s_set",
    )

    class Meta:
        abstract = True
