"""
Organizations models - multi-tenancy foundation.
"""

from django.db import models

from apps.core.models import TimestampedModel
from apps.core.utils import generate_id


class Organization(TimestampedModel):
    """
    Tenant boundary: users, quotas and audit history are all scoped here.

    Created lazily by the gateway tenant resolver the first time a request
    names an unknown org (or none at all), never deleted by the gateway.
    """

    id = models.CharField(
        primary_key=True,
        max_length=64,
        default=generate_id,
        editable=False,
        help_text="Opaque org id, also accepted in the X-Org-Id header",
    )
    slug = models.SlugField(
        max_length=255,
        unique=True,
        help_text="URL-safe identifier, e.g. 'acme-corp'",
    )
    name = models.CharField(max_length=255)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name
