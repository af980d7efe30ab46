"""
Accounts models - org-scoped users.
"""

from django.db import models

from apps.core.models import TenantScopedModel


class User(TenantScopedModel):
    """
    Actor inside exactly one Organization.

    Not Django's AUTH_USER_MODEL: identity comes from the X-User-Id header
    (or the org's default owner) and authentication happens upstream.
    Email is unique per organization, not globally.
    """

    email = models.EmailField()
    display_name = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "email"],
                name="accounts_user_unique_org_email",
            ),
        ]

    def __str__(self) -> str:
        return self.email
