"""
Test settings.

In-memory SQLite and a fixed gateway policy so tests never depend on the
developer's environment.
"""

from .base import *  # noqa: F403
from .base import EV_GATEWAY

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOG_JSON = False
LOG_LEVEL = "WARNING"

EV_GATEWAY = {
    **EV_GATEWAY,
    "ALLOWED_ORIGINS": "https://app.example.com,https://admin.example.com",
    "DEFAULT_ORG_SLUG": "test-org",
    "DEFAULT_ORG_NAME": "Test Org",
    "DEFAULT_USER_EMAIL": "owner@test.local",
    "RATE_LIMIT_USER_PER_MINUTE": 60,
    "RATE_LIMIT_ORG_PER_MINUTE": 300,
    "RATE_LIMIT_FAILED_PER_10_MIN": 30,
    "AUDIT_ANONYMOUS_REJECTIONS": False,
}
