"""
Core utility functions.
"""

from typing import overload
from uuid import uuid4

from django.http import HttpRequest


def generate_id() -> str:
    """Return a new opaque string primary key."""
    return uuid4().hex


@overload
def get_client_ip(request: HttpRequest) -> str | None: ...


@overload
def get_client_ip(request: HttpRequest, default: str) -> str: ...


def get_client_ip(request: HttpRequest, default: str | None = None) -> str | None:
    """
    Extract client IP from X-Forwarded-For or REMOTE_ADDR.

    X-Forwarded-For may carry a proxy chain; the first entry is the
    original client.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    remote_addr = request.META.get("REMOTE_ADDR")
    if remote_addr:
        return str(remote_addr)
    return default


def get_header(request: HttpRequest, name: str) -> str | None:
    """Return a trimmed header value, treating blank values as absent."""
    value = request.headers.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None
