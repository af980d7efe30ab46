"""
Core middleware.
"""

from collections.abc import Callable
from uuid import UUID, uuid4

from django.http import HttpRequest, HttpResponse

from apps.core.logging import bind_contextvars, clear_contextvars
from apps.core.utils import get_client_ip

CORRELATION_ID_HEADER = "X-Correlation-ID"


def _parse_correlation_id(raw: str | None) -> UUID:
    """Reuse a caller-supplied UUID, otherwise mint a new one."""
    if raw:
        try:
            return UUID(raw.strip())
        except ValueError:
            pass
    return uuid4()


class RequestContextMiddleware:
    """
    Binds per-request logging context and echoes the correlation id.

    Sets request.correlation_id and binds it, with caller IP, user agent,
    method and path, into structlog contextvars for the lifetime of the
    request. Context is cleared afterwards so nothing leaks into the next
    request served by the same worker.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        correlation_id = _parse_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        request.correlation_id = correlation_id  # type: ignore[attr-defined]

        clear_contextvars()
        bind_contextvars(
            correlation_id=str(correlation_id),
            **{
                "network.client.ip": get_client_ip(request),
                "http.useragent": request.headers.get("User-Agent"),
                "http.method": request.method,
                "http.url_details.path": request.path,
            },
        )
        try:
            response = self.get_response(request)
        finally:
            clear_contextvars()

        response[CORRELATION_ID_HEADER] = str(correlation_id)
        return response
