"""
Django middleware for request-level correlation ID tracking.
"""
from config.logging_filters import (
    clear_correlation_id,
    new_correlation_id,
    set_correlation_id,
)


class CorrelationIdMiddleware:
    """Reuse the caller's X-Correlation-ID or mint one, and echo it back."""

    header = "X-Correlation-ID"

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        cid = request.headers.get(self.header) or new_correlation_id()
        set_correlation_id(cid)
        request.correlation_id = cid
        try:
            response = self.get_response(request)
        finally:
            clear_correlation_id()
        response[self.header] = cid
        return response
