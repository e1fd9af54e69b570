"""
Logging filters for structured log output.

Every record carries a correlation id so that the lines written while
serving one back-office request (or one batch command run) can be grouped.
"""
import logging
import threading
import uuid

_local = threading.local()


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Get the current correlation ID ("-" if not set)."""
    return getattr(_local, "correlation_id", "") or "-"


def set_correlation_id(cid: str) -> None:
    """Set the correlation ID for the current thread."""
    _local.correlation_id = cid


def clear_correlation_id() -> None:
    _local.correlation_id = ""


class CorrelationIdFilter(logging.Filter):
    """Attach correlation_id to every log record."""

    def filter(self, record):
        record.correlation_id = get_correlation_id()
        return True
