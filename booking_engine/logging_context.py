"""Correlation context for booking logs.

Each booking request runs under a request id (the idempotency key when the
caller supplies one) and, once known, the provider it targets. Loggers
obtained through ``get_request_logger`` stamp both onto every record, so a
single request can be followed from slot listing through the commit path,
including retries that replay the same key.

Usage:
    from booking_engine.logging_context import bind_request, get_request_logger

    logger = get_request_logger(__name__)
    with bind_request("key-123", provider_id="paws-salon"):
        logger.info("Committing booking")  # record.request_id == "key-123"
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

NO_REQUEST_ID = "NO_REQUEST_ID"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)
_provider_id: ContextVar[Optional[str]] = ContextVar("provider_id", default=None)


def new_request_id(prefix: str = "REQ") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def set_request_id(request_id: str) -> None:
    """Set the request id for the rest of the current context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


def get_provider_id() -> Optional[str]:
    return _provider_id.get()


@contextmanager
def bind_request(
    request_id: Optional[str] = None, provider_id: Optional[str] = None
) -> Iterator[str]:
    """Scope a request id and provider id to a block, restoring the outer values.

    A missing ``request_id`` keeps the enclosing one, or generates a fresh
    id when none is set.
    """
    if request_id is None:
        outer = _request_id.get()
        request_id = outer if outer != NO_REQUEST_ID else new_request_id()
    request_token = _request_id.set(request_id)
    provider_token = _provider_id.set(provider_id or _provider_id.get())
    try:
        yield request_id
    finally:
        _provider_id.reset(provider_token)
        _request_id.reset(request_token)


class RequestContextFilter(logging.Filter):
    """Adds ``request_id`` and ``provider_id`` to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        record.provider_id = _provider_id.get() or "-"  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestContextFilter attached.

    Formatters can then use ``%(request_id)s`` and ``%(provider_id)s``.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestContextFilter) for f in logger.filters):
        logger.addFilter(RequestContextFilter())
    return logger
