"""Per-request context carried onto log records."""

import logging
import uuid
from contextvars import ContextVar

_request_id: ContextVar[str | None] = ContextVar("rentora_request_id", default=None)
_actor_id: ContextVar[int | None] = ContextVar("rentora_actor_id", default=None)


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def bind_request(request_id: str | None) -> str:
    """Start a fresh logging context for an incoming request."""
    request_id = request_id or new_request_id()
    _request_id.set(request_id)
    _actor_id.set(None)
    return request_id


def current_request_id() -> str | None:
    return _request_id.get()


def current_actor() -> int | None:
    """Id of the authenticated user handling the current request, if any."""
    return _actor_id.get()


def set_actor_id(actor_id: int | None) -> None:
    _actor_id.set(actor_id)


class RequestContextFilter(logging.Filter):
    """Stamps request_id and actor_id on records.

    Records produced outside a request (startup, jobs) get a dash.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id() or "-"
        record.actor_id = current_actor()
        return True
