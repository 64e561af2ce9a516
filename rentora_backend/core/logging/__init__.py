"""Logging for the Rentora backend: JSON records tagged with request and actor."""

from .context import RequestContextFilter, current_actor, current_request_id, set_actor_id
from .middleware import RequestLogMiddleware
from .pipeline import get_logger, setup_logging, shutdown_logging

__all__ = [
    "RequestContextFilter",
    "RequestLogMiddleware",
    "current_actor",
    "current_request_id",
    "get_logger",
    "set_actor_id",
    "setup_logging",
    "shutdown_logging",
]
