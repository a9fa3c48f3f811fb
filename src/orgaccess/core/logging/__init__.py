"""Logging module with structured logging and request tracking."""

from orgaccess.core.logging.configure import configure_logging
from orgaccess.core.logging.middleware import RequestIdMiddleware, RequestLoggingMiddleware


__all__ = [
    "RequestIdMiddleware",
    "RequestLoggingMiddleware",
    "configure_logging",
]
