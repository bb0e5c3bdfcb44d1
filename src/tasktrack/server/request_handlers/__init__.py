"""Request handler components for the tasktrack server."""

from tasktrack.server.request_handlers.default_request_handler import (
    DefaultRequestHandler,
)
from tasktrack.server.request_handlers.request_handler import RequestHandler


__all__ = [
    'DefaultRequestHandler',
    'RequestHandler',
]
