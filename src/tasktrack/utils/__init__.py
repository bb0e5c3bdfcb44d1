"""Utility functions for the tasktrack service."""

from tasktrack.utils.errors import ServerError, TaskTrackServerError
from tasktrack.utils.logging import TraceContextFilter, setup_logging
from tasktrack.utils.telemetry import SpanKind, trace_class, trace_function


__all__ = [
    'ServerError',
    'SpanKind',
    'TaskTrackServerError',
    'TraceContextFilter',
    'setup_logging',
    'trace_class',
    'trace_function',
]
