"""Logging configuration for the tasktrack server."""

import logging
import logging.config

from opentelemetry import trace


LOG_FORMAT = (
    '%(asctime)s %(levelname)s [%(name)s] '
    '[trace_id=%(trace_id)s span_id=%(span_id)s] '
    'event=%(event)s %(message)s'
)

logger = logging.getLogger(__name__)


class TraceContextFilter(logging.Filter):
    """Adds the current span's trace and span IDs to every record.

    Also defaults the ``event`` field so records logged without
    ``extra={'event': ...}`` still render with `LOG_FORMAT`.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.trace_id = trace.format_trace_id(span_context.trace_id)
            record.span_id = trace.format_span_id(span_context.span_id)
        else:
            record.trace_id = '-'
            record.span_id = '-'
        if not hasattr(record, 'event'):
            record.event = '-'
        return True


def _build_config(level: str, handler: dict) -> dict:
    handler = {
        **handler,
        'level': level,
        'formatter': 'default',
        'filters': ['trace_context'],
    }
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'filters': {
            'trace_context': {'()': TraceContextFilter},
        },
        'formatters': {
            'default': {'format': LOG_FORMAT},
        },
        'handlers': {'default': handler},
        'loggers': {
            '': {
                'level': level,
                'handlers': ['default'],
            },
            'uvicorn': {
                'level': level,
                'handlers': ['default'],
                'propagate': False,
            },
        },
    }


def setup_logging(level: str = 'INFO', log_file: str | None = None) -> None:
    """Configures the root logger.

    Logs go to ``log_file`` through a `WatchedFileHandler`, which reopens
    the file when an external tool rotates it. Without a file, or when the
    file cannot be opened, logs go to stderr.

    Args:
        level: Log level name applied to the root and uvicorn loggers.
        log_file: Optional path of the log file.
    """
    console = {
        'class': 'logging.StreamHandler',
        'stream': 'ext://sys.stderr',
    }
    if not log_file:
        logging.config.dictConfig(_build_config(level, console))
        return

    try:
        logging.config.dictConfig(
            _build_config(
                level,
                {
                    'class': 'logging.handlers.WatchedFileHandler',
                    'filename': log_file,
                    'encoding': 'utf-8',
                },
            )
        )
    except ValueError as e:
        # dictConfig wraps the handler's OSError in a ValueError.
        logging.config.dictConfig(_build_config(level, console))
        logger.error(
            'Failed to open log file %s, falling back to stderr: %s',
            log_file,
            e,
        )
        return
    logger.info('Logger initialized to file %s', log_file)
