"""OpenTelemetry tracing and metrics utilities for tasktrack.

Tracing is applied with two decorators. `trace_function` instruments a
single sync or async callable; `trace_class` instruments the public methods
of a class. Spans record exceptions and set their status, and may carry
static attributes or attributes computed by an `attribute_extractor`.

The service instruments are created against the global meter provider, so
they are no-ops until an SDK `MeterProvider` is installed (see
`tasktrack.server.instrumentation`).

Usage:
    ```python
    @trace_function(span_name='store.add', kind=SpanKind.INTERNAL)
    async def add(text): ...


    @trace_class(exclude_list=['_helper'])
    class Handler:
        async def on_get_task(self, params): ...
    ```
"""

import functools
import inspect
import logging

from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.trace import SpanKind as _SpanKind
from opentelemetry.trace import StatusCode


SpanKind = _SpanKind
__all__ = [
    'SpanKind',
    'error_counter',
    'get_tracer',
    'handler_latency',
    'task_counter',
    'trace_class',
    'trace_function',
]
INSTRUMENTING_MODULE_NAME = 'todo-service'
INSTRUMENTING_MODULE_VERSION = '1.0.0'

logger = logging.getLogger(__name__)

_meter = metrics.get_meter(
    INSTRUMENTING_MODULE_NAME, INSTRUMENTING_MODULE_VERSION
)

task_counter = _meter.create_counter(
    'todo_tasks_added_total',
    unit='{tasks}',
    description='Total number of ToDo tasks added',
)
handler_latency = _meter.create_histogram(
    'todo_handler_latency_milliseconds',
    unit='ms',
    description='Latency of HTTP handlers in milliseconds',
)
error_counter = _meter.create_counter(
    'todo_handler_errors_total',
    unit='{errors}',
    description='Total number of errors encountered by HTTP handlers',
)


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(
        INSTRUMENTING_MODULE_NAME, INSTRUMENTING_MODULE_VERSION
    )


def trace_function(
    func=None,
    *,
    span_name=None,
    kind=SpanKind.INTERNAL,
    attributes=None,
    attribute_extractor=None,
):
    """A decorator to automatically trace a function call with OpenTelemetry.

    Works on both sync and async functions, either bare (`@trace_function`)
    or with arguments (`@trace_function(span_name='custom.name')`).

    Args:
        func (callable, optional): The function to be decorated. If None,
            a partial decorator is returned.
        span_name (str, optional): Custom name for the span. Defaults to
            ``f'{func.__module__}.{func.__name__}'``.
        kind (SpanKind, optional): The span kind. Defaults to
            ``SpanKind.INTERNAL``.
        attributes (dict, optional): Static attributes set on every span.
        attribute_extractor (callable, optional): Called in a ``finally``
            block as ``attribute_extractor(span, args, kwargs, result,
            exception)``. Errors it raises are logged, never propagated.

    Returns:
        callable: The wrapped function, or a partial decorator if ``func``
            is None.
    """
    if func is None:
        return functools.partial(
            trace_function,
            span_name=span_name,
            kind=kind,
            attributes=attributes,
            attribute_extractor=attribute_extractor,
        )

    actual_span_name = span_name or f'{func.__module__}.{func.__name__}'

    is_async_func = inspect.iscoroutinefunction(func)

    logger.debug(
        f'Start tracing for {actual_span_name}, is_async_func {is_async_func}'
    )

    def _run_extractor(span, args, kwargs, result, exception) -> None:
        if not attribute_extractor:
            return
        try:
            attribute_extractor(span, args, kwargs, result, exception)
        except Exception as attr_e:
            logger.error(
                f'attribute_extractor error in span {actual_span_name}: {attr_e}'
            )

    @functools.wraps(func)
    async def async_wrapper(*args, **kwargs) -> Any:
        with get_tracer().start_as_current_span(
            actual_span_name, kind=kind
        ) as span:
            if attributes:
                for k, v in attributes.items():
                    span.set_attribute(k, v)

            result = None
            exception = None

            try:
                result = await func(*args, **kwargs)
                span.set_status(StatusCode.OK)
                return result
            except Exception as e:
                exception = e
                span.record_exception(e)
                span.set_status(StatusCode.ERROR, description=str(e))
                raise
            finally:
                _run_extractor(span, args, kwargs, result, exception)

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs) -> Any:
        with get_tracer().start_as_current_span(
            actual_span_name, kind=kind
        ) as span:
            if attributes:
                for k, v in attributes.items():
                    span.set_attribute(k, v)

            result = None
            exception = None

            try:
                result = func(*args, **kwargs)
                span.set_status(StatusCode.OK)
                return result
            except Exception as e:
                exception = e
                span.record_exception(e)
                span.set_status(StatusCode.ERROR, description=str(e))
                raise
            finally:
                _run_extractor(span, args, kwargs, result, exception)

    return async_wrapper if is_async_func else sync_wrapper


def trace_class(
    include_list: list[str] | None = None,
    exclude_list: list[str] | None = None,
    kind=SpanKind.INTERNAL,
    attribute_extractor=None,
):
    """A class decorator that applies `trace_function` to selected methods.

    Dunder methods are never traced. When `include_list` is given only those
    methods are traced; otherwise every method not in `exclude_list` is.
    Spans are named ``f'{cls.__module__}.{cls.__name__}.{method}'``.

    Args:
        include_list (list[str], optional): Method names to trace exclusively.
        exclude_list (list[str], optional): Method names to skip. Ignored
            when `include_list` is provided.
        kind (SpanKind, optional): The span kind for the created spans.
        attribute_extractor (callable, optional): Passed to `trace_function`
            for every traced method.

    Returns:
        callable: A decorator that wraps the selected methods in place.
    """
    logger.debug(f'Trace all class {include_list}, {exclude_list}')
    exclude_list = exclude_list or []

    def decorator(cls):
        for name, method in inspect.getmembers(cls, inspect.isfunction):
            if name.startswith('__') and name.endswith('__'):
                continue
            if include_list and name not in include_list:
                continue
            if not include_list and name in exclude_list:
                continue

            span_name = f'{cls.__module__}.{cls.__name__}.{name}'
            setattr(
                cls,
                name,
                trace_function(
                    span_name=span_name,
                    kind=kind,
                    attribute_extractor=attribute_extractor,
                )(method),
            )
        return cls

    return decorator
