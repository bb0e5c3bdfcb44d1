import asyncio

from unittest import mock

import pytest

from tasktrack.utils.telemetry import (
    SpanKind,
    error_counter,
    handler_latency,
    task_counter,
    trace_class,
    trace_function,
)


@pytest.fixture
def mock_span():
    return mock.MagicMock()


@pytest.fixture
def mock_tracer(mock_span):
    tracer = mock.MagicMock()
    tracer.start_as_current_span.return_value.__enter__.return_value = mock_span
    tracer.start_as_current_span.return_value.__exit__.return_value = False
    return tracer


@pytest.fixture(autouse=True)
def patch_trace_get_tracer(mock_tracer):
    with mock.patch('opentelemetry.trace.get_tracer', return_value=mock_tracer):
        yield


def test_trace_function_sync_success(mock_span, mock_tracer):
    @trace_function
    def foo(x, y):
        return x + y

    assert foo(2, 3) == 5
    mock_tracer.start_as_current_span.assert_called_once_with(
        f'{foo.__module__}.foo', kind=SpanKind.INTERNAL
    )
    mock_span.set_status.assert_called()
    mock_span.record_exception.assert_not_called()


def test_trace_function_sync_exception(mock_span):
    @trace_function
    def bar():
        raise ValueError('fail')

    with pytest.raises(ValueError):
        bar()
    mock_span.record_exception.assert_called()
    mock_span.set_status.assert_any_call(mock.ANY, description='fail')


def test_trace_function_sync_attribute_extractor_called(mock_span):
    called = {}

    def attr_extractor(span, args, kwargs, result, exception):
        called['called'] = True
        assert span is mock_span
        assert exception is None
        assert result == 42

    @trace_function(attribute_extractor=attr_extractor)
    def foo():
        return 42

    foo()
    assert called['called']


def test_trace_function_attribute_extractor_sees_exception():
    seen = {}

    def attr_extractor(span, args, kwargs, result, exception):
        seen['exception'] = exception

    @trace_function(attribute_extractor=attr_extractor)
    def foo():
        raise KeyError('missing')

    with pytest.raises(KeyError):
        foo()
    assert isinstance(seen['exception'], KeyError)


def test_trace_function_sync_attribute_extractor_error_logged():
    with mock.patch('tasktrack.utils.telemetry.logger') as logger:

        def attr_extractor(span, args, kwargs, result, exception):
            raise RuntimeError('attr fail')

        @trace_function(attribute_extractor=attr_extractor)
        def foo():
            return 1

        assert foo() == 1
        logger.error.assert_any_call(mock.ANY)


@pytest.mark.asyncio
async def test_trace_function_async_success(mock_span):
    @trace_function
    async def foo(x):
        await asyncio.sleep(0)
        return x * 2

    assert await foo(4) == 8
    mock_span.set_status.assert_called()
    mock_span.record_exception.assert_not_called()


@pytest.mark.asyncio
async def test_trace_function_async_exception(mock_span):
    @trace_function
    async def bar():
        await asyncio.sleep(0)
        raise RuntimeError('async fail')

    with pytest.raises(RuntimeError):
        await bar()
    mock_span.record_exception.assert_called()
    mock_span.set_status.assert_any_call(mock.ANY, description='async fail')


def test_trace_function_with_args_and_attributes(mock_span, mock_tracer):
    @trace_function(
        span_name='custom.span', kind=SpanKind.CLIENT, attributes={'foo': 'bar'}
    )
    def foo():
        return 1

    foo()
    mock_tracer.start_as_current_span.assert_called_once_with(
        'custom.span', kind=SpanKind.CLIENT
    )
    mock_span.set_attribute.assert_any_call('foo', 'bar')


def test_trace_class_exclude_list():
    @trace_class(exclude_list=['skip_me'])
    class MyClass:
        def a(self):
            return 'a'

        def skip_me(self):
            return 'skip'

        def __str__(self):
            return 'str'

    obj = MyClass()
    assert obj.a() == 'a'
    assert obj.skip_me() == 'skip'
    assert hasattr(obj.a, '__wrapped__')
    assert not hasattr(obj.skip_me, '__wrapped__')


def test_trace_class_include_list():
    @trace_class(include_list=['only_this'])
    class MyClass:
        def only_this(self):
            return 'yes'

        def not_this(self):
            return 'no'

    obj = MyClass()
    assert obj.only_this() == 'yes'
    assert obj.not_this() == 'no'
    assert hasattr(obj.only_this, '__wrapped__')
    assert not hasattr(obj.not_this, '__wrapped__')


def test_trace_class_span_names(mock_tracer):
    @trace_class(kind=SpanKind.SERVER)
    class Service:
        def run(self):
            return 'ran'

    assert Service().run() == 'ran'
    mock_tracer.start_as_current_span.assert_called_once_with(
        f'{Service.__module__}.Service.run', kind=SpanKind.SERVER
    )


def test_trace_class_attribute_extractor(mock_span):
    seen = []

    def extractor(span, args, kwargs, result, exception):
        seen.append((args[1:], result))
        span.set_attribute('todo.id', result)

    @trace_class(attribute_extractor=extractor)
    class Service:
        def run(self, task_id):
            return task_id

    assert Service().run(7) == 7
    assert seen == [((7,), 7)]
    mock_span.set_attribute.assert_called_with('todo.id', 7)


def test_instruments_accept_measurements():
    # No SDK meter provider is installed, so these are no-op proxies.
    task_counter.add(1, {'source': 'http'})
    error_counter.add(1, {'handler': 'get'})
    handler_latency.record(1.5, {'handler': 'get'})
