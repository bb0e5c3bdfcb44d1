from unittest import mock

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider

from tasktrack.config import ServerConfig
from tasktrack.server.instrumentation import (
    create_meter_provider,
    create_tracer_provider,
)


def test_tracer_provider_without_endpoint():
    with mock.patch(
        'tasktrack.server.instrumentation.OTLPSpanExporter'
    ) as exporter:
        provider = create_tracer_provider(ServerConfig(service_name='svc'))

    assert isinstance(provider, TracerProvider)
    assert provider.resource.attributes[SERVICE_NAME] == 'svc'
    exporter.assert_not_called()
    provider.shutdown()


def test_tracer_provider_exports_to_endpoint():
    endpoint = 'http://otel-collector:4318/v1/traces'
    with (
        mock.patch(
            'tasktrack.server.instrumentation.OTLPSpanExporter'
        ) as exporter,
        mock.patch(
            'tasktrack.server.instrumentation.BatchSpanProcessor'
        ) as processor,
    ):
        provider = create_tracer_provider(
            ServerConfig(otlp_endpoint=endpoint)
        )

    exporter.assert_called_once_with(endpoint=endpoint)
    processor.assert_called_once_with(exporter.return_value)
    assert isinstance(provider, TracerProvider)


def test_meter_provider_without_metrics_port():
    with mock.patch(
        'tasktrack.server.instrumentation.start_http_server'
    ) as start_server:
        provider = create_meter_provider(ServerConfig())

    assert isinstance(provider, MeterProvider)
    start_server.assert_not_called()
    provider.shutdown()


def test_meter_provider_serves_prometheus():
    with mock.patch(
        'tasktrack.server.instrumentation.start_http_server'
    ) as start_server:
        provider = create_meter_provider(ServerConfig(metrics_port=2112))

    assert isinstance(provider, MeterProvider)
    start_server.assert_called_once_with(2112)
    provider.shutdown()
