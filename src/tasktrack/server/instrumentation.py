"""OpenTelemetry SDK provider setup for the tasktrack server.

The providers built here are not installed globally; the entry point does
that with `opentelemetry.trace.set_tracer_provider` and
`opentelemetry.metrics.set_meter_provider`.
"""

import logging

from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
    OTLPSpanExporter,
)
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import start_http_server

from tasktrack.config import ServerConfig


logger = logging.getLogger(__name__)


def _resource(config: ServerConfig) -> Resource:
    return Resource.create({SERVICE_NAME: config.service_name})


def create_tracer_provider(config: ServerConfig) -> TracerProvider:
    """Creates a tracer provider, exporting over OTLP/HTTP if configured."""
    provider = TracerProvider(resource=_resource(config))
    if config.otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=config.otlp_endpoint))
        )
        logger.info('Exporting traces to %s', config.otlp_endpoint)
    else:
        logger.info('No OTLP endpoint configured, spans are not exported')
    return provider


def create_meter_provider(config: ServerConfig) -> MeterProvider:
    """Creates a meter provider, serving Prometheus metrics if configured."""
    if not config.metrics_port:
        return MeterProvider(resource=_resource(config))

    provider = MeterProvider(
        resource=_resource(config), metric_readers=[PrometheusMetricReader()]
    )
    start_http_server(config.metrics_port)
    logger.info(
        'Prometheus metrics exposed at :%d/metrics', config.metrics_port
    )
    return provider
