"""Runtime configuration for the tasktrack server."""

import os

from collections.abc import Mapping

from pydantic import BaseModel


ENV_PREFIX = 'TASKTRACK_'


class ServerConfig(BaseModel):
    """Server settings, read from ``TASKTRACK_*`` environment variables."""

    host: str = '0.0.0.0'
    port: int = 8080
    log_level: str = 'INFO'
    log_file: str | None = None
    otlp_endpoint: str | None = None
    """
    OTLP/HTTP traces endpoint, e.g. ``http://otel-collector:4318/v1/traces``.
    Tracing spans are not exported when unset.
    """
    metrics_port: int | None = None
    """
    Port of the Prometheus ``/metrics`` endpoint. Metrics are not exposed
    when unset.
    """
    service_name: str = 'todo-app'
    shutdown_timeout: float = 5.0
    keep_alive_timeout: float = 60.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> 'ServerConfig':
        """Builds a config from the environment.

        Empty variables are treated as unset.

        Raises:
            pydantic.ValidationError: If a variable has an invalid value.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for field in cls.model_fields:
            value = environ.get(f'{ENV_PREFIX}{field.upper()}')
            if value:
                values[field] = value
        return cls.model_validate(values)
