import logging

import click
import uvicorn

from dotenv import load_dotenv
from opentelemetry import metrics, trace

from tasktrack.config import ServerConfig
from tasktrack.server.apps import TaskTrackStarletteApplication
from tasktrack.server.instrumentation import (
    create_meter_provider,
    create_tracer_provider,
)
from tasktrack.server.request_handlers import DefaultRequestHandler
from tasktrack.server.tasks import InMemoryTaskStore
from tasktrack.utils.logging import setup_logging


load_dotenv()

logger = logging.getLogger(__name__)


@click.command()
@click.option('--host', default=None, help='Interface to bind.')
@click.option('--port', type=int, default=None, help='Port to listen on.')
@click.option('--log-level', default=None, help='Root log level.')
@click.option('--log-file', default=None, help='Write logs to this file.')
def main(host, port, log_level, log_file):
    config = ServerConfig.from_env()
    overrides = {
        'host': host,
        'port': port,
        'log_level': log_level,
        'log_file': log_file,
    }
    config = config.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )

    setup_logging(config.log_level.upper(), config.log_file)

    tracer_provider = create_tracer_provider(config)
    trace.set_tracer_provider(tracer_provider)
    meter_provider = create_meter_provider(config)
    metrics.set_meter_provider(meter_provider)

    request_handler = DefaultRequestHandler(task_store=InMemoryTaskStore())
    server = TaskTrackStarletteApplication(http_handler=request_handler)

    logger.info('Server starting on %s:%d', config.host, config.port)
    try:
        uvicorn.run(
            server.build(),
            host=config.host,
            port=config.port,
            timeout_keep_alive=int(config.keep_alive_timeout),
            timeout_graceful_shutdown=int(config.shutdown_timeout),
            log_config=None,
        )
    finally:
        logger.info('Server stopped, flushing telemetry')
        tracer_provider.shutdown()
        meter_provider.shutdown()


if __name__ == '__main__':
    main()
