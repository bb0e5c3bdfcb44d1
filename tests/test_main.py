from unittest import mock

import pytest

from click.testing import CliRunner
from starlette.applications import Starlette

from tasktrack import __main__ as entrypoint


@pytest.fixture
def patched():
    with (
        mock.patch.object(entrypoint.uvicorn, 'run') as run,
        mock.patch.object(entrypoint, 'setup_logging') as setup_logging,
        mock.patch.object(entrypoint, 'create_tracer_provider') as tracer,
        mock.patch.object(entrypoint, 'create_meter_provider') as meter,
        mock.patch.object(entrypoint.trace, 'set_tracer_provider'),
        mock.patch.object(entrypoint.metrics, 'set_meter_provider'),
    ):
        yield {
            'run': run,
            'setup_logging': setup_logging,
            'tracer': tracer,
            'meter': meter,
        }


def test_main_runs_server_with_overrides(patched, monkeypatch):
    monkeypatch.setenv('TASKTRACK_PORT', '9000')
    monkeypatch.setenv('TASKTRACK_LOG_LEVEL', 'warning')

    result = CliRunner().invoke(
        entrypoint.main, ['--host', '127.0.0.1', '--log-file', 'app.log']
    )

    assert result.exit_code == 0, result.output
    patched['setup_logging'].assert_called_once_with('WARNING', 'app.log')

    app = patched['run'].call_args.args[0]
    assert isinstance(app, Starlette)
    kwargs = patched['run'].call_args.kwargs
    assert kwargs['host'] == '127.0.0.1'
    assert kwargs['port'] == 9000
    assert kwargs['timeout_graceful_shutdown'] == 5


def test_main_shuts_down_providers_after_server_stops(patched):
    patched['run'].side_effect = KeyboardInterrupt

    result = CliRunner().invoke(entrypoint.main, [])

    assert result.exit_code != 0
    patched['tracer'].return_value.shutdown.assert_called_once()
    patched['meter'].return_value.shutdown.assert_called_once()
