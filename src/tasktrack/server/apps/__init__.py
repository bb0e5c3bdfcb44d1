"""HTTP application components for the tasktrack server."""

from tasktrack.server.apps.http_app import HttpApp
from tasktrack.server.apps.starlette_app import TaskTrackStarletteApplication


__all__ = ['HttpApp', 'TaskTrackStarletteApplication']
