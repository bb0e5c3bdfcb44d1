"""Server-side components of the tasktrack service."""

from tasktrack.server.apps import TaskTrackStarletteApplication
from tasktrack.server.request_handlers import DefaultRequestHandler
from tasktrack.server.tasks import InMemoryTaskStore


__all__ = [
    'DefaultRequestHandler',
    'InMemoryTaskStore',
    'TaskTrackStarletteApplication',
]
