"""Components for storing tasks within the tasktrack server."""

from tasktrack.server.tasks.inmemory_task_store import InMemoryTaskStore
from tasktrack.server.tasks.task_store import TaskStore


__all__ = [
    'InMemoryTaskStore',
    'TaskStore',
]
