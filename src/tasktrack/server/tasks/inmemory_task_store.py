import asyncio
import logging

from tasktrack.server.tasks.task_store import TaskStore
from tasktrack.types import Task


logger = logging.getLogger(__name__)


class InMemoryTaskStore(TaskStore):
    """In-memory implementation of TaskStore.

    Tasks and the identifier counter are guarded by a single `asyncio.Lock`.
    Every operation holds the lock for its entire duration and never awaits
    anything else while holding it, so operations are linearizable.
    Returned tasks are copies; mutating them does not affect the store.
    """

    def __init__(self) -> None:
        logger.debug('Initializing InMemoryTaskStore')
        self.tasks: dict[int, Task] = {}
        self.count = 0
        self.lock = asyncio.Lock()

    async def add(self, text: str) -> Task:
        async with self.lock:
            self.count += 1
            task = Task(id=self.count, text=text)
            self.tasks[task.id] = task
            logger.info('Task %s added successfully.', task.id)
            return task.model_copy()

    async def get(self, task_id: int) -> Task | None:
        async with self.lock:
            logger.debug('Attempting to get task with id: %s', task_id)
            task = self.tasks.get(task_id)
            if task:
                logger.debug('Task %s retrieved successfully.', task_id)
                return task.model_copy()
            logger.debug('Task %s not found in store.', task_id)
            return None

    async def list_all(self) -> list[Task]:
        async with self.lock:
            return [
                self.tasks[task_id].model_copy()
                for task_id in sorted(self.tasks)
            ]

    async def delete(self, task_id: int) -> bool:
        async with self.lock:
            logger.debug('Attempting to delete task with id: %s', task_id)
            if task_id in self.tasks:
                del self.tasks[task_id]
                logger.info('Task %s deleted successfully.', task_id)
                return True
            logger.warning(
                'Attempted to delete nonexistent task with id: %s', task_id
            )
            return False

    async def update(self, task_id: int, text: str) -> Task | None:
        async with self.lock:
            task = self.tasks.get(task_id)
            if not task:
                logger.debug('Task %s not found for update.', task_id)
                return None
            task.text = text
            logger.info('Task %s updated successfully.', task_id)
            return task.model_copy()

    async def complete(self, task_id: int) -> Task | None:
        async with self.lock:
            task = self.tasks.get(task_id)
            if not task:
                logger.debug('Task %s not found for completion.', task_id)
                return None
            task.completed = True
            logger.info('Task %s marked completed.', task_id)
            return task.model_copy()

    async def search(self, query: str) -> list[Task]:
        async with self.lock:
            # An empty query matches nothing rather than everything.
            if not query:
                return []
            return [
                self.tasks[task_id].model_copy()
                for task_id in sorted(self.tasks)
                if query in self.tasks[task_id].text
            ]
