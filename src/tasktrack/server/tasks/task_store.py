from abc import ABC, abstractmethod

from tasktrack.types import Task


class TaskStore(ABC):
    """Task Store interface.

    Defines the operations for creating, reading, mutating and removing
    `Task` objects. Implementations own the stored tasks and only hand out
    copies; absence is reported through the return value, never raised.
    """

    @abstractmethod
    async def add(self, text: str) -> Task:
        """Stores a new task under the next identifier and returns it."""

    @abstractmethod
    async def get(self, task_id: int) -> Task | None:
        """Retrieves a task from the store by ID."""

    @abstractmethod
    async def list_all(self) -> list[Task]:
        """Returns a snapshot of every stored task."""

    @abstractmethod
    async def delete(self, task_id: int) -> bool:
        """Deletes a task from the store by ID, returning whether it existed."""

    @abstractmethod
    async def update(self, task_id: int, text: str) -> Task | None:
        """Replaces the text of a task."""

    @abstractmethod
    async def complete(self, task_id: int) -> Task | None:
        """Marks a task as completed."""

    @abstractmethod
    async def search(self, query: str) -> list[Task]:
        """Returns the tasks whose text contains `query`."""
