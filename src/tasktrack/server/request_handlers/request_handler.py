from abc import ABC, abstractmethod

from tasktrack.types import (
    AddTaskParams,
    SearchTasksParams,
    Task,
    TaskIdParams,
    UpdateTaskParams,
)


class RequestHandler(ABC):
    """tasktrack request handler interface.

    This interface defines the methods that a tasktrack server implementation
    must provide to handle incoming requests. Handlers signal failures by
    raising `ServerError`.
    """

    @abstractmethod
    async def on_add_task(self, params: AddTaskParams) -> Task:
        """Handles the '/add' operation.

        Args:
            params: Parameters carrying the text of the new task.

        Returns:
            The created `Task`, including its assigned identifier.
        """

    @abstractmethod
    async def on_list_tasks(self) -> list[Task]:
        """Handles the '/list' operation.

        Returns:
            Every stored `Task`.
        """

    @abstractmethod
    async def on_get_task(self, params: TaskIdParams) -> Task:
        """Handles the '/get' operation.

        Args:
            params: Parameters specifying the task ID.

        Returns:
            The `Task` object.

        Raises:
            ServerError(TaskNotFoundError): If the task does not exist.
        """

    @abstractmethod
    async def on_update_task(self, params: UpdateTaskParams) -> Task:
        """Handles the '/update' operation.

        Args:
            params: Parameters specifying the task ID and its new text.

        Returns:
            The updated `Task` object.

        Raises:
            ServerError(TaskNotFoundError): If the task does not exist.
        """

    @abstractmethod
    async def on_delete_task(self, params: TaskIdParams) -> None:
        """Handles the '/delete' operation.

        Args:
            params: Parameters specifying the task ID.

        Raises:
            ServerError(TaskNotFoundError): If the task does not exist.
        """

    @abstractmethod
    async def on_complete_task(self, params: TaskIdParams) -> Task:
        """Handles the '/complete' operation.

        Args:
            params: Parameters specifying the task ID.

        Returns:
            The `Task` object with `completed` set.

        Raises:
            ServerError(TaskNotFoundError): If the task does not exist.
        """

    @abstractmethod
    async def on_search_tasks(self, params: SearchTasksParams) -> list[Task]:
        """Handles the '/search' operation.

        Args:
            params: Parameters carrying the search query.

        Returns:
            The tasks whose text contains the query.

        Raises:
            ServerError(InvalidParamsError): If the query is empty.
        """
