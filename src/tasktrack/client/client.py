import json

from typing import Any

import httpx

from pydantic import TypeAdapter, ValidationError

from tasktrack.client.errors import (
    TaskTrackClientHTTPError,
    TaskTrackClientJSONError,
)
from tasktrack.types import AddTaskParams, Task
from tasktrack.utils.telemetry import SpanKind, trace_class


_TASK_LIST = TypeAdapter(list[Task])


def _parse_task(response: httpx.Response | None) -> Task | None:
    if response is None:
        return None
    try:
        return Task.model_validate(response.json())
    except (json.JSONDecodeError, ValidationError) as e:
        raise TaskTrackClientJSONError(str(e)) from e


def _parse_task_list(response: httpx.Response | None) -> list[Task]:
    if response is None:
        raise TaskTrackClientHTTPError(404, 'Endpoint not found')
    try:
        return _TASK_LIST.validate_python(response.json())
    except (json.JSONDecodeError, ValidationError) as e:
        raise TaskTrackClientJSONError(str(e)) from e


@trace_class(kind=SpanKind.CLIENT)
class TaskTrackClient:
    """Client for interacting with a tasktrack server.

    A task that does not exist on the server is reported the same way the
    store reports it: `None` from task-returning methods and `False` from
    `delete_task`.
    """

    def __init__(self, httpx_client: httpx.AsyncClient, url: str):
        """Initializes the TaskTrackClient.

        Args:
            httpx_client: An async HTTP client instance (e.g., httpx.AsyncClient).
            url: The base URL of the server, including any route prefix.
        """
        self.url = url.rstrip('/')
        self.httpx_client = httpx_client

    async def _send_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        http_kwargs: dict[str, Any] | None = None,
    ) -> httpx.Response | None:
        """Sends a request and checks its status.

        Returns:
            The response, or None if the server answered 404.

        Raises:
            TaskTrackClientHTTPError: For any other HTTP error status or a
                network communication error.
        """
        try:
            response = await self.httpx_client.request(
                method,
                f'{self.url}/{path}',
                params=params,
                json=body,
                **(http_kwargs or {}),
            )
            if response.status_code == httpx.codes.NOT_FOUND:
                return None
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise TaskTrackClientHTTPError(
                e.response.status_code, str(e)
            ) from e
        except httpx.RequestError as e:
            raise TaskTrackClientHTTPError(
                503, f'Network communication error: {e}'
            ) from e

    async def add_task(
        self, text: str, *, http_kwargs: dict[str, Any] | None = None
    ) -> Task:
        """Creates a task.

        Args:
            text: The text of the new task.
            http_kwargs: Optional keyword arguments for the underlying
                httpx request.

        Returns:
            The created `Task`.

        Raises:
            TaskTrackClientHTTPError: If an HTTP error occurs during the request.
            TaskTrackClientJSONError: If the response body cannot be decoded or validated.
        """
        response = await self._send_request(
            'POST',
            'add',
            body=AddTaskParams(text=text).model_dump(mode='json'),
            http_kwargs=http_kwargs,
        )
        task = _parse_task(response)
        if task is None:
            raise TaskTrackClientHTTPError(404, 'Endpoint not found')
        return task

    async def list_tasks(
        self, *, http_kwargs: dict[str, Any] | None = None
    ) -> list[Task]:
        """Retrieves every task, ordered by ID."""
        return _parse_task_list(
            await self._send_request('GET', 'list', http_kwargs=http_kwargs)
        )

    async def get_task(
        self, task_id: int, *, http_kwargs: dict[str, Any] | None = None
    ) -> Task | None:
        """Retrieves a task by ID, or None if it does not exist."""
        return _parse_task(
            await self._send_request(
                'GET', 'get', params={'id': task_id}, http_kwargs=http_kwargs
            )
        )

    async def update_task(
        self,
        task_id: int,
        text: str,
        *,
        http_kwargs: dict[str, Any] | None = None,
    ) -> Task | None:
        """Replaces the text of a task, or returns None if it does not exist."""
        return _parse_task(
            await self._send_request(
                'PUT',
                'update',
                params={'id': task_id},
                body=AddTaskParams(text=text).model_dump(mode='json'),
                http_kwargs=http_kwargs,
            )
        )

    async def delete_task(
        self, task_id: int, *, http_kwargs: dict[str, Any] | None = None
    ) -> bool:
        """Deletes a task, returning whether it existed."""
        response = await self._send_request(
            'DELETE', 'delete', params={'id': task_id}, http_kwargs=http_kwargs
        )
        return response is not None

    async def complete_task(
        self, task_id: int, *, http_kwargs: dict[str, Any] | None = None
    ) -> Task | None:
        """Marks a task completed, or returns None if it does not exist."""
        return _parse_task(
            await self._send_request(
                'POST',
                'complete',
                params={'id': task_id},
                http_kwargs=http_kwargs,
            )
        )

    async def search_tasks(
        self, query: str, *, http_kwargs: dict[str, Any] | None = None
    ) -> list[Task]:
        """Retrieves the tasks whose text contains `query`.

        Raises:
            TaskTrackClientHTTPError: With status 400 if `query` is empty.
        """
        return _parse_task_list(
            await self._send_request(
                'GET', 'search', params={'q': query}, http_kwargs=http_kwargs
            )
        )
