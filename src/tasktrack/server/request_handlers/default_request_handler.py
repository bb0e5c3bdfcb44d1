import logging

from tasktrack.server.request_handlers.request_handler import RequestHandler
from tasktrack.server.tasks import TaskStore
from tasktrack.types import (
    AddTaskParams,
    InvalidParamsError,
    SearchTasksParams,
    Task,
    TaskIdParams,
    TaskNotFoundError,
    UpdateTaskParams,
)
from tasktrack.utils.errors import ServerError
from tasktrack.utils.telemetry import SpanKind, task_counter, trace_class


logger = logging.getLogger(__name__)

_PARAM_ATTRIBUTES = (
    ('id', 'todo.id'),
    ('text', 'todo.text'),
    ('q', 'search.query'),
)


def _task_span_attributes(span, args, kwargs, result, exception) -> None:
    """Copies request parameters and results onto the handler span."""
    params = args[1] if len(args) > 1 else kwargs.get('params')
    for field, key in _PARAM_ATTRIBUTES:
        value = getattr(params, field, None)
        if value is not None:
            span.set_attribute(key, value)
    if isinstance(result, Task):
        span.set_attribute('todo.id', result.id)
        span.set_attribute('todo.text', result.text)
    elif isinstance(params, SearchTasksParams) and result is not None:
        span.set_attribute('search.results', len(result))


@trace_class(
    kind=SpanKind.INTERNAL, attribute_extractor=_task_span_attributes
)
class DefaultRequestHandler(RequestHandler):
    """Default request handler for all incoming requests.

    Translates requests into `TaskStore` calls, turns absent tasks into
    `ServerError(TaskNotFoundError)` and records one log event per operation.
    """

    def __init__(self, task_store: TaskStore) -> None:
        """Initializes the DefaultRequestHandler.

        Args:
            task_store: The `TaskStore` instance that owns the tasks.
        """
        self.task_store = task_store

    async def on_add_task(self, params: AddTaskParams) -> Task:
        """Default handler for '/add'."""
        task = await self.task_store.add(params.text)
        task_counter.add(1, {'source': 'http'})
        logger.info(
            'Added task %s: %r',
            task.id,
            task.text,
            extra={'event': 'task_added'},
        )
        return task

    async def on_list_tasks(self) -> list[Task]:
        """Default handler for '/list'."""
        tasks = await self.task_store.list_all()
        logger.info(
            'Listed %d tasks', len(tasks), extra={'event': 'list_tasks'}
        )
        return tasks

    async def on_get_task(self, params: TaskIdParams) -> Task:
        """Default handler for '/get'."""
        task = await self.task_store.get(params.id)
        if not task:
            raise ServerError(error=TaskNotFoundError())
        logger.info(
            'Retrieved task %s: %r',
            task.id,
            task.text,
            extra={'event': 'get_task'},
        )
        return task

    async def on_update_task(self, params: UpdateTaskParams) -> Task:
        """Default handler for '/update'."""
        task = await self.task_store.update(params.id, params.text)
        if not task:
            raise ServerError(error=TaskNotFoundError())
        logger.info(
            'Updated task %s: %r',
            task.id,
            task.text,
            extra={'event': 'update_task'},
        )
        return task

    async def on_delete_task(self, params: TaskIdParams) -> None:
        """Default handler for '/delete'."""
        if not await self.task_store.delete(params.id):
            raise ServerError(error=TaskNotFoundError())
        logger.info(
            'Deleted task %s', params.id, extra={'event': 'delete_task'}
        )

    async def on_complete_task(self, params: TaskIdParams) -> Task:
        """Default handler for '/complete'."""
        task = await self.task_store.complete(params.id)
        if not task:
            raise ServerError(error=TaskNotFoundError())
        logger.info(
            'Completed task %s', task.id, extra={'event': 'complete_task'}
        )
        return task

    async def on_search_tasks(self, params: SearchTasksParams) -> list[Task]:
        """Default handler for '/search'.

        The store treats an empty query as matching nothing; over HTTP it is
        a malformed request instead.
        """
        if not params.q:
            raise ServerError(
                error=InvalidParamsError(
                    message="Query parameter 'q' is required"
                )
            )
        tasks = await self.task_store.search(params.q)
        logger.info(
            'Searched tasks for %r, %d matches',
            params.q,
            len(tasks),
            extra={'event': 'search_tasks'},
        )
        return tasks
