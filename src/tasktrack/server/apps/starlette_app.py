import json
import logging
import time

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from opentelemetry import propagate
from opentelemetry.trace import StatusCode
from pydantic import BaseModel, ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from tasktrack.server.apps.http_app import HttpApp
from tasktrack.server.request_handlers.request_handler import RequestHandler
from tasktrack.types import (
    AddTaskParams,
    ErrorResponse,
    InternalError,
    InvalidParamsError,
    JSONParseError,
    SearchTasksParams,
    Task,
    TaskIdParams,
    TaskNotFoundError,
    UpdateTaskParams,
)
from tasktrack.utils.errors import ServerError
from tasktrack.utils.telemetry import (
    SpanKind,
    error_counter,
    get_tracer,
    handler_latency,
)


logger = logging.getLogger(__name__)

M = TypeVar('M', bound=BaseModel)

ErrorModel = (
    JSONParseError | InvalidParamsError | TaskNotFoundError | InternalError
)


class TaskTrackStarletteApplication(HttpApp):
    """A Starlette application exposing the task operations over HTTP.

    Each operation has its own route. Request bodies are JSON, task IDs and
    search queries travel as query parameters, and every error is returned
    as an `ErrorResponse` body with a matching HTTP status code.
    """

    def __init__(self, http_handler: RequestHandler):
        """Initializes the TaskTrackStarletteApplication.

        Args:
            http_handler: The handler instance responsible for processing
              task requests via http.
        """
        self.handler = http_handler

    def _generate_error_response(
        self, handler_name: str, error: ErrorModel
    ) -> JSONResponse:
        """Creates a Starlette JSONResponse for an error.

        Logs the error at WARNING for client errors and ERROR otherwise.

        Args:
            handler_name: The operation that produced the error.
            error: The error model instance.

        Returns:
            A `JSONResponse` whose status code is the error's code.
        """
        error_resp = ErrorResponse(
            code=error.code,
            message=error.message or '',
            data=error.data,
        )
        log_level = (
            logging.ERROR
            if isinstance(error, InternalError)
            else logging.WARNING
        )
        logger.log(
            log_level,
            f'Request Error ({handler_name}): '
            f"Code={error_resp.code}, Message='{error_resp.message}'"
            f'{", Data=" + str(error_resp.data) if error_resp.data else ""}',
            extra={'event': f'{handler_name}_error'},
        )
        return JSONResponse(
            error_resp.model_dump(mode='json', exclude_none=True),
            status_code=error_resp.code,
        )

    async def _dispatch(
        self,
        handler_name: str,
        request: Request,
        operation: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Runs one operation, converting raised errors into responses.

        The operation runs inside a SERVER span that continues any trace
        context carried by the request headers. Records the handler latency
        and, for error responses, the error counter, both tagged with the
        handler name.
        """
        start = time.perf_counter()
        attributes = {'handler': handler_name}
        with get_tracer().start_as_current_span(
            f'{handler_name}_handler',
            context=propagate.extract(request.headers),
            kind=SpanKind.SERVER,
            attributes={
                'http.method': request.method,
                'http.user_agent': request.headers.get('user-agent', ''),
                'http.client_ip': request.client.host
                if request.client
                else '',
            },
        ) as span:
            try:
                response = await operation(request)
            except ServerError as e:
                error_counter.add(1, attributes)
                response = self._generate_error_response(
                    handler_name, e.error or InternalError()
                )
            except Exception as e:
                logger.exception(f'Unhandled exception: {e}')
                span.record_exception(e)
                span.set_status(StatusCode.ERROR, description=str(e))
                error_counter.add(1, attributes)
                response = self._generate_error_response(
                    handler_name, InternalError(message=str(e))
                )
            finally:
                handler_latency.record(
                    (time.perf_counter() - start) * 1000, attributes
                )
            span.set_attribute('http.status_code', response.status_code)
            return response

    @staticmethod
    def _parse_task_id(request: Request) -> int:
        """Reads the required integer `id` query parameter."""
        try:
            params = TaskIdParams.model_validate(
                {'id': request.query_params.get('id')}
            )
        except ValidationError as e:
            raise ServerError(
                error=InvalidParamsError(
                    message='Invalid ID', data=json.loads(e.json())
                )
            ) from e
        return params.id

    @staticmethod
    async def _parse_body(request: Request, model: type[M]) -> M:
        """Decodes the JSON body and validates it against `model`."""
        try:
            body = await request.json()
        except (json.decoder.JSONDecodeError, UnicodeDecodeError) as e:
            raise ServerError(error=JSONParseError(data=str(e))) from e
        try:
            return model.model_validate(body)
        except ValidationError as e:
            raise ServerError(
                error=InvalidParamsError(
                    message='Invalid request body', data=json.loads(e.json())
                )
            ) from e

    @staticmethod
    def _task_response(task: Task, status_code: int = 200) -> JSONResponse:
        return JSONResponse(
            task.model_dump(mode='json'), status_code=status_code
        )

    @staticmethod
    def _task_list_response(tasks: list[Task]) -> JSONResponse:
        return JSONResponse([task.model_dump(mode='json') for task in tasks])

    async def _add(self, request: Request) -> Response:
        params = await self._parse_body(request, AddTaskParams)
        task = await self.handler.on_add_task(params)
        return self._task_response(task, status_code=201)

    async def _list(self, request: Request) -> Response:
        return self._task_list_response(await self.handler.on_list_tasks())

    async def _get(self, request: Request) -> Response:
        task_id = self._parse_task_id(request)
        task = await self.handler.on_get_task(TaskIdParams(id=task_id))
        return self._task_response(task)

    async def _update(self, request: Request) -> Response:
        task_id = self._parse_task_id(request)
        body = await self._parse_body(request, AddTaskParams)
        task = await self.handler.on_update_task(
            UpdateTaskParams(id=task_id, text=body.text)
        )
        return self._task_response(task)

    async def _delete(self, request: Request) -> Response:
        task_id = self._parse_task_id(request)
        await self.handler.on_delete_task(TaskIdParams(id=task_id))
        return Response(status_code=204)

    async def _complete(self, request: Request) -> Response:
        task_id = self._parse_task_id(request)
        task = await self.handler.on_complete_task(TaskIdParams(id=task_id))
        return self._task_response(task)

    async def _search(self, request: Request) -> Response:
        try:
            params = SearchTasksParams.model_validate(
                {'q': request.query_params.get('q')}
            )
        except ValidationError as e:
            raise ServerError(
                error=InvalidParamsError(
                    message="Query parameter 'q' is required",
                    data=json.loads(e.json()),
                )
            ) from e
        return self._task_list_response(
            await self.handler.on_search_tasks(params)
        )

    def _endpoint(
        self,
        handler_name: str,
        operation: Callable[[Request], Awaitable[Response]],
    ) -> Callable[[Request], Awaitable[Response]]:
        async def endpoint(request: Request) -> Response:
            return await self._dispatch(handler_name, request, operation)

        return endpoint

    def routes(self, prefix: str = '') -> list[Route]:
        """Returns the Starlette Routes for handling task requests.

        Args:
            prefix: Path prefix for every route, e.g. '/api'.

        Returns:
            A list of Starlette Route objects.
        """
        table: list[tuple[str, str, Callable[[Request], Awaitable[Response]]]] = [
            ('add', 'POST', self._add),
            ('list', 'GET', self._list),
            ('get', 'GET', self._get),
            ('update', 'PUT', self._update),
            ('delete', 'DELETE', self._delete),
            ('complete', 'POST', self._complete),
            ('search', 'GET', self._search),
        ]
        return [
            Route(
                f'{prefix}/{name}',
                self._endpoint(name, operation),
                methods=[method],
                name=f'{name}_handler',
            )
            for name, method, operation in table
        ]

    def build(self, prefix: str = '', **kwargs: Any) -> Starlette:
        """Builds and returns the Starlette application instance.

        Args:
            prefix: Path prefix for every task route.
            **kwargs: Additional keyword arguments to pass to the Starlette
              constructor.

        Returns:
            A configured Starlette application instance.
        """
        app_routes = self.routes(prefix)
        if 'routes' in kwargs:
            kwargs['routes'].extend(app_routes)
        else:
            kwargs['routes'] = app_routes

        return Starlette(**kwargs)
