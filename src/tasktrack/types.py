from typing import Any, Literal

from pydantic import BaseModel


class Task(BaseModel):
    """A tracked task item."""

    id: int
    """
    Store-assigned identifier, unique for the lifetime of the store.
    """
    text: str
    """
    Free-form task text.
    """
    completed: bool = False
    """
    Whether the task has been marked complete.
    """


class AddTaskParams(BaseModel):
    """Parameters for the `/add` operation."""

    text: str


class TaskIdParams(BaseModel):
    """Parameters containing a task ID, used for simple task operations."""

    id: int


class UpdateTaskParams(BaseModel):
    """Parameters for the `/update` operation."""

    id: int
    text: str


class SearchTasksParams(BaseModel):
    """Parameters for the `/search` operation."""

    q: str
    """
    Literal, case-sensitive substring to look for in task text.
    """


class JSONParseError(BaseModel):
    """The request body could not be parsed as JSON."""

    code: Literal[400] = 400
    message: str | None = 'Invalid JSON'
    data: Any | None = None


class InvalidParamsError(BaseModel):
    """A request parameter or body field was missing or malformed."""

    code: Literal[400] = 400
    message: str | None = 'Invalid parameters'
    data: Any | None = None


class TaskNotFoundError(BaseModel):
    """The requested task does not exist."""

    code: Literal[404] = 404
    message: str | None = 'Task not found'
    data: Any | None = None


class InternalError(BaseModel):
    """An unexpected server-side failure."""

    code: Literal[500] = 500
    message: str | None = 'Internal error'
    data: Any | None = None


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    code: int
    message: str
    data: Any | None = None
