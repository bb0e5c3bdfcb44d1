"""Custom exceptions for tasktrack server-side errors."""

from tasktrack.types import (
    InternalError,
    InvalidParamsError,
    JSONParseError,
    TaskNotFoundError,
)


class TaskTrackServerError(Exception):
    """Base exception for tasktrack Server errors."""


class ServerError(TaskTrackServerError):
    """Wrapper exception for errors originating from the server's logic.

    This exception is used internally by request handlers and other server components
    to signal a specific error that should be formatted as an HTTP error response.
    """

    def __init__(
        self,
        error: (
            JSONParseError
            | InvalidParamsError
            | TaskNotFoundError
            | InternalError
            | None
        ),
    ):
        """Initializes the ServerError.

        Args:
            error: The specific error model instance.
                   If None, an `InternalError` will be used when formatting the response.
        """
        self.error = error
        super().__init__(error.message if error else 'Internal error')
