"""Exceptions raised by `TaskTrackClient`.

A 404 for a single task is not an error on the client side: those
operations return `None` (or `False` for deletes) instead. A 404 from the
list or search endpoints means the endpoint itself is missing and is raised
as `TaskTrackClientHTTPError`.
"""


class TaskTrackClientError(Exception):
    """Base class for every tasktrack client failure."""


class TaskTrackClientHTTPError(TaskTrackClientError):
    """The server answered with an error status, or was unreachable.

    Transport failures (connection refused, timeouts) are reported with
    status code 503.
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f'HTTP Error {status_code}: {message}')


class TaskTrackClientJSONError(TaskTrackClientError):
    """A response body was not a valid task or task list."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f'JSON Error: {message}')
