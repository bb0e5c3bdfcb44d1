"""Client-side components for interacting with a tasktrack server."""

from tasktrack.client.client import TaskTrackClient
from tasktrack.client.errors import (
    TaskTrackClientError,
    TaskTrackClientHTTPError,
    TaskTrackClientJSONError,
)


__all__ = [
    'TaskTrackClient',
    'TaskTrackClientError',
    'TaskTrackClientHTTPError',
    'TaskTrackClientJSONError',
]
