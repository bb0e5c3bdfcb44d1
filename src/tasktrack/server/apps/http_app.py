from abc import ABC, abstractmethod
from typing import Any

from starlette.applications import Starlette


class HttpApp(ABC):
    """tasktrack server application interface.

    Defines the interface for building an HTTP application that serves
    the task operations.
    """

    @abstractmethod
    def build(self, prefix: str = '', **kwargs: Any) -> Starlette:
        """Builds and returns a Starlette application instance.

        Args:
            prefix: Path prefix for every task route.
            **kwargs: Additional keyword arguments to pass to the Starlette
              constructor.

        Returns:
            A configured Starlette application instance.
        """
