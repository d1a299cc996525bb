"""Abstract response cache (port)."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any


class ResponseCache(ABC):
    """Process-wide read-through cache for API responses."""

    @abstractmethod
    def fetch(self, key: str, ttl: int, populate: Callable[[], Any]) -> Any:
        """Return the cached value for ``key``, calling ``populate`` on a miss.

        The populated value is kept for ``ttl`` seconds. Exceptions raised by
        ``populate`` propagate and nothing is stored.
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Forget ``key``. Unknown keys are ignored."""
        ...

    @abstractmethod
    def clear(self) -> None:
        ...
