"""Abstract HTTP transport (port), the only way resources talk to the API."""

from abc import ABC, abstractmethod
from typing import Any


class Transport(ABC):
    """Port for calls to the Supplejack API, implemented in the infrastructure layer.

    ``path`` is relative to the API root and carries no format suffix
    (``/records/123``). ``params`` become the query string. Every method
    raises a ``TransportError`` subclass on failure.
    """

    @abstractmethod
    def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        """Issue a GET and return the decoded JSON body."""
        ...

    @abstractmethod
    def post(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        """Issue a POST with a JSON payload and return the decoded body."""
        ...

    @abstractmethod
    def put(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        ...

    @abstractmethod
    def patch(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        ...

    @abstractmethod
    def delete(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        """Issue a DELETE. Returns the decoded body, or None when there is none."""
        ...
