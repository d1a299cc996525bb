"""Shared fakes and fixtures for the unit tests."""

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

from supplejack.application.context import ApiContext
from supplejack.application.interfaces import ResponseCache, Transport
from supplejack.application.resources import Record
from supplejack.application.services import Search
from supplejack.config import Settings


@dataclass
class Call:
    method: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    payload: dict[str, Any] | None = None


class FakeTransport(Transport):
    """In-memory transport that records calls and replays queued responses.

    Responses are queued per (method, path); the last one queued keeps
    being returned. An exception instance in the queue is raised instead.
    """

    def __init__(self):
        self.calls: list[Call] = []
        self._responses: dict[tuple[str, str], list[Any]] = {}

    def respond(self, method: str, path: str, *responses: Any) -> None:
        self._responses.setdefault((method, path), []).extend(responses)

    def calls_to(self, method: str, path: str) -> list[Call]:
        return [call for call in self.calls if call.method == method and call.path == path]

    def _handle(self, method: str, path: str, params: Any, payload: Any) -> Any:
        self.calls.append(Call(method, path, copy.deepcopy(params or {}), copy.deepcopy(payload)))
        queue = self._responses.get((method, path))
        if not queue:
            return None if method == "DELETE" else {}

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

    def get(self, path, params=None, options=None):
        return self._handle("GET", path, params, None)

    def post(self, path, params=None, payload=None, options=None):
        return self._handle("POST", path, params, payload)

    def put(self, path, params=None, payload=None, options=None):
        return self._handle("PUT", path, params, payload)

    def patch(self, path, params=None, payload=None, options=None):
        return self._handle("PATCH", path, params, payload)

    def delete(self, path, params=None, options=None):
        return self._handle("DELETE", path, params, None)


class InMemoryCache(ResponseCache):
    """Dict-backed cache that ignores TTLs."""

    def __init__(self):
        self.entries: dict[str, Any] = {}

    def fetch(self, key: str, ttl: int, populate: Callable[[], Any]) -> Any:
        if key not in self.entries:
            self.entries[key] = populate()
        return self.entries[key]

    def delete(self, key: str) -> None:
        self.entries.pop(key, None)

    def clear(self) -> None:
        self.entries.clear()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def make_context(transport: FakeTransport, cache: InMemoryCache):
    """Build an ApiContext over the fakes; keyword arguments override settings."""

    def _make(**overrides: Any) -> ApiContext:
        settings = Settings(**{"api_key": "test-key", **overrides})
        return ApiContext(
            settings=settings,
            transport=transport,
            record_factory=Record,
            search_factory=Search,
            cache=cache,
        )

    return _make


@pytest.fixture
def context(make_context) -> ApiContext:
    return make_context()
