"""Shared pieces of the API resources."""

import json
from typing import Any

from supplejack.application.context import ApiContext
from supplejack.domain.exceptions import SupplejackError, UnknownAttributeError
from supplejack.domain.util import stringify_keys

# Failures a save/destroy reports through ``errors`` instead of raising
WRITE_ERRORS: tuple[type[Exception], ...] = (SupplejackError, KeyError, TypeError)


def sort_value(value: Any) -> tuple[bool, Any]:
    """Sort key that puts None last and compares strings case-insensitively."""
    if value is None:
        return (True, 0)
    if isinstance(value, str):
        return (False, value.lower())
    return (False, value)


def unwrap_list(response: Any, *keys: str) -> list[dict[str, Any]]:
    """The list in ``response``: the response itself, or the first matching envelope key."""
    if isinstance(response, dict):
        for key in keys:
            if isinstance(response.get(key), list):
                response = response[key]
                break
    if not isinstance(response, list):
        return []
    return [item for item in response if isinstance(item, dict)]


def user_sets_cache_key(api_key: Any) -> str:
    """Cache key for a user's set list, whichever path fetched it."""
    return f"/users/{api_key}/sets"


def user_stories_cache_key(api_key: Any) -> str:
    """Cache key for a user's story list, whichever path fetched it."""
    return f"/users/{api_key}/stories"


class ApiRecord:
    """Read-only wrapper over a response hash; unknown attributes raise.

    Accepts a mapping or a JSON object string; anything else yields an
    empty attribute map.
    """

    def __init__(self, attributes: Any = None, context: ApiContext | None = None):
        if isinstance(attributes, str):
            try:
                attributes = json.loads(attributes)
            except json.JSONDecodeError:
                attributes = {}
        self.attributes: dict[str, Any] = stringify_keys(attributes)
        self.context = context

    def get(self, name: str) -> Any:
        if name not in self.attributes:
            raise UnknownAttributeError(type(self).__name__, name)
        return self.attributes[name]

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.attributes

    @property
    def persisted(self) -> bool:
        return True

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.attributes == self.attributes

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.attributes!r})"
