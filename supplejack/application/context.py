"""Everything a search or resource needs to reach the API, bundled once."""

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from supplejack.application.interfaces import ResponseCache, Transport
from supplejack.config import Settings

# (attributes, context) -> record object
RecordFactory = Callable[[dict[str, Any], "ApiContext"], Any]
# (params, context) -> search object
SearchFactory = Callable[[dict[str, Any] | None, "ApiContext"], Any]


@dataclass(frozen=True)
class ApiContext:
    """Immutable wiring shared by searches and resources.

    ``record_factory`` builds each search result; ``search_factory`` builds
    the search used by ``Record.find`` when search options are given.
    """

    settings: Settings
    transport: Transport
    record_factory: RecordFactory
    search_factory: SearchFactory
    cache: ResponseCache | None = None

    @property
    def caching_enabled(self) -> bool:
        return self.settings.enable_caching and self.cache is not None

    def cached(self, key: str, ttl: int, populate: Callable[[], Any]) -> Any:
        """Read-through the response cache when caching is on, else just populate."""
        if not self.caching_enabled:
            return populate()
        return self.cache.fetch(key, ttl, populate)

    def invalidate(self, key: str) -> None:
        if self.caching_enabled:
            self.cache.delete(key)

    def with_record_factory(self, record_factory: RecordFactory) -> "ApiContext":
        return replace(self, record_factory=record_factory)
