"""Dependency wiring: settings → transport → cache → ApiContext."""

import httpx

from supplejack.application.context import ApiContext, RecordFactory, SearchFactory
from supplejack.application.resources.record import Record
from supplejack.application.services.search import Search
from supplejack.config import Settings, get_settings
from supplejack.infrastructure.cache.ttl_response_cache import TTLResponseCache
from supplejack.infrastructure.http.httpx_transport import HttpxTransport


def build_context(
    settings: Settings | None = None,
    *,
    http_client: httpx.Client | None = None,
    record_factory: RecordFactory | None = None,
    search_factory: SearchFactory | None = None,
) -> ApiContext:
    """Provides an ApiContext with the httpx transport and, when enabled, the response cache."""
    settings = settings or get_settings()
    transport = HttpxTransport(settings, http_client=http_client)
    cache = TTLResponseCache(max_entries=settings.cache_max_entries) if settings.enable_caching else None

    return ApiContext(
        settings=settings,
        transport=transport,
        record_factory=record_factory or Record,
        search_factory=search_factory or Search,
        cache=cache,
    )
