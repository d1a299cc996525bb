"""Search service: lazily runs one ``/records`` query and post-processes it."""

import hashlib
import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from supplejack.application.context import ApiContext, RecordFactory
from supplejack.application.schemas import SearchPayload
from supplejack.config import LOOKUP_CACHE_TTL, SEARCH_CACHE_TTL
from supplejack.domain.exceptions import (
    ApiNotAvailable,
    ReadTimeout,
    RequestTimeout,
    ServiceUnavailable,
    UnknownAttributeError,
)
from supplejack.domain.facet import Facet, FacetPivot
from supplejack.domain.paginated_collection import PaginatedCollection
from supplejack.domain.url_formats.item_hash import HEADINGS, ITEMS, CanonicalQuery, ItemHash
from supplejack.domain.util import as_list, deep_merge, is_present, stringify_keys, to_int
from supplejack.infrastructure.http.query_string import to_query

logger = logging.getLogger(__name__)

# Position given to facets missing from the configured order
_UNORDERED_POSITION = 100

# Request parameters set by web frameworks that must never reach the API
_ROUTING_PARAMS = ("controller", "action")


def _cache_key(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def _position(order: list[str], name: str) -> int:
    return order.index(name) if name in order else _UNORDERED_POSITION


class Search:
    """One logical search against the records endpoint.

    Construction only decodes ``params``; the API is called on the first
    read of ``results()``, ``total()``, ``facets()`` or ``facet_pivots()``
    and never again for this instance. Generic failures leave the search
    empty, while service-unavailable and timeouts raise ``ApiNotAvailable``
    and ``RequestTimeout``.

    ``and_``, ``or_`` and ``without`` hold extra nested conditions that
    the URL format can't express; they are merged into every request.
    """

    request_path = "/records"

    def __init__(
        self,
        params: Mapping[str, Any] | None,
        context: ApiContext,
        *,
        record_factory: RecordFactory | None = None,
    ):
        settings = context.settings
        self.context = context
        self.record_factory = record_factory

        self.params: dict[str, Any] = stringify_keys(params)
        if not self.params.get("facets"):
            self.params["facets"] = ",".join(settings.facets)
        if not self.params.get("facets_per_page"):
            self.params["facets_per_page"] = settings.facets_per_page
        for name in _ROUTING_PARAMS:
            self.params.pop(name, None)

        self.url_format = ItemHash(
            self.params,
            self,
            per_page=settings.per_page,
            fields=settings.fields,
            non_text_fields=settings.non_text_fields,
            text_field_suffix=settings.text_field_suffix,
        )
        self.query: CanonicalQuery = self.url_format.decode()
        self._filters = self.url_format.filters()
        self.api_params = self.url_format.to_api_hash()

        self.text: str | None = self.params.get("text")
        self.geo_bbox = self.params.get("geo_bbox")
        self.record_type: int | str = self.query.record_type
        self.page = self.query.page
        self.per_page = self.query.per_page
        self.pagination_limit = self.params.get("pagination_limit") or settings.pagination_limit
        self.sort: str | None = self.params.get("sort")
        self.direction: str | None = self.params.get("direction")

        self.and_: dict[str, Any] | None = None
        self.or_: dict[str, Any] | None = None
        self.without: dict[str, Any] | None = None

        self._search_attributes: dict[str, Any] = {}
        for attribute in settings.search_attributes:
            value = self._filters.get(attribute)
            self._search_attributes[attribute] = None if value == "all" else value

        self._lock = threading.RLock()
        self._response: dict[str, Any] | None = None
        self._results: PaginatedCollection | None = None
        self._total: int | None = None
        self._facets: list[Facet] | None = None
        self._categories: dict[str, Any] | None = None
        self._facet_values: dict[str, dict[str, Any]] = {}
        self._facet_params: dict[str, dict[str, Any]] = {}

    # ── Search attributes ──

    def get_attribute(self, name: str) -> Any:
        """Current value of a configured search attribute (e.g. ``location``)."""
        if name not in self._search_attributes:
            raise UnknownAttributeError(type(self).__name__, name)
        return self._search_attributes[name]

    def set_attribute(self, name: str, value: Any) -> None:
        if name not in self._search_attributes:
            raise UnknownAttributeError(type(self).__name__, name)
        self._search_attributes[name] = value

    def has_filter_and_value(self, name: str, value: Any) -> bool:
        """True when the search attribute ``name`` holds ``value`` (alone or in a list)."""
        actual = self._search_attributes.get(name)
        if actual is None:
            return False
        return value in as_list(actual)

    def filters(
        self, format: str = "array", exclude: Iterable[str] = ()
    ) -> list[tuple[str, Any]] | dict[str, Any]:
        """Active filters as ``(name, value)`` pairs, one pair per value.

        ``format="hash"`` returns the merged filter mapping itself.
        """
        if format == "hash":
            return self._filters

        excluded = set(exclude)
        pairs: list[tuple[str, Any]] = []
        for name, value in self._filters.items():
            if name in excluded:
                continue
            values = value if isinstance(value, list) else [value]
            pairs.extend((name, item) for item in values)
        return pairs

    def options(self, filter_options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """URL options for a link to this search; see ``ItemHash.options``."""
        return self.url_format.options(filter_options)

    def is_record(self) -> bool:
        return self.record_type == 0

    def cacheable(self) -> bool:
        return not is_present(self.text) and self.page <= 1

    # ── Execution ──

    def execute_request(self) -> dict[str, Any]:
        """Run the search once; later calls return the same response."""
        with self._lock:
            if self._response is None:
                self._response = self._perform_request()
            return self._response

    def _perform_request(self) -> dict[str, Any]:
        self.api_params = self.merge_extra_filters(self.api_params)
        params = self.api_params

        try:
            if self.context.caching_enabled and self.cacheable():
                key = _cache_key(f"{self.request_path}?{to_query(params)}")
                return self.context.cached(
                    key, SEARCH_CACHE_TTL, lambda: self.context.transport.get(self.request_path, params)
                )
            return self.context.transport.get(self.request_path, params)
        except ServiceUnavailable as e:
            raise ApiNotAvailable("Unable to connect to the Supplejack API") from e
        except ReadTimeout as e:
            raise RequestTimeout(f"Supplejack API request timed out: {e.message}") from e
        except Exception as e:
            logger.warning("Search request failed, returning no results: %s", e)
            return {"search": {}}

    def _payload(self) -> SearchPayload:
        return SearchPayload.from_response(self.execute_request())

    # ── Results ──

    def results(self) -> PaginatedCollection:
        """Records on the current page, built with the configured record factory."""
        if self._results is None:
            payload = self._payload()
            factory = self.record_factory or self.context.record_factory
            records = [factory(attributes, self.context) for attributes in payload.results]

            total = self.total()
            limit = to_int(self.pagination_limit) if self.pagination_limit else total
            self._results = PaginatedCollection(records, self.page, self.per_page, min(limit, total))
        return self._results

    def total(self) -> int:
        if self._total is None:
            self._total = self._payload().result_count
        return self._total

    def facets(self) -> list[Facet]:
        """Facets of the response, ordered as in ``settings.facets`` (unknown ones last)."""
        if self._facets is None:
            settings = self.context.settings
            ordered = sorted(
                self._payload().facets.items(),
                key=lambda item: _position(settings.facets, item[0]),
            )
            self._facets = [
                Facet(name, values, default_sort=settings.facets_sort) for name, values in ordered
            ]
        return self._facets

    def facet_pivots(self) -> list[FacetPivot]:
        order = self.context.settings.facet_pivots
        ordered = sorted(
            self._payload().facet_pivots.items(),
            key=lambda item: _position(order, item[0]),
        )
        return [FacetPivot(name, pivots) for name, pivots in ordered]

    def facet(self, name: str | None) -> Facet | None:
        if name is None:
            return None
        return next((facet for facet in self.facets() if facet.name == name), None)

    # ── Counts ──

    def counts(self, query_parameters: Mapping[str, Mapping[str, Any]]) -> dict[str, int]:
        """Result counts for named ad-hoc queries, run as one facet query.

        ``{"photos": {"large_thumbnail_url": "all", "record_type": 1}}``
        → ``{"photos": 100}``. Each query also carries the filters of the
        current search for the scope its ``record_type`` selects.
        """
        if self.context.caching_enabled:
            key = _cache_key(to_query(self.counts_params(query_parameters)))
            return self.context.cached(
                key, LOOKUP_CACHE_TTL, lambda: self.fetch_counts(query_parameters)
            )
        return self.fetch_counts(query_parameters)

    def fetch_counts(self, query_parameters: Mapping[str, Mapping[str, Any]]) -> dict[str, int]:
        try:
            response = self.context.transport.get(
                self.request_path, self.counts_params(query_parameters)
            )
            counts = dict(response["search"]["facets"]["counts"])
        except Exception as e:
            logger.warning("Counts request failed: %s", e)
            counts = {}

        # Queries that match nothing are missing from the response
        for name in query_parameters:
            if counts.get(str(name)) is None:
                counts[str(name)] = 0
        return counts

    def counts_params(self, query_parameters: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
        query_with_filters: dict[str, Any] = {}
        for count_name, count_filters in query_parameters.items():
            count_filters = stringify_keys(count_filters)
            scope = ITEMS if to_int(count_filters.get("record_type")) == 0 else HEADINGS

            filters = dict(self.url_format.and_filters(scope))
            for name, value in self.url_format.without_filters(scope).items():
                filters[f"-{name}"] = value
            query_with_filters[str(count_name)] = deep_merge(filters, count_filters)

        params: dict[str, Any] = {"facet_query": query_with_filters, "record_type": "all"}
        params["text"] = self.url_format.text()
        if is_present(self.text):
            params["text"] = self.text
        if is_present(self.geo_bbox):
            params["geo_bbox"] = self.geo_bbox
        params["query_fields"] = self.url_format.query_fields()

        params = self.merge_extra_filters(params)
        return {name: value for name, value in params.items() if value is not None}

    # ── Facet values ──

    def categories(self, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Category counts, not narrowed by the current category filter."""
        if self._categories is None:
            self._categories = self.facet_values("category", options)
        return self._categories

    def facet_values(self, facet_name: str, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Value counts of one facet, not narrowed by that facet's own filter.

        ``options``: ``all`` (default True) adds an ``"All"`` total,
        ``sort`` picks the Facet sort and ``facets_per_page`` caps the values.
        """
        if facet_name in self._facet_values:
            return self._facet_values[facet_name]

        if self.context.caching_enabled:
            key = _cache_key(to_query(self.facet_values_params(facet_name, options)))
            values = self.context.cached(
                key, LOOKUP_CACHE_TTL, lambda: self.fetch_facet_values(facet_name, options)
            )
            self._facet_values[facet_name] = values
            return values
        return self.fetch_facet_values(facet_name, options)

    def fetch_facet_values(
        self, facet_name: str, options: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        if facet_name in self._facet_values:
            return self._facet_values[facet_name]

        options = {"all": True, "sort": None, **dict(options or {})}
        try:
            response = self.context.transport.get(
                self.request_path, self.facet_values_params(facet_name, options)
            )
            search = response["search"]
            values = dict(search["facets"][facet_name])
        except Exception as e:
            logger.warning("Facet values request for '%s' failed: %s", facet_name, e)
            values = {}

        if options["all"]:
            values["All"] = sum(to_int(count) for count in values.values())

        facet = Facet(facet_name, values, default_sort=self.context.settings.facets_sort)
        self._facet_values[facet_name] = facet.values(options["sort"])
        return self._facet_values[facet_name]

    def facet_values_params(
        self, facet_name: str, options: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        if facet_name in self._facet_params:
            return self._facet_params[facet_name]

        options = options or {}
        filters = dict(self.url_format.and_filters())
        filters.pop(facet_name, None)

        facet_params = dict(self.api_params)
        facet_params["and"] = filters
        facet_params["facets"] = facet_name
        facet_params["per_page"] = 0
        if options.get("facets_per_page"):
            facet_params["facets_per_page"] = options["facets_per_page"]

        self._facet_params[facet_name] = self.merge_extra_filters(facet_params)
        return self._facet_params[facet_name]

    # ── Extra filters ──

    def merge_extra_filters(self, existing_filters: Mapping[str, Any]) -> dict[str, Any]:
        """Overlay the ``and_``/``or_``/``without`` conditions onto request params."""
        extra: dict[str, Any] = {}
        if self.and_:
            extra["and"] = self.and_
        if self.or_:
            extra["or"] = self.or_
        if self.without:
            extra["without"] = self.without
        return deep_merge(existing_filters, extra)
