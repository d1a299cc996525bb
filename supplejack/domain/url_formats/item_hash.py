"""The ``i``/``il``/``h``/``hl`` URL filter format.

Search state travels in links as four filter buckets:

    i   unlocked item filters        il  locked item filters
    h   unlocked heading filters     hl  locked heading filters

plus top-level ``text``, ``page``, ``per_page``, ``sort``, ``direction``,
``record_type`` and facet parameters. ``ItemHash`` decodes that structure
into the API's parameter contract and encodes the current search state
back into it for generating links.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from supplejack.domain.util import (
    as_list,
    deep_merge,
    is_blank,
    is_present,
    stringify_keys,
    to_int,
)

ITEMS = "items"
HEADINGS = "headings"

# Bucket name → (scope symbol, locked)
BUCKETS: dict[str, tuple[str, bool]] = {
    "i": ("i", False),
    "il": ("i", True),
    "h": ("h", False),
    "hl": ("h", True),
}

WITHOUT_PREFIX = "-"


@dataclass
class CanonicalQuery:
    """Decoded view of an item hash, in API terms."""

    and_: dict[str, Any] = field(default_factory=dict)
    without: dict[str, Any] = field(default_factory=dict)
    text: str | None = None
    query_fields: list[str] = field(default_factory=list)
    page: int = 1
    per_page: int = 20
    sort: str | None = None
    direction: str | None = None
    record_type: int | str = 0
    facets: list[str] = field(default_factory=list)
    facets_per_page: int | None = None


class ItemHash:
    """Codec between the nested URL filter structure and API parameters.

    ``search`` is the owning search, if any. ``options()`` reads the
    current text/sort/direction/page/record_type from it so that changes
    made on the search after construction show up in generated links.
    """

    def __init__(
        self,
        params: Mapping[str, Any] | None = None,
        search: Any = None,
        *,
        per_page: int = 20,
        fields: Iterable[str] = ("default",),
        non_text_fields: Iterable[str] = (),
        text_field_suffix: str = "_text",
    ):
        self.params: dict[str, Any] = stringify_keys(params)
        self.search = search
        self._default_per_page = per_page
        self._fields = list(fields)
        self._non_text_fields = {str(name) for name in non_text_fields}
        self._text_field_suffix = text_field_suffix

        self._buckets = {name: self.filters_of_type(name) for name in BUCKETS}
        self._filters: dict[str, dict[str, Any]] = {}
        self._and_filters: dict[str, dict[str, Any]] = {}
        self._without_filters: dict[str, dict[str, Any]] = {}

    # ── Buckets ──

    @property
    def i_unlocked(self) -> dict[str, Any]:
        return self._buckets["i"]

    @property
    def i_locked(self) -> dict[str, Any]:
        return self._buckets["il"]

    @property
    def h_unlocked(self) -> dict[str, Any]:
        return self._buckets["h"]

    @property
    def h_locked(self) -> dict[str, Any]:
        return self._buckets["hl"]

    def filters_of_type(self, bucket: str) -> dict[str, Any]:
        """One bucket of filters; anything that isn't a mapping reads as empty."""
        return stringify_keys(self.params.get(bucket))

    def filter_symbol(self, scope: str | None = None) -> str:
        """``i`` or ``h``: the explicit scope, else the one ``record_type`` selects."""
        if scope:
            return "i" if scope == ITEMS else "h"
        return "i" if to_int(self.params.get("record_type")) == 0 else "h"

    # ── Decoding ──

    def filters(self, scope: str | None = None) -> dict[str, Any]:
        """Unlocked and locked filters of a scope merged together (locked last)."""
        symbol = self.filter_symbol(scope)
        if symbol not in self._filters:
            unlocked = self._buckets[symbol]
            locked = self._buckets[f"{symbol}l"]
            self._filters[symbol] = deep_merge(unlocked, locked)
        return self._filters[symbol]

    def and_filters(self, scope: str | None = None) -> dict[str, Any]:
        symbol = self.filter_symbol(scope)
        if symbol not in self._and_filters:
            self._and_filters[symbol] = {
                name: value
                for name, value in self.filters(scope).items()
                if not name.startswith(WITHOUT_PREFIX) and not self.is_text_field(name)
            }
        return self._and_filters[symbol]

    def without_filters(self, scope: str | None = None) -> dict[str, Any]:
        symbol = self.filter_symbol(scope)
        if symbol not in self._without_filters:
            self._without_filters[symbol] = {
                name[len(WITHOUT_PREFIX):]: value
                for name, value in self.filters(scope).items()
                if name.startswith(WITHOUT_PREFIX) and len(name) > len(WITHOUT_PREFIX)
            }
        return self._without_filters[symbol]

    def is_text_field(self, name: str | None) -> bool:
        if not name or name in self._non_text_fields:
            return False
        return name.endswith(self._text_field_suffix)

    def text(self, default_text: str | None = None, scope: str | None = None) -> str | None:
        """The free-text query: ``default_text`` followed by every ``*_text`` filter value."""
        text_values: list[str] = []
        if is_present(default_text):
            text_values.append(str(default_text))

        for name, value in self.filters(scope).items():
            if self.is_text_field(name):
                text_values.extend(str(item) for item in as_list(value))

        if not text_values:
            return None
        return " ".join(text_values)

    def query_fields(self, scope: str | None = None) -> list[str] | None:
        """Field names of the ``*_text`` filters, with the suffix removed."""
        suffix_length = len(self._text_field_suffix)
        fields = [
            name[:-suffix_length]
            for name in self.filters(scope)
            if self.is_text_field(name)
        ]
        return fields or None

    def to_api_hash(self) -> dict[str, Any]:
        """Parameters for the ``/records`` endpoint; blank values are left out."""
        params = self.params
        api: dict[str, Any] = {}

        text_value = self.text(params.get("text"))
        if text_value:
            api["text"] = text_value
        if params.get("geo_bbox"):
            api["geo_bbox"] = params["geo_bbox"]

        api["record_type"] = self._record_type()
        api["page"] = self._page()
        per_page = params.get("per_page")
        api["per_page"] = to_int(self._default_per_page if per_page is None else per_page)

        if self.and_filters():
            api["and"] = self.and_filters()
        if self.without_filters():
            api["without"] = self.without_filters()
        if is_present(params.get("facets")):
            api["facets"] = params["facets"]
        if is_present(params.get("facets_per_page")):
            api["facets_per_page"] = to_int(params["facets_per_page"])
        if is_present(params.get("facets_page")):
            api["facets_page"] = to_int(params["facets_page"])
        if is_present(params.get("facet_pivots")):
            api["facet_pivots"] = params["facet_pivots"]

        api["fields"] = params.get("fields") or ",".join(self._fields)

        query_fields = self.query_fields()
        if query_fields:
            api["query_fields"] = query_fields
        if is_present(params.get("solr_query")):
            api["solr_query"] = params["solr_query"]
        if is_present(params.get("ignore_metrics")):
            api["ignore_metrics"] = params["ignore_metrics"]
        api["exclude_filters_from_facets"] = params.get("exclude_filters_from_facets") or False

        if is_present(params.get("sort")):
            api["sort"] = params["sort"]
            api["direction"] = params.get("direction") or "asc"

        return api

    def decode(self) -> CanonicalQuery:
        api = self.to_api_hash()
        facets = api.get("facets") or []
        if isinstance(facets, str):
            facets = [name.strip() for name in facets.split(",") if name.strip()]

        return CanonicalQuery(
            and_=dict(api.get("and", {})),
            without=dict(api.get("without", {})),
            text=api.get("text"),
            query_fields=list(api.get("query_fields", [])),
            page=api["page"],
            per_page=api["per_page"],
            sort=api.get("sort"),
            direction=api.get("direction"),
            record_type=api["record_type"],
            facets=list(facets),
            facets_per_page=api.get("facets_per_page"),
        )

    def _record_type(self) -> int | str:
        record_type = self.params.get("record_type") or 0
        if record_type == "all":
            return record_type
        return to_int(record_type)

    def _page(self) -> int:
        return max(to_int(self.params.get("page") or 1), 1)

    # ── Encoding ──

    def options(self, filter_options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Rebuild the URL structure for a link, with filters removed or added.

        ``filter_options``:
            except  names to drop, or ``{name: values}`` to drop single values
                    from a multi-valued filter; ``"page"`` keeps the page out.
            plus    ``{bucket: {name: value}}`` merged into that bucket.
        """
        filter_options = filter_options or {}
        exceptions = list(filter_options.get("except") or [])
        plus = filter_options.get("plus") or {}

        link: dict[str, Any] = {}
        for bucket in BUCKETS:
            filters = {
                name: value for name, value in self._buckets[bucket].items() if not is_blank(value)
            }

            for exception in exceptions:
                if isinstance(exception, Mapping):
                    if not exception:
                        continue
                    name, values_to_delete = next(iter(exception.items()))
                    name = str(name)
                    values_to_delete = as_list(values_to_delete)
                    remaining = [
                        value for value in as_list(filters.get(name)) if value not in values_to_delete
                    ]
                    if remaining:
                        filters[name] = remaining[0] if len(remaining) == 1 else remaining
                    else:
                        filters.pop(name, None)
                else:
                    filters.pop(str(exception), None)

            extra = plus.get(bucket) if isinstance(plus, Mapping) else None
            if extra:
                filters = deep_merge(filters, extra)

            if filters:
                link[bucket] = filters

        for attribute in ("text", "direction", "sort"):
            value = self._current(attribute)
            if is_present(value):
                link[attribute] = value

        if "page" not in exceptions:
            page = self._current("page")
            if page and page != 1:
                link["page"] = page

        record_type = self._current("record_type")
        if isinstance(record_type, int) and record_type > 0:
            link["record_type"] = 1

        return link

    def _current(self, attribute: str) -> Any:
        """Current value of a search attribute, from the search when there is one."""
        if self.search is not None:
            return getattr(self.search, attribute)
        if attribute == "page":
            return self._page()
        if attribute == "record_type":
            return self._record_type()
        return self.params.get(attribute)
