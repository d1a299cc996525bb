"""Facet groups returned alongside search results."""

from dataclasses import dataclass, field
from typing import Any

from supplejack.domain.util import to_int

# Recognised sort policies for Facet.values()
SORT_INDEX = "index"
SORT_COUNT = "count"


class Facet:
    """A facet name and its value → count mapping.

    ``values()`` re-sorts on every call so the same instance can be read
    in different orders.
    """

    def __init__(self, name: str, values: dict[str, Any] | None, default_sort: str | None = None):
        self._name = name
        self._values = dict(values or {})
        self._default_sort = default_sort

    @property
    def name(self) -> str:
        return self._name

    def values(self, sort: str | None = None) -> dict[str, Any]:
        """Return the values ordered by ``index`` (label), ``count`` (desc) or response order."""
        sort = sort or self._default_sort
        items = list(self._values.items())

        if sort == SORT_INDEX:
            items.sort(key=lambda item: str(item[0]))
        elif sort == SORT_COUNT:
            items.sort(key=lambda item: -to_int(item[1]))

        return dict(items)

    def __repr__(self) -> str:
        return f"Facet(name={self._name!r}, values={self._values!r})"


@dataclass
class FacetPivot:
    """A pivot facet: nested value trees keyed by the pivot name."""

    name: str
    pivots: list[dict[str, Any]] = field(default_factory=list)
