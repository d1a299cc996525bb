"""A list of results that knows which page of the full result set it is."""

import math
from collections.abc import Iterable
from typing import Any


class PaginatedCollection(list):
    """List subclass carrying page metadata.

    Exposes both naming conventions used by pagination helpers:
    ``total_entries``/``total_pages``/``previous_page`` and
    ``total_count``/``num_pages``/``limit_value``. Both read and write the
    same underlying total.
    """

    def __init__(
        self,
        items: Iterable[Any] = (),
        current_page: int = 1,
        per_page: int = 20,
        total_count: int = 0,
    ):
        super().__init__(items)
        self.current_page = int(current_page)
        self.per_page = int(per_page)
        self._total_count = int(total_count)

    # ── Totals ──

    @property
    def total_count(self) -> int:
        return self._total_count

    @total_count.setter
    def total_count(self, value: int) -> None:
        self._total_count = int(value)

    @property
    def total_entries(self) -> int:
        return self._total_count

    @total_entries.setter
    def total_entries(self, value: int) -> None:
        self._total_count = int(value)

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return math.ceil(self._total_count / self.per_page)

    @property
    def num_pages(self) -> int:
        return self.total_pages

    @property
    def limit_value(self) -> int:
        return self.per_page

    # ── Navigation ──

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.per_page

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def previous_page(self) -> int | None:
        return self.current_page - 1 if self.has_previous else None

    @property
    def next_page(self) -> int | None:
        return self.current_page + 1 if self.has_next else None

    @property
    def first_page(self) -> bool:
        return self.current_page == 1

    @property
    def last_page(self) -> bool:
        return self.current_page >= self.total_pages

    @property
    def out_of_bounds(self) -> bool:
        return self.current_page > self.total_pages

    def __repr__(self) -> str:
        return (
            f"PaginatedCollection({list.__repr__(self)}, page={self.current_page}, "
            f"per_page={self.per_page}, total={self._total_count})"
        )
