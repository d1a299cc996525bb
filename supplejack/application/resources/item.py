"""Items: the records inside a user set."""

from datetime import datetime
from typing import Any

from supplejack.application.context import ApiContext
from supplejack.application.resources.base import WRITE_ERRORS, user_sets_cache_key
from supplejack.domain.util import is_present, parse_time, stringify_keys


class Item:
    """A record in a set, with a copy of some of the record's attributes.

    Unknown attributes read as None through ``get``.
    """

    ATTRIBUTES = (
        "record_id", "title", "description", "large_thumbnail_url", "thumbnail_url",
        "contributing_partner", "display_content_partner", "display_collection",
        "landing_url", "category", "date", "dnz_type", "dc_identifier", "creator",
    )

    def __init__(self, attributes: Any, context: ApiContext):
        attrs = stringify_keys(attributes)
        self.context = context
        self.user_set_id = attrs.get("user_set_id")
        self.api_key: str | None = attrs.get("api_key")
        self.position = attrs.get("position")
        self.errors: str | None = None

        for name in self.ATTRIBUTES:
            setattr(self, name, attrs.get(name))

    @property
    def date(self) -> datetime | None:
        value = self._date
        if isinstance(value, list):
            value = value[0] if value else None
        return parse_time(value) if value else None

    @date.setter
    def date(self, value: Any) -> None:
        self._date = value

    @property
    def id(self) -> Any:
        return self.record_id

    @property
    def attributes(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.ATTRIBUTES}

    def get(self, name: str) -> Any:
        if name in self.ATTRIBUTES or name in ("id", "user_set_id", "api_key", "position"):
            return getattr(self, name)
        return None

    def save(self) -> bool:
        """Add the record to its set."""
        record = {"record_id": self.record_id}
        if is_present(self.position):
            record["position"] = self.position
        try:
            self.context.transport.post(
                f"/sets/{self.user_set_id}/records", {"api_key": self.api_key}, {"record": record}
            )
            self.context.invalidate(user_sets_cache_key(self.api_key))
            return True
        except WRITE_ERRORS as e:
            self.errors = str(e)
            return False

    def destroy(self) -> bool:
        """Remove the record from its set."""
        try:
            self.context.transport.delete(
                f"/sets/{self.user_set_id}/records/{self.record_id}", {"api_key": self.api_key}
            )
            self.context.invalidate(user_sets_cache_key(self.api_key))
            return True
        except WRITE_ERRORS as e:
            self.errors = str(e)
            return False

    def __repr__(self) -> str:
        return f"Item(record_id={self.record_id!r}, title={self.title!r})"
