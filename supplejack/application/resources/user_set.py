"""User sets: named, ordered collections of records owned by a user."""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from supplejack.application.context import ApiContext
from supplejack.application.resources.base import WRITE_ERRORS, unwrap_list, user_sets_cache_key
from supplejack.application.resources.user import User
from supplejack.config import LOOKUP_CACHE_TTL
from supplejack.domain.exceptions import ResourceNotFound, SetNotFound
from supplejack.domain.paginated_collection import PaginatedCollection
from supplejack.domain.util import is_blank, is_present, parse_time, stringify_keys, to_int

if TYPE_CHECKING:
    from supplejack.application.resources.item_relation import ItemRelation

logger = logging.getLogger(__name__)


class UserSet:
    """A set on the API.

    Its records are reached through ``user_set.items`` (an ``ItemRelation``).
    The API key used for writes is the set's own, else its user's.
    """

    ATTRIBUTES = (
        "id", "name", "description", "privacy", "url", "priority", "count", "tags",
        "tag_list", "featured", "records", "created_at", "updated_at", "approved", "record",
    )
    API_ATTRIBUTES = ("name", "description", "privacy", "priority", "tag_list", "featured", "approved")
    PRIVACY_STATES = ("public", "hidden", "private")

    def __init__(self, attributes: Any, context: ApiContext):
        attrs = stringify_keys(attributes)
        self.context = context

        self.id: str | None = None
        self.name: str | None = None
        self.description: str | None = None
        self.privacy: str | None = None
        self.url: str | None = None
        self.count: int | None = None
        self.tags: list[str] | None = None
        self.featured: bool | None = None
        self.records: list[dict[str, Any]] | None = None
        self.approved: bool | None = None
        self.record: dict[str, Any] | None = None
        self._priority: int | None = None
        self._tag_list: str | None = None
        self._created_at: datetime | None = None
        self._updated_at: datetime | None = None

        self._api_key: str | None = None
        self.errors: str | None = None
        self.user = User(attrs.get("user"), context)
        self._items: "ItemRelation | None" = None

        self.assign_attributes(attrs)

    # ── Attributes ──

    @property
    def attributes(self) -> dict[str, Any]:
        """Present (non-blank) attributes."""
        values = {name: getattr(self, name) for name in self.ATTRIBUTES}
        return {name: value for name, value in values.items() if is_present(value)}

    def assign_attributes(self, attributes: Any) -> None:
        """Set every known attribute in ``attributes``; ``ordered_records`` fills ``records``."""
        attributes = stringify_keys(attributes)
        for name, value in attributes.items():
            if name in self.ATTRIBUTES:
                setattr(self, name, value)
        if attributes.get("ordered_records"):
            self.records = self.ordered_records_from_array(attributes["ordered_records"])

    def api_attributes(self) -> dict[str, Any]:
        api_attributes = {name: getattr(self, name) for name in self.API_ATTRIBUTES}
        api_attributes["records"] = self.api_records()
        return api_attributes

    def api_records(self) -> list[dict[str, Any]]:
        """``[{"record_id": 123, "position": 1}, ...]`` for the set's records."""
        records = self.records if isinstance(self.records, list) else []
        api_records = []
        for record in records:
            record = stringify_keys(record)
            if record.get("record_id"):
                api_records.append({"record_id": record["record_id"], "position": record.get("position")})
        return api_records

    @staticmethod
    def ordered_records_from_array(record_ids: list[Any]) -> list[dict[str, Any]]:
        """``[89, 66]`` → ``[{"record_id": 89, "position": 1}, {"record_id": 66, "position": 2}]``"""
        return [
            {"record_id": record_id, "position": index}
            for index, record_id in enumerate(record_ids, start=1)
        ]

    @property
    def priority(self) -> int:
        return self._priority or 1

    @priority.setter
    def priority(self, value: int | None) -> None:
        self._priority = value

    @property
    def tag_list(self) -> str | None:
        if self._tag_list:
            return self._tag_list
        if self.tags:
            return ", ".join(self.tags)
        return None

    @tag_list.setter
    def tag_list(self, value: str | None) -> None:
        self._tag_list = value

    @property
    def created_at(self) -> datetime | None:
        return self._created_at

    @created_at.setter
    def created_at(self, value: Any) -> None:
        self._created_at = parse_time(value)

    @property
    def updated_at(self) -> datetime | None:
        return self._updated_at

    @updated_at.setter
    def updated_at(self, value: Any) -> None:
        self._updated_at = parse_time(value)

    @property
    def api_key(self) -> str | None:
        return self._api_key or self.user.api_key

    @api_key.setter
    def api_key(self, value: str | None) -> None:
        self._api_key = value

    @property
    def items(self) -> "ItemRelation":
        if self._items is None:
            from supplejack.application.resources.item_relation import ItemRelation

            self._items = ItemRelation(self)
        return self._items

    # ── Predicates ──

    def is_favourite(self) -> bool:
        return self.name == "Favourites"

    def is_private(self) -> bool:
        return self.privacy == "private"

    def is_public(self) -> bool:
        return self.privacy == "public"

    def is_hidden(self) -> bool:
        return self.privacy == "hidden"

    def is_new_record(self) -> bool:
        return is_blank(self.id)

    @property
    def persisted(self) -> bool:
        return not self.is_new_record()

    def has_record(self, record_id: Any) -> bool:
        record_id = to_int(record_id)
        return any(to_int(item.record_id) == record_id for item in self.items)

    def set_record_id(self) -> Any:
        """The ``record_id`` of the set's associated record, if any."""
        if self.record:
            return self.record.get("record_id")
        return None

    def viewable_by(self, user: User | None) -> bool:
        """Public and hidden sets are viewable by anyone, private ones by the owner."""
        if self.is_public() or self.is_hidden():
            return True
        return self.owned_by(user)

    def owned_by(self, user: User | None) -> bool:
        user_key = getattr(user, "api_key", None)
        if is_blank(user_key) or is_blank(self.api_key):
            return False
        return user_key == self.api_key

    # ── Persistence ──

    def save(self) -> bool:
        """POST a new set or PUT an existing one; failures land in ``errors``."""
        try:
            payload = {"set": self.api_attributes()}
            if self.is_new_record():
                response = self.context.transport.post("/sets", {"api_key": self.api_key}, payload)
                self.id = response["set"]["id"]
            else:
                self.context.transport.put(f"/sets/{self.id}", {"api_key": self.api_key}, payload)
            self.context.invalidate(user_sets_cache_key(self.api_key))
            return True
        except WRITE_ERRORS as e:
            self.errors = repr(e)
            return False

    def update_attributes(self, attributes: dict[str, Any]) -> bool:
        self.assign_attributes(attributes)
        return self.save()

    def destroy(self) -> bool:
        if self.is_new_record():
            return False
        try:
            self.context.transport.delete(f"/sets/{self.id}", {"api_key": self.api_key})
            self.context.invalidate(user_sets_cache_key(self.api_key))
            return True
        except WRITE_ERRORS as e:
            self.errors = repr(e)
            return False

    def reload(self) -> None:
        """Fetch the set again, dropping the loaded items."""
        self._items = None
        try:
            response = self.context.transport.get(f"/sets/{self.id}")
        except ResourceNotFound as e:
            raise SetNotFound(self.id) from e
        self.assign_attributes(response.get("set"))

    # ── Lookup ──

    @classmethod
    def find(cls, context: ApiContext, set_id: Any, api_key: str | None = None) -> "UserSet":
        try:
            response = context.transport.get(f"/sets/{set_id}")
        except ResourceNotFound as e:
            raise SetNotFound(set_id) from e

        user_set = cls(response.get("set") or {}, context)
        if is_present(api_key):
            user_set.api_key = api_key
        return user_set

    @classmethod
    def public_sets(
        cls, context: ApiContext, page: int = 1, per_page: int = 100
    ) -> PaginatedCollection:
        response = context.transport.get("/sets/public", {"page": page, "per_page": per_page})
        user_sets = [cls(attributes, context) for attributes in unwrap_list(response, "sets")]
        return PaginatedCollection(user_sets, to_int(page), to_int(per_page), to_int(response.get("total")))

    @classmethod
    def featured_sets(cls, context: ApiContext) -> list["UserSet"]:
        path = "/sets/featured"
        response = context.cached(path, LOOKUP_CACHE_TTL, lambda: context.transport.get(path))
        return [cls(attributes, context) for attributes in unwrap_list(response, "sets")]

    def __repr__(self) -> str:
        return f"UserSet(id={self.id!r}, name={self.name!r})"
