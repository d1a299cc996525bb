from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from supplejack.application.resources.item import Item
from supplejack.domain.util import stringify_keys, to_int

if TYPE_CHECKING:
    from supplejack.application.resources.user_set import UserSet


class ItemRelation(Sequence):
    """The items of a user set, as a read-only sequence.

        user_set.items.build({"record_id": 1})   # new Item linked to the set
        user_set.items.find(1)                   # Item with record_id 1, or None
    """

    def __init__(self, user_set: "UserSet"):
        self.user_set = user_set
        records = user_set.attributes.get("records") or []
        self.items: list[Item] = [self._new_item(record) for record in records]

    def _new_item(self, attributes: Any) -> Item:
        attributes = stringify_keys(attributes)
        attributes["user_set_id"] = self.user_set.id
        attributes["api_key"] = self.user_set.api_key
        return Item(attributes, self.user_set.context)

    def all(self) -> list[Item]:
        return self.items

    def find(self, record_id: Any) -> Item | None:
        record_id = to_int(record_id)
        return next((item for item in self.items if to_int(item.record_id) == record_id), None)

    def build(self, attributes: dict[str, Any] | None = None) -> Item:
        """A new, unsaved Item linked to the set."""
        return self._new_item(attributes)

    def create(self, attributes: dict[str, Any] | None = None) -> bool:
        """Build an Item and save it; returns whether the save succeeded."""
        return self.build(attributes).save()

    def __getitem__(self, index):
        return self.items[index]

    def __len__(self) -> int:
        return len(self.items)
