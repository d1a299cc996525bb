import json
from typing import Any

from supplejack.application.context import ApiContext
from supplejack.application.resources.base import WRITE_ERRORS, user_stories_cache_key
from supplejack.domain.util import deep_stringify_keys


class StoryItem:
    """One block of a story (an embedded record, some text, ...).

    ``id`` and ``story_id`` are fixed once the API has assigned them;
    only the modifiable attributes are sent on save.
    """

    MODIFIABLE_ATTRIBUTES = ("position", "meta", "content", "type", "sub_type")
    UNMODIFIABLE_ATTRIBUTES = ("id", "story_id")
    ATTRIBUTES = MODIFIABLE_ATTRIBUTES + UNMODIFIABLE_ATTRIBUTES

    def __init__(self, attributes: Any, context: ApiContext):
        attrs = deep_stringify_keys(attributes) if isinstance(attributes, dict) else {}
        self.context = context
        self.api_key: str | None = attrs.get("api_key")
        self.errors: str | None = None

        for name in self.ATTRIBUTES:
            setattr(self, name, None)
        self.meta: dict[str, Any] | None = {}

        self.assign_attributes(attrs)

    def assign_attributes(self, attributes: Any) -> None:
        if not isinstance(attributes, dict):
            return
        for name, value in deep_stringify_keys(attributes).items():
            if name in self.ATTRIBUTES:
                setattr(self, name, value)

    @property
    def attributes(self) -> dict[str, Any]:
        return self._retrieve_attributes(self.ATTRIBUTES)

    def api_attributes(self) -> dict[str, Any]:
        return self._retrieve_attributes(self.MODIFIABLE_ATTRIBUTES)

    def _retrieve_attributes(self, names: tuple[str, ...]) -> dict[str, Any]:
        values = {name: getattr(self, name) for name in names}
        return {name: value for name, value in values.items() if value is not None}

    def is_new_record(self) -> bool:
        return self.id is None

    def save(self) -> bool:
        try:
            params = {"api_key": self.api_key}
            payload = {"item": self.api_attributes()}
            if self.is_new_record():
                response = self.context.transport.post(f"/stories/{self.story_id}/items", params, payload)
            else:
                response = self.context.transport.patch(
                    f"/stories/{self.story_id}/items/{self.id}", params, payload
                )
            self.assign_attributes(response)
            self.context.invalidate(user_stories_cache_key(self.api_key))
            return True
        except WRITE_ERRORS as e:
            self.errors = str(e)
            return False

    def destroy(self) -> bool:
        if self.is_new_record():
            return False
        try:
            self.context.transport.delete(
                f"/stories/{self.story_id}/items/{self.id}", {"api_key": self.api_key}
            )
            self.context.invalidate(user_stories_cache_key(self.api_key))
            return True
        except WRITE_ERRORS as e:
            self.errors = str(e)
            return False

    def update_attributes(self, attributes: dict[str, Any]) -> bool:
        self.assign_attributes(attributes)
        return self.save()

    def to_json(self) -> str:
        return json.dumps(self.attributes)

    def __repr__(self) -> str:
        return f"StoryItem(id={self.id!r}, type={self.type!r})"
