"""Stories: user-curated narratives made of story items."""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from supplejack.application.context import ApiContext
from supplejack.application.resources.base import WRITE_ERRORS, unwrap_list, user_stories_cache_key
from supplejack.application.resources.user import User
from supplejack.config import LOOKUP_CACHE_TTL
from supplejack.domain.exceptions import (
    ResourceNotFound,
    StoryNotFound,
    StoryUnauthorised,
    Unauthorized,
)
from supplejack.domain.util import is_blank, parse_time, stringify_keys

if TYPE_CHECKING:
    from supplejack.application.resources.moderation_record import ModerationRecord
    from supplejack.application.resources.story_item_relation import StoryItemRelation

logger = logging.getLogger(__name__)


class Story:
    ATTRIBUTES = (
        "id", "name", "created_at", "updated_at", "privacy", "featured", "approved",
        "description", "tags", "number_of_items", "contents",
    )
    MODIFIABLE_ATTRIBUTES = ("name", "description", "privacy", "featured", "approved", "tags")

    def __init__(self, attributes: Any, context: ApiContext):
        attrs = stringify_keys(attributes)
        self.context = context

        self.id: str | None = None
        self.name: str | None = None
        self.privacy: str | None = None
        self.featured: bool | None = None
        self.approved: bool | None = None
        self.description: str | None = None
        self.tags: list[str] | None = None
        self.number_of_items: int | None = None
        self.contents: list[dict[str, Any]] | None = None
        self._created_at: datetime | None = None
        self._updated_at: datetime | None = None

        self._api_key: str | None = None
        self.errors: str | None = None
        self.user = User(attrs.get("user"), context)
        self._items: "StoryItemRelation | None" = None

        self.assign_attributes(attrs)

    # ── Attributes ──

    @property
    def attributes(self) -> dict[str, Any]:
        values = {name: getattr(self, name) for name in self.ATTRIBUTES}
        return {name: value for name, value in values.items() if value is not None}

    def api_attributes(self) -> dict[str, Any]:
        """Modifiable attributes that are set, as sent on save."""
        values = {name: getattr(self, name) for name in self.MODIFIABLE_ATTRIBUTES}
        return {name: value for name, value in values.items() if value is not None}

    def assign_attributes(self, attributes: Any) -> None:
        for name, value in stringify_keys(attributes).items():
            if name in self.ATTRIBUTES:
                setattr(self, name, value)

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
    def tag_list(self) -> str | None:
        if self.tags:
            return ", ".join(self.tags)
        return None

    @property
    def items(self) -> "StoryItemRelation":
        if self._items is None:
            from supplejack.application.resources.story_item_relation import StoryItemRelation

            self._items = StoryItemRelation(self)
        return self._items

    # ── Predicates ──

    def is_private(self) -> bool:
        return self.privacy == "private"

    def is_public(self) -> bool:
        return self.privacy == "public"

    def is_hidden(self) -> bool:
        return self.privacy == "hidden"

    def is_new_record(self) -> bool:
        return is_blank(self.id)

    def viewable_by(self, user: User | None) -> bool:
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
        """POST a new story or PATCH an existing one, then take the API's copy."""
        try:
            params = {"api_key": self.api_key}
            payload = {"story": self.api_attributes()}
            if self.is_new_record():
                response = self.context.transport.post("/stories", params, payload)
            else:
                response = self.context.transport.patch(f"/stories/{self.id}", params, payload)
            self.assign_attributes(response)
            self.context.invalidate(user_stories_cache_key(self.api_key))
            return True
        except WRITE_ERRORS as e:
            self.errors = str(e)
            return False

    def update_attributes(self, attributes: dict[str, Any]) -> bool:
        self.assign_attributes(attributes)
        return self.save()

    def destroy(self) -> bool:
        if self.is_new_record():
            return False
        try:
            self.context.transport.delete(f"/stories/{self.id}", {"api_key": self.api_key})
            self.context.invalidate(user_stories_cache_key(self.api_key))
            return True
        except WRITE_ERRORS as e:
            self.errors = str(e)
            return False

    def reload(self) -> None:
        self._items = None
        try:
            response = self.context.transport.get(f"/stories/{self.id}")
        except ResourceNotFound as e:
            raise StoryNotFound(self.id) from e
        self.assign_attributes(response)

    # ── Lookup ──

    @classmethod
    def find(cls, context: ApiContext, story_id: Any, user_key: str | None = None) -> "Story":
        """Fetch a story; private stories need their owner's key as ``user_key``."""
        params = {"user_key": user_key} if user_key else {}
        try:
            response = context.transport.get(f"/stories/{story_id}", params)
        except ResourceNotFound as e:
            raise StoryNotFound(story_id) from e
        except Unauthorized as e:
            raise StoryUnauthorised(f"Story with ID {story_id} is private") from e
        return cls(response, context)

    @classmethod
    def featured(cls, context: ApiContext) -> list["Story"]:
        path = "/stories/featured"
        response = context.cached(path, LOOKUP_CACHE_TTL, lambda: context.transport.get(path))
        return [cls(attributes, context) for attributes in unwrap_list(response, "stories")]

    @classmethod
    def moderations(
        cls, context: ApiContext, options: dict[str, Any] | None = None
    ) -> list["ModerationRecord"]:
        from supplejack.application.resources.moderation_record import ModerationRecord

        response = context.transport.get("/stories/moderations", dict(options or {}))
        return [
            ModerationRecord.from_api(attributes, context)
            for attributes in unwrap_list(response, "sets", "stories")
        ]

    def __repr__(self) -> str:
        return f"Story(id={self.id!r}, name={self.name!r})"
