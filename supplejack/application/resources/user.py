"""API users, the owners of sets and stories.

A ``User`` reaches its sets and stories through ``user.sets`` and
``user.stories``. Those relations keep a plain reference back to the
user to resolve its API key; the user owns them.
"""

import logging
from typing import TYPE_CHECKING, Any

from supplejack.application.context import ApiContext
from supplejack.application.resources.base import WRITE_ERRORS
from supplejack.domain.util import is_present, stringify_keys

if TYPE_CHECKING:
    from supplejack.application.resources.user_set_relation import UserSetRelation
    from supplejack.application.resources.user_story_relation import UserStoryRelation

logger = logging.getLogger(__name__)


class User:
    PROFILE_FIELDS = ("name", "username", "email", "encrypted_password")

    def __init__(self, attributes: Any, context: ApiContext):
        self.attributes: dict[str, Any] = stringify_keys(attributes)
        self.context = context

        attrs = self.attributes
        self.id = attrs.get("id")
        self.api_key: str | None = attrs.get("api_key") or attrs.get("authentication_token")
        self.name: str | None = attrs.get("name")
        self.username: str | None = attrs.get("username")
        self.email: str | None = attrs.get("email")
        self.encrypted_password: str | None = attrs.get("encrypted_password")
        self.sets_attributes = attrs.get("sets")
        self.use_own_api_key = bool(attrs.get("use_own_api_key") or False)
        self.regenerate_api_key = bool(attrs.get("regenerate_api_key") or False)

        self._sets: "UserSetRelation | None" = None
        self._stories: "UserStoryRelation | None" = None

    @property
    def sets(self) -> "UserSetRelation":
        if self._sets is None:
            from supplejack.application.resources.user_set_relation import UserSetRelation

            self._sets = UserSetRelation(self)
        return self._sets

    @property
    def stories(self) -> "UserStoryRelation":
        if self._stories is None:
            from supplejack.application.resources.user_story_relation import UserStoryRelation

            self._stories = UserStoryRelation(self)
        return self._stories

    def api_attributes(self) -> dict[str, Any]:
        """Attributes sent when saving the user."""
        attrs: dict[str, Any] = {}
        for name in self.PROFILE_FIELDS:
            value = getattr(self, name)
            if is_present(value):
                attrs[name] = value

        if is_present(self.sets_attributes):
            attrs["sets"] = self.sets_attributes
        if self.regenerate_api_key:
            attrs["authentication_token"] = None
        return attrs

    def save(self) -> bool:
        """PUT the user; picks up the new API key when regenerating it."""
        try:
            updated = self.context.transport.put(f"/users/{self.api_key}", {}, self.api_attributes())
            if self.regenerate_api_key:
                self.api_key = updated["user"]["api_key"]
            return True
        except WRITE_ERRORS as e:
            logger.warning("Saving user %s failed: %s", self.id or self.api_key, e)
            return False

    def destroy(self) -> bool:
        id_or_api_key = self.id or self.api_key
        try:
            self.context.transport.delete(f"/users/{id_or_api_key}")
            return True
        except WRITE_ERRORS as e:
            logger.warning("Deleting user %s failed: %s", id_or_api_key, e)
            return False

    # ── Lookup ──

    @classmethod
    def find(cls, context: ApiContext, user_id: Any) -> "User":
        response = context.transport.get(f"/users/{user_id}")
        return cls(response["user"], context)

    @classmethod
    def create(cls, context: ApiContext, attributes: dict[str, Any] | None = None) -> "User":
        response = context.transport.post("/users", {}, {"user": dict(attributes or {})})
        return cls(response["user"], context)

    @classmethod
    def update(cls, context: ApiContext, attributes: dict[str, Any]) -> "User":
        attributes = stringify_keys(attributes)
        response = context.transport.put(f"/users/{attributes.get('api_key')}", {}, {"user": attributes})
        return cls(response["user"], context)

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, name={self.name!r})"
