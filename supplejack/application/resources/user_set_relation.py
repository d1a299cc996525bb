from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from supplejack.application.resources.base import sort_value, unwrap_list, user_sets_cache_key
from supplejack.application.resources.user_set import UserSet
from supplejack.config import LOOKUP_CACHE_TTL

if TYPE_CHECKING:
    from supplejack.application.resources.user import User


class UserSetRelation(Sequence):
    """The sets of a user, fetched once and kept sorted by priority.

        user.sets.build({"name": "Dogs and cats"})   # new UserSet for the user
        user.sets.find("5023...")                    # one of the user's sets
        user.sets.order("name")                      # sorted by priority, then name
    """

    def __init__(self, user: "User"):
        self.user = user
        self._sets: list[UserSet] | None = None

    @property
    def sets(self) -> list[UserSet]:
        if self._sets is None:
            self._sets = self.fetch_sets()
        return self._sets

    def fetch_sets(self) -> list[UserSet]:
        response = self.sets_response()
        context = self.user.context
        user_sets = [UserSet(attributes, context) for attributes in unwrap_list(response, "sets")]
        self._sets = sorted(user_sets, key=lambda user_set: user_set.priority)
        return self._sets

    def sets_response(self) -> Any:
        """The user's sets response, cached for a day under the user's key.

        Saving or deleting any of the user's sets drops the cached entry.
        """
        params: dict[str, Any] = {}
        if self.user.use_own_api_key:
            path = "/sets"
            params["api_key"] = self.user.api_key
        else:
            path = f"/users/{self.user.api_key}/sets"

        context = self.user.context
        return context.cached(
            user_sets_cache_key(self.user.api_key),
            LOOKUP_CACHE_TTL,
            lambda: context.transport.get(path, params),
        )

    def find(self, user_set_id: Any) -> UserSet:
        return UserSet.find(self.user.context, user_set_id, self.user.api_key)

    def build(self, attributes: dict[str, Any] | None = None) -> UserSet:
        user_set = UserSet(attributes or {}, self.user.context)
        user_set.api_key = self.user.api_key
        return user_set

    def create(self, attributes: dict[str, Any] | None = None) -> UserSet:
        user_set = self.build(attributes)
        user_set.save()
        return user_set

    def order(self, attribute: str) -> list[UserSet]:
        """Sets ordered by priority then ``attribute``; ``updated_at`` sorts newest first only."""
        if attribute == "updated_at":
            self._sets = sorted(
                self.sets, key=lambda user_set: sort_value(user_set.updated_at), reverse=True
            )
        else:
            self._sets = sorted(
                self.sets,
                key=lambda user_set: (user_set.priority, sort_value(getattr(user_set, attribute))),
            )
        return self._sets

    def all(self) -> list[UserSet]:
        return self.sets

    def __getitem__(self, index):
        return self.sets[index]

    def __len__(self) -> int:
        return len(self.sets)
