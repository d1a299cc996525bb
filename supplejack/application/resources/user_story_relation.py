import json
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from supplejack.application.resources.base import sort_value, unwrap_list, user_stories_cache_key
from supplejack.application.resources.story import Story
from supplejack.config import LOOKUP_CACHE_TTL

if TYPE_CHECKING:
    from supplejack.application.resources.user import User


class UserStoryRelation(Sequence):
    """The stories of a user.

    Stories are fetched on first access; stories built afterwards are
    appended to the same list, so unsaved ones show up too.
    """

    def __init__(self, user: "User"):
        self.user = user
        self._stories: list[Story] = []
        self._initial_fetch = False

    def fetch(self, force: bool = False) -> list[Story]:
        if force or not self._initial_fetch:
            self._initial_fetch = True
            self._stories = [
                Story({**attributes, "user": self.user.attributes}, self.user.context)
                for attributes in unwrap_list(self._fetch_api_stories(), "stories")
            ]
        return self._stories

    def all(self) -> list[Story]:
        return self.fetch()

    def _fetch_api_stories(self) -> Any:
        params: dict[str, Any] = {}
        if self.user.use_own_api_key:
            path = "/stories"
            params["api_key"] = self.user.api_key
        else:
            path = f"/users/{self.user.api_key}/stories"

        context = self.user.context
        return context.cached(
            user_stories_cache_key(self.user.api_key),
            LOOKUP_CACHE_TTL,
            lambda: context.transport.get(path, params),
        )

    def find(self, story_id: Any) -> Story:
        """Fetch one of the user's stories, private ones included."""
        story = Story.find(self.user.context, story_id, user_key=self.user.api_key)
        if not story.api_key:
            story.api_key = self.user.api_key
        return story

    def build(self, attributes: dict[str, Any] | None = None) -> Story:
        story = Story(attributes or {}, self.user.context)
        story.api_key = self.user.api_key
        self._stories.append(story)
        return story

    def create(self, attributes: dict[str, Any] | None = None) -> Story:
        story = self.build(attributes)
        story.save()
        return story

    def order(self, attribute: str) -> list[Story]:
        self._stories = sorted(self.all(), key=lambda story: sort_value(getattr(story, attribute)))
        return self._stories

    def to_json(self) -> str:
        return json.dumps([story.attributes for story in self.all()], default=str)

    def __getitem__(self, index):
        return self.all()[index]

    def __len__(self) -> int:
        return len(self.all())
