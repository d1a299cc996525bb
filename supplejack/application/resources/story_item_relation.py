from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from supplejack.application.resources.base import WRITE_ERRORS, unwrap_list, user_stories_cache_key
from supplejack.application.resources.story_item import StoryItem
from supplejack.domain.util import stringify_keys, to_int

if TYPE_CHECKING:
    from supplejack.application.resources.story import Story


class StoryItemRelation(Sequence):
    """The items of a story, in story order."""

    def __init__(self, story: "Story"):
        self.story = story
        self.errors: str | None = None
        self._items = [self._new_item(attributes) for attributes in story.contents or []]

    def _new_item(self, attributes: Any) -> StoryItem:
        attributes = stringify_keys(attributes)
        attributes["story_id"] = self.story.id
        attributes["api_key"] = self.story.api_key
        return StoryItem(attributes, self.story.context)

    def all(self) -> list[StoryItem]:
        return self._items

    def build(self, attributes: dict[str, Any] | None = None) -> StoryItem:
        """A new StoryItem appended to the story (not saved)."""
        story_item = self._new_item(attributes)
        self._items.append(story_item)
        return story_item

    def create(self, attributes: dict[str, Any] | None = None) -> StoryItem:
        story_item = self.build(attributes)
        story_item.save()
        return story_item

    def find(self, item_id: Any) -> StoryItem | None:
        item_id = to_int(item_id)
        return next((item for item in self._items if to_int(item.id) == item_id), None)

    def move_item(self, item_id: Any, position: int) -> bool:
        """Move an item to ``position``; the API answers with the reordered items."""
        context = self.story.context
        try:
            response = context.transport.post(
                f"/stories/{self.story.id}/items/{item_id}/moves",
                {"api_key": self.story.api_key},
                {"item_id": item_id, "position": position},
            )
            self._items = [self._new_item(attributes) for attributes in unwrap_list(response, "items")]
            context.invalidate(user_stories_cache_key(self.story.api_key))
            return True
        except WRITE_ERRORS as e:
            self.errors = str(e)
            return False

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)
