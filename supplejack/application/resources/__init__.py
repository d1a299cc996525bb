from .concept import Concept
from .item import Item
from .item_relation import ItemRelation
from .moderation_record import ModerationRecord
from .more_like_this_record import MoreLikeThisRecord
from .record import Record
from .story import Story
from .story_item import StoryItem
from .story_item_relation import StoryItemRelation
from .user import User
from .user_set import UserSet
from .user_set_relation import UserSetRelation
from .user_story_relation import UserStoryRelation

__all__ = [
    "Concept",
    "Item",
    "ItemRelation",
    "ModerationRecord",
    "MoreLikeThisRecord",
    "Record",
    "Story",
    "StoryItem",
    "StoryItemRelation",
    "User",
    "UserSet",
    "UserSetRelation",
    "UserStoryRelation",
]
