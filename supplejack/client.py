"""Consumer-facing entry point.

    client = SupplejackClient()
    search = client.search({"text": "kiwi", "i": {"category": "Images"}})
    for record in search.results():
        print(record.title)
"""

from collections.abc import Mapping
from typing import Any

import httpx

from supplejack.application.context import ApiContext
from supplejack.application.resources import (
    Concept,
    ModerationRecord,
    MoreLikeThisRecord,
    Record,
    Story,
    User,
    UserSet,
)
from supplejack.application.services import Search
from supplejack.config import Settings
from supplejack.domain.paginated_collection import PaginatedCollection
from supplejack.infrastructure.dependencies import build_context


class SupplejackClient:
    """Thin facade over one ApiContext."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.Client | None = None,
        context: ApiContext | None = None,
    ):
        self.context = context or build_context(settings, http_client=http_client)

    @property
    def settings(self) -> Settings:
        return self.context.settings

    # ── Search ──

    def search(self, params: Mapping[str, Any] | None = None, **kwargs: Any) -> Search:
        return self.context.search_factory(dict(params or {}), self.context, **kwargs)

    # ── Records & concepts ──

    def find_record(self, record_id: Any, options: Mapping[str, Any] | None = None) -> Record:
        return self._record_class().find(self.context, record_id, options)

    def find_records(self, record_ids: list[Any]) -> list[Record]:
        return self._record_class().find(self.context, list(record_ids))

    def more_like_this(self, record_id: Any, options: Mapping[str, Any] | None = None) -> list[Any]:
        return MoreLikeThisRecord(record_id, self.context, options).records()

    def find_concept(self, concept_id: Any, options: Mapping[str, Any] | None = None) -> Concept:
        return Concept.find(self.context, concept_id, options)

    def concepts(self) -> Any:
        return Concept.all(self.context)

    # ── Users ──

    def find_user(self, user_id: Any) -> User:
        return User.find(self.context, user_id)

    def create_user(self, attributes: dict[str, Any] | None = None) -> User:
        return User.create(self.context, attributes)

    def update_user(self, attributes: dict[str, Any]) -> User:
        return User.update(self.context, attributes)

    # ── Sets ──

    def find_set(self, set_id: Any, api_key: str | None = None) -> UserSet:
        return UserSet.find(self.context, set_id, api_key)

    def public_sets(self, page: int = 1, per_page: int = 100) -> PaginatedCollection:
        return UserSet.public_sets(self.context, page, per_page)

    def featured_sets(self) -> list[UserSet]:
        return UserSet.featured_sets(self.context)

    # ── Stories ──

    def find_story(self, story_id: Any, user_key: str | None = None) -> Story:
        return Story.find(self.context, story_id, user_key=user_key)

    def featured_stories(self) -> list[Story]:
        return Story.featured(self.context)

    def story_moderations(self, options: dict[str, Any] | None = None) -> list[ModerationRecord]:
        return Story.moderations(self.context, options)

    def _record_class(self) -> type[Record]:
        factory = self.context.record_factory
        return factory if isinstance(factory, type) and issubclass(factory, Record) else Record
