from dataclasses import dataclass
from datetime import datetime
from typing import Any

from supplejack.application.context import ApiContext
from supplejack.application.resources.user import User
from supplejack.application.schemas import ModerationRecordSchema


@dataclass
class ModerationRecord:
    """A story awaiting (or past) moderation, with the user who owns it."""

    id: str | int
    created_at: datetime | None
    updated_at: datetime | None
    user: User
    state: str | None

    @classmethod
    def from_api(cls, attributes: dict[str, Any], context: ApiContext) -> "ModerationRecord":
        schema = ModerationRecordSchema.model_validate(attributes)
        return cls(
            id=schema.id,
            created_at=schema.created_at,
            updated_at=schema.updated_at,
            user=User(schema.user, context),
            state=schema.state,
        )
