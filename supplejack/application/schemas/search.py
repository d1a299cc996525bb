"""Pydantic schemas for API response envelopes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from supplejack.domain.util import to_int


# ── Search envelope ──────────────────────────────────────────────────


class SearchPayload(BaseModel):
    """The ``search`` section of a ``/records`` response.

    Every field tolerates being absent or malformed, so a degraded
    ``{"search": {}}`` response reads as an empty result set.
    """

    model_config = ConfigDict(extra="allow")

    results: list[dict[str, Any]] = []
    result_count: int = 0
    facets: dict[str, dict[str, Any]] = {}
    facet_pivots: dict[str, list[Any]] = {}
    solr_request_params: dict[str, Any] | None = None

    @field_validator("results", mode="before")
    @classmethod
    def _results_list(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @field_validator("result_count", mode="before")
    @classmethod
    def _result_count_int(cls, value: Any) -> int:
        return to_int(value)

    @field_validator("facets", mode="before")
    @classmethod
    def _facets_mapping(cls, value: Any) -> dict:
        if not isinstance(value, dict):
            return {}
        return {str(name): values for name, values in value.items() if isinstance(values, dict)}

    @field_validator("facet_pivots", mode="before")
    @classmethod
    def _pivots_mapping(cls, value: Any) -> dict:
        if not isinstance(value, dict):
            return {}
        return {str(name): pivots for name, pivots in value.items() if isinstance(pivots, list)}

    @classmethod
    def from_response(cls, response: Any) -> "SearchPayload":
        """Validate ``response["search"]``, falling back to an empty payload."""
        section = response.get("search") if isinstance(response, dict) else None
        return cls.model_validate(section if isinstance(section, dict) else {})


# ── Moderation ───────────────────────────────────────────────────────


class ModerationRecordSchema(BaseModel):
    """One entry of ``GET /stories/moderations``."""

    id: str | int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user: dict[str, Any] = Field(default_factory=dict)
    state: str | None = None

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _blank_time(cls, value: Any) -> Any:
        return value or None

    @field_validator("user", mode="before")
    @classmethod
    def _user_mapping(cls, value: Any) -> dict:
        return value if isinstance(value, dict) else {}
