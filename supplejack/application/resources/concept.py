"""Concepts: people, places and things records are linked to."""

from collections.abc import Mapping
from typing import Any

from supplejack.application.context import ApiContext
from supplejack.application.resources.base import ApiRecord
from supplejack.domain.exceptions import ConceptNotFound, MalformedRequest, ResourceNotFound
from supplejack.domain.util import is_present, to_int


class Concept(ApiRecord):
    @property
    def id(self) -> int:
        return to_int(self.attributes.get("id") or self.attributes.get("concept_id"))

    def to_param(self) -> int:
        return self.id

    @property
    def name(self) -> str:
        name = self.attributes.get("name")
        return name if is_present(name) else "Unknown"

    @property
    def next_page(self) -> Any:
        return self.attributes.get("next_page")

    @property
    def previous_page(self) -> Any:
        return self.attributes.get("previous_page")

    @property
    def next_concept(self) -> Any:
        return self.attributes.get("next_concept")

    @property
    def previous_concept(self) -> Any:
        return self.attributes.get("previous_concept")

    @classmethod
    def find(
        cls,
        context: ApiContext,
        concept_id: Any,
        options: Mapping[str, Any] | None = None,
    ) -> "Concept":
        numeric_id = to_int(concept_id)
        if numeric_id <= 0:
            raise MalformedRequest(f"'{concept_id}' is not a valid concept id")

        try:
            response = context.transport.get(f"/concepts/{numeric_id}", dict(options or {}))
        except ResourceNotFound as e:
            raise ConceptNotFound(numeric_id) from e
        return cls(response, context)

    @classmethod
    def all(cls, context: ApiContext) -> Any:
        """The raw ``/concepts`` response."""
        return context.transport.get("/concepts")
