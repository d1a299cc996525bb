"""Records: the items returned by searches and by ``/records/:id``."""

from collections.abc import Iterable, Mapping
from typing import Any

from supplejack.application.context import ApiContext
from supplejack.application.resources.base import ApiRecord
from supplejack.domain.exceptions import MalformedRequest, RecordNotFound, ResourceNotFound
from supplejack.domain.util import is_blank, is_present, to_int


def _camelcase(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))


class Record(ApiRecord):
    """A record from the API.

    Attributes are read with ``record.get("name")`` or ``record["name"]``;
    asking for one the API didn't return raises ``UnknownAttributeError``.
    """

    @property
    def id(self) -> int:
        return to_int(self.attributes.get("id") or self.attributes.get("record_id"))

    def to_param(self) -> int:
        return self.id

    @property
    def title(self) -> str:
        title = self.attributes.get("title")
        return title if is_present(title) else "Untitled"

    @property
    def format(self) -> Any:
        return self.get("format")

    # Pagination within the search the record was found through
    @property
    def next_page(self) -> Any:
        return self.attributes.get("next_page")

    @property
    def previous_page(self) -> Any:
        return self.attributes.get("previous_page")

    @property
    def next_record(self) -> Any:
        return self.attributes.get("next_record")

    @property
    def previous_record(self) -> Any:
        return self.attributes.get("previous_record")

    def single_value(self, name: str) -> Any:
        """First value of a multi-valued attribute (listed in ``single_value_methods``)."""
        if name not in self.context.settings.single_value_methods:
            return self.get(name)
        values = self.attributes.get(name)
        if isinstance(values, list):
            return values[0] if values else None
        return values

    @property
    def description(self) -> Any:
        return self.single_value("description")

    def metadata(self) -> list[dict[str, Any]]:
        """Every attribute listed in ``special_fields``, one entry per value.

            [{"name": "location", "schema": "supplejack", "value": "Wellington"}, ...]

        The ``{schema}_`` prefix is stripped from names; ``format`` may be
        ``uppercase``, ``lowercase`` or ``camelcase``.
        """
        metadata = []
        for schema, config in self.context.settings.special_fields.items():
            for field in config.get("fields", []):
                field = str(field)
                if field not in self.attributes:
                    continue

                values = self.attributes[field]
                if values is None:
                    values = []
                elif not isinstance(values, list):
                    values = [values]

                name = field
                fmt = config.get("format")
                if fmt == "uppercase":
                    name = name.upper()
                elif fmt == "lowercase":
                    name = name.lower()
                elif fmt == "camelcase":
                    name = _camelcase(name)
                name = name.replace(f"{schema}_", "", 1)

                metadata.extend(
                    {"name": name, "schema": str(schema), "value": value} for value in values
                )
        return metadata

    # ── Lookup ──

    @classmethod
    def find(
        cls,
        context: ApiContext,
        id_or_ids: Any,
        options: Mapping[str, Any] | None = None,
    ) -> "Record | list[Record]":
        """Fetch one record, or several when given a list of IDs.

        ``options`` are search parameters; when given, the API also returns
        the next/previous record within that search.
        """
        if isinstance(id_or_ids, (list, tuple)):
            return cls._find_many(context, id_or_ids)

        record_id = to_int(id_or_ids)
        if record_id <= 0:
            raise MalformedRequest(f"'{id_or_ids}' is not a valid record id")

        search = context.search_factory(dict(options or {}), context)
        search_options = search.merge_extra_filters(search.api_params)

        params: dict[str, Any] = {"search": search_options, "fields": search_options.pop("fields", None)}
        if is_blank(options):
            del params["search"]

        try:
            response = context.transport.get(f"/records/{record_id}", params)
        except ResourceNotFound as e:
            raise RecordNotFound(id_or_ids) from e
        return cls(response.get("record"), context)

    @classmethod
    def _find_many(cls, context: ApiContext, ids: Iterable[Any]) -> list["Record"]:
        params = {"record_ids": list(ids), "fields": ",".join(context.settings.fields)}
        response = context.transport.get("/records/multiple", params)
        return [cls(attributes, context) for attributes in response.get("records") or []]
