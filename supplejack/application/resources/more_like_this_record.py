"""Records similar to a given record."""

import logging
from collections.abc import Mapping
from typing import Any

from supplejack.application.context import ApiContext
from supplejack.domain.exceptions import MalformedRequest, RecordNotFound, ResourceNotFound
from supplejack.domain.util import stringify_keys, to_int

logger = logging.getLogger(__name__)


class MoreLikeThisRecord:
    """Wraps ``GET /records/:id/more_like_this``.

    ``options`` are passed as query parameters; ``mlt_fields`` may be a
    list and ``frequency`` defaults to 1.
    """

    DEFAULT_OPTIONS = {"frequency": 1}

    def __init__(self, record_id: Any, context: ApiContext, options: Mapping[str, Any] | None = None):
        self.id = to_int(record_id)
        if self.id <= 0:
            raise MalformedRequest(f"'{record_id}' is not a valid record id")

        self.context = context
        self.params: dict[str, Any] = {**self.DEFAULT_OPTIONS, **stringify_keys(options)}
        mlt_fields = self.params.get("mlt_fields")
        if isinstance(mlt_fields, (list, tuple)):
            self.params["mlt_fields"] = ",".join(str(field) for field in mlt_fields)

    def execute_request(self) -> dict[str, Any]:
        try:
            return self.context.transport.get(f"/records/{self.id}/more_like_this", self.params)
        except ResourceNotFound as e:
            raise RecordNotFound(self.id) from e
        except Exception as e:
            logger.warning("More-like-this request for record %s failed: %s", self.id, e)
            return {"more_like_this": {"results": []}}

    def records(self) -> list[Any]:
        """Similar records, built with the configured record factory."""
        section = self.execute_request().get("more_like_this") or {}
        results = section.get("results") if isinstance(section, dict) else None
        if not isinstance(results, list):
            return []
        return [self.context.record_factory(attributes, self.context) for attributes in results]
