"""HTTP infrastructure package."""

from .httpx_transport import HttpxTransport
from .query_string import to_query

__all__ = ["HttpxTransport", "to_query"]
