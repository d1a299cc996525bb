from .search import ModerationRecordSchema, SearchPayload

__all__ = [
    "ModerationRecordSchema",
    "SearchPayload",
]
