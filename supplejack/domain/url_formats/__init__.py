from .item_hash import CanonicalQuery, ItemHash

__all__ = ["CanonicalQuery", "ItemHash"]
