from .ttl_response_cache import TTLResponseCache

__all__ = ["TTLResponseCache"]
