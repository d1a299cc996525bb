from .response_cache import ResponseCache
from .transport import Transport

__all__ = [
    "ResponseCache",
    "Transport",
]
