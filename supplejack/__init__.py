"""Client library for the Supplejack search and content API."""

from .client import SupplejackClient
from .config import Settings, get_settings
from .infrastructure.dependencies import build_context

__all__ = [
    "SupplejackClient",
    "Settings",
    "get_settings",
    "build_context",
]
