import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_PROJECT_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _PROJECT_DIR / ".env",
    ".env",
)

# Timeout used when the configured one is zero or negative
DEFAULT_TIMEOUT = 30

# Cache lifetimes (seconds) per call site
SEARCH_CACHE_TTL = 60 * 60
LOOKUP_CACHE_TTL = 60 * 60 * 24


class Settings(BaseSettings):
    """Client settings loaded from environment variables (SUPPLEJACK_*).

    Instances are immutable; build a new one with ``model_copy(update=...)``
    to change a value for a single client.
    """

    api_key: str | None = None
    api_url: str = "http://api.digitalnz.org"
    response_format: str = "json"

    # Search defaults
    facets: list[str] = []
    facet_pivots: list[str] = []
    facets_per_page: int = 10
    facets_sort: str | None = None
    per_page: int = 20
    pagination_limit: int | None = None
    fields: list[str] = ["default"]
    search_attributes: list[str] = ["location"]
    non_text_fields: list[str] = []
    text_field_suffix: str = "_text"

    # Record presentation
    special_fields: dict[str, dict[str, Any]] = {
        "supplejack": {"fields": []},
        "admin": {"fields": []},
    }
    single_value_methods: list[str] = ["description"]

    # Transport
    timeout: int = DEFAULT_TIMEOUT
    retry_attempts: int = 5
    retry_backoff_multiplier: float = 0.5
    retry_backoff_max: float = 8.0
    enable_debugging: bool = False

    # Response cache
    enable_caching: bool = False
    cache_max_entries: int = 1000

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore, outbound HTTP
    log_level_requests: str = "DEBUG"        # Supplejack API request log (needs enable_debugging)

    model_config = {
        "env_prefix": "SUPPLEJACK_",
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
        "frozen": True,
    }

    @property
    def effective_timeout(self) -> int:
        """Configured timeout, falling back to DEFAULT_TIMEOUT when unset."""
        if self.timeout <= 0:
            _config_logger.warning(
                "Invalid timeout %s configured, using %ss", self.timeout, DEFAULT_TIMEOUT
            )
            return DEFAULT_TIMEOUT
        return self.timeout


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance; reads the environment once."""
    return Settings()
