"""Logging setup for applications embedding the client.

The client itself only creates loggers; ``setup_logging`` is for the
host application (or a script) that wants the request log visible and
the httpx chatter quiet:

    from supplejack.infrastructure.logging.log_config import setup_logging
    setup_logging()
"""

import logging
import sys

from supplejack.config import Settings, get_settings

LOG_FORMAT = "%(levelname)-8s %(name)s: %(message)s"

# Settings field → loggers whose level it controls
_CATEGORY_MAP: dict[str, list[str]] = {
    "log_level_http": [
        "httpx",
        "httpcore",
    ],
    "log_level_requests": [
        "supplejack.requests",
    ],
    "log_level": [
        "supplejack",
    ],
}


def setup_logging(settings: Settings | None = None) -> dict[str, int]:
    """Apply the configured levels and return them by logger name.

    The request log only produces output when ``enable_debugging`` is on,
    so its level is left untouched otherwise.
    """
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))
    _ensure_handler(root)

    applied: dict[str, int] = {}
    for settings_field, logger_names in _CATEGORY_MAP.items():
        if settings_field == "log_level_requests" and not settings.enable_debugging:
            continue
        level = _parse_level(getattr(settings, settings_field))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)
            applied[name] = level

    logging.getLogger(__name__).debug(
        "Logging configured: %s",
        ", ".join(f"{name}={logging.getLevelName(level)}" for name, level in applied.items()),
    )
    return applied


def _ensure_handler(root: logging.Logger) -> None:
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def _parse_level(raw: str) -> int:
    """Level name to logging constant; unknown names read as INFO."""
    numeric = logging.getLevelName(str(raw).upper())
    return numeric if isinstance(numeric, int) else logging.INFO
