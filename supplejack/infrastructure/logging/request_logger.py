"""Colored request logger: one ANSI-colored line per Supplejack API call.

Color scheme:
    Green   request label and duration
    Bold    parameter values
    Yellow  SOLR request parameters echoed back by the API
    Red     exceptions
"""

import logging
from collections.abc import Mapping
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    WHITE = "\033[97m"


def colorize(value: Any, color: str) -> str:
    """Color a value; mappings and lists are colored element by element."""
    if isinstance(value, Mapping):
        inner = ", ".join(f"{key}: {colorize(item, color)}" for key, item in value.items())
        return f"{{{inner}}}"
    if isinstance(value, (list, tuple)):
        return f"[{', '.join(colorize(item, color) for item in value)}]"
    return f"{_Colors.BOLD}{color}{value}{_Colors.RESET}"


def _pairs(values: Mapping[str, Any] | None) -> str:
    return ", ".join(f"{key}: {colorize(value, _Colors.WHITE)}" for key, value in (values or {}).items())


# ── RequestLogger ────────────────────────────────────────────────────

class RequestLogger:
    """Logs API calls at DEBUG level when debugging is enabled.

    Usage:
        log = RequestLogger(enabled=settings.enable_debugging)
        log.log_request(12.3, "get", "/records", params={"text": "dog"})
    """

    def __init__(self, enabled: bool = False, logger_name: str = "supplejack.requests"):
        self._enabled = enabled
        self._logger = logging.getLogger(logger_name)

    def log_request(
        self,
        duration_ms: float,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        payload: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        error: BaseException | None = None,
        solr_request_params: Mapping[str, Any] | None = None,
    ) -> str | None:
        """Log one call and return the formatted line (None when disabled)."""
        if not self._enabled:
            return None

        name = f"Supplejack API ({duration_ms:.1f}ms)"
        request = (
            f"{method.upper()} path={path} params={{{_pairs(params)}}}, "
            f"body={{{_pairs(payload)}}} options={{{_pairs(options)}}}"
        )

        info = ""
        if error is not None:
            info = (
                f"\n  {colorize('Exception', _Colors.RED)} "
                f"[ {type(error).__name__}, {error} ]"
            )
        elif solr_request_params:
            info = (
                f"\n  {colorize('SOLR Request', _Colors.YELLOW)} "
                f"[ {_pairs(solr_request_params)} ]"
            )

        line = f"  {colorize(name, _Colors.GREEN)}  [ {request} ] {info}"
        self._logger.debug(line)
        return line
