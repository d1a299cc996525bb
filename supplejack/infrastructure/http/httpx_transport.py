"""Supplejack API client: implements the Transport interface with httpx.

Builds ``{api_url}{path}.{format}?{query}`` URLs, adds the API key and
debug flag, maps HTTP failures onto the transport exceptions and retries
503 responses with exponential backoff.
"""

import json
import logging
import time
from typing import Any

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from supplejack.application.interfaces.transport import Transport
from supplejack.config import Settings
from supplejack.domain.exceptions import (
    Forbidden,
    ReadTimeout,
    ResourceNotFound,
    ServiceUnavailable,
    TransportError,
    Unauthorized,
)
from supplejack.infrastructure.http.query_string import to_query
from supplejack.infrastructure.logging.request_logger import RequestLogger

logger = logging.getLogger(__name__)

_STATUS_ERRORS: dict[int, type[TransportError]] = {
    401: Unauthorized,
    403: Forbidden,
    404: ResourceNotFound,
    503: ServiceUnavailable,
}

_JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class HttpxTransport(Transport):
    """Infrastructure adapter that connects to the Supplejack API.

    Uses a synchronous httpx client. Pass ``http_client`` to share a
    connection pool (or a ``MockTransport`` in tests); otherwise a client
    is created per call and closed afterwards.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.Client | None = None,
        request_logger: RequestLogger | None = None,
    ):
        self._settings = settings
        self._http_client = http_client
        self._request_logger = request_logger or RequestLogger(enabled=settings.enable_debugging)

    # ── Transport ──

    def get(self, path, params=None, options=None):
        return self._request("GET", path, params, None, options)

    def post(self, path, params=None, payload=None, options=None):
        return self._request("POST", path, params, payload or {}, options)

    def put(self, path, params=None, payload=None, options=None):
        return self._request("PUT", path, params, payload or {}, options)

    def patch(self, path, params=None, payload=None, options=None):
        return self._request("PATCH", path, params, payload or {}, options)

    def delete(self, path, params=None, options=None):
        return self._request("DELETE", path, params, None, options)

    # ── Helpers ──

    def full_url(
        self,
        path: str,
        format: str | None = None,
        params: dict[str, Any] | None = None,
        api_key: str | None = None,
    ) -> str:
        """Absolute URL for ``path``, with the API key and debug flag added."""
        params = dict(params or {})
        if params.get("api_key") is None:
            key = api_key or self._settings.api_key
            if key:
                params["api_key"] = key
        if self._settings.enable_debugging:
            params["debug"] = True

        fmt = format or self._settings.response_format
        return f"{self._settings.api_url}{path}.{fmt}?{to_query(params)}"

    def timeout(self, options: dict[str, Any] | None = None) -> float:
        options = options or {}
        return options.get("timeout") or self._settings.effective_timeout

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        payload: dict[str, Any] | None,
        options: dict[str, Any] | None,
    ) -> Any:
        params = params or {}
        options = options or {}
        url = self.full_url(path, options.get("format"), params, options.get("api_key"))

        result: Any = None
        error: Exception | None = None
        started = time.perf_counter()
        try:
            result = self._send_with_retry(method, url, payload, self.timeout(options))
            return result
        except TransportError as e:
            error = e
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            solr_request_params = None
            if isinstance(result, dict) and isinstance(result.get("search"), dict):
                solr_request_params = result["search"].get("solr_request_params")
            self._request_logger.log_request(
                duration_ms,
                method,
                path,
                params=params,
                payload=payload,
                options=options,
                error=error,
                solr_request_params=solr_request_params,
            )

    def _send_with_retry(
        self, method: str, url: str, payload: dict[str, Any] | None, timeout: float
    ) -> Any:
        """Send the request, retrying while the API answers 503."""
        retrying = Retrying(
            stop=stop_after_attempt(max(self._settings.retry_attempts, 1)),
            wait=wait_exponential(
                multiplier=self._settings.retry_backoff_multiplier,
                max=self._settings.retry_backoff_max,
            ),
            retry=retry_if_exception_type(ServiceUnavailable),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        "Retrying %s %s (attempt %d)", method, url, attempt.retry_state.attempt_number
                    )
                return self._send(method, url, payload, timeout)

    def _get_client(self) -> httpx.Client:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.Client()

    def _send(self, method: str, url: str, payload: dict[str, Any] | None, timeout: float) -> Any:
        client = self._get_client()
        should_close = self._http_client is None

        try:
            if payload is None:
                response = client.request(method, url, timeout=timeout)
            else:
                response = client.request(
                    method, url, headers=_JSON_HEADERS, json=payload, timeout=timeout
                )
        except httpx.TimeoutException as e:
            raise ReadTimeout(0, f"Request to {url} timed out") from e
        except httpx.HTTPError as e:
            raise TransportError(0, str(e)) from e
        finally:
            if should_close:
                client.close()

        if response.status_code >= 400:
            self._raise_transport_error(response)

        return self._decode(method, response)

    @staticmethod
    def _decode(method: str, response: httpx.Response) -> Any:
        """Decode a JSON body; empty or non-JSON bodies read as {} (None for DELETE)."""
        empty = None if method == "DELETE" else {}
        if not response.content:
            return empty
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return empty

    @staticmethod
    def _raise_transport_error(response: httpx.Response) -> None:
        """Raise the TransportError subclass matching a non-2xx response."""
        try:
            data = response.json()
            message = data.get("errors") or data.get("error") or response.text
        except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
            message = response.text

        error_class = _STATUS_ERRORS.get(response.status_code, TransportError)
        raise error_class(response.status_code, str(message or response.reason_phrase))
