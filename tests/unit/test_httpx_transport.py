"""Unit tests for the HttpxTransport."""

import json
import logging

import httpx
import pytest

from supplejack.config import Settings
from supplejack.domain.exceptions import (
    Forbidden,
    ReadTimeout,
    ResourceNotFound,
    ServiceUnavailable,
    TransportError,
    Unauthorized,
)
from supplejack.infrastructure.http import HttpxTransport


# ── Helpers ──


def _settings(**overrides) -> Settings:
    return Settings(
        **{
            "api_key": "abc",
            "api_url": "http://api.test",
            "retry_backoff_multiplier": 0,
            **overrides,
        }
    )


def _make_transport(handler, **overrides) -> HttpxTransport:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpxTransport(_settings(**overrides), http_client=client)


def _recording_handler(requests: list, status_code: int = 200, body: dict | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json=body if body is not None else {"ok": True})

    return handler


# ── URLs ──


def test_full_url_adds_format_and_api_key():
    transport = HttpxTransport(_settings())
    url = transport.full_url("/records", params={"text": "dog"})
    assert url == "http://api.test/records.json?api_key=abc&text=dog"


def test_full_url_keeps_explicit_api_key_and_format():
    transport = HttpxTransport(_settings())
    url = transport.full_url("/records/1", format="xml", params={"api_key": "mine"})
    assert url == "http://api.test/records/1.xml?api_key=mine"


def test_full_url_adds_debug_flag():
    transport = HttpxTransport(_settings(enable_debugging=True))
    assert transport.full_url("/records") == "http://api.test/records.json?api_key=abc&debug=true"


def test_timeout_falls_back_to_default():
    assert HttpxTransport(_settings(timeout=0)).timeout() == 30
    assert HttpxTransport(_settings(timeout=10)).timeout() == 10
    assert HttpxTransport(_settings()).timeout({"timeout": 5}) == 5


# ── Requests ──


def test_get_sends_query_and_decodes_json():
    requests: list[httpx.Request] = []
    transport = _make_transport(_recording_handler(requests, body={"search": {"result_count": 3}}))

    result = transport.get("/records", {"text": "dog", "and": {"category": "Images"}})

    assert result == {"search": {"result_count": 3}}
    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/records.json"
    assert request.url.params["api_key"] == "abc"
    assert request.url.params["text"] == "dog"
    assert request.url.params["and[category]"] == "Images"


def test_post_sends_json_payload():
    requests: list[httpx.Request] = []
    transport = _make_transport(_recording_handler(requests, body={"set": {"id": "1"}}))

    result = transport.post("/sets", {"api_key": "user-key"}, {"set": {"name": "Dogs"}})

    assert result == {"set": {"id": "1"}}
    request = requests[0]
    assert request.method == "POST"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"set": {"name": "Dogs"}}
    assert request.url.params["api_key"] == "user-key"


def test_put_and_patch_use_their_methods():
    requests: list[httpx.Request] = []
    transport = _make_transport(_recording_handler(requests))

    transport.put("/users/abc", {}, {"user": {}})
    transport.patch("/stories/1", {}, {"story": {}})

    assert [request.method for request in requests] == ["PUT", "PATCH"]


def test_empty_bodies():
    transport = _make_transport(lambda request: httpx.Response(200, content=b""))
    assert transport.get("/records") == {}
    assert transport.delete("/sets/1") is None


def test_non_json_body_reads_as_empty():
    transport = _make_transport(lambda request: httpx.Response(200, content=b"<html></html>"))
    assert transport.get("/records") == {}


# ── Errors ──


@pytest.mark.parametrize(
    "status_code, error_class",
    [
        (401, Unauthorized),
        (403, Forbidden),
        (404, ResourceNotFound),
        (500, TransportError),
    ],
)
def test_status_codes_map_to_errors(status_code, error_class):
    transport = _make_transport(
        lambda request: httpx.Response(status_code, json={"errors": "Something went wrong"})
    )

    with pytest.raises(error_class) as exc_info:
        transport.get("/records/1")

    assert exc_info.value.status_code == status_code
    assert exc_info.value.message == "Something went wrong"


def test_error_message_falls_back_to_body_text():
    transport = _make_transport(lambda request: httpx.Response(500, content=b"Internal error"))
    with pytest.raises(TransportError) as exc_info:
        transport.get("/records")
    assert exc_info.value.message == "Internal error"


def test_timeout_raises_read_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ReadTimeout):
        _make_transport(handler).get("/records")


def test_connection_error_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportError) as exc_info:
        _make_transport(handler).get("/records")
    assert exc_info.value.status_code == 0


def test_service_unavailable_is_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(503, json={"error": "down"})
        return httpx.Response(200, json={"ok": True})

    assert _make_transport(handler).get("/records") == {"ok": True}
    assert len(attempts) == 3


def test_service_unavailable_surfaces_after_last_attempt():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(503, json={"error": "down"})

    with pytest.raises(ServiceUnavailable):
        _make_transport(handler, retry_attempts=2).get("/records")
    assert len(attempts) == 2


def test_other_errors_are_not_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(404, json={"errors": "missing"})

    with pytest.raises(ResourceNotFound):
        _make_transport(handler).get("/records/1")
    assert len(attempts) == 1


# ── Request log ──


def test_requests_are_logged_when_debugging(caplog):
    transport = _make_transport(
        lambda request: httpx.Response(
            200, json={"search": {"solr_request_params": {"q": "dog"}}}
        ),
        enable_debugging=True,
    )

    with caplog.at_level(logging.DEBUG, logger="supplejack.requests"):
        transport.get("/records", {"text": "dog"})

    assert "Supplejack API" in caplog.text
    assert "GET path=/records" in caplog.text
    assert "SOLR Request" in caplog.text


def test_failed_requests_are_logged_with_the_exception(caplog):
    transport = _make_transport(
        lambda request: httpx.Response(404, json={"errors": "missing"}), enable_debugging=True
    )

    with caplog.at_level(logging.DEBUG, logger="supplejack.requests"):
        with pytest.raises(ResourceNotFound):
            transport.get("/records/1")

    assert "ResourceNotFound" in caplog.text
