import http.client
import io
import json
import urllib.error

import pytest

from src.python_buddy import completion_client
from src.python_buddy.completion_client import (
    CompletionRequestError,
    EmptyCompletionError,
    GeminiCompletionClient,
    extract_candidate_text,
)


class FakeResponse:
    def __init__(self, body: bytes):
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def _install_urlopen(monkeypatch, handler):
    calls = []

    def fake_urlopen(request, *args, **kwargs):
        calls.append({"request": request, "args": args, "kwargs": kwargs})
        return handler(request)

    monkeypatch.setattr(completion_client.urllib.request, "urlopen", fake_urlopen)
    return calls


def _reply_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_complete_posts_prompt_and_returns_first_candidate_text(monkeypatch):
    calls = _install_urlopen(
        monkeypatch,
        lambda request: FakeResponse(json.dumps(_reply_payload("A list is...")).encode("utf-8")),
    )
    client = GeminiCompletionClient(model="gemini-pro", api_base="https://example.test/v1beta")

    assert client.complete("What is a list?", api_key="K") == "A list is..."

    request = calls[0]["request"]
    assert request.get_method() == "POST"
    assert request.full_url == "https://example.test/v1beta/models/gemini-pro:generateContent?key=K"
    assert request.get_header("Content-type") == "application/json"
    assert json.loads(request.data.decode("utf-8")) == {
        "contents": [{"parts": [{"text": "What is a list?"}]}]
    }
    assert calls[0]["kwargs"] == {}


def test_complete_passes_configured_timeout(monkeypatch):
    calls = _install_urlopen(
        monkeypatch,
        lambda request: FakeResponse(json.dumps(_reply_payload("ok")).encode("utf-8")),
    )
    client = GeminiCompletionClient(api_key="K", timeout_seconds=5)

    assert client.complete("hi") == "ok"
    assert calls[0]["kwargs"] == {"timeout": 5}


def test_complete_without_credential_fails_before_network(monkeypatch):
    calls = _install_urlopen(monkeypatch, lambda request: pytest.fail("network must not be used"))
    client = GeminiCompletionClient()

    with pytest.raises(CompletionRequestError):
        client.complete("hi", api_key="  ")
    assert calls == []


def test_complete_raises_empty_completion_for_unexpected_shape(monkeypatch):
    _install_urlopen(monkeypatch, lambda request: FakeResponse(b'{"candidates": []}'))

    with pytest.raises(EmptyCompletionError):
        GeminiCompletionClient(api_key="K").complete("hi")


def test_complete_raises_request_error_for_invalid_json(monkeypatch):
    _install_urlopen(monkeypatch, lambda request: FakeResponse(b"<html>oops</html>"))

    with pytest.raises(CompletionRequestError):
        GeminiCompletionClient(api_key="K").complete("hi")


def test_complete_raises_request_error_for_http_error(monkeypatch):
    def raise_http_error(request):
        raise urllib.error.HTTPError(
            request.full_url, 400, "Bad Request", {}, io.BytesIO(b'{"error": "API key not valid"}')
        )

    _install_urlopen(monkeypatch, raise_http_error)

    with pytest.raises(CompletionRequestError) as excinfo:
        GeminiCompletionClient(api_key="K").complete("hi")
    assert "400" in str(excinfo.value)


def test_complete_raises_request_error_for_network_failure(monkeypatch):
    def raise_url_error(request):
        raise urllib.error.URLError("name resolution failed")

    _install_urlopen(monkeypatch, raise_url_error)

    with pytest.raises(CompletionRequestError):
        GeminiCompletionClient(api_key="K").complete("hi")


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        {},
        {"candidates": [{}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
        {"candidates": [{"content": {"parts": [{"text": 3}]}}]},
    ],
)
def test_extract_candidate_text_rejects_malformed_payloads(payload):
    assert extract_candidate_text(payload) is None


def test_build_url_escapes_credential():
    client = GeminiCompletionClient(model="gemini-pro", api_base="https://example.test/v1beta/")
    assert client.build_url("a&b") == "https://example.test/v1beta/models/gemini-pro:generateContent?key=a%26b"


def test_complete_raises_request_error_for_non_utf8_body(monkeypatch):
    _install_urlopen(monkeypatch, lambda request: FakeResponse(b"\xff\xfe{not utf8"))

    with pytest.raises(CompletionRequestError):
        GeminiCompletionClient(api_key="K").complete("hi")


def test_complete_raises_request_error_for_truncated_body(monkeypatch):
    class TruncatedResponse(FakeResponse):
        def read(self):
            raise http.client.IncompleteRead(b'{"cand')

    _install_urlopen(monkeypatch, lambda request: TruncatedResponse(b""))

    with pytest.raises(CompletionRequestError):
        GeminiCompletionClient(api_key="K").complete("hi")
