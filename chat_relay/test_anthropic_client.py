"""
Tests for AnthropicClient — request shape and error mapping.
Uses httpx.MockTransport so nothing leaves the process.
"""

import asyncio
import json

import httpx
import pytest

from chat_relay.anthropic_client import AnthropicClient
from chat_relay.config import Settings
from chat_relay.exceptions import UpstreamError

MESSAGES = [
    {"role": "user", "content": "Do you offer Hydrafacials?"},
    {"role": "assistant", "content": "Yes, $180-250."},
    {"role": "user", "content": "Great, thanks!"},
]


def _client(handler, **overrides) -> AnthropicClient:
    values = {"api_key": "sk-test", "model": "claude-test", "max_tokens": 256}
    values.update(overrides)
    return AnthropicClient(Settings(**values), transport=httpx.MockTransport(handler))


def _complete(client: AnthropicClient, system_prompt="Be nice.", messages=MESSAGES) -> str:
    return asyncio.run(client.complete_chat(system_prompt, messages))


def _reply(text="Happy to help!") -> httpx.Response:
    return httpx.Response(200, json={"id": "msg_1", "content": [{"type": "text", "text": text}]})


# --------------- Request shape ---------------

def test_sends_one_post_with_headers_and_body():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _reply()

    _complete(_client(handler))

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.anthropic.com/v1/messages"
    assert request.headers["x-api-key"] == "sk-test"
    assert request.headers["anthropic-version"] == "2023-06-01"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {
        "model": "claude-test",
        "max_tokens": 256,
        "system": "Be nice.",
        "messages": MESSAGES,
    }


def test_custom_api_url():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return _reply()

    _complete(_client(handler, api_url="http://localhost:9999/v1/messages"))
    assert seen == ["http://localhost:9999/v1/messages"]


def test_missing_api_key_makes_no_call():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _reply()

    with pytest.raises(UpstreamError):
        _complete(_client(handler, api_key=""))
    assert seen == []


# --------------- Replies ---------------

def test_returns_first_text_segment_verbatim():
    def handler(request):
        return httpx.Response(
            200,
            json={"content": [{"type": "text", "text": "  First.\n"}, {"type": "text", "text": "Second."}]},
        )

    assert _complete(_client(handler)) == "  First.\n"


@pytest.mark.parametrize(
    "body",
    [
        {"content": []},
        {"content": None},
        {"no_content": True},
        {"content": [{"type": "tool_use", "id": "t1"}]},
        {"content": ["not an object"]},
        [1, 2, 3],
    ],
)
def test_malformed_reply_raises(body):
    def handler(request):
        return httpx.Response(200, json=body)

    with pytest.raises(UpstreamError):
        _complete(_client(handler))


def test_non_json_reply_raises():
    def handler(request):
        return httpx.Response(200, content=b"<html>gateway</html>")

    with pytest.raises(UpstreamError, match="invalid JSON"):
        _complete(_client(handler))


# --------------- Errors ---------------

@pytest.mark.parametrize("status", [400, 401, 429, 500, 529])
def test_error_status_raises_with_status(status):
    def handler(request):
        return httpx.Response(status, json={"type": "error", "error": {"type": "x", "message": "nope"}})

    with pytest.raises(UpstreamError) as excinfo:
        _complete(_client(handler))
    assert excinfo.value.status_code == status
    assert str(status) in str(excinfo.value)


def test_error_body_is_logged(caplog):
    def handler(request):
        return httpx.Response(400, json={"type": "error", "error": {"message": "messages: field required"}})

    with pytest.raises(UpstreamError):
        _complete(_client(handler))
    assert "messages: field required" in caplog.text


def test_non_json_error_body_is_logged(caplog):
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(UpstreamError):
        _complete(_client(handler))
    assert "Bad Gateway" in caplog.text


def test_transport_error_raises_upstream_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as excinfo:
        _complete(_client(handler))
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


# --------------- Timeout ---------------

def test_default_timeout_is_finite():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.extensions["timeout"])
        return _reply()

    _complete(_client(handler))
    assert seen[0]["read"] == 300.0
    assert all(value is not None for value in seen[0].values())


def test_configured_timeout_is_used():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.extensions["timeout"])
        return _reply()

    _complete(_client(handler, upstream_timeout=12.5))
    assert seen[0] == {"connect": 12.5, "read": 12.5, "write": 12.5, "pool": 12.5}
