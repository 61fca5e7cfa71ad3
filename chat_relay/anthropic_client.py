"""Chat Relay — Anthropic Messages API client."""

import logging
from typing import Any, Optional, Protocol, Sequence

import httpx

from chat_relay.config import Settings
from chat_relay.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class ChatCompleter(Protocol):
    async def complete_chat(self, system_prompt: str, messages: Sequence[Any]) -> str:
        """Return the reply text or raise UpstreamError."""
        ...


class AnthropicClient:
    """One POST to the Messages API per call. No retries.

    With no API key configured nothing is sent: the call fails with
    UpstreamError straight away instead of making a request upstream would
    reject.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def _headers(self) -> dict:
        return {
            "x-api-key": self.settings.api_key,
            "anthropic-version": self.settings.api_version,
            "content-type": "application/json",
        }

    async def complete_chat(self, system_prompt: str, messages: Sequence[Any]) -> str:
        if not self.settings.api_key:
            raise UpstreamError("ANTHROPIC_API_KEY not configured")

        payload = {
            "model": self.settings.model,
            "max_tokens": self.settings.max_tokens,
            "system": system_prompt,
            "messages": list(messages),
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.upstream_timeout,
                transport=self.transport,
            ) as client:
                response = await client.post(
                    self.settings.api_url,
                    headers=self._headers(),
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Anthropic API request failed: {e!r}") from e

        if not response.is_success:
            logger.error("Anthropic API error %s: %s", response.status_code, _error_body(response))
            raise UpstreamError(
                f"Anthropic API error: {response.status_code}",
                status_code=response.status_code,
            )

        return _first_text(response)


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _first_text(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError as e:
        raise UpstreamError("Anthropic API returned invalid JSON") from e

    content = data.get("content") if isinstance(data, dict) else None
    if not isinstance(content, list) or not content:
        raise UpstreamError("Anthropic API reply has no content")

    first = content[0]
    text = first.get("text") if isinstance(first, dict) else None
    if not isinstance(text, str):
        raise UpstreamError("Anthropic API reply has no text segment")
    return text
