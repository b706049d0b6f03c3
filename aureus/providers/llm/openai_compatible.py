"""Streaming completions from an OpenAI-compatible server.

Targets LM Studio and similar local servers exposing ``POST /completions``
with server-sent events:

    data: {"choices": [{"text": "Hel"}]}
    data: {"choices": [{"text": "lo"}]}
    data: [DONE]
"""

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx

from aureus.config.models.generation import GenerationConfig
from aureus.observability.logging import get_logger
from aureus.providers.llm.base import (
    AuthenticationError,
    ConnectionFailedError,
    GenerationSource,
    ModelError,
    ProviderError,
    RateLimitError,
    StreamProtocolError,
)

logger = get_logger(__name__)

_DONE_MARKER = "[DONE]"

# Returned by _parse_event at the end of the stream
_END_OF_STREAM = object()


class OpenAICompatibleSource(GenerationSource):
    """Generation source backed by an OpenAI-compatible completions API.

    Attributes:
        base_url: API root, e.g. http://localhost:1234/v1
        model: Model identifier sent with each request
    """

    def __init__(
        self,
        base_url: str = "http://localhost:1234/v1",
        model: str = "local-model",
        *,
        api_key: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        stop: list[str] | None = None,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._api_key = api_key
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._stop = list(stop or [])
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    @classmethod
    def from_config(
        cls,
        config: GenerationConfig,
        client: httpx.AsyncClient | None = None,
    ) -> "OpenAICompatibleSource":
        return cls(
            base_url=config.base_url,
            model=config.model,
            api_key=config.api_key.get_secret_value() if config.api_key else None,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            stop=config.stop,
            timeout=config.timeout,
            client=client,
        )

    @property
    def provider_name(self) -> str:
        return "openai_compatible"

    async def __aenter__(self) -> "OpenAICompatibleSource":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "text/event-stream"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _payload(self, prompt: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
            "stream": True,
        }
        if self._stop:
            payload["stop"] = self._stop
        return payload

    async def generate_stream(self, prompt: str) -> AsyncIterator[str]:
        logger.debug("generation_request", model=self.model, prompt_length=len(prompt))
        try:
            async with self._client.stream(
                "POST",
                f"{self.base_url}/completions",
                headers=self._headers(),
                json=self._payload(prompt),
            ) as response:
                if response.status_code >= 400:
                    body = (await response.aread()).decode(errors="replace")
                    raise _error_for_status(response.status_code, body)

                async for line in response.aiter_lines():
                    text = _parse_event(line)
                    if text is None:
                        continue
                    if text is _END_OF_STREAM:
                        return
                    if text:
                        yield text
        except httpx.TimeoutException as e:
            raise ConnectionFailedError(f"generation request timed out: {e}") from e
        except httpx.TransportError as e:
            raise ConnectionFailedError(f"generation request failed: {e}") from e


def _parse_event(line: str) -> str | object | None:
    """Extract the text delta from one SSE line.

    Returns None for lines that carry no data, _END_OF_STREAM at the end of
    the stream, and otherwise the (possibly empty) text.
    """
    line = line.strip()
    if not line.startswith("data:"):
        return None
    data = line[len("data:"):].strip()
    if data == _DONE_MARKER:
        return _END_OF_STREAM

    try:
        event = json.loads(data)
    except json.JSONDecodeError as e:
        raise StreamProtocolError(f"malformed stream event: {data[:200]}") from e

    if not isinstance(event, dict):
        raise StreamProtocolError(f"unexpected stream event: {data[:200]}")
    if "error" in event:
        error = event["error"]
        message = error.get("message") if isinstance(error, dict) else str(error)
        raise ModelError(message or "generation failed")

    choices = event.get("choices") or []
    if not choices:
        return ""
    choice = choices[0]
    if "text" in choice:
        return choice.get("text") or ""
    # Chat-style servers put deltas under "delta"
    delta = choice.get("delta") or {}
    return delta.get("content") or ""


def _error_for_status(status_code: int, body: str) -> ProviderError:
    message = body[:500] or f"HTTP {status_code}"
    if status_code in (401, 403):
        return AuthenticationError(message, status_code=status_code)
    if status_code == 429:
        return RateLimitError(message, status_code=status_code)
    if status_code in (400, 404, 422):
        return ModelError(message, status_code=status_code)
    return ProviderError(message, status_code=status_code)
