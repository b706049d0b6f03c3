"""Mock generation source for testing."""

import asyncio
from collections.abc import AsyncIterator

from aureus.providers.llm.base import GenerationSource, ModelError


class MockGenerationSource(GenerationSource):
    """Scripted generation source.

    Streams a fixed response, or explicit chunks, without any network access.
    Useful for unit testing and development.
    """

    def __init__(
        self,
        default_response: str = "Mock response",
        *,
        chunks: list[str] | None = None,
        stream_chunk_size: int = 10,
        fail_after: int | None = None,
        error: Exception | None = None,
        chunk_delay: float = 0.0,
    ):
        """Initialize mock source.

        Args:
            default_response: Text to stream when no chunks are scripted
            chunks: Exact chunks to yield, overriding default_response
            stream_chunk_size: Number of chars per chunk for default_response
            fail_after: Raise after yielding this many chunks
            error: Exception raised by fail_after (defaults to ModelError)
            chunk_delay: Seconds to sleep before each chunk
        """
        self._default_response = default_response
        self._chunks = chunks
        self._stream_chunk_size = stream_chunk_size
        self._fail_after = fail_after
        self._error = error
        self._chunk_delay = chunk_delay
        self._prompts: list[str] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def prompts(self) -> list[str]:
        """Prompts received, for test assertions."""
        return self._prompts

    @property
    def call_count(self) -> int:
        return len(self._prompts)

    def set_chunks(self, chunks: list[str]) -> None:
        self._chunks = list(chunks)

    def fail_with(self, error: Exception, after: int = 0) -> None:
        """Raise ``error`` once ``after`` chunks have been streamed."""
        self._error = error
        self._fail_after = after

    def _script(self) -> list[str]:
        if self._chunks is not None:
            return list(self._chunks)
        content = self._default_response
        size = self._stream_chunk_size
        return [content[i:i + size] for i in range(0, len(content), size)]

    async def generate_stream(self, prompt: str) -> AsyncIterator[str]:
        self._prompts.append(prompt)
        for index, chunk in enumerate(self._script()):
            if self._fail_after is not None and index >= self._fail_after:
                break
            if self._chunk_delay:
                await asyncio.sleep(self._chunk_delay)
            yield chunk
        if self._fail_after is not None:
            raise self._error or ModelError("mock generation failure")
