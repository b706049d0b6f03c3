"""Generation source interface and error types.

- GenerationSource: streams completion text for a context string
- Error types for different failure modes
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class GenerationSource(ABC):
    """Produces a response to a prompt as a stream of text chunks.

    Chunks are arbitrary fragments; nothing aligns them with words or
    delimiters.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    def generate_stream(self, prompt: str) -> AsyncIterator[str]:
        """Stream the response to ``prompt``.

        Raises:
            ProviderError: If the request fails before or during streaming
        """
        pass

    async def aclose(self) -> None:
        """Release any connections held by the source."""
        return None


# ============================================================================
# Error Types
# ============================================================================


class ProviderError(Exception):
    """Base exception for generation provider errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ConnectionFailedError(ProviderError):
    """The provider could not be reached."""

    pass


class AuthenticationError(ProviderError):
    """Invalid or missing API key."""

    pass


class RateLimitError(ProviderError):
    """Rate limit exceeded."""

    pass


class ModelError(ProviderError):
    """Model not found, unavailable or failed mid-generation."""

    pass


class StreamProtocolError(ProviderError):
    """The stream carried a payload that could not be parsed."""

    pass
