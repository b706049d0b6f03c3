"""Generation sources for streamed text.

The primary interface is GenerationSource.generate_stream(prompt), which
yields text chunks as the model produces them.

Providers:
- openai_compatible -> OpenAICompatibleSource (LM Studio and similar servers)
- mock -> MockGenerationSource for testing
"""

from aureus.providers.llm.base import (
    AuthenticationError,
    ConnectionFailedError,
    GenerationSource,
    ModelError,
    ProviderError,
    RateLimitError,
    StreamProtocolError,
)
from aureus.providers.llm.factory import create_generation_source
from aureus.providers.llm.mock import MockGenerationSource
from aureus.providers.llm.openai_compatible import OpenAICompatibleSource

__all__ = [
    "GenerationSource",
    "create_generation_source",
    # Errors
    "ProviderError",
    "AuthenticationError",
    "ConnectionFailedError",
    "RateLimitError",
    "ModelError",
    "StreamProtocolError",
    # Providers
    "OpenAICompatibleSource",
    "MockGenerationSource",
]
