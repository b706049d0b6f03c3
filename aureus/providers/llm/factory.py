"""Create a generation source from configuration."""

from aureus.config.models.generation import GenerationConfig
from aureus.providers.llm.base import GenerationSource
from aureus.providers.llm.mock import MockGenerationSource
from aureus.providers.llm.openai_compatible import OpenAICompatibleSource


def create_generation_source(config: GenerationConfig) -> GenerationSource:
    """Instantiate the provider named by ``config.provider``."""
    if config.provider == "mock":
        return MockGenerationSource()
    if config.provider == "openai_compatible":
        return OpenAICompatibleSource.from_config(config)
    raise ValueError(f"Unknown generation provider: {config.provider}")
