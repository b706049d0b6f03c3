"""Configuration section models."""

from aureus.config.models.generation import GenerationConfig, ReasoningConfig
from aureus.config.models.observability import LoggingConfig, ObservabilityConfig
from aureus.config.models.session import SessionConfig

__all__ = [
    "GenerationConfig",
    "ReasoningConfig",
    "SessionConfig",
    "LoggingConfig",
    "ObservabilityConfig",
]
