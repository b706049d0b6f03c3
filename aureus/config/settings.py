"""Root settings model for Aureus configuration."""

from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from aureus.config.models.generation import GenerationConfig, ReasoningConfig
from aureus.config.models.observability import ObservabilityConfig
from aureus.config.models.session import SessionConfig

# TOML values handed to the settings source by get_settings()
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration to be used by Settings."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the merged TOML files."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return _toml_config.copy()


class Settings(BaseSettings):
    """Root configuration object.

    Environment variables use the AUREUS_ prefix and a double underscore for
    nesting, e.g. AUREUS_GENERATION__BASE_URL.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUREUS_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="aureus", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")

    generation: GenerationConfig = Field(
        default_factory=GenerationConfig,
        description="Generation source configuration",
    )
    reasoning: ReasoningConfig = Field(
        default_factory=ReasoningConfig,
        description="Reasoning segment delimiters",
    )
    session: SessionConfig = Field(
        default_factory=SessionConfig,
        description="Submission behaviour",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Logging configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Constructor args, then AUREUS_* env vars, then TOML, then defaults."""
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
