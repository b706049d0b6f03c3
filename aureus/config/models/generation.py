"""Generation source and reasoning delimiter configuration."""

from typing import Literal

from pydantic import BaseModel, Field, SecretStr, model_validator

GenerationProviderType = Literal["openai_compatible", "mock"]


class GenerationConfig(BaseModel):
    """Configuration for the streaming generation source."""

    provider: GenerationProviderType = Field(
        default="openai_compatible",
        description="Provider type",
    )
    base_url: str = Field(
        default="http://localhost:1234/v1",
        description="API base URL (LM Studio default)",
    )
    model: str = Field(
        default="local-model",
        description="Model identifier",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="API key (prefer env var)",
    )
    max_tokens: int = Field(
        default=2048,
        gt=0,
        description="Maximum tokens per response",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    timeout: float = Field(
        default=120.0,
        gt=0,
        description="Request timeout in seconds",
    )
    stop: list[str] = Field(
        default_factory=lambda: ["\nUser:"],
        description="Stop sequences",
    )


class ReasoningConfig(BaseModel):
    """Delimiters marking reasoning segments in generated text."""

    open_delimiter: str = Field(
        default="<think>",
        min_length=1,
        description="Marker that opens a reasoning segment",
    )
    close_delimiter: str = Field(
        default="</think>",
        min_length=1,
        description="Marker that closes a reasoning segment",
    )
    case_sensitive: bool = Field(
        default=False,
        description="Match delimiters case-sensitively",
    )

    @model_validator(mode="after")
    def _delimiters_differ(self) -> "ReasoningConfig":
        if self.open_delimiter == self.close_delimiter:
            raise ValueError("open_delimiter and close_delimiter must differ")
        return self
