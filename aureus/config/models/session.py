"""Submission behaviour configuration."""

from typing import Literal

from pydantic import BaseModel, Field

SwitchPolicy = Literal["append", "drop"]


class SessionConfig(BaseModel):
    """How the session controller commits responses."""

    fallback_text: str = Field(
        default="[Error getting a response from the AI]",
        min_length=1,
        description="AI turn appended when generation fails",
    )
    trim_final_text: bool = Field(
        default=True,
        description="Strip surrounding whitespace from the committed response",
    )
    switch_policy: SwitchPolicy = Field(
        default="append",
        description=(
            "What to do with a response whose conversation is no longer active: "
            "append it to the active one, or drop it"
        ),
    )
    user_label: str = Field(default="User", description="Role label for user turns")
    ai_label: str = Field(default="AI", description="Role label for AI turns")
