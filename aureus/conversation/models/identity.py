"""Identity of the signed-in participant."""

from pydantic import BaseModel, ConfigDict, Field


class UserIdentity(BaseModel):
    """Present-user signal handed to subscriptions and submissions.

    ``None`` in place of an identity means nobody is signed in.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1, description="Stable user identifier")
    username: str | None = Field(default=None, description="Display name")
