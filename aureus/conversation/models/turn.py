"""Turn model for conversation domain."""

from pydantic import BaseModel, ConfigDict, Field

from aureus.conversation.models.enums import Sender


class Turn(BaseModel):
    """One message in a conversation.

    Turns are immutable once created; a conversation only ever grows by
    appending new ones.
    """

    model_config = ConfigDict(frozen=True)

    sender: Sender = Field(..., description="Who produced the turn")
    text: str = Field(..., description="Message text")

    @classmethod
    def user(cls, text: str) -> "Turn":
        return cls(sender=Sender.USER, text=text)

    @classmethod
    def ai(cls, text: str) -> "Turn":
        return cls(sender=Sender.AI, text=text)
