"""Conversation domain models.

- Sender for turn attribution
- Turn for individual messages
- UserIdentity for the signed-in participant
"""

from aureus.conversation.models.enums import Sender
from aureus.conversation.models.identity import UserIdentity
from aureus.conversation.models.turn import Turn

__all__ = [
    "Sender",
    "Turn",
    "UserIdentity",
]
