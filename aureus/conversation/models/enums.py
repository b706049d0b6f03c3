"""Enums for conversation domain."""

from enum import Enum


class Sender(str, Enum):
    """Who produced a turn.

    - USER: The human participant
    - AI: The generation source
    - SYSTEM: Store-side notices; never part of the generation context
    """

    USER = "user"
    AI = "ai"
    SYSTEM = "system"
