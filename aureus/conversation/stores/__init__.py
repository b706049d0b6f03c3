"""Message stores for conversation persistence."""

from aureus.conversation.store import FeedHandle, MessageStore, PersistenceError
from aureus.conversation.stores.inmemory import InMemoryMessageStore

__all__ = [
    "FeedHandle",
    "MessageStore",
    "PersistenceError",
    "InMemoryMessageStore",
]
