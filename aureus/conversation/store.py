"""MessageStore abstract interface."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from aureus.conversation.models import Sender, Turn

SnapshotCallback = Callable[[Sequence[Turn]], None]


class PersistenceError(Exception):
    """A store could not persist or deliver turns."""

    pass


class FeedHandle(ABC):
    """Owns one live feed connection.

    ``dispose()`` must be idempotent; after it returns the feed delivers no
    further snapshots.
    """

    @property
    @abstractmethod
    def disposed(self) -> bool:
        """Whether the feed has been torn down."""
        pass

    @abstractmethod
    def dispose(self) -> None:
        """Tear down the feed."""
        pass


class MessageStore(ABC):
    """Abstract interface for conversation persistence.

    Turns are appended per conversation and delivered to subscribers as
    complete, ordered snapshots.
    """

    @abstractmethod
    async def append(self, conversation_id: str, sender: Sender, text: str) -> None:
        """Persist a turn at the end of a conversation.

        Raises:
            PersistenceError: If the turn could not be stored
        """
        pass

    @abstractmethod
    def subscribe(self, conversation_id: str, on_snapshot: SnapshotCallback) -> FeedHandle:
        """Open a feed that pushes the conversation's ordered turns."""
        pass
