"""In-memory implementation of MessageStore."""

from collections import defaultdict
from collections.abc import Sequence

from aureus.conversation.models import Sender, Turn
from aureus.conversation.store import (
    FeedHandle,
    MessageStore,
    PersistenceError,
    SnapshotCallback,
)
from aureus.observability.logging import get_logger

logger = get_logger(__name__)


class InMemoryFeedHandle(FeedHandle):
    """Feed registered with an InMemoryMessageStore."""

    def __init__(
        self,
        store: "InMemoryMessageStore",
        conversation_id: str,
        callback: SnapshotCallback,
    ) -> None:
        self._store = store
        self.conversation_id = conversation_id
        self.callback = callback
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._store._unregister(self)


class InMemoryMessageStore(MessageStore):
    """In-memory MessageStore for testing and development.

    Subscribers receive the current snapshot as soon as they subscribe and a
    fresh one after every append. Not suitable for production use.
    """

    def __init__(self) -> None:
        self._turns: dict[str, list[Turn]] = defaultdict(list)
        self._feeds: dict[str, list[InMemoryFeedHandle]] = defaultdict(list)
        self._fail_appends = False

    def fail_appends(self, enabled: bool = True) -> None:
        """Make subsequent appends raise PersistenceError."""
        self._fail_appends = enabled

    def turns(self, conversation_id: str) -> list[Turn]:
        """Stored turns for a conversation, oldest first."""
        return list(self._turns.get(conversation_id, []))

    def feed_count(self, conversation_id: str) -> int:
        """Number of live feeds for a conversation."""
        return len(self._feeds.get(conversation_id, []))

    async def append(self, conversation_id: str, sender: Sender, text: str) -> None:
        if self._fail_appends:
            raise PersistenceError(f"append rejected for conversation {conversation_id}")
        self._turns[conversation_id].append(Turn(sender=sender, text=text))
        self._publish(conversation_id)

    def subscribe(self, conversation_id: str, on_snapshot: SnapshotCallback) -> FeedHandle:
        handle = InMemoryFeedHandle(self, conversation_id, on_snapshot)
        self._feeds[conversation_id].append(handle)
        logger.debug("feed_registered", conversation_id=conversation_id)
        on_snapshot(self._snapshot(conversation_id))
        return handle

    def _snapshot(self, conversation_id: str) -> Sequence[Turn]:
        return tuple(self._turns.get(conversation_id, []))

    def _publish(self, conversation_id: str) -> None:
        snapshot = self._snapshot(conversation_id)
        # Copy: a callback may dispose its own feed
        for handle in list(self._feeds.get(conversation_id, [])):
            if not handle.disposed:
                handle.callback(snapshot)

    def _unregister(self, handle: InMemoryFeedHandle) -> None:
        feeds = self._feeds.get(handle.conversation_id, [])
        if handle in feeds:
            feeds.remove(handle)
        if not feeds:
            self._feeds.pop(handle.conversation_id, None)
        logger.debug("feed_unregistered", conversation_id=handle.conversation_id)
