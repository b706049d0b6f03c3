"""Single active message-feed subscription per conversation.

SubscriptionManager owns the feed for whichever conversation is active and
the latest turn snapshot that feed delivered. Switching conversations tears
the old feed down before the new one is opened, and a snapshot from a feed
that is no longer active is discarded even if it arrives late.
"""

from collections.abc import Callable, Sequence

from aureus.conversation.models import Turn, UserIdentity
from aureus.conversation.store import FeedHandle, MessageStore
from aureus.observability.logging import get_logger
from aureus.observability.metrics import ACTIVE_FEEDS, FEED_SUBSCRIPTIONS

logger = get_logger(__name__)


class _ActiveFeed:
    """Binds a store handle to the conversation it was opened for."""

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        self.handle: FeedHandle | None = None
        self.live = True

    def dispose(self) -> None:
        self.live = False
        if self.handle is not None:
            self.handle.dispose()


class SubscriptionManager:
    """Keeps at most one live feed and the snapshot it last delivered.

    Attributes:
        conversation_id: Active conversation, "" when there is none
        is_loading: True until the active feed delivers its first snapshot
    """

    def __init__(
        self,
        store: MessageStore,
        on_change: Callable[[Sequence[Turn]], None] | None = None,
    ) -> None:
        self._store = store
        self._on_change = on_change
        self._feed: _ActiveFeed | None = None
        self._turns: list[Turn] = []
        self.conversation_id = ""
        self.is_loading = False

    @property
    def turns(self) -> list[Turn]:
        """Current snapshot, oldest first."""
        return list(self._turns)

    @property
    def has_active_feed(self) -> bool:
        return self._feed is not None

    def set_active_conversation(
        self,
        conversation_id: str,
        identity: UserIdentity | None,
    ) -> None:
        """Point the manager at a conversation.

        Without an identity everything is reset and no feed is opened.
        Re-selecting the active conversation is a no-op.
        """
        if identity is None:
            self.reset()
            return

        if conversation_id == self.conversation_id and self._feed is not None:
            return

        self._dispose_feed()
        # Registered before any listener runs so a re-entrant call sees it
        feed = _ActiveFeed(conversation_id)
        self._feed = feed
        ACTIVE_FEEDS.inc()
        self.conversation_id = conversation_id
        self._turns = []
        self.is_loading = True
        self._notify()

        if self._feed is not feed:
            # The listener switched conversations or reset; its call won
            return

        FEED_SUBSCRIPTIONS.inc()
        logger.info(
            "feed_subscribed",
            conversation_id=conversation_id,
            user_id=identity.user_id,
            username=identity.username,
        )
        try:
            handle = self._store.subscribe(
                conversation_id,
                lambda snapshot: self._on_snapshot(feed, snapshot),
            )
        except Exception:
            if self._feed is feed:
                self._feed = None
                ACTIVE_FEEDS.dec()
            feed.live = False
            self.is_loading = False
            logger.exception("feed_subscribe_failed", conversation_id=conversation_id)
            raise
        if feed.live:
            feed.handle = handle
        else:
            # Switched away while the store was delivering the first snapshot
            handle.dispose()

    def append_local(self, turn: Turn) -> None:
        """Show a turn before the store confirms it."""
        self._turns.append(turn)
        self._notify()

    def reset(self) -> None:
        """Drop the feed and return to an empty, idle state."""
        self._dispose_feed()
        self.conversation_id = ""
        self._turns = []
        self.is_loading = False
        self._notify()

    def close(self) -> None:
        """Dispose the active feed, keeping the last snapshot."""
        self._dispose_feed()

    def _on_snapshot(self, feed: _ActiveFeed, snapshot: Sequence[Turn]) -> None:
        if not feed.live or feed is not self._feed:
            logger.debug("stale_snapshot_discarded", conversation_id=feed.conversation_id)
            return
        self._turns = list(snapshot)
        self.is_loading = False
        logger.debug(
            "snapshot_received",
            conversation_id=feed.conversation_id,
            turn_count=len(self._turns),
        )
        self._notify()

    def _dispose_feed(self) -> None:
        if self._feed is None:
            return
        feed, self._feed = self._feed, None
        feed.dispose()
        ACTIVE_FEEDS.dec()
        logger.info("feed_disposed", conversation_id=feed.conversation_id)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.turns)
