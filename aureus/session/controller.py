"""Session controller.

Drives one submission at a time through:

    IDLE -> SUBMITTING -> STREAMING -> COMMITTED | FAILED -> IDLE

The user turn is shown immediately and persisted. The context is built from
the current turns, that user turn included, plus the prompt. The response is
streamed through a DelimiterFilter so reasoning segments never reach
``in_progress_text``, and the final text (or a fixed fallback notice on
failure) is committed as an AI turn.

In-flight requests are not cancelled when the active conversation changes.
``SessionConfig.switch_policy`` decides what happens to their response:
"append" commits it to whichever conversation is active when the stream
ends, "drop" discards it.
"""

from collections.abc import Callable
from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, Field

from aureus.config.models.generation import ReasoningConfig
from aureus.config.models.session import SessionConfig
from aureus.conversation.models import Sender, Turn, UserIdentity
from aureus.conversation.store import MessageStore
from aureus.conversation.subscription import SubscriptionManager
from aureus.generation.history import HistoryBuilder
from aureus.generation.reasoning_filter import DelimiterFilter
from aureus.observability.logging import get_logger
from aureus.observability.metrics import (
    GENERATION_CHUNKS,
    GENERATION_REQUESTS,
    PERSISTENCE_ERRORS,
    REASONING_SEGMENTS_REMOVED,
    SUBMISSIONS_IGNORED,
)
from aureus.providers.llm.base import GenerationSource

logger = get_logger(__name__)


class SubmissionState(str, Enum):
    """Lifecycle of a single submission."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    STREAMING = "streaming"
    COMMITTED = "committed"
    FAILED = "failed"


class SubmissionOutcome(str, Enum):
    """How a call to submit() ended.

    - IGNORED: Empty input, no identity or no conversation; nothing happened
    - BUSY: Another submission was still in flight
    - COMMITTED: The filtered response was appended
    - FAILED: Generation failed and the fallback notice was appended
    - DROPPED: The conversation changed and the response was discarded
    """

    IGNORED = "ignored"
    BUSY = "busy"
    COMMITTED = "committed"
    FAILED = "failed"
    DROPPED = "dropped"


class SubmissionResult(BaseModel):
    """Result of one submit() call."""

    model_config = ConfigDict(frozen=True)

    outcome: SubmissionOutcome
    conversation_id: str = Field(default="", description="Conversation the prompt went to")
    text: str | None = Field(default=None, description="Committed AI text, if any")
    error: str | None = Field(default=None, description="Generation error, if any")


class SessionController:
    """Orchestrates submissions against the active conversation.

    Attributes:
        is_loading: True while a submission is in flight
        in_progress_text: Visible part of the response being streamed
        state: Current SubmissionState
    """

    def __init__(
        self,
        store: MessageStore,
        source: GenerationSource,
        *,
        subscriptions: SubscriptionManager | None = None,
        history: HistoryBuilder | None = None,
        reasoning: ReasoningConfig | None = None,
        config: SessionConfig | None = None,
        on_progress: Callable[[str], None] | None = None,
    ) -> None:
        self._store = store
        self._source = source
        self._config = config or SessionConfig()
        self._subscriptions = subscriptions or SubscriptionManager(store)
        self._history = history or HistoryBuilder.from_config(self._config)
        self._reasoning = reasoning or ReasoningConfig()
        self._on_progress = on_progress

        self.is_loading = False
        self.in_progress_text = ""
        self.state = SubmissionState.IDLE

    @property
    def subscriptions(self) -> SubscriptionManager:
        return self._subscriptions

    @property
    def conversation_id(self) -> str:
        return self._subscriptions.conversation_id

    @property
    def turns(self) -> list[Turn]:
        return self._subscriptions.turns

    def set_active_conversation(
        self,
        conversation_id: str,
        identity: UserIdentity | None,
    ) -> None:
        """Switch the conversation whose feed backs ``turns``."""
        self._subscriptions.set_active_conversation(conversation_id, identity)

    def close(self) -> None:
        """Dispose the active feed."""
        self._subscriptions.close()

    async def submit(self, prompt: str, identity: UserIdentity | None) -> SubmissionResult:
        """Send a prompt and commit the response.

        Never raises for generation or persistence failures; those end in a
        FAILED outcome or are logged respectively.
        """
        text = prompt.strip()
        if not text:
            return self._ignore("empty")
        if identity is None:
            return self._ignore("no_identity")
        if not self._subscriptions.conversation_id:
            return self._ignore("no_conversation")
        if self.is_loading:
            SUBMISSIONS_IGNORED.labels(reason="busy").inc()
            logger.info("submission_rejected_busy", conversation_id=self.conversation_id)
            return SubmissionResult(
                outcome=SubmissionOutcome.BUSY,
                conversation_id=self.conversation_id,
            )

        self.is_loading = True
        conversation_id = self._subscriptions.conversation_id
        try:
            with structlog.contextvars.bound_contextvars(
                conversation_id=conversation_id,
                user_id=identity.user_id,
            ):
                return await self._run(conversation_id, text)
        finally:
            self.is_loading = False
            self.state = SubmissionState.IDLE
            if self.in_progress_text:
                self._set_progress("")

    async def _run(self, conversation_id: str, text: str) -> SubmissionResult:
        self.state = SubmissionState.SUBMITTING
        self._subscriptions.append_local(Turn.user(text))
        self._set_progress("")
        await self._persist(conversation_id, Sender.USER, text)

        self.state = SubmissionState.STREAMING
        history = self._subscriptions.turns
        context = self._history.build(history, text)
        stream_filter = DelimiterFilter.from_config(self._reasoning)
        chunk_count = 0
        logger.info("generation_started", history_turns=len(history), context_length=len(context))

        try:
            async for chunk in self._source.generate_stream(context):
                chunk_count += 1
                GENERATION_CHUNKS.inc()
                self._set_progress(stream_filter.ingest(chunk))
        except Exception as e:
            self.state = SubmissionState.FAILED
            logger.warning(
                "generation_failed",
                error=str(e),
                error_type=type(e).__name__,
                chunk_count=chunk_count,
            )
            result = await self._commit(
                conversation_id,
                self._config.fallback_text,
                SubmissionOutcome.FAILED,
            )
            return result.model_copy(update={"error": str(e)})

        final = stream_filter.finalize()
        if self._config.trim_final_text:
            final = final.strip()
        REASONING_SEGMENTS_REMOVED.inc(stream_filter.segments_removed)
        logger.info(
            "generation_completed",
            chunk_count=chunk_count,
            raw_length=len(stream_filter.raw_text),
            visible_length=len(final),
            segments_removed=stream_filter.segments_removed,
            unterminated=stream_filter.inside_reasoning,
        )
        self.state = SubmissionState.COMMITTED
        return await self._commit(conversation_id, final, SubmissionOutcome.COMMITTED)

    async def _commit(
        self,
        origin_id: str,
        text: str,
        outcome: SubmissionOutcome,
    ) -> SubmissionResult:
        target_id = self._subscriptions.conversation_id
        switched = target_id != origin_id
        if switched and (self._config.switch_policy == "drop" or not target_id):
            logger.info(
                "response_dropped",
                origin_conversation_id=origin_id,
                active_conversation_id=target_id,
            )
            GENERATION_REQUESTS.labels(outcome=SubmissionOutcome.DROPPED.value).inc()
            self._set_progress("")
            return SubmissionResult(outcome=SubmissionOutcome.DROPPED, conversation_id=origin_id)

        if switched:
            logger.warning(
                "response_appended_to_switched_conversation",
                origin_conversation_id=origin_id,
                active_conversation_id=target_id,
            )

        self._subscriptions.append_local(Turn.ai(text))
        await self._persist(target_id, Sender.AI, text)
        self._set_progress("")
        GENERATION_REQUESTS.labels(outcome=outcome.value).inc()
        return SubmissionResult(outcome=outcome, conversation_id=target_id, text=text)

    async def _persist(self, conversation_id: str, sender: Sender, text: str) -> bool:
        """Persist a turn; failures are logged and leave the local turn in place."""
        try:
            await self._store.append(conversation_id, sender, text)
        except Exception as e:
            PERSISTENCE_ERRORS.labels(sender=sender.value).inc()
            logger.error(
                "turn_persist_failed",
                persist_conversation_id=conversation_id,
                sender=sender.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        return True

    def _ignore(self, reason: str) -> SubmissionResult:
        SUBMISSIONS_IGNORED.labels(reason=reason).inc()
        logger.debug("submission_ignored", reason=reason)
        return SubmissionResult(
            outcome=SubmissionOutcome.IGNORED,
            conversation_id=self._subscriptions.conversation_id,
        )

    def _set_progress(self, text: str) -> None:
        self.in_progress_text = text
        if self._on_progress is not None:
            self._on_progress(text)
