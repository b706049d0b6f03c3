"""Tests for SessionController."""

import asyncio

import pytest
from prometheus_client import REGISTRY

from aureus.config.models.session import SessionConfig
from aureus.conversation.models import Sender, Turn
from aureus.conversation.stores import InMemoryMessageStore
from aureus.providers.llm import MockGenerationSource, ModelError
from aureus.session import (
    SessionController,
    SubmissionOutcome,
    SubmissionState,
)

FALLBACK = SessionConfig().fallback_text


def sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


@pytest.fixture
def controller(store, source, identity) -> SessionController:
    controller = SessionController(store, source)
    controller.set_active_conversation("c1", identity)
    return controller


class TestSubmit:
    """Tests for the happy path."""

    @pytest.mark.asyncio
    async def test_commits_filtered_response(self, store, identity) -> None:
        """Reasoning is stripped and the response becomes an AI turn."""
        source = MockGenerationSource(chunks=["<thi", "nk>secret</think>", "visible"])
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)

        result = await controller.submit("Hello", identity)

        assert result.outcome is SubmissionOutcome.COMMITTED
        assert result.text == "visible"
        assert controller.turns == [Turn.user("Hello"), Turn.ai("visible")]
        assert store.turns("c1") == [Turn.user("Hello"), Turn.ai("visible")]

    @pytest.mark.asyncio
    async def test_prompt_trimmed(self, controller, store, identity) -> None:
        """Surrounding whitespace is stripped from the user turn."""
        await controller.submit("  Hello \n", identity)
        assert store.turns("c1")[0] == Turn.user("Hello")

    @pytest.mark.asyncio
    async def test_context_built_from_current_turns(self, store, source, identity) -> None:
        """The context lists the turns including the submitted one, then the prompt."""
        await store.append("c1", Sender.USER, "Hi")
        await store.append("c1", Sender.AI, "Hello!")
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)

        await controller.submit("How are you?", identity)

        assert source.prompts == [
            "User: Hi\nAI: Hello!\nUser: How are you?\nUser: How are you?\nAI:"
        ]

    @pytest.mark.asyncio
    async def test_context_on_empty_conversation_includes_user_turn(
        self, controller, source, identity
    ) -> None:
        """The optimistic user turn is part of the history sent to the model."""
        await controller.submit("Hello", identity)

        assert source.prompts == ["User: Hello\nUser: Hello\nAI:"]

    @pytest.mark.asyncio
    async def test_final_text_trimmed(self, store, identity) -> None:
        """Whitespace left around removed segments is trimmed on commit."""
        source = MockGenerationSource(chunks=["<think>plan</think>\n\n", "Answer  "])
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)

        result = await controller.submit("q", identity)

        assert result.text == "Answer"

    @pytest.mark.asyncio
    async def test_trim_disabled(self, store, identity) -> None:
        source = MockGenerationSource(chunks=[" a "])
        controller = SessionController(store, source, config=SessionConfig(trim_final_text=False))
        controller.set_active_conversation("c1", identity)

        result = await controller.submit("q", identity)

        assert result.text == " a "

    @pytest.mark.asyncio
    async def test_unterminated_reasoning_dropped(self, store, identity) -> None:
        """A response that ends inside a segment keeps only the text before it."""
        source = MockGenerationSource(chunks=["before", "<think>hidden"])
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)

        result = await controller.submit("q", identity)

        assert result.text == "before"

    @pytest.mark.asyncio
    async def test_state_and_flags_reset(self, controller, identity) -> None:
        """After a submission the controller is idle again."""
        await controller.submit("Hello", identity)
        assert controller.is_loading is False
        assert controller.in_progress_text == ""
        assert controller.state is SubmissionState.IDLE


class TestProgress:
    """Tests for in-progress publication."""

    @pytest.mark.asyncio
    async def test_progress_never_shows_reasoning(self, store, identity) -> None:
        """Every published projection hides reasoning and partial delimiters."""
        published: list[str] = []
        source = MockGenerationSource(
            chunks=["Sure", " <thi", "nk>sec", "ret</thi", "nk> thing", "!"]
        )
        controller = SessionController(store, source, on_progress=published.append)
        controller.set_active_conversation("c1", identity)

        await controller.submit("q", identity)

        assert all("sec" not in text and "<" not in text for text in published)
        assert "Sure  thing!" in published
        assert published[-1] == ""

    @pytest.mark.asyncio
    async def test_loading_while_streaming(self, store, identity) -> None:
        """is_loading and STREAMING hold while chunks arrive."""
        observed: list[tuple[bool, SubmissionState]] = []
        source = MockGenerationSource(chunks=["a", "b"])
        controller = SessionController(
            store,
            source,
            on_progress=lambda _: observed.append((controller.is_loading, controller.state)),
        )
        controller.set_active_conversation("c1", identity)

        await controller.submit("q", identity)

        assert (True, SubmissionState.STREAMING) in observed


class TestIgnoredSubmissions:
    """Tests for submissions that do nothing."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prompt", ["", "   ", "\n\t "])
    async def test_blank_prompt_is_noop(self, controller, store, source, identity, prompt) -> None:
        """Blank input adds no turn and makes no calls."""
        result = await controller.submit(prompt, identity)

        assert result.outcome is SubmissionOutcome.IGNORED
        assert controller.turns == []
        assert store.turns("c1") == []
        assert source.call_count == 0
        assert controller.is_loading is False

    @pytest.mark.asyncio
    async def test_no_identity_is_noop(self, controller, source) -> None:
        result = await controller.submit("Hello", None)
        assert result.outcome is SubmissionOutcome.IGNORED
        assert source.call_count == 0

    @pytest.mark.asyncio
    async def test_no_conversation_is_noop(self, store, source, identity) -> None:
        controller = SessionController(store, source)
        result = await controller.submit("Hello", identity)
        assert result.outcome is SubmissionOutcome.IGNORED
        assert source.call_count == 0

    @pytest.mark.asyncio
    async def test_concurrent_submission_rejected(self, store, identity) -> None:
        """A second submission while streaming is rejected as BUSY."""
        source = MockGenerationSource(chunks=["slow", " reply"], chunk_delay=0.01)
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)

        first = asyncio.create_task(controller.submit("one", identity))
        await asyncio.sleep(0)
        second = await controller.submit("two", identity)
        await first

        assert second.outcome is SubmissionOutcome.BUSY
        assert source.call_count == 1
        assert [t.text for t in store.turns("c1")] == ["one", "slow reply"]


class TestFailures:
    """Tests for generation and persistence failures."""

    @pytest.mark.asyncio
    async def test_generation_failure_appends_one_fallback(self, store, identity) -> None:
        """A rejected stream yields exactly one fallback AI turn."""
        source = MockGenerationSource(fail_after=0)
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)
        failed_before = sample("aureus_generation_requests_total", {"outcome": "failed"})

        result = await controller.submit("Hello", identity)

        assert result.outcome is SubmissionOutcome.FAILED
        assert result.error == "mock generation failure"
        ai_turns = [t for t in store.turns("c1") if t.sender is Sender.AI]
        assert ai_turns == [Turn.ai(FALLBACK)]
        assert controller.is_loading is False
        assert controller.in_progress_text == ""
        assert sample("aureus_generation_requests_total", {"outcome": "failed"}) == failed_before + 1

    @pytest.mark.asyncio
    async def test_mid_stream_failure_hides_partial_text(self, store, identity) -> None:
        """Partial output is discarded in favour of the fallback notice."""
        source = MockGenerationSource(chunks=["partial <think>x", "more"])
        source.fail_with(ModelError("lost"), after=1)
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)

        result = await controller.submit("Hello", identity)

        assert result.text == FALLBACK
        assert controller.turns[-1] == Turn.ai(FALLBACK)
        assert all("partial" not in t.text for t in controller.turns)

    @pytest.mark.asyncio
    async def test_custom_fallback_text(self, store, identity) -> None:
        source = MockGenerationSource(fail_after=0)
        controller = SessionController(store, source, config=SessionConfig(fallback_text="Sorry."))
        controller.set_active_conversation("c1", identity)

        result = await controller.submit("Hello", identity)

        assert result.text == "Sorry."

    @pytest.mark.asyncio
    async def test_persistence_failure_does_not_escape(self, store, identity) -> None:
        """A store that rejects every append does not crash the controller."""
        source = MockGenerationSource(fail_after=0)
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)
        store.fail_appends()
        errors_before = sample("aureus_persistence_errors_total", {"sender": "ai"})

        result = await controller.submit("Hello", identity)

        assert result.outcome is SubmissionOutcome.FAILED
        assert controller.is_loading is False
        assert controller.turns == [Turn.user("Hello"), Turn.ai(FALLBACK)]
        assert sample("aureus_persistence_errors_total", {"sender": "ai"}) == errors_before + 1

    @pytest.mark.asyncio
    async def test_user_turn_kept_when_persist_fails(self, store, identity) -> None:
        """The optimistic user turn is not rolled back."""
        source = MockGenerationSource(chunks=["ok"])
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)
        store.fail_appends()

        result = await controller.submit("Hello", identity)

        assert result.outcome is SubmissionOutcome.COMMITTED
        assert controller.turns == [Turn.user("Hello"), Turn.ai("ok")]
        assert store.turns("c1") == []

    @pytest.mark.asyncio
    async def test_cancellation_clears_loading(self, store, identity) -> None:
        """Loading is cleared even when the submission task is cancelled."""
        source = MockGenerationSource(chunks=["a", "b"], chunk_delay=1.0)
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)

        task = asyncio.create_task(controller.submit("Hello", identity))
        await asyncio.sleep(0.01)
        assert controller.is_loading is True
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert controller.is_loading is False


class TestConversationSwitch:
    """Tests for switching conversations while a response streams."""

    async def _switch_mid_stream(self, controller, identity):
        task = asyncio.create_task(controller.submit("question", identity))
        await asyncio.sleep(0.005)
        controller.set_active_conversation("c2", identity)
        return await task

    @pytest.mark.asyncio
    async def test_append_policy_commits_to_active_conversation(self, store, identity) -> None:
        """By default the response lands in the conversation active at the end."""
        source = MockGenerationSource(chunks=["late", " answer"], chunk_delay=0.01)
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)

        result = await self._switch_mid_stream(controller, identity)

        assert result.outcome is SubmissionOutcome.COMMITTED
        assert result.conversation_id == "c2"
        assert store.turns("c1") == [Turn.user("question")]
        assert store.turns("c2") == [Turn.ai("late answer")]

    @pytest.mark.asyncio
    async def test_drop_policy_discards_response(self, store, identity) -> None:
        """With switch_policy='drop' nothing is appended after a switch."""
        source = MockGenerationSource(chunks=["late", " answer"], chunk_delay=0.01)
        controller = SessionController(store, source, config=SessionConfig(switch_policy="drop"))
        controller.set_active_conversation("c1", identity)

        result = await self._switch_mid_stream(controller, identity)

        assert result.outcome is SubmissionOutcome.DROPPED
        assert store.turns("c1") == [Turn.user("question")]
        assert store.turns("c2") == []
        assert controller.turns == []
        assert controller.in_progress_text == ""

    @pytest.mark.asyncio
    async def test_sign_out_mid_stream_drops(self, store, identity) -> None:
        """With no active conversation left the response is dropped."""
        source = MockGenerationSource(chunks=["late"], chunk_delay=0.01)
        controller = SessionController(store, source)
        controller.set_active_conversation("c1", identity)

        task = asyncio.create_task(controller.submit("question", identity))
        await asyncio.sleep(0.005)
        controller.set_active_conversation("c1", None)
        result = await task

        assert result.outcome is SubmissionOutcome.DROPPED
        assert controller.is_loading is False


class TestFeedIntegration:
    """Tests for controller and store working together."""

    @pytest.mark.asyncio
    async def test_snapshot_replaced_by_store_emissions(self, identity) -> None:
        """Turns appended elsewhere show up through the feed."""
        store = InMemoryMessageStore()
        controller = SessionController(store, MockGenerationSource())
        controller.set_active_conversation("c1", identity)

        await store.append("c1", Sender.USER, "from another tab")

        assert controller.turns == [Turn.user("from another tab")]
        assert controller.subscriptions.is_loading is False

    @pytest.mark.asyncio
    async def test_close_stops_updates(self, store, identity) -> None:
        controller = SessionController(store, MockGenerationSource())
        controller.set_active_conversation("c1", identity)

        controller.close()
        await store.append("c1", Sender.USER, "unseen")

        assert controller.turns == []
        assert store.feed_count("c1") == 0
