"""Tests for HistoryBuilder."""

from aureus.config.models.session import SessionConfig
from aureus.conversation.models import Sender, Turn
from aureus.generation.history import HistoryBuilder, build_context


class TestHistoryBuilder:
    """Tests for context string construction."""

    def test_empty_history(self) -> None:
        """Only the new prompt and the AI marker are emitted."""
        assert build_context([], "Hi") == "User: Hi\nAI:"

    def test_turns_in_insertion_order(self) -> None:
        """Turns become labelled lines in their original order."""
        turns = [Turn.user("Hello"), Turn.ai("Hi! How can I help?"), Turn.user("Weather?")]
        assert build_context(turns, "And tomorrow?") == (
            "User: Hello\n"
            "AI: Hi! How can I help?\n"
            "User: Weather?\n"
            "User: And tomorrow?\n"
            "AI:"
        )

    def test_system_turns_excluded(self) -> None:
        """Turns from other senders are left out."""
        turns = [
            Turn(sender=Sender.SYSTEM, text="conversation created"),
            Turn.user("a"),
            Turn.ai("b"),
        ]
        assert build_context(turns, "c") == "User: a\nAI: b\nUser: c\nAI:"

    def test_multiline_text_kept_verbatim(self) -> None:
        """Turn text is not escaped or reflowed."""
        turns = [Turn.ai("line 1\nline 2")]
        assert build_context(turns, "ok") == "AI: line 1\nline 2\nUser: ok\nAI:"

    def test_deterministic(self) -> None:
        """Same input, same output."""
        turns = [Turn.user("x"), Turn.ai("y")]
        assert build_context(turns, "z") == build_context(turns, "z")

    def test_custom_labels_from_config(self) -> None:
        """Role labels come from SessionConfig."""
        builder = HistoryBuilder.from_config(SessionConfig(user_label="Q", ai_label="A"))
        assert builder.build([Turn.ai("prev")], "next") == "A: prev\nQ: next\nA:"
