"""Build the plain-text context handed to the generation source.

Each user or AI turn becomes a ``"<Label>: <text>"`` line in conversation
order, followed by the new prompt and an open ``AI:`` line for the model to
continue. Turns from any other sender are left out.
"""

from collections.abc import Iterable

from aureus.config.models.session import SessionConfig
from aureus.conversation.models import Sender, Turn


class HistoryBuilder:
    """Serialize conversation turns into a completion prompt."""

    def __init__(self, user_label: str = "User", ai_label: str = "AI") -> None:
        self._labels = {
            Sender.USER: user_label,
            Sender.AI: ai_label,
        }

    @classmethod
    def from_config(cls, config: SessionConfig) -> "HistoryBuilder":
        return cls(user_label=config.user_label, ai_label=config.ai_label)

    def build(self, turns: Iterable[Turn], next_prompt: str) -> str:
        """Return the context string for the next generation request.

        Args:
            turns: Conversation turns, oldest first
            next_prompt: The prompt being submitted

        Returns:
            History lines, the new user line and a trailing AI marker
        """
        lines = [
            f"{self._labels[turn.sender]}: {turn.text}"
            for turn in turns
            if turn.sender in self._labels
        ]
        lines.append(f"{self._labels[Sender.USER]}: {next_prompt}")
        lines.append(f"{self._labels[Sender.AI]}:")
        return "\n".join(lines)


_default_builder = HistoryBuilder()


def build_context(turns: Iterable[Turn], next_prompt: str) -> str:
    """Build a context string with the default role labels."""
    return _default_builder.build(turns, next_prompt)
