"""Generation helpers: reasoning segment filtering and context building."""

from aureus.generation.history import HistoryBuilder, build_context
from aureus.generation.reasoning_filter import DelimiterFilter, SegmentState

__all__ = [
    "DelimiterFilter",
    "SegmentState",
    "HistoryBuilder",
    "build_context",
]
