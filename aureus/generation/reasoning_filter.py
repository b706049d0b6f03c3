"""Strip delimiter-marked reasoning segments from streamed text.

Delimiters can be split across any number of chunks, so the filter never
matches chunk by chunk. It keeps the whole raw text and recomputes the
visible projection from the start of the buffer on every chunk.
"""

import re
from enum import Enum

from aureus.config.models.generation import ReasoningConfig


class SegmentState(str, Enum):
    """Where the end of the raw buffer sits relative to reasoning segments.

    - OUTSIDE: Text is visible
    - INSIDE: An opening delimiter has no matching close yet
    """

    OUTSIDE = "outside"
    INSIDE = "inside"


class DelimiterFilter:
    """Incrementally project raw generated text onto its visible part.

    Every complete ``open ... close`` span, delimiters included, is removed.
    Text after an opening delimiter that has not been closed is hidden; if the
    stream ends in that state the trailing span is discarded for good.

    While streaming, a buffer tail that could still grow into an opening
    delimiter (``"<thi"``) is held back from the projection. ``finalize()``
    releases it when the stream ends before the delimiter completes.
    """

    def __init__(
        self,
        open_delimiter: str = "<think>",
        close_delimiter: str = "</think>",
        *,
        case_sensitive: bool = False,
    ) -> None:
        if not open_delimiter or not close_delimiter:
            raise ValueError("delimiters must be non-empty")
        if open_delimiter == close_delimiter:
            raise ValueError("open and close delimiters must differ")

        flags = 0 if case_sensitive else re.IGNORECASE
        self._open = open_delimiter
        self._open_re = re.compile(re.escape(open_delimiter), flags)
        self._close_re = re.compile(re.escape(close_delimiter), flags)
        self._case_sensitive = case_sensitive

        self._raw = ""
        self._state = SegmentState.OUTSIDE
        self._visible = ""
        self._reasoning: list[str] = []
        self._segments_removed = 0
        self._finalized = False

    @classmethod
    def from_config(cls, config: ReasoningConfig) -> "DelimiterFilter":
        return cls(
            config.open_delimiter,
            config.close_delimiter,
            case_sensitive=config.case_sensitive,
        )

    @property
    def raw_text(self) -> str:
        """Everything ingested so far, unmodified."""
        return self._raw

    @property
    def state(self) -> SegmentState:
        return self._state

    @property
    def inside_reasoning(self) -> bool:
        return self._state is SegmentState.INSIDE

    @property
    def visible_text(self) -> str:
        """Projection computed by the last ingest() or finalize()."""
        return self._visible

    @property
    def reasoning_segments(self) -> list[str]:
        """Hidden segment bodies, including a trailing unterminated one."""
        return list(self._reasoning)

    @property
    def segments_removed(self) -> int:
        """Number of complete segments excised so far."""
        return self._segments_removed

    @property
    def finalized(self) -> bool:
        return self._finalized

    def ingest(self, chunk: str) -> str:
        """Append a chunk and return the visible text so far."""
        if self._finalized:
            raise RuntimeError("cannot ingest after finalize()")
        if chunk:
            self._raw += chunk
        self._visible = self._project(final=False)
        return self._visible

    def finalize(self) -> str:
        """End the stream and return the final visible text.

        An unterminated trailing segment is dropped, not treated as an error.
        Calling finalize() again returns the same text.
        """
        if not self._finalized:
            self._visible = self._project(final=True)
            self._finalized = True
        return self._visible

    def _project(self, *, final: bool) -> str:
        raw = self.raw_text
        pieces: list[str] = []
        reasoning: list[str] = []
        removed = 0
        state = SegmentState.OUTSIDE
        pos = 0

        while True:
            opened = self._open_re.search(raw, pos)
            if opened is None:
                tail = raw[pos:]
                if not final:
                    tail = tail[: len(tail) - self._partial_open_length(tail)]
                pieces.append(tail)
                break

            pieces.append(raw[pos:opened.start()])
            closed = self._close_re.search(raw, opened.end())
            if closed is None:
                state = SegmentState.INSIDE
                reasoning.append(raw[opened.end():])
                break

            reasoning.append(raw[opened.end():closed.start()])
            removed += 1
            pos = closed.end()

        self._state = state
        self._reasoning = reasoning
        self._segments_removed = removed
        return "".join(pieces)

    def _partial_open_length(self, tail: str) -> int:
        """Length of the longest tail suffix that is a proper prefix of the opener."""
        longest = min(len(tail), len(self._open) - 1)
        for size in range(longest, 0, -1):
            suffix = tail[-size:]
            prefix = self._open[:size]
            if self._case_sensitive:
                matched = suffix == prefix
            else:
                matched = suffix.lower() == prefix.lower()
            if matched:
                return size
        return 0
