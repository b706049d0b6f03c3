"""Session orchestration: submissions, streaming and commits."""

from aureus.session.controller import (
    SessionController,
    SubmissionOutcome,
    SubmissionResult,
    SubmissionState,
)

__all__ = [
    "SessionController",
    "SubmissionOutcome",
    "SubmissionResult",
    "SubmissionState",
]
