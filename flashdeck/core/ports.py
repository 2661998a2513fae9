"""
Port for the persistence collaborator.

The study core never stores anything itself. It reads a snapshot of cards
and completed sessions, and hands back an outcome log once a session
completes. Any record store (the bundled SQLAlchemy one, an HTTP client,
an in-memory fake) satisfies this protocol.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Mapping, Protocol

from .models import Card, StudyOutcome, StudySession


class RecordStore(Protocol):
    """Protocol for the record store consumed by the study core."""

    def list_cards(self, set_id: str) -> Sequence[Card | Mapping[str, Any]]:
        """Return every card in a set."""
        ...

    def list_completed_sessions(
        self, set_id: str, user_id: str
    ) -> Sequence[StudySession | Mapping[str, Any]]:
        """Return the learner's completed sessions for a set, with outcomes."""
        ...

    def create_session(self, set_id: str, user_id: str, mode: str) -> str:
        """Open a session record and return its id."""
        ...

    def record_session_outcomes(self, session_id: str, outcomes: Sequence[StudyOutcome]) -> None:
        """
        Store the outcome log of a completed session and mark it completed.

        Raises:
            PersistenceUnavailable: If the write fails
        """
        ...
