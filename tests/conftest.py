"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from flashdeck.core.models import Card, StudyOutcome, StudySession  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (temporary SQLite database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "smoke" in path:
            item.add_marker(pytest.mark.smoke)


# ========================================
# Time
# ========================================

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


@pytest.fixture
def now():
    """Fixed reference time for retention decay."""
    return NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    """Seeded random source so queues and options are reproducible."""
    return random.Random(1234)


# ========================================
# Cards and history
# ========================================


def make_card(i: int, front: str | None = None, back: str | None = None) -> Card:
    return Card(
        id=f"c{i}",
        front=front or f"Question {i}",
        back=back or f"Answer {i}",
        position=i,
    )


def make_session(
    outcomes: list[tuple[str, bool]],
    completed_at: datetime | None = NOW,
    session_id: str = "s1",
    started_at: datetime | None = None,
) -> StudySession:
    """Build a session from (card_id, correct) pairs."""
    if started_at is None:
        started_at = (completed_at or NOW) - timedelta(minutes=10)
    return StudySession(
        id=session_id,
        user_id="u1",
        set_id="set1",
        mode="learn",
        started_at=started_at,
        completed_at=completed_at,
        outcomes=tuple(StudyOutcome(card_id=cid, correct=ok) for cid, ok in outcomes),
    )


@pytest.fixture
def sample_cards():
    """Five cards with distinct answers."""
    return [
        Card(id="c1", front="Capital of France?", back="Paris", position=0),
        Card(id="c2", front="Capital of Japan?", back="Tokyo", position=1),
        Card(id="c3", front="Capital of Kenya?", back="Nairobi", position=2),
        Card(id="c4", front="Capital of Peru?", back="Lima", position=3),
        Card(id="c5", front="Capital of Canada?", back="Ottawa", position=4),
    ]


@pytest.fixture
def three_cards():
    return [make_card(1), make_card(2), make_card(3)]


# ========================================
# Record store fake
# ========================================


class InMemoryRecordStore:
    """RecordStore double that keeps everything in dictionaries."""

    def __init__(self, cards=None, sessions=None, fail_writes: bool = False):
        self.cards = {"set1": list(cards or [])}
        self.sessions = list(sessions or [])
        self.fail_writes = fail_writes
        self.created: list[tuple[str, str, str]] = []
        self.recorded: list[tuple[str, tuple]] = []

    def list_cards(self, set_id):
        from flashdeck.core.errors import SetNotFound

        if set_id not in self.cards:
            raise SetNotFound(f"Set not found: {set_id}")
        return list(self.cards[set_id])

    def list_completed_sessions(self, set_id, user_id):
        return list(self.sessions)

    def create_session(self, set_id, user_id, mode):
        self.created.append((set_id, user_id, mode))
        return f"session-{len(self.created)}"

    def record_session_outcomes(self, session_id, outcomes):
        from flashdeck.core.errors import PersistenceUnavailable

        if self.fail_writes:
            raise PersistenceUnavailable("store offline")
        self.recorded.append((session_id, tuple(outcomes)))


@pytest.fixture
def make_store():
    return InMemoryRecordStore


@pytest.fixture
def card_factory():
    return make_card


@pytest.fixture
def session_factory():
    return make_session
