"""Unit tests for boundary validation of cards and sessions."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from flashdeck.core.errors import InvalidSnapshot
from flashdeck.core.models import Card, StudySession, validate_cards, validate_sessions


class TestCards:
    def test_camel_case_and_numeric_ids(self):
        (card,) = validate_cards(
            [{"id": 12, "front": "Q", "back": "A", "frontImage": "q.png", "position": 3}]
        )
        assert card.id == "12"
        assert card.front_image == "q.png"
        assert card.back_image is None
        assert card.position == 3

    def test_sorted_by_position(self):
        cards = validate_cards(
            [
                {"id": "b", "front": "2", "back": "2", "position": 1},
                {"id": "a", "front": "1", "back": "1", "position": 0},
            ]
        )
        assert [c.id for c in cards] == ["a", "b"]

    def test_accepts_models(self, sample_cards):
        assert validate_cards(reversed(sample_cards)) == sample_cards

    def test_missing_field(self):
        with pytest.raises(InvalidSnapshot, match="Invalid card"):
            validate_cards([{"id": "a", "front": "Q"}])

    def test_duplicate_ids(self):
        with pytest.raises(InvalidSnapshot, match="Duplicate"):
            validate_cards(
                [{"id": "a", "front": "1", "back": "1"}, {"id": "a", "front": "2", "back": "2"}]
            )

    def test_cards_are_frozen(self, sample_cards):
        with pytest.raises(ValidationError):
            sample_cards[0].front = "changed"


class TestSessions:
    def test_transport_shape(self):
        (session,) = validate_sessions(
            [
                {
                    "id": 7,
                    "userId": "u1",
                    "setId": 3,
                    "mode": "learn",
                    "startedAt": "2024-03-01T10:00:00",
                    "completedAt": "2024-03-01T10:05:00+02:00",
                    "results": [{"cardId": 1, "correct": True}, {"card_id": "2", "correct": 0}],
                }
            ]
        )
        assert session.id == "7"
        assert session.set_id == "3"
        assert session.started_at == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert session.completed_at == datetime(2024, 3, 1, 8, 5, tzinfo=timezone.utc)
        assert [(o.card_id, o.correct) for o in session.outcomes] == [("1", True), ("2", False)]
        assert session.is_completed

    def test_abandoned_session(self):
        session = StudySession(id="s", started_at=datetime(2024, 1, 1))
        assert not session.is_completed
        assert session.outcomes == ()

    def test_bad_timestamp(self):
        with pytest.raises(InvalidSnapshot):
            validate_sessions([{"id": "s", "startedAt": "yesterday"}])

    def test_card_equality_is_by_value(self):
        assert Card(id="x", front="f", back="b") == Card(id="x", front="f", back="b")
