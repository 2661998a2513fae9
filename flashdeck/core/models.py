"""
Boundary models for the study core.

Cards and session history arrive from the record store (or the transport
layer) as loosely-typed mappings. They are validated here into frozen
pydantic models before any estimator sees them:

- Card: front/back pair owned by a set, ordered by ``position``
- StudyOutcome: (card_id, correct) produced by one answered presentation
- StudySession: one study session with its ordered outcome log

Both snake_case and camelCase keys are accepted, numeric ids are coerced to
strings, and timestamps are normalised to timezone-aware UTC.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidSnapshot


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class Card(_FrozenModel):
    """A front/back question-answer pair."""

    id: str = Field(min_length=1)
    front: str
    back: str
    front_image: str | None = Field(
        default=None, validation_alias=AliasChoices("front_image", "frontImage")
    )
    back_image: str | None = Field(
        default=None, validation_alias=AliasChoices("back_image", "backImage")
    )
    position: int = 0


class StudyOutcome(_FrozenModel):
    """Result of one answered presentation."""

    card_id: str = Field(min_length=1, validation_alias=AliasChoices("card_id", "cardId"))
    correct: bool


class StudySession(_FrozenModel):
    """A study session and its outcome log, as recorded by the record store."""

    id: str = Field(min_length=1)
    user_id: str = Field(default="", validation_alias=AliasChoices("user_id", "userId"))
    set_id: str = Field(default="", validation_alias=AliasChoices("set_id", "setId"))
    mode: str = ""
    started_at: datetime = Field(validation_alias=AliasChoices("started_at", "startedAt"))
    completed_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("completed_at", "completedAt")
    )
    outcomes: tuple[StudyOutcome, ...] = Field(
        default=(), validation_alias=AliasChoices("outcomes", "results")
    )

    @field_validator("started_at", "completed_at")
    @classmethod
    def _to_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @property
    def is_completed(self) -> bool:
        """Abandoned sessions never receive a completion timestamp."""
        return self.completed_at is not None


def validate_cards(raw: Iterable[Card | Mapping[str, Any]]) -> list[Card]:
    """
    Validate raw card records and return them in display order.

    Raises:
        InvalidSnapshot: If any record is malformed or ids repeat
    """
    try:
        cards = [c if isinstance(c, Card) else Card.model_validate(c) for c in raw]
    except ValidationError as e:
        raise InvalidSnapshot(f"Invalid card record: {e}") from e

    seen: set[str] = set()
    for card in cards:
        if card.id in seen:
            raise InvalidSnapshot(f"Duplicate card id in set: {card.id}")
        seen.add(card.id)

    return sorted(cards, key=lambda c: c.position)


def validate_sessions(raw: Iterable[StudySession | Mapping[str, Any]]) -> list[StudySession]:
    """
    Validate raw session records.

    Raises:
        InvalidSnapshot: If any record is malformed
    """
    try:
        return [
            s if isinstance(s, StudySession) else StudySession.model_validate(s) for s in raw
        ]
    except ValidationError as e:
        raise InvalidSnapshot(f"Invalid study session record: {e}") from e
