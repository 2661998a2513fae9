"""
SQLAlchemy-backed record store.

Implements the RecordStore protocol consumed by the study core, plus the
set and card CRUD the CLI needs. Every database failure surfaces as
PersistenceUnavailable so callers never depend on SQLAlchemy exceptions.
"""
from __future__ import annotations

from collections.abc import Generator, Iterable, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from flashdeck.core.errors import (
    CardNotFound,
    PersistenceUnavailable,
    SessionNotFound,
    SetNotFound,
)
from flashdeck.core.models import Card, StudyOutcome, StudySession, ensure_utc, utcnow
from flashdeck.db.database import get_session_factory, session_scope
from flashdeck.db.models import CardRecord, StudyResultRecord, StudySessionRecord, StudySetRecord


@dataclass
class StudySetSummary:
    """A set as listed to its owner."""

    id: str
    title: str
    description: str | None
    card_count: int
    created_at: datetime | None


def _to_card(record: CardRecord) -> Card:
    return Card(
        id=record.id,
        front=record.front,
        back=record.back,
        front_image=record.front_image,
        back_image=record.back_image,
        position=record.position,
    )


def _to_session(record: StudySessionRecord) -> StudySession:
    return StudySession(
        id=record.id,
        user_id=record.user_id,
        set_id=record.set_id,
        mode=record.mode,
        started_at=ensure_utc(record.started_at),
        completed_at=ensure_utc(record.completed_at),
        outcomes=tuple(
            StudyOutcome(card_id=r.card_id, correct=r.correct) for r in record.results
        ),
    )


class SqlRecordStore:
    """Record store over a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._factory = session_factory or get_session_factory()

    @contextmanager
    def _scope(self, operation: str) -> Generator[Session, None, None]:
        try:
            with session_scope(self._factory) as session:
                yield session
        except SQLAlchemyError as e:
            logger.warning(f"Record store failure during {operation}: {e}")
            raise PersistenceUnavailable(f"{operation} failed: {e}") from e

    @staticmethod
    def _require_set(session: Session, set_id: str) -> StudySetRecord:
        study_set = session.get(StudySetRecord, set_id)
        if study_set is None:
            raise SetNotFound(f"Set not found: {set_id}")
        return study_set

    # ========================================
    # Sets
    # ========================================

    def create_set(
        self,
        user_id: str,
        title: str,
        description: str | None = None,
        is_public: bool = False,
    ) -> str:
        """Create an empty set and return its id."""
        with self._scope("create_set") as session:
            record = StudySetRecord(
                user_id=user_id, title=title, description=description, is_public=is_public
            )
            session.add(record)
            session.flush()
            logger.info(f"Created set {record.id} ({title!r})")
            return record.id

    def list_sets(self, user_id: str) -> list[StudySetSummary]:
        """List a learner's sets with card counts, newest first."""
        with self._scope("list_sets") as session:
            card_count = (
                select(func.count(CardRecord.id))
                .where(CardRecord.set_id == StudySetRecord.id)
                .correlate(StudySetRecord)
                .scalar_subquery()
            )
            rows = session.execute(
                select(StudySetRecord, card_count)
                .where(StudySetRecord.user_id == user_id)
                .order_by(StudySetRecord.created_at.desc())
            ).all()
            return [
                StudySetSummary(
                    id=s.id,
                    title=s.title,
                    description=s.description,
                    card_count=count,
                    created_at=ensure_utc(s.created_at),
                )
                for s, count in rows
            ]

    def get_set(self, set_id: str) -> StudySetSummary:
        """
        Get one set.

        Raises:
            SetNotFound: If the set does not exist
        """
        with self._scope("get_set") as session:
            record = self._require_set(session, set_id)
            return StudySetSummary(
                id=record.id,
                title=record.title,
                description=record.description,
                card_count=len(record.cards),
                created_at=ensure_utc(record.created_at),
            )

    # ========================================
    # Cards
    # ========================================

    def list_cards(self, set_id: str) -> list[Card]:
        """Return every card of a set in position order."""
        with self._scope("list_cards") as session:
            self._require_set(session, set_id)
            records = session.scalars(
                select(CardRecord)
                .where(CardRecord.set_id == set_id)
                .order_by(CardRecord.position, CardRecord.created_at)
            ).all()
            return [_to_card(r) for r in records]

    def add_cards(self, set_id: str, cards: Iterable[Card]) -> list[str]:
        """
        Append cards to a set, after its current last position.

        Incoming ids are ignored; new ids are assigned.
        """
        with self._scope("add_cards") as session:
            self._require_set(session, set_id)
            last = session.scalar(
                select(func.max(CardRecord.position)).where(CardRecord.set_id == set_id)
            )
            next_position = 0 if last is None else last + 1

            records = []
            for offset, card in enumerate(cards):
                record = CardRecord(
                    set_id=set_id,
                    front=card.front,
                    back=card.back,
                    front_image=card.front_image,
                    back_image=card.back_image,
                    position=next_position + offset,
                )
                session.add(record)
                records.append(record)
            session.flush()
            logger.info(f"Added {len(records)} card(s) to set {set_id}")
            return [r.id for r in records]

    def update_card(
        self,
        card_id: str,
        front: str | None = None,
        back: str | None = None,
    ) -> Card:
        """Edit a card's text; fields left as None are unchanged."""
        with self._scope("update_card") as session:
            record = session.get(CardRecord, card_id)
            if record is None:
                raise CardNotFound(f"Card not found: {card_id}")
            if front is not None:
                record.front = front
            if back is not None:
                record.back = back
            session.flush()
            return _to_card(record)

    def delete_card(self, card_id: str) -> bool:
        """Delete a card. Returns False if it did not exist."""
        with self._scope("delete_card") as session:
            record = session.get(CardRecord, card_id)
            if record is None:
                return False
            session.delete(record)
            return True

    # ========================================
    # Sessions
    # ========================================

    def create_session(self, set_id: str, user_id: str, mode: str) -> str:
        """Open a session record and return its id."""
        with self._scope("create_session") as session:
            self._require_set(session, set_id)
            record = StudySessionRecord(set_id=set_id, user_id=user_id, mode=mode)
            session.add(record)
            session.flush()
            logger.debug(f"Started session {record.id} ({mode}) on set {set_id}")
            return record.id

    def list_completed_sessions(self, set_id: str, user_id: str) -> list[StudySession]:
        """Completed sessions of a learner on a set, oldest completion first."""
        with self._scope("list_completed_sessions") as session:
            records = session.scalars(
                select(StudySessionRecord)
                .where(
                    StudySessionRecord.set_id == set_id,
                    StudySessionRecord.user_id == user_id,
                    StudySessionRecord.completed_at.is_not(None),
                )
                .order_by(StudySessionRecord.completed_at, StudySessionRecord.started_at)
                .options(selectinload(StudySessionRecord.results))
            ).all()
            return [_to_session(r) for r in records]

    def record_session_outcomes(
        self,
        session_id: str,
        outcomes: Sequence[StudyOutcome],
        completed_at: datetime | None = None,
    ) -> None:
        """
        Store a completed session's outcome log and stamp its completion.

        Raises:
            SessionNotFound: If the session does not exist
            PersistenceUnavailable: If the write fails
        """
        with self._scope("record_session_outcomes") as session:
            record = session.get(StudySessionRecord, session_id)
            if record is None:
                raise SessionNotFound(f"Session not found: {session_id}")

            for sequence, outcome in enumerate(outcomes):
                session.add(
                    StudyResultRecord(
                        session_id=session_id,
                        card_id=outcome.card_id,
                        correct=outcome.correct,
                        sequence=sequence,
                    )
                )
            record.completed_at = completed_at or utcnow()
            logger.debug(f"Recorded {len(outcomes)} outcome(s) for session {session_id}")
