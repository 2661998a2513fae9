"""
SQLAlchemy models for the reference record store.

Tables:
- study_sets: named card collections owned by a learner
- cards: front/back pairs, ordered by position within a set
- study_sessions: one row per started session; completed_at stays NULL
  for abandoned sessions
- study_results: ordered outcome log of a completed session

Ids are uuid4 strings so the schema works unchanged on SQLite and PostgreSQL.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for flashdeck tables."""


class StudySetRecord(Base):
    """A named collection of cards."""

    __tablename__ = "study_sets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    cards: Mapped[list[CardRecord]] = relationship(
        back_populates="study_set",
        cascade="all, delete-orphan",
        order_by="CardRecord.position",
    )

    def __repr__(self) -> str:
        return f"<StudySetRecord id={self.id} title={self.title!r}>"


class CardRecord(Base):
    """A front/back pair belonging to one set."""

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    set_id: Mapped[str] = mapped_column(
        ForeignKey("study_sets.id", ondelete="CASCADE"), nullable=False
    )
    front: Mapped[str] = mapped_column(Text, nullable=False)
    back: Mapped[str] = mapped_column(Text, nullable=False)
    front_image: Mapped[str | None] = mapped_column(Text)
    back_image: Mapped[str | None] = mapped_column(Text)
    position: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    study_set: Mapped[StudySetRecord] = relationship(back_populates="cards")

    __table_args__ = (Index("idx_cards_set_position", "set_id", "position"),)

    def __repr__(self) -> str:
        return f"<CardRecord id={self.id} set={self.set_id} pos={self.position}>"


class StudySessionRecord(Base):
    """A study session; completed_at is set only when results are recorded."""

    __tablename__ = "study_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    set_id: Mapped[str] = mapped_column(
        ForeignKey("study_sets.id", ondelete="CASCADE"), nullable=False
    )
    mode: Mapped[str] = mapped_column(String(32), nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    results: Mapped[list[StudyResultRecord]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="StudyResultRecord.sequence",
    )

    __table_args__ = (
        Index("idx_sessions_set_user", "set_id", "user_id", "completed_at"),
    )

    def __repr__(self) -> str:
        return f"<StudySessionRecord id={self.id} mode={self.mode} completed={self.completed_at}>"


class StudyResultRecord(Base):
    """One answered presentation within a completed session."""

    __tablename__ = "study_results"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("study_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    card_id: Mapped[str] = mapped_column(String(36), nullable=False)
    correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    session: Mapped[StudySessionRecord] = relationship(back_populates="results")
