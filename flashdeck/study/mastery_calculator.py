"""
Mastery Calculator for flashcard sets.

Turns the completed study history of a set into per-card mastery:
- correct / incorrect counts across all completed sessions
- last time the card was answered
- a difficulty weight that drives adaptive queues
- focus hints: cards weighted above 1.2 need practice, unattempted cards are new

Classification (used by both statistics and weighting):
- no attempts                                  -> not started
- >= 3 correct AND >= 80% accuracy             -> mastered
- otherwise                                    -> learning

Weights are recomputed from history on every call; nothing here is stored.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from flashdeck.core.models import Card, StudyOutcome, StudySession, utcnow

from .retention_engine import RetentionEstimate, RetentionEstimator, round_half_up


class MasteryStatus(str, Enum):
    """Learning state of a single card."""

    NOT_STARTED = "not_started"
    LEARNING = "learning"
    MASTERED = "mastered"


@dataclass
class CardMastery:
    """Derived correctness statistics for one card."""

    card_id: str
    correct_count: int = 0
    incorrect_count: int = 0
    last_seen: datetime | None = None
    weight: float = 2.0

    @property
    def attempts(self) -> int:
        return self.correct_count + self.incorrect_count

    @property
    def accuracy(self) -> float | None:
        """Share of correct answers (None if never attempted)."""
        if self.attempts == 0:
            return None
        return self.correct_count / self.attempts

    @property
    def status(self) -> MasteryStatus:
        return MasteryEstimator.classify(self.correct_count, self.incorrect_count)

    @property
    def needs_practice(self) -> bool:
        """Weight above the focus threshold (shown as a focus card)."""
        return self.weight > MasteryEstimator.HARD_WEIGHT


@dataclass(frozen=True)
class MasteryHints:
    """Counts shown before an adaptive session starts."""

    needs_practice: int
    new: int

    @property
    def all_mastered(self) -> bool:
        return self.needs_practice == 0 and self.new == 0


@dataclass
class SetStatistics:
    """Progress summary for a set, as shown on the stats screen."""

    total_cards: int
    mastered: int
    learning: int
    not_started: int
    mastered_percent: int
    learning_percent: int
    not_started_percent: int
    avg_accuracy: int  # 0-100
    study_sessions: int
    last_studied: datetime | None
    retention: RetentionEstimate
    hints: MasteryHints


class MasteryEstimator:
    """
    Estimates per-card mastery from completed study sessions.

    Weight formula (higher = needs more practice):
    - never attempted: 2.0
    - otherwise: max(0.2, 2.0 - accuracy * 1.5), +0.5 if incorrect > correct
    """

    # Classification thresholds
    MASTERY_MIN_CORRECT = 3
    MASTERY_MIN_ACCURACY = 0.8

    # Weight formula
    UNSEEN_WEIGHT = 2.0
    BASE_WEIGHT = 2.0
    ACCURACY_FACTOR = 1.5
    MIN_WEIGHT = 0.2
    STRUGGLE_BONUS = 0.5

    # Cards weighted above this are flagged for practice
    HARD_WEIGHT = 1.2

    @classmethod
    def classify(cls, correct_count: int, incorrect_count: int) -> MasteryStatus:
        """Classify a card from its answer counts."""
        attempts = correct_count + incorrect_count
        if attempts == 0:
            return MasteryStatus.NOT_STARTED
        if (
            correct_count >= cls.MASTERY_MIN_CORRECT
            and correct_count / attempts >= cls.MASTERY_MIN_ACCURACY
        ):
            return MasteryStatus.MASTERED
        return MasteryStatus.LEARNING

    @classmethod
    def compute_weight(cls, correct_count: int, incorrect_count: int) -> float:
        """
        Calculate the difficulty weight of a card.

        Depends only on the two totals, never on the order of attempts.

        Args:
            correct_count: Total correct answers
            incorrect_count: Total incorrect answers

        Returns:
            Weight >= 0.2; exactly 2.0 for a card never attempted
        """
        total = correct_count + incorrect_count
        if total == 0:
            return cls.UNSEEN_WEIGHT

        accuracy = correct_count / total
        weight = max(cls.MIN_WEIGHT, cls.BASE_WEIGHT - accuracy * cls.ACCURACY_FACTOR)
        if incorrect_count > correct_count:
            weight += cls.STRUGGLE_BONUS
        return weight

    @classmethod
    def hints(cls, mastery: Mapping[str, CardMastery]) -> MasteryHints:
        """Count cards that need practice and cards never attempted."""
        return MasteryHints(
            needs_practice=sum(1 for m in mastery.values() if m.needs_practice),
            new=sum(1 for m in mastery.values() if m.attempts == 0),
        )

    def estimate(
        self,
        cards: Sequence[Card],
        sessions: Iterable[StudySession],
    ) -> dict[str, CardMastery]:
        """
        Build the mastery map for a set.

        Only completed sessions count. Sessions are visited in ascending
        completion order (ties keep their input order) so that ``last_seen``
        is the completion time of the latest session that recorded the card.
        Outcomes for cards no longer in the set are ignored.

        Args:
            cards: Every card of the set
            sessions: The learner's study sessions for the set

        Returns:
            Mapping card id -> CardMastery (empty for an empty set)
        """
        mastery = {card.id: CardMastery(card_id=card.id) for card in cards}

        completed = sorted(
            (s for s in sessions if s.is_completed),
            key=lambda s: s.completed_at,
        )
        for session in completed:
            for outcome in session.outcomes:
                entry = mastery.get(outcome.card_id)
                if entry is None:
                    continue
                if outcome.correct:
                    entry.correct_count += 1
                else:
                    entry.incorrect_count += 1
                entry.last_seen = session.completed_at

        for entry in mastery.values():
            entry.weight = self.compute_weight(entry.correct_count, entry.incorrect_count)

        return mastery

    def summarize(
        self,
        cards: Sequence[Card],
        sessions: Iterable[StudySession],
        now: datetime | None = None,
    ) -> SetStatistics:
        """
        Calculate the progress summary for a set.

        Args:
            cards: Every card of the set
            sessions: The learner's study sessions for the set
            now: Reference time for retention decay (defaults to current UTC)

        Returns:
            SetStatistics with classification counts and retention estimate
        """
        completed = [s for s in sessions if s.is_completed]
        mastery = self.estimate(cards, completed)
        counts = count_by_status(mastery)
        total = len(cards)

        def percent(n: int) -> int:
            return round_half_up(n / total * 100) if total > 0 else 0

        last_studied = max((s.completed_at for s in completed), default=None)
        retention = estimate_retention(mastery, len(completed), last_studied, now)

        return SetStatistics(
            total_cards=total,
            mastered=counts[MasteryStatus.MASTERED],
            learning=counts[MasteryStatus.LEARNING],
            not_started=counts[MasteryStatus.NOT_STARTED],
            mastered_percent=percent(counts[MasteryStatus.MASTERED]),
            learning_percent=percent(counts[MasteryStatus.LEARNING]),
            not_started_percent=percent(counts[MasteryStatus.NOT_STARTED]),
            avg_accuracy=average_accuracy(mastery),
            study_sessions=len(completed),
            last_studied=last_studied,
            retention=retention,
            hints=self.hints(mastery),
        )


def count_by_status(mastery: Mapping[str, CardMastery]) -> dict[MasteryStatus, int]:
    """Count cards per MasteryStatus (every status present, possibly 0)."""
    counts = {status: 0 for status in MasteryStatus}
    for entry in mastery.values():
        counts[entry.status] += 1
    return counts


def average_accuracy(mastery: Mapping[str, CardMastery]) -> int:
    """Overall accuracy percentage across all attempts (0 with no attempts)."""
    correct = sum(m.correct_count for m in mastery.values())
    attempts = sum(m.attempts for m in mastery.values())
    if attempts == 0:
        return 0
    return round_half_up(correct / attempts * 100)


def estimate_mastery(
    cards: Sequence[Card],
    sessions: Iterable[StudySession],
) -> dict[str, CardMastery]:
    """Build the mastery map for a set (see MasteryEstimator.estimate)."""
    return MasteryEstimator().estimate(cards, sessions)


def estimate_retention(
    mastery: Mapping[str, CardMastery],
    session_count: int,
    last_session_at: datetime | None,
    now: datetime | None = None,
) -> RetentionEstimate:
    """
    Estimate retention for a set from its mastery map.

    With no completed sessions nothing has been learned yet, so the estimate
    is zero days (status Weak).
    """
    if session_count == 0 or last_session_at is None:
        return RetentionEstimate(total_retention_days=0, remaining_days=0, days_since_study=0)

    mastered = count_by_status(mastery)[MasteryStatus.MASTERED]
    return RetentionEstimator().estimate(
        mastered_count=mastered,
        avg_accuracy=average_accuracy(mastery),
        session_count=session_count,
        last_session_at=last_session_at,
        now=now or utcnow(),
    )


def summarize_set(
    cards: Sequence[Card],
    sessions: Iterable[StudySession],
    now: datetime | None = None,
) -> SetStatistics:
    """Calculate the progress summary for a set (see MasteryEstimator.summarize)."""
    return MasteryEstimator().summarize(cards, sessions, now)


def count_improved(
    before: Mapping[str, CardMastery],
    outcomes: Iterable[StudyOutcome],
) -> int:
    """Cards of the set whose correct count rose with ``outcomes``."""
    return len({o.card_id for o in outcomes if o.correct and o.card_id in before})
