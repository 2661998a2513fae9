"""
Retention Engine - predicted memory retention for a set.

A deliberately simple heuristic, not a spaced-repetition scheduler. Base
stability starts at 1 day and grows with:
- mastered cards (0.5 day each)
- overall accuracy (up to 2 days)
- completed sessions (0.3 day each, capped at 3 days)

The prediction counts from the most recent completed session and decays
one day per elapsed day.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from flashdeck.core.models import ensure_utc, utcnow


def round_half_up(value: float) -> int:
    """Round .5 up (round(5.5) == 6, round(4.5) == 5), ignoring float noise."""
    return int(math.floor(round(value, 9) + 0.5))


class RetentionStatus(str, Enum):
    """Qualitative retention status for the remaining days."""

    STRONG = "Strong"
    GOOD = "Good"
    FADING = "Fading"
    WEAK = "Weak"

    @classmethod
    def from_remaining_days(cls, days: int) -> "RetentionStatus":
        if days >= 5:
            return cls.STRONG
        if days >= 2:
            return cls.GOOD
        if days >= 1:
            return cls.FADING
        return cls.WEAK

    @property
    def message(self) -> str:
        return _STATUS_MESSAGES[self]


_STATUS_MESSAGES = {
    RetentionStatus.STRONG: "Your memory is solid. Review when convenient.",
    RetentionStatus.GOOD: "Consider reviewing in the next few days.",
    RetentionStatus.FADING: "Review soon to maintain memory.",
    RetentionStatus.WEAK: "Review now to prevent forgetting.",
}


@dataclass(frozen=True)
class RetentionEstimate:
    """Predicted retention for a set."""

    total_retention_days: int
    remaining_days: int
    days_since_study: int

    @property
    def status(self) -> RetentionStatus:
        return RetentionStatus.from_remaining_days(self.remaining_days)


class RetentionEstimator:
    """Heuristic retention predictor."""

    BASE_STABILITY = 1.0
    MASTERY_BONUS_PER_CARD = 0.5
    ACCURACY_BONUS_MAX = 2.0
    SESSION_BONUS_PER_SESSION = 0.3
    SESSION_BONUS_CAP = 3.0

    def total_retention_days(
        self,
        mastered_count: int,
        avg_accuracy: float,
        session_count: int,
    ) -> int:
        """
        Predicted days of retention counted from the last session.

        Args:
            mastered_count: Number of mastered cards in the set
            avg_accuracy: Average accuracy percentage (0-100)
            session_count: Number of completed sessions

        Returns:
            Days, rounded half-up
        """
        mastery_bonus = mastered_count * self.MASTERY_BONUS_PER_CARD
        accuracy_bonus = (avg_accuracy / 100) * self.ACCURACY_BONUS_MAX
        session_bonus = min(session_count * self.SESSION_BONUS_PER_SESSION, self.SESSION_BONUS_CAP)
        total = self.BASE_STABILITY + mastery_bonus + accuracy_bonus + session_bonus
        return round_half_up(total)

    @staticmethod
    def days_since(last_session_at: datetime | None, now: datetime) -> int:
        """Whole days elapsed since the last session (0 if none, or if in the future)."""
        if last_session_at is None:
            return 0
        elapsed = ensure_utc(now) - ensure_utc(last_session_at)
        return max(0, elapsed // timedelta(days=1))

    def estimate(
        self,
        mastered_count: int,
        avg_accuracy: float,
        session_count: int,
        last_session_at: datetime | None,
        now: datetime | None = None,
    ) -> RetentionEstimate:
        """Compute total and remaining retention days."""
        total = self.total_retention_days(mastered_count, avg_accuracy, session_count)
        days_since = self.days_since(last_session_at, now or utcnow())
        return RetentionEstimate(
            total_retention_days=total,
            remaining_days=max(0, total - days_since),
            days_since_study=days_since,
        )
