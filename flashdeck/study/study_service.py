"""
Study Service for flashdeck.

Provides high-level operations for the CLI (and any other front end):
- Load a validated snapshot of a set from the record store
- Per-card mastery and the set statistics screen
- Start a study session in a given mode
- Build multiple-choice options for the current card
- Finish a session and hand its outcome log to the record store

The record store is the only collaborator that persists anything. Writes
are best effort: if recording a completed session fails, the learner still
gets the local summary and the failure is logged.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from flashdeck.config import Settings, get_settings
from flashdeck.core.errors import (
    InvalidTransition,
    ModeUnavailable,
    PersistenceUnavailable,
    SessionNotFound,
)
from flashdeck.core.models import (
    Card,
    StudyOutcome,
    StudySession,
    utcnow,
    validate_cards,
    validate_sessions,
)
from flashdeck.core.modes import (
    Direction,
    ModePolicy,
    StudyMode,
    TestFormat,
    ensure_mode_available,
    get_policy,
)
from flashdeck.core.ports import RecordStore
from flashdeck.matchers import get_matcher
from flashdeck.matchers.distractors import build_choice_options

from .mastery_calculator import (
    CardMastery,
    MasteryEstimator,
    MasteryHints,
    SetStatistics,
    count_improved,
)
from .queue_builder import AdaptiveQueueBuilder, BiasStrategy
from .quiz_engine import QuizSession, SessionPhase, SessionStats


@dataclass
class StudySnapshot:
    """Read-only view of a set and its completed history for one learner."""

    set_id: str
    user_id: str
    cards: list[Card]
    sessions: list[StudySession]


@dataclass
class ActiveStudy:
    """A running study session together with what it was started from."""

    session_id: str | None  # None when the store could not open a record
    set_id: str
    user_id: str
    policy: ModePolicy
    strategy: BiasStrategy
    direction: Direction
    cards: list[Card]
    quiz: QuizSession
    mastery: dict[str, CardMastery] = field(default_factory=dict)  # as of the start
    started_at: datetime = field(default_factory=utcnow)
    report: StudyOutcomeReport | None = None

    @property
    def mode(self) -> StudyMode:
        return self.policy.mode

    @property
    def hints(self) -> MasteryHints:
        return MasteryEstimator.hints(self.mastery)

    def is_focus_card(self, card_id: str) -> bool:
        """A weighted session flags cards that needed practice when it started."""
        entry = self.mastery.get(card_id)
        if self.strategy is not BiasStrategy.WEIGHTED or entry is None:
            return False
        return entry.needs_practice


@dataclass(frozen=True)
class StudyOutcomeReport:
    """What the learner sees after a session ends."""

    persisted: bool
    stats: SessionStats
    outcomes: tuple[StudyOutcome, ...]
    phase: SessionPhase = SessionPhase.COMPLETE
    improved: int = 0  # cards answered correctly at least once this session


class StudyService:
    """
    High-level service for study operations.

    Coordinates between the record store, mastery estimator, queue builder
    and session engine.
    """

    def __init__(
        self,
        store: RecordStore,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize study service.

        Args:
            store: Record store to read snapshots from and write outcomes to
            settings: Settings (cached application settings if None)
            rng: Random source shared by queue building, retries and options
            clock: Monotonic clock for session timing
            now: Wall clock for retention decay
        """
        self.store = store
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.clock = clock
        self.now = now
        self.estimator = MasteryEstimator()

    def _user(self, user_id: str | None) -> str:
        return user_id or self.settings.default_user_id

    # ========================================
    # Snapshot and statistics
    # ========================================

    def snapshot(self, set_id: str, user_id: str | None = None) -> StudySnapshot:
        """
        Load and validate the cards and completed sessions of a set.

        Raises:
            InvalidSnapshot: If the store returned malformed records
            PersistenceUnavailable: If the store could not be read
        """
        user_id = self._user(user_id)
        cards = validate_cards(self.store.list_cards(set_id))
        sessions = validate_sessions(self.store.list_completed_sessions(set_id, user_id))
        return StudySnapshot(set_id=set_id, user_id=user_id, cards=cards, sessions=sessions)

    def mastery(self, set_id: str, user_id: str | None = None) -> dict[str, CardMastery]:
        """Per-card mastery for a learner's set."""
        snap = self.snapshot(set_id, user_id)
        return self.estimator.estimate(snap.cards, snap.sessions)

    def statistics(self, set_id: str, user_id: str | None = None) -> SetStatistics:
        """Progress summary (classification counts, accuracy, retention)."""
        snap = self.snapshot(set_id, user_id)
        return self.estimator.summarize(snap.cards, snap.sessions, now=self.now())

    # ========================================
    # Sessions
    # ========================================

    def start(
        self,
        set_id: str,
        user_id: str | None = None,
        mode: StudyMode | str = StudyMode.LEARN,
        strategy: BiasStrategy | str | None = None,
        direction: Direction | str = Direction.DEFINITION,
        test_format: TestFormat | str | None = None,
    ) -> ActiveStudy:
        """
        Start a study session.

        Args:
            set_id: Set to study
            user_id: Learner (settings default if None)
            mode: flashcards, learn, write or test
            strategy: uniform or weighted (settings default if None)
            direction: Which side of the card is the prompt
            test_format: written or multiple (test mode only)

        Returns:
            ActiveStudy wrapping a QuizSession in the presenting phase

        Raises:
            ModeUnavailable: If the set is too small for the mode
        """
        policy = get_policy(mode, test_format)
        strategy = BiasStrategy(strategy or self.settings.default_strategy)
        direction = Direction(direction)

        snap = self.snapshot(set_id, user_id)
        ensure_mode_available(policy, len(snap.cards))

        matcher = get_matcher(policy.matcher)
        if matcher is None:
            raise ModeUnavailable(f"No answer matcher registered for {policy.matcher}")

        mastery = self.estimator.estimate(snap.cards, snap.sessions)
        queue = AdaptiveQueueBuilder(rng=self.rng).build(snap.cards, mastery, strategy)

        session_id = None
        if policy.records_outcomes:
            try:
                session_id = self.store.create_session(set_id, snap.user_id, policy.label)
            except PersistenceUnavailable as e:
                logger.warning(f"Could not open a session record, results will not be saved: {e}")

        quiz = QuizSession(
            queue,
            matcher,
            strategy=strategy,
            retry_missed=policy.retry_missed,
            allow_override=policy.allow_override,
            direction=direction,
            rng=self.rng,
            clock=self.clock,
        )
        logger.debug(
            f"Started {policy.label} session {session_id} on set {set_id}: "
            f"{len(queue)} entries, {strategy.value}"
        )
        return ActiveStudy(
            session_id=session_id,
            set_id=set_id,
            user_id=snap.user_id,
            policy=policy,
            strategy=strategy,
            direction=direction,
            cards=snap.cards,
            quiz=quiz,
            mastery=mastery,
            started_at=self.now(),
        )

    def choices_for(self, active: ActiveStudy) -> list[str]:
        """
        Options for the card currently presented in a multiple-choice mode.

        Raises:
            InvalidTransition: If the mode has no options or no card is presented
        """
        phase = active.quiz.phase
        if not active.policy.uses_choices:
            raise InvalidTransition(
                "build choices", phase.value, f"{active.policy.label} is not multiple choice"
            )
        view = active.quiz.view()
        if view.card is None:
            raise InvalidTransition("build choices", phase.value)
        return build_choice_options(view.card, active.cards, active.direction, self.rng)

    def finish(self, active: ActiveStudy) -> StudyOutcomeReport:
        """
        Close out a finished session and record it if eligible.

        Outcomes are recorded once, and only for a completed session of a
        recording mode with at least one answer. Calling finish again
        returns the first report. If the store is down or no longer has
        the session, the report says so instead of raising.

        Raises:
            InvalidTransition: If the session is still running
        """
        if active.report is not None:
            return active.report

        quiz = active.quiz
        if not quiz.is_finished:
            raise InvalidTransition("finish", quiz.phase.value, "complete or abandon the session first")

        outcomes = quiz.persistable_outcomes()
        persisted = False
        if outcomes and active.policy.records_outcomes and active.session_id is not None:
            try:
                self.store.record_session_outcomes(active.session_id, outcomes)
                persisted = True
            except (PersistenceUnavailable, SessionNotFound) as e:
                logger.warning(f"Session {active.session_id} outcomes not saved: {e}")

        active.report = StudyOutcomeReport(
            persisted=persisted,
            stats=quiz.stats(),
            outcomes=outcomes,
            phase=quiz.phase,
            improved=count_improved(active.mastery, outcomes),
        )
        return active.report
