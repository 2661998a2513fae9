"""
Quiz Session Engine - the state machine behind every study mode.

Phases:
    presenting --submit_answer--> feedback --advance--> presenting | complete
    presenting | feedback --abandon--> abandoned

On ``advance`` past the end of the queue, cards missed during the session
are appended again (once each for uniform sessions, twice each and
shuffled for weighted ones) until none remain. Modes that do not retry
(tests, flip cards) complete as soon as the queue is exhausted.

The engine never talks to persistence. Only a session that reaches
``complete`` hands back its outcome log; an abandoned one hands back
nothing, so partial sessions cannot skew mastery.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Union

from loguru import logger

from flashdeck.core.errors import InvalidTransition
from flashdeck.core.models import Card, StudyOutcome
from flashdeck.core.modes import Direction
from flashdeck.matchers.base import AnswerMatcher

from .retention_engine import round_half_up
from .queue_builder import BiasStrategy, QueueEntry

# Copies of each missed card appended per retry round, by strategy
RETRY_COPIES = {
    BiasStrategy.UNIFORM: 1,
    BiasStrategy.WEIGHTED: 2,
}


class SessionPhase(str, Enum):
    """Phase of a quiz session."""

    PRESENTING = "presenting"
    FEEDBACK = "feedback"
    COMPLETE = "complete"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class SessionStats:
    """Running score of a session."""

    correct: int = 0
    incorrect: int = 0
    elapsed_seconds: float = 0.0

    @property
    def answered(self) -> int:
        return self.correct + self.incorrect

    @property
    def percentage(self) -> int:
        if self.answered == 0:
            return 0
        return round_half_up(self.correct / self.answered * 100)

    @property
    def is_perfect(self) -> bool:
        return self.answered > 0 and self.incorrect == 0


# ========================================
# Tagged states
# ========================================


@dataclass(frozen=True)
class Presenting:
    """A card is shown and awaits an answer."""

    entry: QueueEntry
    index: int
    is_retry: bool = False
    phase = SessionPhase.PRESENTING


@dataclass(frozen=True)
class Feedback:
    """An answer was scored and the verdict is shown."""

    entry: QueueEntry
    index: int
    correct: bool
    response: Any = None
    is_retry: bool = False
    phase = SessionPhase.FEEDBACK


@dataclass(frozen=True)
class Complete:
    """Queue and retries are exhausted."""

    stats: SessionStats
    phase = SessionPhase.COMPLETE


@dataclass(frozen=True)
class Abandoned:
    """The learner quit; nothing will be recorded."""

    stats: SessionStats
    phase = SessionPhase.ABANDONED


SessionState = Union[Presenting, Feedback, Complete, Abandoned]


@dataclass(frozen=True)
class SessionView:
    """Everything a front end needs to render the current step."""

    phase: SessionPhase
    state: SessionState
    card: Card | None
    prompt: str | None
    expected: str | None
    is_retry: bool
    position: int  # 1-based index into the queue, 0 once finished
    queue_length: int
    stats: SessionStats
    last_correct: bool | None = None


class QuizSession:
    """
    One quiz session over a prepared queue.

    All transitions go through submit_answer / advance / override / abandon;
    each returns a fresh SessionView and raises InvalidTransition when called
    in the wrong phase.
    """

    def __init__(
        self,
        queue: Sequence[QueueEntry],
        matcher: AnswerMatcher,
        *,
        strategy: BiasStrategy | str = BiasStrategy.UNIFORM,
        retry_missed: bool = True,
        allow_override: bool = False,
        direction: Direction = Direction.DEFINITION,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.matcher = matcher
        self.strategy = BiasStrategy(strategy)
        self.retry_missed = retry_missed
        self.allow_override = allow_override
        self.direction = direction
        self.rng = rng or random.Random()
        self._clock = clock

        self.queue: list[QueueEntry] = list(queue)
        self._primary_length = len(self.queue)
        self._outcomes: list[StudyOutcome] = []
        self._missed: dict[str, Card] = {}  # insertion-ordered, one per card
        self._started_at = clock()
        self._elapsed: float | None = None

        self.state: SessionState
        if self.queue:
            self.state = Presenting(entry=self.queue[0], index=0)
        else:
            self._elapsed = 0.0
            self.state = Complete(stats=self.stats())

    # ========================================
    # Read-only views
    # ========================================

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def outcomes(self) -> tuple[StudyOutcome, ...]:
        """The in-memory outcome log, in answer order."""
        return tuple(self._outcomes)

    @property
    def missed_card_ids(self) -> list[str]:
        return list(self._missed)

    @property
    def is_finished(self) -> bool:
        return self.phase in (SessionPhase.COMPLETE, SessionPhase.ABANDONED)

    def stats(self) -> SessionStats:
        correct = sum(1 for o in self._outcomes if o.correct)
        if self._elapsed is not None:
            elapsed = self._elapsed
        else:
            elapsed = self._clock() - self._started_at
        return SessionStats(
            correct=correct,
            incorrect=len(self._outcomes) - correct,
            elapsed_seconds=elapsed,
        )

    def view(self) -> SessionView:
        state = self.state
        stats = self.stats()
        if isinstance(state, (Presenting, Feedback)):
            card = state.entry.card
            return SessionView(
                phase=state.phase,
                state=state,
                card=card,
                prompt=self.direction.prompt_of(card),
                expected=self.direction.answer_of(card),
                is_retry=state.is_retry,
                position=state.index + 1,
                queue_length=len(self.queue),
                stats=stats,
                last_correct=state.correct if isinstance(state, Feedback) else None,
            )
        return SessionView(
            phase=state.phase,
            state=state,
            card=None,
            prompt=None,
            expected=None,
            is_retry=False,
            position=0,
            queue_length=len(self.queue),
            stats=stats,
        )

    def persistable_outcomes(self) -> tuple[StudyOutcome, ...]:
        """Outcome log to hand to the record store: empty unless complete."""
        if self.phase is SessionPhase.COMPLETE:
            return self.outcomes
        return ()

    # ========================================
    # Transitions
    # ========================================

    def submit_answer(self, response: Any) -> SessionView:
        """
        Score an answer to the current card.

        Raises:
            InvalidTransition: If no card is awaiting an answer
        """
        state = self.state
        if not isinstance(state, Presenting):
            raise InvalidTransition("submit an answer", state.phase.value)

        card = state.entry.card
        correct = bool(self.matcher.matches(self.direction.answer_of(card), response))
        self._outcomes.append(StudyOutcome(card_id=card.id, correct=correct))
        if not correct and card.id not in self._missed:
            self._missed[card.id] = card

        self.state = Feedback(
            entry=state.entry,
            index=state.index,
            correct=correct,
            response=response,
            is_retry=state.is_retry,
        )
        return self.view()

    def advance(self) -> SessionView:
        """
        Move past the feedback screen.

        Raises:
            InvalidTransition: If not showing feedback
        """
        state = self.state
        if not isinstance(state, Feedback):
            raise InvalidTransition("advance", state.phase.value)

        next_index = state.index + 1
        if next_index >= len(self.queue) and self.retry_missed and self._missed:
            self._queue_retries()

        if next_index < len(self.queue):
            self.state = Presenting(
                entry=self.queue[next_index],
                index=next_index,
                is_retry=next_index >= self._primary_length,
            )
        else:
            self._finish()
            self.state = Complete(stats=self.stats())
            logger.debug(
                f"Quiz session complete: {self.state.stats.correct}/{self.state.stats.answered} correct"
            )
        return self.view()

    def override(self, card_id: str) -> SessionView:
        """
        Accept a typed answer the matcher rejected.

        Only the card whose rejection is on screen can be overridden. Its
        outcome (the latest in the log) flips from incorrect to correct and
        the card leaves the retry set. Other outcomes are untouched.

        Raises:
            InvalidTransition: If not showing feedback, the mode does not
                allow overrides, ``card_id`` is not the card on screen, or
                its answer was already accepted
        """
        state = self.state
        if not isinstance(state, Feedback):
            raise InvalidTransition("override", state.phase.value)
        if not self.allow_override:
            raise InvalidTransition(
                "override", state.phase.value, "this mode does not allow overrides"
            )
        if state.entry.card_id != card_id:
            raise InvalidTransition(
                "override", state.phase.value, f"card {card_id} is not the card being shown"
            )
        if state.correct:
            raise InvalidTransition(
                "override", state.phase.value, f"answer for card {card_id} was already accepted"
            )

        self._outcomes[-1] = StudyOutcome(card_id=card_id, correct=True)
        self._missed.pop(card_id, None)
        self.state = replace(state, correct=True)
        logger.debug(f"Override accepted for card {card_id}")
        return self.view()

    def abandon(self) -> SessionView:
        """
        Quit the session. Nothing it produced will be recorded.

        Raises:
            InvalidTransition: If the session already ended
        """
        state = self.state
        if self.is_finished:
            raise InvalidTransition("abandon", state.phase.value)

        self._finish()
        self.state = Abandoned(stats=self.stats())
        logger.debug(f"Quiz session abandoned after {len(self._outcomes)} answer(s)")
        return self.view()

    # ========================================
    # Internals
    # ========================================

    def _queue_retries(self) -> None:
        copies = RETRY_COPIES[self.strategy]
        block = [
            QueueEntry(card=card, is_repeat=True)
            for card in self._missed.values()
            for _ in range(copies)
        ]
        if self.strategy is BiasStrategy.WEIGHTED:
            self.rng.shuffle(block)
        self.queue.extend(block)
        logger.debug(f"Re-queued {len(self._missed)} missed card(s) as {len(block)} entries")
        self._missed.clear()

    def _finish(self) -> None:
        self._elapsed = self._clock() - self._started_at


def start_session(
    queue: Sequence[QueueEntry],
    matcher: AnswerMatcher,
    **options: Any,
) -> QuizSession:
    """Start a quiz session over ``queue`` (options as for QuizSession)."""
    return QuizSession(queue, matcher, **options)
