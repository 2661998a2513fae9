"""
Study modes for flashdeck.

Defines the four ways a set can be studied and the policy each one runs
the session engine with:

1. Flashcards - flip through cards and self-grade; nothing is recorded
2. Learn - multiple choice with retry of missed cards
3. Write - typed answers with fuzzy matching and a manual override
4. Test - one pass, timed, either written or multiple choice

Mode availability is decided here, at the mode-selection boundary, not
inside the matchers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import ModeUnavailable
from .models import Card


class StudyMode(str, Enum):
    """Study modes offered for a set."""

    FLASHCARDS = "flashcards"
    LEARN = "learn"
    WRITE = "write"
    TEST = "test"


class TestFormat(str, Enum):
    """Answer format for test mode."""

    __test__ = False  # not a pytest class

    WRITTEN = "written"
    MULTIPLE = "multiple"


class Direction(str, Enum):
    """Which side of the card is the prompt."""

    DEFINITION = "definition"  # show front, answer with back
    TERM = "term"  # show back, answer with front

    def prompt_of(self, card: Card) -> str:
        return card.front if self is Direction.DEFINITION else card.back

    def answer_of(self, card: Card) -> str:
        return card.back if self is Direction.DEFINITION else card.front


# Multiple choice needs the correct answer plus three distractors
MIN_CHOICE_CARDS = 4


@dataclass(frozen=True)
class ModePolicy:
    """How the session engine is configured for one mode."""

    mode: StudyMode
    matcher: str
    uses_choices: bool
    retry_missed: bool
    allow_override: bool
    records_outcomes: bool
    timed: bool = False
    test_format: TestFormat | None = None

    @property
    def min_cards(self) -> int:
        return MIN_CHOICE_CARDS if self.uses_choices else 1

    @property
    def label(self) -> str:
        if self.test_format is not None:
            return f"{self.mode.value}:{self.test_format.value}"
        return self.mode.value


_POLICIES: dict[tuple[StudyMode, TestFormat | None], ModePolicy] = {
    (StudyMode.FLASHCARDS, None): ModePolicy(
        mode=StudyMode.FLASHCARDS,
        matcher="self_report",
        uses_choices=False,
        retry_missed=False,
        allow_override=False,
        records_outcomes=False,
    ),
    (StudyMode.LEARN, None): ModePolicy(
        mode=StudyMode.LEARN,
        matcher="choice",
        uses_choices=True,
        retry_missed=True,
        allow_override=False,
        records_outcomes=True,
    ),
    (StudyMode.WRITE, None): ModePolicy(
        mode=StudyMode.WRITE,
        matcher="typed_text",
        uses_choices=False,
        retry_missed=True,
        allow_override=True,
        records_outcomes=True,
    ),
    (StudyMode.TEST, TestFormat.WRITTEN): ModePolicy(
        mode=StudyMode.TEST,
        matcher="typed_text",
        uses_choices=False,
        retry_missed=False,
        allow_override=False,
        records_outcomes=True,
        timed=True,
        test_format=TestFormat.WRITTEN,
    ),
    (StudyMode.TEST, TestFormat.MULTIPLE): ModePolicy(
        mode=StudyMode.TEST,
        matcher="choice",
        uses_choices=True,
        retry_missed=False,
        allow_override=False,
        records_outcomes=True,
        timed=True,
        test_format=TestFormat.MULTIPLE,
    ),
}


def get_policy(
    mode: StudyMode | str,
    test_format: TestFormat | str | None = None,
) -> ModePolicy:
    """
    Get the session policy for a mode.

    Test mode defaults to the written format; the format is ignored for
    every other mode.
    """
    mode = StudyMode(mode)
    if mode is StudyMode.TEST:
        fmt = TestFormat(test_format) if test_format is not None else TestFormat.WRITTEN
    else:
        fmt = None
    return _POLICIES[(mode, fmt)]


def available_modes(card_count: int) -> list[ModePolicy]:
    """List the mode policies a set of ``card_count`` cards can be studied with."""
    return [p for p in _POLICIES.values() if card_count >= p.min_cards]


def ensure_mode_available(policy: ModePolicy, card_count: int) -> None:
    """
    Raise if the set is too small for the mode.

    Raises:
        ModeUnavailable: If the set has fewer cards than the mode needs
    """
    if card_count < policy.min_cards:
        raise ModeUnavailable(
            f"{policy.label} needs at least {policy.min_cards} card(s), set has {card_count}"
        )
