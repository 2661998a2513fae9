"""
Option generation for multiple-choice modes.

For a target card, up to three other cards of the same set are picked at
random and their answer text becomes the wrong options. Duplicates and
texts identical to the correct answer are dropped, so small sets or sets
with repeated answers yield fewer than four options. That is acceptable;
whether a set may use multiple choice at all is decided by the mode gate.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from flashdeck.core.models import Card
from flashdeck.core.modes import Direction

MAX_DISTRACTORS = 3


def pick_distractors(
    card: Card,
    cards: Sequence[Card],
    direction: Direction = Direction.DEFINITION,
    rng: random.Random | None = None,
    limit: int = MAX_DISTRACTORS,
) -> list[str]:
    """
    Pick distinct wrong answers for ``card`` from the rest of the set.

    Args:
        card: The card being asked
        cards: Every card of the set (the target may be included)
        direction: Which side is the answer
        rng: Random source (module-level random if None)
        limit: Maximum number of wrong answers

    Returns:
        Up to ``limit`` distinct answer texts, none equal to the correct one
    """
    rng = rng or random.Random()
    correct = direction.answer_of(card)
    others = [c for c in cards if c.id != card.id]
    sampled = rng.sample(others, min(limit, len(others)))

    wrong: list[str] = []
    for other in sampled:
        text = direction.answer_of(other)
        if text != correct and text not in wrong:
            wrong.append(text)
    return wrong


def build_choice_options(
    card: Card,
    cards: Sequence[Card],
    direction: Direction = Direction.DEFINITION,
    rng: random.Random | None = None,
) -> list[str]:
    """Build the shuffled option list (distractors plus the correct answer)."""
    rng = rng or random.Random()
    options = pick_distractors(card, cards, direction, rng)
    options.append(direction.answer_of(card))
    rng.shuffle(options)
    return options
