"""
Adaptive Queue Builder for quiz sessions.

Two bias strategies:
- uniform (regular): every card exactly once, fairly shuffled
- weighted (personalized): each card repeated ceil(weight * 2) times,
  shuffled, then capped at twice the deck size

Weighted queues lean towards high-weight (struggling or unseen) cards, but
the cap means any single card may still be left out of a given session.
Shuffling is Fisher-Yates via ``random.Random.shuffle``.
"""
from __future__ import annotations

import math
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from flashdeck.core.models import Card

from .mastery_calculator import CardMastery, MasteryEstimator


class BiasStrategy(str, Enum):
    """How a queue is biased towards difficult cards."""

    UNIFORM = "uniform"
    WEIGHTED = "weighted"

    @classmethod
    def _missing_(cls, value):
        # Names used on the mode selection screen
        aliases = {"regular": cls.UNIFORM, "personalized": cls.WEIGHTED}
        if isinstance(value, str):
            value = value.lower()
            for member in cls:
                if member.value == value:
                    return member
            return aliases.get(value)
        return None


@dataclass(frozen=True)
class QueueEntry:
    """A card in the session queue."""

    card: Card
    is_repeat: bool = False  # informational only

    @property
    def card_id(self) -> str:
        return self.card.id


@dataclass
class QueueConfig:
    """Configuration for weighted queue building."""

    copies_per_weight: float = 2.0
    max_length_factor: int = 2


class AdaptiveQueueBuilder:
    """
    Builds the ordered card sequence for a quiz session.

    The random source is injectable so sessions can be reproduced in tests.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        config: QueueConfig | None = None,
    ):
        """
        Initialize builder.

        Args:
            rng: Random source (fresh unseeded Random if None)
            config: QueueConfig or None for defaults
        """
        self.rng = rng or random.Random()
        self.config = config or QueueConfig()

    def copies_for(self, weight: float) -> int:
        """Number of times a card of ``weight`` enters the weighted working list."""
        return math.ceil(round(weight * self.config.copies_per_weight, 9))

    def uniform(self, cards: Sequence[Card]) -> list[QueueEntry]:
        """Return a fair random permutation of the cards."""
        queue = [QueueEntry(card=card) for card in cards]
        self.rng.shuffle(queue)
        return queue

    def weighted_working_list(
        self,
        cards: Sequence[Card],
        mastery: Mapping[str, CardMastery],
    ) -> list[QueueEntry]:
        """
        Expand each card into its weighted repetitions (unshuffled).

        Cards missing from the mastery map are treated as never studied.
        """
        working: list[QueueEntry] = []
        for card in cards:
            entry = mastery.get(card.id)
            weight = entry.weight if entry is not None else MasteryEstimator.UNSEEN_WEIGHT
            for i in range(self.copies_for(weight)):
                working.append(QueueEntry(card=card, is_repeat=i > 0))
        return working

    def weighted(
        self,
        cards: Sequence[Card],
        mastery: Mapping[str, CardMastery],
    ) -> list[QueueEntry]:
        """Return a shuffled, length-capped queue biased towards heavy cards."""
        working = self.weighted_working_list(cards, mastery)
        self.rng.shuffle(working)
        limit = min(len(working), len(cards) * self.config.max_length_factor)
        return working[:limit]

    def build(
        self,
        cards: Sequence[Card],
        mastery: Mapping[str, CardMastery],
        strategy: BiasStrategy | str = BiasStrategy.UNIFORM,
    ) -> list[QueueEntry]:
        """
        Build a session queue.

        Args:
            cards: Every card of the set
            mastery: Mastery map from the MasteryEstimator
            strategy: uniform or weighted

        Returns:
            Ordered queue entries (empty if there are no cards)
        """
        strategy = BiasStrategy(strategy)
        if not cards:
            return []

        if strategy is BiasStrategy.WEIGHTED:
            queue = self.weighted(cards, mastery)
        else:
            queue = self.uniform(cards)

        logger.debug(f"Built {strategy.value} queue: {len(queue)} entries from {len(cards)} cards")
        return queue


def build_queue(
    cards: Sequence[Card],
    mastery: Mapping[str, CardMastery],
    strategy: BiasStrategy | str = BiasStrategy.UNIFORM,
    rng: random.Random | None = None,
) -> list[QueueEntry]:
    """Build a session queue (see AdaptiveQueueBuilder.build)."""
    return AdaptiveQueueBuilder(rng=rng).build(cards, mastery, strategy)
