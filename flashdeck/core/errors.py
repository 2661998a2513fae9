"""
Exception hierarchy for flashdeck.

Empty inputs (no cards, no history) are not errors anywhere in the core;
estimators and the queue builder return empty results instead.
"""

from __future__ import annotations


class FlashdeckError(Exception):
    """Base class for all flashdeck errors."""


class InvalidTransition(FlashdeckError):
    """A session operation was called in a phase that does not allow it."""

    def __init__(self, operation: str, phase: str, detail: str | None = None):
        self.operation = operation
        self.phase = phase
        message = f"Cannot {operation} while session is {phase}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class PersistenceUnavailable(FlashdeckError):
    """The record store could not be reached or refused the write."""


class InvalidSnapshot(FlashdeckError):
    """Cards or sessions handed to the core failed validation."""


class ModeUnavailable(FlashdeckError):
    """A study mode was requested for a set that cannot support it."""


class SetNotFound(FlashdeckError):
    """No set with the given id exists in the record store."""


class SessionNotFound(FlashdeckError):
    """No study session with the given id exists in the record store."""


class CardNotFound(FlashdeckError):
    """No card with the given id exists in the record store."""
