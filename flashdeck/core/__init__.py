"""
Core types shared by every flashdeck component.

- errors: exception hierarchy
- models: validated Card / StudyOutcome / StudySession
- modes: study modes, directions, and their session policies
- ports: the record store protocol
"""

from .errors import (
    CardNotFound,
    FlashdeckError,
    InvalidSnapshot,
    InvalidTransition,
    ModeUnavailable,
    PersistenceUnavailable,
    SessionNotFound,
    SetNotFound,
)
from .models import Card, StudyOutcome, StudySession, validate_cards, validate_sessions
from .modes import (
    MIN_CHOICE_CARDS,
    Direction,
    ModePolicy,
    StudyMode,
    TestFormat,
    available_modes,
    ensure_mode_available,
    get_policy,
)
from .ports import RecordStore

__all__ = [
    "Card",
    "CardNotFound",
    "Direction",
    "FlashdeckError",
    "InvalidSnapshot",
    "InvalidTransition",
    "MIN_CHOICE_CARDS",
    "ModePolicy",
    "ModeUnavailable",
    "PersistenceUnavailable",
    "RecordStore",
    "SessionNotFound",
    "SetNotFound",
    "StudyMode",
    "StudyOutcome",
    "StudySession",
    "TestFormat",
    "available_modes",
    "ensure_mode_available",
    "get_policy",
    "validate_cards",
    "validate_sessions",
]
