"""
Answer matchers for flashdeck study sessions.

Each study mode decides correctness with its own strategy:
- choice: exact match against the generated correct option
- typed_text: normalised, lenient match for typed answers
- self_report: the learner grades a flipped card themselves
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import AnswerMatcher


class MatcherType(str, Enum):
    """Registered answer matching strategies."""
    CHOICE = "choice"
    TYPED_TEXT = "typed_text"
    SELF_REPORT = "self_report"


# Matcher registry - populated by @register decorator
MATCHERS: dict[MatcherType, "AnswerMatcher"] = {}


def register(matcher_type: MatcherType):
    """Decorator to register an answer matcher."""
    def decorator(cls):
        MATCHERS[matcher_type] = cls()
        return cls
    return decorator


def get_matcher(matcher_type: str | MatcherType) -> "AnswerMatcher | None":
    """Get the matcher for a strategy name."""
    if isinstance(matcher_type, str):
        try:
            matcher_type = MatcherType(matcher_type.lower())
        except ValueError:
            return None
    return MATCHERS.get(matcher_type)


# Import matchers to trigger registration
from . import choice
from . import self_report
from . import typed_text

__all__ = [
    "MatcherType",
    "MATCHERS",
    "get_matcher",
    "register",
]
