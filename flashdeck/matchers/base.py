"""
Base protocol and text helpers for answer matchers.
"""

import re
from typing import Any, Protocol

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_answer(text: str) -> str:
    """Lower-case, trim, strip punctuation and collapse internal whitespace."""
    text = _PUNCTUATION.sub("", text.lower().strip())
    return _WHITESPACE.sub(" ", text).strip()


class AnswerMatcher(Protocol):
    """Protocol for answer matching strategies."""

    def matches(self, expected: str, response: Any) -> bool:
        """Return True if ``response`` counts as a correct answer to ``expected``."""
        ...
