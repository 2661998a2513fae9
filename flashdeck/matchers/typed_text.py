"""
Typed-text matcher for write mode and written tests.

Grading is deliberately lenient:
1. Normalised strings equal -> correct
2. Otherwise, take the words of the normalised expected answer that are
   longer than 3 characters. If at least 70% of them occur as substrings
   of the normalised response -> correct
3. Anything else, including an answer that normalises to nothing -> incorrect

Write mode pairs this with a manual override for the false negatives the
heuristic still produces.
"""

from typing import Any

from . import MatcherType, register
from .base import normalize_answer

# Share of key words that must be present for partial credit
KEYWORD_MATCH_THRESHOLD = 0.7
# Words of this length or shorter are ignored as key words
MIN_KEYWORD_LENGTH = 3


def key_words(text: str) -> list[str]:
    """Words of a normalised answer that count towards partial credit."""
    return [w for w in text.split(" ") if len(w) > MIN_KEYWORD_LENGTH]


def keyword_ratio(expected: str, response: str) -> float:
    """Fraction of the expected key words found in the response (0.0 if none)."""
    expected_norm = normalize_answer(expected)
    response_norm = normalize_answer(response)
    words = key_words(expected_norm)
    if not words:
        return 0.0
    matched = [w for w in words if w in response_norm]
    return len(matched) / len(words)


def check_written_answer(expected: str, response: str) -> bool:
    """Grade a typed answer against the expected text. A blank answer is always wrong."""
    response_norm = normalize_answer(response)
    if not response_norm:
        return False
    if response_norm == normalize_answer(expected):
        return True
    return keyword_ratio(expected, response) >= KEYWORD_MATCH_THRESHOLD


@register(MatcherType.TYPED_TEXT)
class TypedTextMatcher:
    """Normalised exact match with keyword partial credit."""

    def matches(self, expected: str, response: Any) -> bool:
        if response is None:
            return False
        return check_written_answer(expected, str(response))
