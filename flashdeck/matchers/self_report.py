"""
Self-report matcher for flip-card mode.

The learner flips the card and says whether they knew it. The expected
text is shown, never compared.
"""

from typing import Any

from . import MatcherType, register

KNEW_IT_INPUTS = {"y", "yes", "k", "know", "knew", "got it", "correct", "1", "true"}


@register(MatcherType.SELF_REPORT)
class SelfReportMatcher:
    """Trust the learner's own verdict."""

    def matches(self, expected: str, response: Any) -> bool:
        if isinstance(response, bool):
            return response
        if isinstance(response, str):
            return response.strip().lower() in KNEW_IT_INPUTS
        return False
