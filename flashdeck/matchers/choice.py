"""
Choice matcher for multiple-choice modes (learn, test/multiple).

The response is the option text the learner picked. It must equal the
generated correct option exactly; no normalisation is applied.
"""

from typing import Any

from . import MatcherType, register


@register(MatcherType.CHOICE)
class ChoiceMatcher:
    """Exact string equality against the correct option."""

    def matches(self, expected: str, response: Any) -> bool:
        return isinstance(response, str) and response == expected
