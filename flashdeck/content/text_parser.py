"""
Text importer for flashcards.

Parses pasted notes with one card per line, front and back separated by a
delimiter:

    Capital of France? | Paris
    What is 2 + 2? | 4

Supported delimiters in the UI are pipe, tab, double colon and semicolon,
but any non-empty string works. Everything after the first delimiter is
the back, so answers may contain the delimiter themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from flashdeck.core.models import Card

COMMON_DELIMITERS = {
    "pipe": "|",
    "tab": "\t",
    "colon": "::",
    "semicolon": ";",
}


def resolve_delimiter(delimiter: str) -> str:
    """Map a delimiter name or escape (``tab``, ``\\t``) to the literal string."""
    if delimiter in COMMON_DELIMITERS:
        return COMMON_DELIMITERS[delimiter]
    if delimiter == "\\t":
        return "\t"
    if not delimiter:
        raise ValueError("Delimiter must not be empty")
    return delimiter


@dataclass
class ParsedCards:
    """Result of parsing an import text."""

    cards: list[Card] = field(default_factory=list)
    skipped_lines: list[int] = field(default_factory=list)  # 1-based

    @property
    def count(self) -> int:
        return len(self.cards)


class TextCardParser:
    """Parser for delimited flashcard text."""

    def __init__(self, delimiter: str = "|"):
        self.delimiter = resolve_delimiter(delimiter)

    def parse(self, text: str) -> ParsedCards:
        result = ParsedCards()
        position = 0
        for line_number, line in enumerate(text.splitlines(), 1):
            if not line.strip():
                continue

            parts = line.split(self.delimiter)
            if len(parts) < 2:
                result.skipped_lines.append(line_number)
                continue

            front = parts[0].strip()
            back = self.delimiter.join(parts[1:]).strip()
            result.cards.append(
                Card(id=f"import-{position}", front=front, back=back, position=position)
            )
            position += 1

        if result.skipped_lines:
            logger.debug(f"Skipped {len(result.skipped_lines)} line(s) without a delimiter")
        return result

    def parse_file(self, path: Path | str) -> ParsedCards:
        """Parse a UTF-8 text file."""
        return self.parse(Path(path).read_text(encoding="utf-8"))


def parse_cards(text: str, delimiter: str = "|") -> list[Card]:
    """Parse delimited text into cards (see TextCardParser)."""
    return TextCardParser(delimiter).parse(text).cards
