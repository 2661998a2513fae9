"""Card content import."""

from .text_parser import ParsedCards, TextCardParser, parse_cards, resolve_delimiter

__all__ = ["ParsedCards", "TextCardParser", "parse_cards", "resolve_delimiter"]
