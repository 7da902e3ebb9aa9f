"""Utility functions for Eon."""

from .numbers import format_number, parse_number
from .strings import is_valid_identifier, key_needs_quotes, quote_string

__all__ = [
    "format_number",
    "parse_number",
    "is_valid_identifier",
    "key_needs_quotes",
    "quote_string",
]
