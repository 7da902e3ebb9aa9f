"""
Eon - a human-friendly configuration format.

A superset of JSON with comments, optional commas, unquoted keys, sum-type
variants and arbitrary map keys. This package parses Eon text into values
or comment-preserving documents and formats them back into canonical text.
"""

from typing import Optional, Union

from .binding import dump, dumps, from_value, load, loads, to_value
from .error_handler import ErrorHandler
from .formatter import FormatOptions, Formatter
from .models import Document, Map, Value, Variant, make_variant, values_equal
from .parser import MAX_NESTING_DEPTH, Parser
from .types import BindingError, DocumentShape, ErrorKind, LexError, ParseError, Span

__version__ = "1.0.0"
__all__ = [
    "parse",
    "parse_value",
    "format",
    "format_value",
    "reformat",
    "loads",
    "load",
    "dumps",
    "dump",
    "to_value",
    "from_value",
    "Document",
    "DocumentShape",
    "Map",
    "Value",
    "Variant",
    "make_variant",
    "values_equal",
    "Parser",
    "Formatter",
    "FormatOptions",
    "ErrorHandler",
    "ParseError",
    "LexError",
    "BindingError",
    "ErrorKind",
    "Span",
    "MAX_NESTING_DEPTH",
]


def parse(text: Union[str, bytes]) -> Document:
    """Parse Eon text into a Document, keeping comments."""
    return Parser().parse(text)


def parse_value(text: Union[str, bytes]) -> Value:
    """Parse Eon text into a plain value."""
    return Parser().parse_value(text)


def format(document: Document, options: Optional[FormatOptions] = None) -> str:
    """Render a Document as canonical Eon text."""
    return Formatter(options).format_document(document)


def format_value(value: Value, options: Optional[FormatOptions] = None) -> str:
    """Render a plain value as canonical Eon text."""
    return Formatter(options).format_value(value)


def reformat(text: Union[str, bytes], options: Optional[FormatOptions] = None) -> str:
    """Parse and re-format Eon text, keeping comments."""
    return format(parse(text), options)
