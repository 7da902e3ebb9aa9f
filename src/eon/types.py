"""Core type definitions for Eon."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional


class TokenKind(Enum):
    """Enumeration of token kinds produced by the lexer."""
    OPEN_BRACE = "open brace '{'"
    CLOSE_BRACE = "close brace '}'"
    OPEN_LIST = "open bracket '['"
    CLOSE_LIST = "close bracket ']'"
    OPEN_PAREN = "open parenthesis '('"
    CLOSE_PAREN = "close parenthesis ')'"
    COLON = "colon ':'"
    COMMA = "comma ','"
    COMMENT = "comment"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    STRING = "string"


class StringFlavor(Enum):
    """The lexical form a string was written in."""
    BASIC = "basic"
    LITERAL = "literal"
    MULTILINE_BASIC = "multiline basic"
    MULTILINE_LITERAL = "multiline literal"
    IDENTIFIER = "identifier"

    @property
    def is_multiline(self) -> bool:
        return self in (StringFlavor.MULTILINE_BASIC, StringFlavor.MULTILINE_LITERAL)


class DocumentShape(Enum):
    """Top-level shape of a document."""
    MAP = "map"
    LIST = "list"
    VALUE = "value"


class ErrorKind(Enum):
    """Enumeration of parse error kinds."""
    UNTERMINATED_STRING = "UnterminatedString"
    INVALID_ESCAPE = "InvalidEscape"
    INVALID_NUMBER_LITERAL = "InvalidNumberLiteral"
    UNEXPECTED_CHARACTER = "UnexpectedCharacter"
    INVALID_UTF8 = "InvalidUtf8"
    UNEXPECTED_TOKEN = "UnexpectedToken"
    UNEXPECTED_END_OF_INPUT = "UnexpectedEndOfInput"
    NESTING_TOO_DEEP = "NestingTooDeep"
    DUPLICATE_KEY = "DuplicateKey"

    @property
    def category(self) -> str:
        """Return ``lexical``, ``syntactic`` or ``semantic``."""
        if self in _LEXICAL_KINDS:
            return "lexical"
        if self is ErrorKind.DUPLICATE_KEY:
            return "semantic"
        return "syntactic"


_LEXICAL_KINDS = frozenset({
    ErrorKind.UNTERMINATED_STRING,
    ErrorKind.INVALID_ESCAPE,
    ErrorKind.INVALID_NUMBER_LITERAL,
    ErrorKind.UNEXPECTED_CHARACTER,
    ErrorKind.INVALID_UTF8,
})


@dataclass(frozen=True)
class Span:
    """
    Location of a piece of source text.

    ``start`` and ``end`` are byte offsets into the UTF-8 encoded source,
    ``line`` and ``column`` are 1-based and refer to ``start``; ``end_line``
    is the line ``end`` falls on (0 when it is the same as ``line``).
    """
    start: int
    end: int
    line: int
    column: int
    end_line: int = 0

    @property
    def last_line(self) -> int:
        return self.end_line or self.line

    def __or__(self, other: 'Span') -> 'Span':
        """Smallest span covering both spans."""
        first = self if self.start <= other.start else other
        last = self if self.end >= other.end else other
        return Span(first.start, last.end, first.line, first.column, last.last_line)


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location."""
    kind: TokenKind
    text: str
    span: Span
    value: Any = None
    flavor: Optional[StringFlavor] = None


@dataclass
class FileResult:
    """Result of formatting or checking a single file."""
    path: str
    changed: bool
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class FormatRunResult:
    """Result of a format or check run over many files."""
    files: List[FileResult]
    check_only: bool
    missing_paths: List[str]

    @property
    def changed(self) -> List[FileResult]:
        return [result for result in self.files if result.changed]

    @property
    def failed(self) -> List[FileResult]:
        return [result for result in self.files if not result.success]

    @property
    def exit_code(self) -> int:
        if self.failed or self.missing_paths:
            return 1
        if self.check_only and self.changed:
            return 1
        return 0


class ParseError(Exception):
    """Raised when a document cannot be parsed."""

    def __init__(self, message: str, kind: ErrorKind, span: Span,
                 expected: Optional[str] = None,
                 related_span: Optional[Span] = None):
        super().__init__(f"{message} at line {span.line}, column {span.column}")
        self.message = message
        self.kind = kind
        self.span = span
        self.expected = expected
        self.related_span = related_span

    @property
    def offset(self) -> int:
        return self.span.start

    @property
    def line(self) -> int:
        return self.span.line

    @property
    def column(self) -> int:
        return self.span.column


class LexError(ParseError):
    """Raised for lexical errors (bad characters, strings, numbers or encoding)."""


class BindingError(Exception):
    """Raised when a value cannot be converted to or from a Python type."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
