"""Lexer: turns Eon source text into tokens."""

import logging
from typing import Iterator, List, Optional, Tuple

from .types import ErrorKind, LexError, Span, StringFlavor, Token, TokenKind
from .utils.numbers import parse_number

_PUNCTUATION = {
    "{": TokenKind.OPEN_BRACE,
    "}": TokenKind.CLOSE_BRACE,
    "[": TokenKind.OPEN_LIST,
    "]": TokenKind.CLOSE_LIST,
    "(": TokenKind.OPEN_PAREN,
    ")": TokenKind.CLOSE_PAREN,
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
}

_WHITESPACE = " \t\n\r\f"
_IDENTIFIER_START = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_"
_IDENTIFIER_CHARS = _IDENTIFIER_START + "0123456789"
_NUMBER_START = "+-.0123456789"
_NUMBER_CHARS = _IDENTIFIER_CHARS + ".+-"
_HEX_DIGITS = "0123456789abcdefABCDEF"

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "0": "\0",
    '"': '"',
    "'": "'",
    "\\": "\\",
    "/": "/",
}

# (char offset, byte offset, line, column)
_Mark = Tuple[int, int, int, int]


def _utf8_len(ch: str) -> int:
    code = ord(ch)
    if code < 0x80:
        return 1
    if code < 0x800:
        return 2
    if code < 0x10000:
        return 3
    return 4


class Lexer:
    """
    Single forward pass over the source producing tokens lazily.

    Comments are produced as ``COMMENT`` tokens so the parser can attach them
    to values. Whitespace is skipped.
    """

    def __init__(self, source: str, logger: Optional[logging.Logger] = None):
        """
        Initialize the lexer.

        Args:
            source: Decoded document text
            logger: Optional logger instance
        """
        self.source = source
        self.length = len(source)
        self.logger = logger or logging.getLogger(__name__)

        self.pos = 0
        self.byte_pos = 0
        self.line = 1
        self.col = 1

    def tokens(self) -> Iterator[Token]:
        """
        Yield the tokens of the source in order.

        Raises:
            LexError: At the first malformed token
        """
        while True:
            self._skip_whitespace()
            if self.pos >= self.length:
                return
            yield self._next_token()

    def end_span(self) -> Span:
        """Zero-width span at the current position (the end once exhausted)."""
        return Span(self.byte_pos, self.byte_pos, self.line, self.col)

    # ------------------------------------------------------------------
    # Cursor

    def peek(self, offset: int = 0) -> Optional[str]:
        pos = self.pos + offset
        if pos >= self.length:
            return None
        return self.source[pos]

    def advance(self) -> Optional[str]:
        if self.pos >= self.length:
            return None
        ch = self.source[self.pos]
        self.pos += 1
        self.byte_pos += _utf8_len(ch)
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _mark(self) -> _Mark:
        return (self.pos, self.byte_pos, self.line, self.col)

    def _span_from(self, mark: _Mark) -> Span:
        end_line = self.line if self.line != mark[2] else 0
        return Span(mark[1], self.byte_pos, mark[2], mark[3], end_line)

    def _error(self, kind: ErrorKind, message: str, mark: Optional[_Mark] = None):
        span = self._span_from(mark) if mark is not None else self.end_span()
        raise LexError(message, kind, span)

    def _skip_whitespace(self) -> None:
        while self.pos < self.length and self.source[self.pos] in _WHITESPACE:
            self.advance()

    # ------------------------------------------------------------------
    # Tokens

    def _next_token(self) -> Token:
        ch = self.source[self.pos]
        mark = self._mark()

        if ch in _PUNCTUATION:
            self.advance()
            return Token(_PUNCTUATION[ch], ch, self._span_from(mark))

        if ch == "/":
            if self.peek(1) != "/":
                self.advance()
                self._error(ErrorKind.UNEXPECTED_CHARACTER,
                            "Unexpected character '/'. Comments start with '//'", mark)
            return self._read_comment(mark)

        if ch == '"' or ch == "'":
            return self._read_string(mark)

        if ch in _NUMBER_START:
            return self._read_number(mark)

        if ch in _IDENTIFIER_START:
            while self.pos < self.length and self.source[self.pos] in _IDENTIFIER_CHARS:
                self.advance()
            return Token(TokenKind.IDENTIFIER, self.source[mark[0]:self.pos], self._span_from(mark))

        self.advance()
        self._error(ErrorKind.UNEXPECTED_CHARACTER, f"Unexpected character {ch!r}", mark)

    def _read_comment(self, mark: _Mark) -> Token:
        while self.pos < self.length and self.source[self.pos] != "\n":
            self.advance()
        text = self.source[mark[0]:self.pos].rstrip("\r")
        return Token(TokenKind.COMMENT, text, self._span_from(mark))

    def _read_number(self, mark: _Mark) -> Token:
        while self.pos < self.length and self.source[self.pos] in _NUMBER_CHARS:
            self.advance()
        text = self.source[mark[0]:self.pos]
        try:
            value = parse_number(text)
        except ValueError as e:
            self._error(ErrorKind.INVALID_NUMBER_LITERAL,
                        f"Invalid number {text!r}: {e}", mark)
        return Token(TokenKind.NUMBER, text, self._span_from(mark), value=value)

    def _read_string(self, mark: _Mark) -> Token:
        quote = self.source[self.pos]
        triple = self.source.startswith(quote * 3, self.pos)

        if quote == '"' and triple:
            flavor = StringFlavor.MULTILINE_BASIC
            value = self._read_multiline_basic(mark)
        elif quote == '"':
            flavor = StringFlavor.BASIC
            value = self._read_basic(mark)
        elif triple:
            flavor = StringFlavor.MULTILINE_LITERAL
            value = self._read_multiline_literal(mark)
        else:
            flavor = StringFlavor.LITERAL
            value = self._read_literal(mark)

        return Token(TokenKind.STRING, self.source[mark[0]:self.pos], self._span_from(mark),
                     value=value, flavor=flavor)

    def _skip_first_newline(self) -> None:
        if self.peek() == "\n":
            self.advance()
        elif self.peek() == "\r" and self.peek(1) == "\n":
            self.advance()
            self.advance()

    def _read_basic(self, mark: _Mark) -> str:
        self.advance()
        content: List[str] = []
        while True:
            ch = self.peek()
            if ch is None or ch == "\n":
                self._error(ErrorKind.UNTERMINATED_STRING,
                            "Unterminated string. Use a multiline string (\"\"\") for line breaks",
                            mark)
            if ch == '"':
                self.advance()
                return "".join(content)
            if ch == "\\":
                content.append(self._read_escape())
            else:
                content.append(ch)
                self.advance()

    def _read_multiline_basic(self, mark: _Mark) -> str:
        for _ in range(3):
            self.advance()
        self._skip_first_newline()
        content: List[str] = []
        while True:
            ch = self.peek()
            if ch is None:
                self._error(ErrorKind.UNTERMINATED_STRING, "Unterminated multiline string", mark)
            if self.source.startswith('"""', self.pos):
                for _ in range(3):
                    self.advance()
                return "".join(content)
            if ch == "\\" and self._at_line_continuation():
                self._skip_line_continuation()
            elif ch == "\\":
                content.append(self._read_escape())
            else:
                content.append(ch)
                self.advance()

    def _at_line_continuation(self) -> bool:
        nxt = self.peek(1)
        return nxt == "\n" or (nxt == "\r" and self.peek(2) == "\n")

    def _skip_line_continuation(self) -> None:
        self.advance()
        self._skip_first_newline()
        while self.peek() in (" ", "\t"):
            self.advance()

    def _read_literal(self, mark: _Mark) -> str:
        self.advance()
        start = self.pos
        while True:
            ch = self.peek()
            if ch is None or ch == "\n":
                self._error(ErrorKind.UNTERMINATED_STRING, "Unterminated literal string", mark)
            if ch == "'":
                content = self.source[start:self.pos]
                self.advance()
                return content
            self.advance()

    def _read_multiline_literal(self, mark: _Mark) -> str:
        for _ in range(3):
            self.advance()
        self._skip_first_newline()
        end = self.source.find("'''", self.pos)
        if end == -1:
            while self.pos < self.length:
                self.advance()
            self._error(ErrorKind.UNTERMINATED_STRING, "Unterminated multiline literal string", mark)
        content = self.source[self.pos:end]
        while self.pos < end + 3:
            self.advance()
        return content

    def _read_escape(self) -> str:
        mark = self._mark()
        self.advance()
        ch = self.peek()
        if ch is None:
            self._error(ErrorKind.UNTERMINATED_STRING, "Incomplete escape sequence", mark)
        self.advance()
        if ch in _ESCAPES:
            return _ESCAPES[ch]
        if ch != "u":
            self._error(ErrorKind.INVALID_ESCAPE, f"Invalid escape sequence '\\{ch}'", mark)

        if self.peek() == "{":
            self.advance()
            digits = self._read_hex_digits(6, mark, terminator="}")
            code = int(digits, 16)
        else:
            code = int(self._read_hex_digits(4, mark), 16)
            if 0xD800 <= code <= 0xDBFF and self.peek() == "\\" and self.peek(1) == "u":
                low_mark = self._mark()
                self.advance()
                self.advance()
                low = int(self._read_hex_digits(4, low_mark), 16)
                if not 0xDC00 <= low <= 0xDFFF:
                    self._error(ErrorKind.INVALID_ESCAPE,
                                "Expected a low surrogate after a high surrogate", mark)
                code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)

        if 0xD800 <= code <= 0xDFFF:
            self._error(ErrorKind.INVALID_ESCAPE, "Unpaired surrogate in unicode escape", mark)
        if code > 0x10FFFF:
            self._error(ErrorKind.INVALID_ESCAPE, "Unicode escape out of range", mark)
        return chr(code)

    def _read_hex_digits(self, count: int, mark: _Mark, terminator: Optional[str] = None) -> str:
        digits: List[str] = []
        if terminator is None:
            for _ in range(count):
                ch = self.peek()
                if ch is None or ch not in _HEX_DIGITS:
                    self._error(ErrorKind.INVALID_ESCAPE,
                                f"Invalid unicode escape: expected {count} hex digits", mark)
                digits.append(ch)
                self.advance()
            return "".join(digits)

        while self.peek() is not None and self.peek() in _HEX_DIGITS and len(digits) < count:
            digits.append(self.peek())
            self.advance()
        if not digits or self.peek() != terminator:
            self._error(ErrorKind.INVALID_ESCAPE,
                        "Invalid unicode escape: expected '\\u{' 1 to 6 hex digits '}'", mark)
        self.advance()
        return "".join(digits)
