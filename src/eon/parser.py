"""Recursive descent parser for Eon documents."""

import logging
from typing import Iterator, List, Optional, Tuple, Union

from .error_handler import ErrorHandler
from .lexer import Lexer
from .models.document import (
    Document,
    ListContents,
    MapContents,
    MapEntry,
    Node,
    Scalar,
    VariantCall,
)
from .models.value import Map, Value
from .types import DocumentShape, ErrorKind, ParseError, Span, StringFlavor, Token, TokenKind

# Protects the recursive descent against stack exhaustion on hostile input.
MAX_NESTING_DEPTH = 128

_KEYWORDS = {"true": True, "false": False, "null": None}

_CLOSERS = (TokenKind.CLOSE_BRACE, TokenKind.CLOSE_LIST, TokenKind.CLOSE_PAREN)

_SUGGESTIONS = {
    "inf": "+inf or -inf",
    "infinity": "+inf or -inf",
    "nan": "+nan",
    "true": "true",
    "false": "false",
    "nil": "null",
    "null": "null",
    "none": "null",
}


class _TokenStream:
    """Token iterator with one token of lookahead."""

    def __init__(self, lexer: Lexer):
        self._lexer = lexer
        self._tokens: Iterator[Token] = lexer.tokens()
        self._peeked: Optional[Token] = None
        self._exhausted = False
        self.previous: Optional[Token] = None

    def peek(self) -> Optional[Token]:
        if self._peeked is None and not self._exhausted:
            self._peeked = next(self._tokens, None)
            if self._peeked is None:
                self._exhausted = True
        return self._peeked

    def next(self) -> Optional[Token]:
        token = self.peek()
        self._peeked = None
        if token is not None:
            self.previous = token
        return token

    def peek_kind(self) -> Optional[TokenKind]:
        token = self.peek()
        return token.kind if token is not None else None

    def end_span(self) -> Span:
        self.peek()
        return self._lexer.end_span()

    def next_span(self) -> Span:
        """Span of the upcoming token, or the end of input."""
        token = self.peek()
        return token.span if token is not None else self.end_span()


class Parser:
    """
    Parser turning Eon source text into a ``Document`` or a plain value.

    Uses one routine per grammar production and one token of lookahead.
    The first error aborts the parse; no partial tree is ever returned.
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None,
                 logger: Optional[logging.Logger] = None,
                 max_depth: int = MAX_NESTING_DEPTH):
        """
        Initialize the parser.

        Args:
            error_handler: Optional ErrorHandler instance used to decode input
            logger: Optional logger instance
            max_depth: Maximum nesting depth of lists, maps and calls
        """
        self.error_handler = error_handler or ErrorHandler()
        self.logger = logger or logging.getLogger(__name__)
        self.max_depth = max_depth

    def parse(self, source: Union[str, bytes]) -> Document:
        """
        Parse a full document, keeping comments.

        Args:
            source: Document text, or UTF-8 encoded bytes

        Returns:
            The parsed Document

        Raises:
            ParseError: If the source is not valid Eon
        """
        text = self.error_handler.decode_input(source)
        stream = _TokenStream(Lexer(text, self.logger))
        document = self._parse_document(stream)
        self.logger.debug(f"Parsed {len(text)} characters as top-level {document.shape.value}")
        return document

    def parse_value(self, source: Union[str, bytes]) -> Value:
        """Parse a document and drop comments and layout."""
        return self.parse(source).to_value()

    # ------------------------------------------------------------------
    # Productions

    def _parse_document(self, stream: _TokenStream) -> Document:
        prefix = self._parse_comments(stream)

        if stream.peek() is None:
            root = Node(MapContents(closing_comments=prefix, multiline=True))
            return Document(root, DocumentShape.MAP)

        first = self._parse_node(stream, 1, allow_identifier=True)
        first.prefix_comments = prefix + first.prefix_comments

        if stream.peek_kind() is TokenKind.COLON:
            entries, closing = self._parse_map_contents(stream, 0, None, first_key=first)
            self._expect_end(stream)
            root = Node(MapContents(entries, closing, multiline=True), first.span)
            return Document(root, DocumentShape.MAP)

        self._check_value(first)
        items, closing = self._parse_list_contents(stream, 0, None, first_item=first,
                                                   top_level=True)
        self._expect_end(stream)

        if len(items) == 1:
            return Document(items[0], DocumentShape.VALUE, trailing_comments=closing)
        root = Node(ListContents(items, closing, multiline=True), items[0].span)
        return Document(root, DocumentShape.LIST)

    def _parse_node(self, stream: _TokenStream, depth: int,
                    allow_identifier: bool = False) -> Node:
        if depth > self.max_depth:
            raise ParseError(
                f"Maximum nesting depth of {self.max_depth} exceeded while parsing document",
                ErrorKind.NESTING_TOO_DEEP, stream.next_span())

        prefix = self._parse_comments(stream)
        token = stream.next()
        if token is None:
            raise ParseError("Unexpected end of input: expected a value",
                             ErrorKind.UNEXPECTED_END_OF_INPUT, stream.end_span(),
                             expected="a value")

        kind = token.kind
        if kind is TokenKind.OPEN_LIST:
            multiline = self._breaks_line_after(stream, token)
            items, closing = self._parse_list_contents(stream, depth, TokenKind.CLOSE_LIST)
            self._expect(stream, TokenKind.CLOSE_LIST)
            value = ListContents(items, closing, multiline)
        elif kind is TokenKind.OPEN_BRACE:
            multiline = self._breaks_line_after(stream, token)
            entries, closing = self._parse_map_contents(stream, depth, TokenKind.CLOSE_BRACE)
            self._expect(stream, TokenKind.CLOSE_BRACE)
            value = MapContents(entries, closing, multiline)
        elif kind is TokenKind.STRING:
            if stream.peek_kind() is TokenKind.OPEN_PAREN:
                value = self._parse_call(stream, depth, token)
            else:
                value = Scalar(token.value, token.flavor)
        elif kind is TokenKind.NUMBER:
            value = Scalar(token.value)
        elif kind is TokenKind.IDENTIFIER:
            if token.text in _KEYWORDS:
                value = Scalar(_KEYWORDS[token.text])
            elif allow_identifier:
                value = Scalar(token.text, StringFlavor.IDENTIFIER)
            else:
                raise self._bare_identifier_error(token.text, token.span)
        elif kind is TokenKind.OPEN_PAREN:
            raise ParseError("Parentheses must be preceded by a string",
                             ErrorKind.UNEXPECTED_TOKEN, token.span, expected="a value")
        elif kind in _CLOSERS:
            raise ParseError(f"Unbalanced {kind.value}", ErrorKind.UNEXPECTED_TOKEN,
                             token.span, expected="a value")
        else:
            raise ParseError(
                f"Expected a value, like a map, list, number, or string, but found {kind.value}",
                ErrorKind.UNEXPECTED_TOKEN, token.span, expected="a value")

        span = token.span | stream.previous.span
        suffix = self._parse_suffix_comment(stream)
        return Node(value, span, prefix, suffix)

    def _parse_call(self, stream: _TokenStream, depth: int, name: Token) -> VariantCall:
        open_paren = stream.next()
        multiline = self._breaks_line_after(stream, open_paren)
        args, closing = self._parse_list_contents(stream, depth, TokenKind.CLOSE_PAREN)
        self._expect(stream, TokenKind.CLOSE_PAREN)
        return VariantCall(name.value, args, closing, multiline)

    def _parse_list_contents(self, stream: _TokenStream, depth: int,
                             closer: Optional[TokenKind],
                             first_item: Optional[Node] = None,
                             top_level: bool = False) -> Tuple[List[Node], List[str]]:
        """
        Parse values up to (not including) ``closer``, or to the end of input.

        In the bracket-less top-level list a plain string directly followed
        on the same line by ``{`` or ``[`` is rejected, so that
        ``"Rgb" {r: 1}`` is not silently read as two values.
        """
        items: List[Node] = []
        separated = True
        if first_item is not None:
            separated = self._parse_optional_comma(stream, first_item)
            items.append(first_item)

        while True:
            prefix = self._parse_comments(stream)
            if self._at_container_end(stream, closer):
                return items, prefix

            if top_level and items and not separated:
                self._check_not_variant_like(items[-1], stream.peek())

            item = self._parse_node(stream, depth + 1)
            item.prefix_comments = prefix + item.prefix_comments
            separated = self._parse_optional_comma(stream, item)
            items.append(item)

    def _check_not_variant_like(self, previous: Node, token: Token) -> None:
        if token.kind not in (TokenKind.OPEN_BRACE, TokenKind.OPEN_LIST):
            return
        if not isinstance(previous.value, Scalar) or not isinstance(previous.value.value, str):
            return
        if token.span.line == previous.span.last_line:
            raise ParseError(
                f"Expected '(' after the variant name, or a comma before {token.kind.value}",
                ErrorKind.UNEXPECTED_TOKEN, token.span, expected="'(' or ','")

    def _parse_map_contents(self, stream: _TokenStream, depth: int,
                            closer: Optional[TokenKind],
                            first_key: Optional[Node] = None) -> Tuple[List[MapEntry], List[str]]:
        """Parse ``key: value`` entries up to (not including) ``closer``."""
        entries: List[MapEntry] = []
        # key value -> span of its first occurrence
        seen = Map()

        while True:
            if first_key is not None:
                key, first_key = first_key, None
            else:
                prefix = self._parse_comments(stream)
                if self._at_container_end(stream, closer):
                    return entries, prefix
                key = self._parse_node(stream, depth + 1, allow_identifier=True)
                key.prefix_comments = prefix + key.prefix_comments

            entries.append(self._parse_entry(stream, depth, key, seen))

    def _parse_entry(self, stream: _TokenStream, depth: int, key: Node, seen: Map) -> MapEntry:
        first = seen.insert(key.to_value(), key.span)
        if first is not None:
            raise ParseError(
                f"Duplicate key in map (first defined at line {first.line}, column {first.column})",
                ErrorKind.DUPLICATE_KEY, key.span, related_span=first)

        self._expect(stream, TokenKind.COLON)
        value = self._parse_node(stream, depth + 1)
        self._parse_optional_comma(stream, value)
        if key.suffix_comment is not None:
            # `key: // comment` belongs to the value written below it.
            value.prefix_comments.insert(0, key.suffix_comment)
            key.suffix_comment = None
        return MapEntry(key, value)

    # ------------------------------------------------------------------
    # Helpers

    def _at_container_end(self, stream: _TokenStream, closer: Optional[TokenKind]) -> bool:
        token = stream.peek()
        if token is None:
            if closer is not None:
                raise ParseError(f"Expected {closer.value} but reached end of input",
                                 ErrorKind.UNEXPECTED_END_OF_INPUT, stream.end_span(),
                                 expected=closer.value)
            return True
        if token.kind in _CLOSERS:
            if closer is None:
                raise ParseError(f"Unbalanced {token.kind.value}", ErrorKind.UNEXPECTED_TOKEN,
                                 token.span, expected="end of input")
            return True
        return False

    def _parse_optional_comma(self, stream: _TokenStream, node: Node) -> bool:
        if stream.peek_kind() is not TokenKind.COMMA:
            return False
        stream.next()
        if node.suffix_comment is None:
            node.suffix_comment = self._parse_suffix_comment(stream)
        return True

    def _parse_comments(self, stream: _TokenStream) -> List[str]:
        comments: List[str] = []
        while stream.peek_kind() is TokenKind.COMMENT:
            comments.append(stream.next().text)
        return comments

    def _parse_suffix_comment(self, stream: _TokenStream) -> Optional[str]:
        """A comment on the same line as the previous token."""
        token = stream.peek()
        if token is None or token.kind is not TokenKind.COMMENT:
            return None
        if token.span.line != stream.previous.span.last_line:
            return None
        return stream.next().text

    def _breaks_line_after(self, stream: _TokenStream, opener: Token) -> bool:
        token = stream.peek()
        return token is not None and token.span.line > opener.span.last_line

    def _expect(self, stream: _TokenStream, expected: TokenKind) -> Token:
        token = stream.next()
        if token is None:
            raise ParseError(f"Expected {expected.value} but reached end of input",
                             ErrorKind.UNEXPECTED_END_OF_INPUT, stream.end_span(),
                             expected=expected.value)
        if token.kind is not expected:
            raise ParseError(f"Expected {expected.value} but found {token.kind.value}",
                             ErrorKind.UNEXPECTED_TOKEN, token.span, expected=expected.value)
        return token

    def _expect_end(self, stream: _TokenStream) -> None:
        token = stream.peek()
        if token is not None:
            raise ParseError(f"Expected end of input but found {token.kind.value}",
                             ErrorKind.UNEXPECTED_TOKEN, token.span, expected="end of input")

    def _check_value(self, node: Node) -> None:
        """Reject a bare identifier that was parsed in key position."""
        content = node.value
        if isinstance(content, Scalar) and content.flavor is StringFlavor.IDENTIFIER:
            raise self._bare_identifier_error(content.value, node.span)

    def _bare_identifier_error(self, identifier: str, span: Span) -> ParseError:
        suggestion = _SUGGESTIONS.get(identifier.lower())
        if suggestion is not None:
            message = f"Unknown keyword {identifier!r}. Did you mean: {suggestion}?"
        else:
            message = f"Unknown keyword {identifier!r}. Expected 'null', 'true', or 'false'"
        return ParseError(message, ErrorKind.UNEXPECTED_TOKEN, span,
                          expected="a value (strings must be quoted)")
