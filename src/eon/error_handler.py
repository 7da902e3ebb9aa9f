"""Error handling: input validation and diagnostics for parse errors."""

import logging
from typing import List, Optional, Union

from .types import ErrorKind, LexError, ParseError, Span


class ErrorHandler:
    """
    Validates raw input and turns parse errors into readable diagnostics.

    The core never recovers from errors; callers such as the CLI use
    ``render`` to report them and decide whether to continue.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def decode_input(self, source: Union[str, bytes, bytearray]) -> str:
        """
        Return the document text, decoding bytes as strict UTF-8.

        Args:
            source: Document text or raw bytes

        Returns:
            The decoded text

        Raises:
            LexError: ``InvalidUtf8`` if the bytes are not valid UTF-8
        """
        if isinstance(source, str):
            return source
        if not isinstance(source, (bytes, bytearray)):
            raise TypeError(f"Expected str or bytes, got {type(source).__name__}")

        data = bytes(source)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            valid = data[:e.start].decode("utf-8")
            line = valid.count("\n") + 1
            column = len(valid) - (valid.rfind("\n") + 1) + 1
            span = Span(e.start, e.end, line, column)
            raise LexError(f"Invalid UTF-8: {e.reason}", ErrorKind.INVALID_UTF8, span) from None

    def render(self, error: ParseError, source: Union[str, bytes, None] = None,
               path: Optional[str] = None) -> str:
        """
        Render a parse error as a multi-line diagnostic.

        Args:
            error: The ParseError to describe
            source: The source the error refers to, used to quote the offending line
            path: Optional file name shown in the location

        Returns:
            Diagnostic text naming the error kind, location, the source line
            with the span underlined, and what was expected
        """
        location = f"{path or '<input>'}:{error.line}:{error.column}"
        lines = [f"error[{error.kind.value}]: {error.message}", f"  --> {location}"]

        text = self._source_text(source)
        if text is not None:
            lines.extend(self._snippet(text, error.span))

        if error.expected:
            lines.append(f"  = expected {error.expected}")
        if error.related_span is not None:
            related = error.related_span
            lines.append(f"  = note: first defined at {path or '<input>'}:"
                         f"{related.line}:{related.column}")
        return "\n".join(lines)

    def report(self, error: ParseError, source: Union[str, bytes, None] = None,
               path: Optional[str] = None) -> str:
        """Render an error and log it."""
        message = self.render(error, source, path)
        self.logger.error(f"Failed to parse {path or 'input'}: {error.kind.value} at "
                          f"{error.line}:{error.column}")
        return message

    def _source_text(self, source: Union[str, bytes, None]) -> Optional[str]:
        if source is None:
            return None
        if isinstance(source, str):
            return source
        return bytes(source).decode("utf-8", errors="replace")

    def _snippet(self, text: str, span: Span) -> List[str]:
        source_lines = text.split("\n")
        if not 1 <= span.line <= len(source_lines):
            return []
        line_text = source_lines[span.line - 1].rstrip("\r")
        gutter = " " * len(str(span.line))

        # Byte span to a character width on the first line, at least one caret.
        line_bytes = line_text.encode("utf-8")
        start_col = span.column - 1
        start_byte = len(line_text[:start_col].encode("utf-8"))
        end_byte = min(start_byte + (span.end - span.start), len(line_bytes))
        width = len(line_bytes[start_byte:end_byte].decode("utf-8", errors="ignore"))

        return [
            f"{gutter} |",
            f"{span.line} | {line_text}",
            f"{gutter} | {' ' * start_col}{'^' * max(width, 1)}",
        ]
