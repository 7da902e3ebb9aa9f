"""Canonical formatter: renders documents and values as Eon text."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .models.document import (
    Document,
    ListContents,
    MapContents,
    MapEntry,
    Node,
    Scalar,
    VariantCall,
)
from .models.value import Value
from .types import DocumentShape
from .utils.numbers import format_number
from .utils.strings import key_needs_quotes, quote_multiline, quote_string

Container = Union[ListContents, MapContents, VariantCall]


@dataclass
class FormatOptions:
    """
    How to format an Eon document.

    Options that are not whitespace (or ``": "`` for the separator) can
    produce output that is no longer valid Eon.
    """
    # A tab lets readers pick their own indentation width in their editor.
    indentation: str = "\t"
    newline: str = "\n"
    space_before_suffix_comment: str = " "
    key_value_separator: str = ": "
    # Surround the top-level map with braces and an extra level of indentation.
    always_include_outer_braces: bool = False


class Formatter:
    """
    Canonical formatter for Eon documents and values.

    Formatting is deterministic and idempotent: formatting the parse of the
    output gives the output again.
    """

    def __init__(self, options: Optional[FormatOptions] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the formatter.

        Args:
            options: Optional FormatOptions; defaults are used when omitted
            logger: Optional logger instance
        """
        self.options = options or FormatOptions()
        self.logger = logger or logging.getLogger(__name__)

    def format_document(self, document: Document) -> str:
        """
        Render a document, keeping its comments.

        Args:
            document: Parsed (or constructed) Document

        Returns:
            Canonical text, ending with a newline unless it is empty
        """
        printer = _Printer(self.options)
        printer.document(document)
        text = printer.finish()
        self.logger.debug(f"Formatted {document.shape.value} document into {len(text)} characters")
        return text

    def format_value(self, value: Value) -> str:
        """
        Render a plain value with the default line breaking policy.

        Raises:
            TypeError: If the value contains something that is not an Eon value
        """
        return self.format_document(Document.from_value(value))


class _Printer:
    """Output buffer and indentation state for one formatting run."""

    def __init__(self, options: FormatOptions):
        self.options = options
        self.indent = 0
        self.parts: List[str] = []

    def finish(self) -> str:
        assert self.indent == 0, f"Formatter finished with non-zero indent of {self.indent}"
        return "".join(self.parts)

    def write(self, text: str) -> None:
        self.parts.append(text)

    def newline(self) -> None:
        self.parts.append(self.options.newline)

    def add_indent(self) -> None:
        if self.indent:
            self.parts.append(self.options.indentation * self.indent)

    def comments(self, comments: Sequence[str]) -> None:
        for comment in comments:
            self.add_indent()
            self.write(comment)
            self.newline()

    def suffix_comment(self, comment: Optional[str]) -> None:
        if comment is not None:
            self.write(self.options.space_before_suffix_comment)
            self.write(comment)

    # ------------------------------------------------------------------
    # Document level

    def document(self, document: Document) -> None:
        root = document.root
        content = root.value
        trailing = ([root.suffix_comment] if root.suffix_comment is not None else [])
        trailing += document.trailing_comments

        if isinstance(content, MapContents) and not self.options.always_include_outer_braces:
            self.map_content(content.entries, content.closing_comments + trailing,
                             leading=root.prefix_comments)
        elif document.shape is DocumentShape.LIST and isinstance(content, ListContents):
            self.list_content(content.items, content.closing_comments + trailing,
                              leading=root.prefix_comments)
        else:
            self.indented_node(root)
            self.newline()
            self.comments(document.trailing_comments)

    # ------------------------------------------------------------------
    # Nodes

    def indented_node(self, node: Node) -> None:
        self.comments(node.prefix_comments)
        self.add_indent()
        self.node_value(node)
        self.suffix_comment(node.suffix_comment)

    def node_value(self, node: Node) -> None:
        content = node.value
        if isinstance(content, Scalar):
            self.write(self.scalar(content))
        elif isinstance(content, ListContents):
            self.list(content)
        elif isinstance(content, MapContents):
            self.map(content)
        else:
            self.variant(content)

    def scalar(self, scalar: Scalar) -> str:
        value = scalar.value
        if value is None:
            return "null"
        if value is True:
            return "true"
        if value is False:
            return "false"
        if isinstance(value, str):
            if scalar.flavor is not None and scalar.flavor.is_multiline and "\n" in value:
                quoted = quote_multiline(value)
                if quoted is not None:
                    return quoted
            return quote_string(value)
        return format_number(value)

    def key(self, node: Node) -> None:
        content = node.value
        if (isinstance(content, Scalar) and isinstance(content.value, str)
                and not key_needs_quotes(content.value)):
            self.write(content.value)
        else:
            self.node_value(node)

    def list(self, content: ListContents) -> None:
        one_line = self.inline_content(content)
        if one_line is not None:
            self.write(one_line)
            return
        self.write("[")
        self.newline()
        self.indent += 1
        self.list_content(content.items, content.closing_comments)
        self.indent -= 1
        self.add_indent()
        self.write("]")

    def list_content(self, items: Sequence[Node], closing_comments: Sequence[str],
                     leading: Sequence[str] = ()) -> None:
        leading_comments = [list(item.prefix_comments) for item in items]
        if leading_comments:
            leading_comments[0] = list(leading) + leading_comments[0]
        else:
            closing_comments = list(leading) + list(closing_comments)
        add_blank_lines = any(leading_comments)

        for i, item in enumerate(items):
            self.comments(leading_comments[i])
            self.add_indent()
            self.node_value(item)
            self.suffix_comment(item.suffix_comment)
            self.newline()
            if add_blank_lines and i + 1 < len(items):
                self.newline()

        if add_blank_lines and closing_comments:
            self.newline()
        self.comments(closing_comments)

    def map(self, content: MapContents) -> None:
        one_line = self.inline_content(content)
        if one_line is not None:
            self.write(one_line)
            return
        self.write("{")
        self.newline()
        self.indent += 1
        self.map_content(content.entries, content.closing_comments)
        self.indent -= 1
        self.add_indent()
        self.write("}")

    def map_content(self, entries: Sequence[MapEntry], closing_comments: Sequence[str],
                    leading: Sequence[str] = ()) -> None:
        leading_comments = [_entry_comments(entry) for entry in entries]
        if leading_comments:
            leading_comments[0] = list(leading) + leading_comments[0]
        else:
            closing_comments = list(leading) + list(closing_comments)
        add_blank_lines = any(leading_comments)

        for i, entry in enumerate(entries):
            self.comments(leading_comments[i])
            self.add_indent()
            self.key(entry.key)
            self.write(self.options.key_value_separator)
            self.node_value(entry.value)
            self.suffix_comment(entry.value.suffix_comment)
            self.newline()
            if add_blank_lines and i + 1 < len(entries):
                self.newline()

        if add_blank_lines and closing_comments:
            self.newline()
        self.comments(closing_comments)

    def variant(self, content: VariantCall) -> None:
        quoted_tag = quote_string(content.tag)
        if not content.args and not content.closing_comments:
            # The canonical zero-argument call omits the parentheses.
            self.write(quoted_tag)
            return

        one_line = self.inline_content(content)
        if one_line is not None:
            self.write(one_line)
            return

        if not content.closing_comments and len(content.args) == 1:
            arg = content.args[0]
            inner = arg.value
            if (not arg.prefix_comments and arg.suffix_comment is None
                    and isinstance(inner, (MapContents, ListContents))
                    and self.inline_node(arg) is None):
                # A single map or list argument, like `"Tag"({ … })`, without double indentation.
                is_map = isinstance(inner, MapContents)
                self.write(quoted_tag + ("({" if is_map else "(["))
                self.newline()
                self.indent += 1
                if is_map:
                    self.map_content(inner.entries, inner.closing_comments)
                else:
                    self.list_content(inner.items, inner.closing_comments)
                self.indent -= 1
                self.add_indent()
                self.write("})" if is_map else "])")
                return

        self.write(quoted_tag + "(")
        self.newline()
        self.indent += 1
        self.list_content(content.args, content.closing_comments)
        self.indent -= 1
        self.add_indent()
        self.write(")")

    # ------------------------------------------------------------------
    # Single-line layout

    def inline_node(self, node: Node) -> Optional[str]:
        """Render a child node on one line, or ``None`` if it cannot be."""
        if node.prefix_comments or node.suffix_comment is not None:
            return None
        content = node.value
        if isinstance(content, Scalar):
            text = self.scalar(content)
            return None if "\n" in text else text
        return self.inline_content(content)

    def inline_key(self, node: Node) -> Optional[str]:
        content = node.value
        if (isinstance(content, Scalar) and isinstance(content.value, str)
                and not key_needs_quotes(content.value)):
            return None if node.prefix_comments or node.suffix_comment else content.value
        return self.inline_node(node)

    def inline_content(self, content: Container) -> Optional[str]:
        if isinstance(content, MapContents):
            if not content.entries and not content.closing_comments:
                return "{}"
        elif isinstance(content, ListContents):
            if not content.items and not content.closing_comments:
                return "[]"
        elif not content.args and not content.closing_comments:
            return quote_string(content.tag)

        if content.closing_comments or not self._may_use_one_line(content):
            return None

        if isinstance(content, MapContents):
            parts = []
            for entry in content.entries:
                key = self.inline_key(entry.key)
                value = self.inline_node(entry.value)
                if key is None or value is None:
                    return None
                parts.append(f"{key}{self.options.key_value_separator}{value}")
            return "{" + ", ".join(parts) + "}"

        items = content.items if isinstance(content, ListContents) else content.args
        parts = [self.inline_node(item) for item in items]
        if any(part is None for part in parts):
            return None
        # Single-line lists and calls use commas for readability.
        joined = ", ".join(parts)
        if isinstance(content, ListContents):
            return f"[{joined}]"
        return f"{quote_string(content.tag)}({joined})"

    def _may_use_one_line(self, content: Container) -> bool:
        if content.multiline is not None:
            # Follow the author: a line break after the opening bracket keeps it multi-line.
            return not content.multiline
        if isinstance(content, MapContents):
            return False
        items = content.items if isinstance(content, ListContents) else content.args
        return self._values_fit_on_one_line(items)

    def _values_fit_on_one_line(self, items: Sequence[Node]) -> bool:
        if not all(self._is_simple(item) for item in items):
            return False

        if len(items) <= 4 and all(_is_number(item) for item in items):
            return True  # e.g. [1, 2, 3, 4]

        if len(items) > 4:
            return False

        estimated_width = 0
        for item in items:
            content = item.value
            if isinstance(content, Scalar) and isinstance(content.value, str):
                estimated_width += len(self.scalar(content))
            else:
                estimated_width += 5
            estimated_width += 2
        return estimated_width < 60

    def _is_simple(self, node: Node) -> bool:
        if node.prefix_comments or node.suffix_comment is not None:
            return False
        content = node.value
        if isinstance(content, Scalar):
            return "\n" not in self.scalar(content)
        if content.closing_comments:
            return False
        if isinstance(content, MapContents):
            return not content.entries
        if isinstance(content, ListContents):
            return not content.items
        return not content.args


def _entry_comments(entry: MapEntry) -> List[str]:
    """Comments shown above a ``key: value`` line, in source order."""
    comments = list(entry.key.prefix_comments)
    if entry.key.suffix_comment is not None:
        comments.append(entry.key.suffix_comment)
    comments.extend(entry.value.prefix_comments)
    return comments


def _is_number(node: Node) -> bool:
    content = node.value
    return (isinstance(content, Scalar) and isinstance(content.value, (int, float))
            and not isinstance(content.value, bool))
