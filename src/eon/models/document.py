"""Document model: a value tree that keeps comments and layout hints."""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..types import DocumentShape, Span, StringFlavor
from .value import Map, Value, Variant, make_variant


@dataclass
class Scalar:
    """``null``, a bool, a number or a string."""
    value: Value
    flavor: Optional[StringFlavor] = None


@dataclass
class ListContents:
    """
    A list, like ``[a, b, c]``.

    ``multiline`` records whether the source had a line break right after the
    opening bracket; ``None`` means the node was built from a bare value and
    the formatter picks the layout.
    """
    items: List['Node'] = field(default_factory=list)
    closing_comments: List[str] = field(default_factory=list)
    multiline: Optional[bool] = None


@dataclass
class MapEntry:
    """One ``key: value`` pair."""
    key: 'Node'
    value: 'Node'


@dataclass
class MapContents:
    """A map, like ``{key: value}``."""
    entries: List[MapEntry] = field(default_factory=list)
    closing_comments: List[str] = field(default_factory=list)
    multiline: Optional[bool] = None


@dataclass
class VariantCall:
    """A sum-type call, like ``"Rgb"(255, 0, 0)`` or ``"None"()``."""
    tag: str
    args: List['Node'] = field(default_factory=list)
    closing_comments: List[str] = field(default_factory=list)
    multiline: Optional[bool] = None


NodeValue = Union[Scalar, ListContents, MapContents, VariantCall]


@dataclass
class Node:
    """
    A value together with the comments attached to it.

    ``prefix_comments`` are the ``// comment`` lines before the value,
    ``suffix_comment`` is a comment on the same line after it.
    """
    value: NodeValue
    span: Optional[Span] = None
    prefix_comments: List[str] = field(default_factory=list)
    suffix_comment: Optional[str] = None

    def to_value(self) -> Value:
        """Strip comments and layout, leaving the plain value."""
        content = self.value
        if isinstance(content, Scalar):
            return content.value
        if isinstance(content, ListContents):
            return [item.to_value() for item in content.items]
        if isinstance(content, MapContents):
            return Map((entry.key.to_value(), entry.value.to_value())
                       for entry in content.entries)
        return make_variant(content.tag, (arg.to_value() for arg in content.args))

    @classmethod
    def from_value(cls, value: Value) -> 'Node':
        """
        Build a comment-free node tree from a value.

        Raises:
            TypeError: If the value contains something that is not an Eon value
        """
        if isinstance(value, Map) or isinstance(value, dict):
            return cls(MapContents(entries=[
                MapEntry(cls.from_value(key), cls.from_value(item))
                for key, item in value.items()
            ]))
        if isinstance(value, (list, tuple)):
            return cls(ListContents(items=[cls.from_value(item) for item in value]))
        if isinstance(value, Variant):
            return cls(VariantCall(value.tag, args=[cls.from_value(arg) for arg in value.args]))
        if value is None or isinstance(value, (bool, int, float, str)):
            return cls(Scalar(value))
        raise TypeError(f"Not an Eon value: {type(value).__name__}")


@dataclass
class Document:
    """
    A parsed Eon document.

    ``shape`` tells whether the source was an implicit top-level map
    (``key: value`` pairs), an implicit top-level list, or a single value.
    ``trailing_comments`` holds comments after a single top-level value.
    """
    root: Node
    shape: DocumentShape
    trailing_comments: List[str] = field(default_factory=list)

    def to_value(self) -> Value:
        """Project the document onto its plain value, dropping comments."""
        return self.root.to_value()

    @classmethod
    def from_value(cls, value: Value) -> 'Document':
        """Wrap a value in a document; maps become implicit top-level maps."""
        root = Node.from_value(value)
        shape = DocumentShape.MAP if isinstance(root.value, MapContents) else DocumentShape.VALUE
        return cls(root, shape)

    def comments(self) -> List[str]:
        """All comments in source order."""
        found: List[str] = []
        _collect_comments(self.root, found)
        found.extend(self.trailing_comments)
        return found


def _collect_comments(node: Node, found: List[str]) -> None:
    found.extend(node.prefix_comments)
    content = node.value
    if isinstance(content, MapContents):
        for entry in content.entries:
            _collect_comments(entry.key, found)
            _collect_comments(entry.value, found)
        found.extend(content.closing_comments)
    elif isinstance(content, ListContents):
        for item in content.items:
            _collect_comments(item, found)
        found.extend(content.closing_comments)
    elif isinstance(content, VariantCall):
        for arg in content.args:
            _collect_comments(arg, found)
        found.extend(content.closing_comments)
    if node.suffix_comment is not None:
        found.append(node.suffix_comment)
