"""Data models for Eon values and documents."""

from .value import Map, Value, Variant, make_variant, structural_key, values_equal
from .document import Document, ListContents, MapContents, MapEntry, Node, Scalar, VariantCall

__all__ = [
    "Map",
    "Value",
    "Variant",
    "make_variant",
    "structural_key",
    "values_equal",
    "Document",
    "ListContents",
    "MapContents",
    "MapEntry",
    "Node",
    "Scalar",
    "VariantCall",
]
