"""Conversion between Eon values and plain Python objects, dataclasses and enums."""

import dataclasses
import logging
import typing
from collections.abc import Mapping
from enum import Enum
from typing import IO, Any, Dict, List, Optional, Union

from .formatter import FormatOptions, Formatter
from .models.value import Map, Value, Variant
from .parser import Parser
from .types import BindingError

_PRIMITIVES = (type(None), bool, int, float, str)


class ValueBinder:
    """
    Maps the generic value model to and from Python objects.

    Dataclasses become maps of their fields and enums are written by member
    name. Conversion into a target type follows its type hints
    (``List[T]``, ``Dict[K, V]``, ``Optional[T]``, nested dataclasses).
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the binder.

        Args:
            logger: Optional logger instance, used to warn about unknown keys
        """
        self.logger = logger or logging.getLogger(__name__)

    def to_value(self, obj: Any, path: str = "") -> Value:
        """
        Convert a Python object into an Eon value.

        Raises:
            BindingError: If the object has no Eon representation
        """
        if isinstance(obj, _PRIMITIVES):
            return obj
        if isinstance(obj, Enum):
            return obj.name
        if isinstance(obj, Variant):
            return Variant(obj.tag, [self.to_value(arg, f"{path}({i})")
                                     for i, arg in enumerate(obj.args)])
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return Map((field.name, self.to_value(getattr(obj, field.name), _join(path, field.name)))
                       for field in dataclasses.fields(obj))
        if isinstance(obj, (Map, Mapping)):
            return Map((self.to_value(key, path), self.to_value(item, _join(path, key)))
                       for key, item in obj.items())
        if isinstance(obj, (bytes, bytearray)):
            return list(obj)
        if isinstance(obj, (list, tuple, set, frozenset)):
            return [self.to_value(item, f"{path}[{i}]") for i, item in enumerate(obj)]
        raise BindingError(f"Cannot convert {type(obj).__name__} to an Eon value", path)

    def from_value(self, value: Value, target: Any = None, path: str = "") -> Any:
        """
        Convert an Eon value into a Python object.

        Args:
            value: Value to convert
            target: Optional target type; without one maps become dicts
                (or stay ``Map`` when their keys cannot be dict keys)
            path: Location used in error messages

        Raises:
            BindingError: If the value does not fit the target type
        """
        if target is None or target is Any:
            return self._plain(value)

        origin = typing.get_origin(target)
        if origin is Union:
            return self._union(value, typing.get_args(target), path)
        if origin in (list, List):
            (item_type,) = typing.get_args(target) or (None,)
            items = self._expect(value, list, "a list", path)
            return [self.from_value(item, item_type, f"{path}[{i}]") for i, item in enumerate(items)]
        if origin in (dict, Dict):
            key_type, item_type = typing.get_args(target) or (None, None)
            entries = self._expect(value, Map, "a map", path)
            return {self.from_value(key, key_type, path): self.from_value(item, item_type, _join(path, key))
                    for key, item in entries.items()}
        if origin is tuple:
            items = self._expect(value, list, "a list", path)
            args = typing.get_args(target)
            if len(args) == 2 and args[1] is Ellipsis:
                args = (args[0],) * len(items)
            if len(args) != len(items):
                raise BindingError(f"Expected {len(args)} items, found {len(items)}", path)
            return tuple(self.from_value(item, arg, f"{path}[{i}]")
                         for i, (item, arg) in enumerate(zip(items, args)))

        if isinstance(target, type):
            if dataclasses.is_dataclass(target):
                return self._dataclass(value, target, path)
            if issubclass(target, Enum):
                return self._enum(value, target, path)
            if target is float:
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    return float(value)
                raise BindingError(f"Expected a number, found {_describe(value)}", path)
            if target is int:
                if isinstance(value, int) and not isinstance(value, bool):
                    return value
                raise BindingError(f"Expected an integer, found {_describe(value)}", path)
            if target in (list, dict, tuple):
                return self.from_value(value, typing.List if target is list else
                                       typing.Dict if target is dict else typing.Tuple[Any, ...], path)
            if isinstance(value, target):
                return value
            raise BindingError(f"Expected {target.__name__}, found {_describe(value)}", path)

        raise BindingError(f"Unsupported target type {target!r}", path)

    def _plain(self, value: Value) -> Any:
        if isinstance(value, list):
            return [self._plain(item) for item in value]
        if isinstance(value, Variant):
            return Variant(value.tag, [self._plain(arg) for arg in value.args])
        if isinstance(value, Map):
            items = [(self._plain(key), self._plain(item)) for key, item in value.items()]
            if all(isinstance(key, _PRIMITIVES) for key, _ in items):
                converted = dict(items)
                # 1 and True are distinct Eon keys but collide in a dict.
                if len(converted) == len(items):
                    return converted
            return Map(items)
        return value

    def _union(self, value: Value, options: tuple, path: str) -> Any:
        if value is None and type(None) in options:
            return None
        for option in options:
            if option is type(None):
                continue
            try:
                return self.from_value(value, option, path)
            except BindingError:
                continue
        raise BindingError(f"Value {_describe(value)} matches none of the allowed types", path)

    def _dataclass(self, value: Value, target: type, path: str) -> Any:
        entries = self._expect(value, Map, f"a map for {target.__name__}", path)
        hints = typing.get_type_hints(target)
        fields = {field.name: field for field in dataclasses.fields(target) if field.init}

        kwargs = {}
        for name, field in fields.items():
            if name in entries:
                kwargs[name] = self.from_value(entries[name], hints.get(name), _join(path, name))
            elif (field.default is dataclasses.MISSING
                    and field.default_factory is dataclasses.MISSING):
                raise BindingError(f"Missing required field '{name}' of {target.__name__}", path)

        unknown = [key for key in entries if not (isinstance(key, str) and key in fields)]
        for key in unknown:
            self.logger.warning(f"Ignoring unknown key {key!r} for {target.__name__}"
                                f"{' at ' + path if path else ''}")
        return target(**kwargs)

    def _enum(self, value: Value, target: type, path: str) -> Enum:
        if isinstance(value, str) and value in target.__members__:
            return target.__members__[value]
        try:
            return target(value)
        except (ValueError, TypeError):
            names = ", ".join(target.__members__)
            raise BindingError(f"{_describe(value)} is not a member of {target.__name__} "
                               f"(expected one of: {names})", path) from None

    def _expect(self, value: Value, kind: type, description: str, path: str) -> Any:
        if not isinstance(value, kind):
            raise BindingError(f"Expected {description}, found {_describe(value)}", path)
        return value


def _join(path: str, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


def _describe(value: Value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "a bool"
    if isinstance(value, (int, float)):
        return "a number"
    if isinstance(value, str):
        return f"string {value!r}"
    if isinstance(value, list):
        return "a list"
    if isinstance(value, Map):
        return "a map"
    if isinstance(value, Variant):
        return f"variant {value.tag!r}"
    return type(value).__name__


# Shared instance for the module-level helpers
_default_binder = ValueBinder()


def to_value(obj: Any) -> Value:
    """Convert a Python object into an Eon value."""
    return _default_binder.to_value(obj)


def from_value(value: Value, target: Any = None) -> Any:
    """Convert an Eon value into a Python object, optionally of type ``target``."""
    return _default_binder.from_value(value, target)


def loads(text: Union[str, bytes], target: Any = None) -> Any:
    """Parse Eon text and convert it to Python objects."""
    return from_value(Parser().parse_value(text), target)


def load(fp: IO, target: Any = None) -> Any:
    """Read Eon from a file object (text or binary)."""
    return loads(fp.read(), target)


def dumps(obj: Any, options: Optional[FormatOptions] = None) -> str:
    """Convert a Python object to canonical Eon text."""
    return Formatter(options).format_value(to_value(obj))


def dump(obj: Any, fp: IO, options: Optional[FormatOptions] = None) -> None:
    """Write ``obj`` as Eon text to a text file object."""
    fp.write(dumps(obj, options))
