"""Number literal interpretation and rendering."""

import math
import re
from typing import Union

Number = Union[int, float]

_DEC = r"[0-9](?:_?[0-9])*"
_HEX_RE = re.compile(r"0[xX]([0-9a-fA-F](?:_?[0-9a-fA-F])*)")
_BIN_RE = re.compile(r"0[bB]([01](?:_?[01])*)")
_INT_RE = re.compile(_DEC)
_FLOAT_RE = re.compile(
    rf"(?:{_DEC}\.(?:{_DEC})?|\.{_DEC}|{_DEC})(?:[eE][+-]?{_DEC})?"
)

_SPECIALS = {
    "+inf": math.inf,
    "-inf": -math.inf,
    "+nan": math.nan,
    "-nan": math.nan,
}


def parse_number(text: str) -> Number:
    """
    Interpret a number literal.

    Args:
        text: The literal as written, e.g. ``-0x_ff`` is rejected but ``-0xff``
            and ``1_000.5e-3`` are accepted

    Returns:
        An ``int`` for integer literals, a ``float`` otherwise

    Raises:
        ValueError: If the literal is malformed
    """
    if text in _SPECIALS:
        return _SPECIALS[text]

    sign = 1
    digits = text
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        digits = text[1:]

    lowered = digits.lower()
    if lowered == "nan":
        raise ValueError("NaN must be written as '+nan'")
    if lowered in ("inf", "infinity"):
        raise ValueError("Infinity must be written as '+inf' or '-inf'")
    if not digits:
        raise ValueError("Expected digits after the sign")

    match = _HEX_RE.fullmatch(digits)
    if match:
        return sign * int(match.group(1).replace("_", ""), 16)

    match = _BIN_RE.fullmatch(digits)
    if match:
        return sign * int(match.group(1).replace("_", ""), 2)

    if _INT_RE.fullmatch(digits):
        return sign * int(digits.replace("_", ""))

    if _FLOAT_RE.fullmatch(digits):
        value = float(digits.replace("_", ""))
        return -value if sign == -1 else value

    if "__" in digits or digits.startswith("_") or digits.endswith("_"):
        raise ValueError("'_' is only allowed between two digits")
    if digits[:2] in ("0x", "0X"):
        raise ValueError("Failed to parse hexadecimal number. Expected '0x…'")
    if digits[:2] in ("0b", "0B"):
        raise ValueError("Failed to parse binary number. Expected '0b…'")
    raise ValueError("Not a valid number")


def format_number(value: Number) -> str:
    """
    Render a number so that parsing the result gives back the same value.

    Floats use the shortest decimal that round-trips (``repr``), specials
    are written with an explicit sign.
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a number")
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "+nan"
    if math.isinf(value):
        return "+inf" if value > 0 else "-inf"
    return repr(value)
