"""String quoting helpers."""

import re
from typing import Optional

KEYWORDS = frozenset({"true", "false", "null"})

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_SIMPLE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\b": "\\b",
    "\f": "\\f",
}


def is_valid_identifier(text: str) -> bool:
    """Returns ``True`` if the text matches ``[A-Za-z_][A-Za-z0-9_]*``."""
    return _IDENTIFIER_RE.fullmatch(text) is not None


def key_needs_quotes(text: str) -> bool:
    """
    Returns ``True`` if a string map key must be written quoted.

    ``true``, ``false`` and ``null`` need quotes, since unquoted they are
    read as the bool/null values.
    """
    return text in KEYWORDS or not is_valid_identifier(text)


def _is_control(ch: str) -> bool:
    code = ord(ch)
    return code < 0x20 or code == 0x7F


def escape_basic(text: str) -> str:
    """Escape text for use inside a double-quoted string."""
    parts = []
    for ch in text:
        if ch in _SIMPLE_ESCAPES:
            parts.append(_SIMPLE_ESCAPES[ch])
        elif _is_control(ch):
            parts.append(f"\\u{{{ord(ch):x}}}")
        else:
            parts.append(ch)
    return "".join(parts)


def can_quote_literal(text: str) -> bool:
    """A single-quoted literal string cannot hold ``'`` or control characters."""
    return "'" not in text and not any(_is_control(ch) for ch in text)


def quote_string(text: str) -> str:
    """
    Quote a string in its canonical form.

    Basic double quotes are preferred; single-quoted literal strings are used
    when the basic form would need two or more escaped quotes or backslashes.
    """
    escapes = text.count('"') + text.count("\\")
    if escapes >= 2 and can_quote_literal(text):
        return f"'{text}'"
    return f'"{escape_basic(text)}"'


def quote_multiline(text: str) -> Optional[str]:
    """
    Quote a string as a multiline literal (``'''``) if it can be written verbatim.

    Returns:
        The quoted string, or ``None`` if the content cannot be represented
    """
    if "'''" in text or text.endswith("'"):
        return None
    if any(_is_control(ch) and ch not in "\n\t" for ch in text):
        return None
    return f"'''\n{text}'''"
