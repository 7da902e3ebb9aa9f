#!/usr/bin/env python3
"""
Example usage of Eon.

This script parses a commented configuration, reads typed settings from
it, and shows the canonical formatting of documents and plain values.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import eon

EXAMPLE_FILE = Path(__file__).parent / "example.eon"


class LogLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"


@dataclass
class Listener:
    host: str
    port: int
    tls: bool = False


@dataclass
class ServerConfig:
    name: str
    log_level: LogLevel
    listeners: List[Listener] = field(default_factory=list)
    limits: Dict[str, int] = field(default_factory=dict)
    motd: Optional[str] = None


def main():
    """Main example function."""
    print("Eon Example")
    print("=" * 50)

    source = EXAMPLE_FILE.read_text(encoding="utf-8")
    print(f"Source ({len(source)} characters):\n{source}")

    try:
        document = eon.parse(source)
    except eon.ParseError as e:
        print(eon.ErrorHandler().render(e, source, str(EXAMPLE_FILE)))
        return

    print(f"Top-level shape: {document.shape.value}")
    print(f"Comments kept: {len(document.comments())}")

    # Canonical form keeps every comment
    print("\nCanonical form:")
    print(eon.format(document))

    config = eon.from_value(document.to_value(), ServerConfig)
    print(f"✅ Loaded {config.name!r} with {len(config.listeners)} listeners")
    for listener in config.listeners:
        print(f"   {listener.host}:{listener.port} (tls={listener.tls})")

    # Plain values use the default line breaking
    config.listeners.append(Listener("0.0.0.0", 9090))
    config.limits["max_connections"] = 2048
    print("\nUpdated configuration:")
    print(eon.dumps(config))

    # Sum types and non-string keys
    palette = eon.Map([
        ("background", eon.Variant("Rgb", [30, 30, 30])),
        ("accent", eon.Variant("Hsl", [210, 0.8, 0.5])),
        ("none", "Transparent"),
        ((0, 0), "origin"),
    ])
    print("Palette:")
    print(eon.format_value(palette))

    print("Error report for a broken document:")
    broken = 'name: "demo"\nname: "again"\n'
    try:
        eon.parse(broken)
    except eon.ParseError as e:
        print(eon.ErrorHandler().render(e, broken, "broken.eon"))


if __name__ == "__main__":
    main()
