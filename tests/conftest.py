"""Pytest configuration and fixtures."""

import pytest
import tempfile
from pathlib import Path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def formatted_document():
    """A small configuration document already in canonical form."""
    return (
        "// Server configuration\n"
        "name: \"demo\"\n"
        "\n"
        "port: 8080 // default\n"
        "\n"
        "tags: [\"a\", \"b\"]\n"
        "\n"
        "// Colors\n"
        "color: \"Rgb\"(255, 0, 0)\n"
        "\n"
        "limits: {\n"
        "\tmax: 10\n"
        "\tmin: -1.5\n"
        "}\n"
    )


@pytest.fixture
def messy_document():
    """The same document as ``formatted_document`` with non-canonical layout."""
    return (
        "// Server configuration\n"
        "name: 'demo',\n"
        "port: 8080, // default\n"
        "tags: [\"a\" \"b\"]\n"
        "// Colors\n"
        "color: \"Rgb\"(255 0 0)\n"
        "limits: {\n"
        "  max: 10,\n"
        "  min: -1.5,\n"
        "}\n"
    )


@pytest.fixture
def json_document():
    """A plain JSON document."""
    return (
        '{"users": [{"name": "Alice", "age": 30, "admin": true}, '
        '{"name": "Bob", "age": 25.5, "admin": false, "manager": null}], '
        '"escaped": "line\\nbreak \\"quoted\\" \\u00e9"}'
    )
