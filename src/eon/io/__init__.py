"""File I/O for Eon documents."""

from .file_writer import FileWriter

__all__ = ["FileWriter"]
