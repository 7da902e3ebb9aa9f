"""Engines that apply the formatter to files on disk."""

from .file_formatting_engine import FileFormattingEngine

__all__ = ["FileFormattingEngine"]
