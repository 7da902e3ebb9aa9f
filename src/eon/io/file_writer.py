"""File reading and writing for Eon documents."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..error_handler import ErrorHandler

PathLike = Union[str, Path]


class FileWriter:
    """
    Reads and writes Eon documents on disk.

    Documents are always UTF-8. Reading rejects invalid UTF-8 with a
    ``ParseError`` of kind ``InvalidUtf8``; writing replaces the target file
    atomically so an interrupted run never leaves a half-written document.
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the file writer.

        Args:
            error_handler: Optional ErrorHandler used to decode file contents
            logger: Optional logger instance
        """
        self.error_handler = error_handler or ErrorHandler()
        self.logger = logger or logging.getLogger(__name__)

    def read_document(self, path: PathLike) -> str:
        """
        Read a document as text.

        Args:
            path: File to read

        Returns:
            The decoded document text, line endings untouched

        Raises:
            OSError: If the file cannot be read
            LexError: If the file is not valid UTF-8
        """
        data = Path(path).read_bytes()
        self.logger.debug(f"Read {len(data)} bytes from {path}")
        return self.error_handler.decode_input(data)

    def write_document(self, path: PathLike, text: str) -> Dict[str, Any]:
        """
        Write a document, replacing the file if it exists.

        Args:
            path: Destination file
            text: Document text to write

        Returns:
            Dictionary with file information
        """
        file_path = Path(path)
        self._ensure_directory_exists(file_path.parent)

        data = text.encode("utf-8")
        fd, tmp_name = tempfile.mkstemp(prefix=f".{file_path.name}.", suffix=".tmp",
                                        dir=str(file_path.parent))
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            if file_path.exists():
                os.chmod(tmp_name, file_path.stat().st_mode & 0o7777)
            os.replace(tmp_name, file_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        self.logger.debug(f"Wrote {len(data)} bytes to {file_path}")
        return {
            "path": str(file_path.absolute()),
            "size": len(data),
        }

    def _ensure_directory_exists(self, directory_path: Path) -> None:
        if str(directory_path):
            directory_path.mkdir(parents=True, exist_ok=True)
