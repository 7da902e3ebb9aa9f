"""File formatting engine: finds Eon files and formats or checks them."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import pathspec

from ..error_handler import ErrorHandler
from ..formatter import Formatter
from ..io.file_writer import FileWriter
from ..parser import Parser
from ..types import FileResult, FormatRunResult, ParseError

IGNORE_FILES = (".gitignore", ".eonignore")
SKIPPED_DIRECTORIES = frozenset({".git"})

# (directory the ignore file lives in, its patterns)
_IgnoreRule = Tuple[Path, pathspec.PathSpec]


class FileFormattingEngine:
    """
    Formats or checks every Eon file under a set of paths.

    Files named explicitly are always processed. Directories are walked
    recursively, honouring ``.gitignore`` and ``.eonignore`` files and only
    picking files with the configured extension. Files are processed in
    parallel; one failing file never stops the others.
    """

    def __init__(self, parser: Optional[Parser] = None,
                 formatter: Optional[Formatter] = None,
                 file_writer: Optional[FileWriter] = None,
                 error_handler: Optional[ErrorHandler] = None,
                 extension: str = "eon",
                 max_workers: Optional[int] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the file formatting engine.

        Args:
            parser: Optional Parser instance
            formatter: Optional Formatter instance
            file_writer: Optional FileWriter instance
            error_handler: Optional ErrorHandler used to render parse errors
            extension: Extension (without the dot) of the files to process
            max_workers: Thread pool size; ``None`` lets the executor decide
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.error_handler = error_handler or ErrorHandler()
        self.parser = parser or Parser(error_handler=self.error_handler)
        self.formatter = formatter or Formatter()
        self.file_writer = file_writer or FileWriter(error_handler=self.error_handler)
        self.extension = extension.lstrip(".")
        self.max_workers = max_workers

    def run(self, paths: Sequence[str], check_only: bool = False) -> FormatRunResult:
        """
        Format (or check) all files found under ``paths``.

        Args:
            paths: Files and directories to process
            check_only: Report files that would change instead of rewriting them

        Returns:
            FormatRunResult with one FileResult per file
        """
        files, missing = self.discover(paths)
        for path in missing:
            self.logger.error(f"Path does not exist: {path}")

        if len(files) <= 1 or self.max_workers == 1:
            results = [self.format_file(path, check_only) for path in files]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(lambda path: self.format_file(path, check_only), files))

        run_result = FormatRunResult(results, check_only, missing)
        verb = "would reformat" if check_only else "reformatted"
        self.logger.info(f"Processed {len(results)} files: {len(run_result.changed)} {verb}, "
                         f"{len(run_result.failed)} failed")
        return run_result

    def format_file(self, path: str, check_only: bool = False) -> FileResult:
        """
        Format or check a single file.

        Args:
            path: File to process
            check_only: Do not write, only report whether the file would change

        Returns:
            FileResult; parse and I/O errors are recorded, not raised
        """
        source: Optional[str] = None
        try:
            source = self.file_writer.read_document(path)
            formatted = self.formatter.format_document(self.parser.parse(source))
        except ParseError as e:
            return FileResult(path, changed=False,
                              error=self.error_handler.report(e, source, path))
        except OSError as e:
            self.logger.error(f"Failed to read {path}: {e}")
            return FileResult(path, changed=False, error=f"error: cannot read {path}: {e}")

        changed = formatted != source
        if changed and not check_only:
            try:
                self.file_writer.write_document(path, formatted)
            except OSError as e:
                self.logger.error(f"Failed to write {path}: {e}")
                return FileResult(path, changed=True, error=f"error: cannot write {path}: {e}")
            self.logger.debug(f"Reformatted {path}")
        return FileResult(path, changed=changed)

    def discover(self, paths: Iterable[str]) -> Tuple[List[str], List[str]]:
        """
        Expand paths into the files to process.

        Returns:
            Tuple of (files in a stable order without duplicates, paths that do not exist)
        """
        files: List[str] = []
        missing: List[str] = []
        seen = set()

        for raw in paths:
            path = Path(raw)
            if path.is_file():
                found: Iterable[Path] = [path]
            elif path.is_dir():
                found = self._walk(path)
            else:
                missing.append(raw)
                continue
            for file_path in found:
                key = os.path.normpath(str(file_path))
                if key not in seen:
                    seen.add(key)
                    files.append(str(file_path))

        self.logger.debug(f"Discovered {len(files)} files with extension .{self.extension}")
        return files, missing

    def _walk(self, root: Path) -> List[Path]:
        found: List[Path] = []
        rules: List[_IgnoreRule] = []

        for directory, dirnames, filenames in os.walk(root):
            current = Path(directory)
            rules = [rule for rule in rules if _is_within(current, rule[0])]
            rules.extend(self._load_ignore_rules(current))

            dirnames[:] = sorted(
                name for name in dirnames
                if name not in SKIPPED_DIRECTORIES
                and not _is_ignored(current / name, rules, is_dir=True)
            )
            for name in sorted(filenames):
                file_path = current / name
                if file_path.suffix == f".{self.extension}" and not _is_ignored(file_path, rules):
                    found.append(file_path)
        return found

    def _load_ignore_rules(self, directory: Path) -> List[_IgnoreRule]:
        rules: List[_IgnoreRule] = []
        for name in IGNORE_FILES:
            ignore_file = directory / name
            if ignore_file.is_file():
                lines = ignore_file.read_text(encoding="utf-8", errors="replace").splitlines()
                rules.append((directory, pathspec.PathSpec.from_lines("gitwildmatch", lines)))
                self.logger.debug(f"Loaded ignore patterns from {ignore_file}")
        return rules


def _is_within(path: Path, directory: Path) -> bool:
    return path == directory or directory in path.parents


def _is_ignored(path: Path, rules: Sequence[_IgnoreRule], is_dir: bool = False) -> bool:
    for base, patterns in rules:
        relative = path.relative_to(base).as_posix()
        if is_dir:
            relative += "/"
        if patterns.match_file(relative):
            return True
    return False
