"""Command-line interface for Eon."""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__
from .engines import FileFormattingEngine
from .error_handler import ErrorHandler
from .formatter import FormatOptions, Formatter
from .io import FileWriter
from .parser import Parser
from .profiler import PerformanceProfiler
from .types import FormatRunResult, ParseError


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _run_format(paths: Tuple[str, ...], check: bool, ext: str, indent: Optional[str],
                jobs: Optional[int], verbose: bool) -> None:
    _configure_logging(verbose)
    options = FormatOptions()
    if indent is not None:
        options.indentation = indent.encode().decode("unicode_escape")

    engine = FileFormattingEngine(formatter=Formatter(options), extension=ext, max_workers=jobs)
    result = engine.run(paths, check_only=check)
    _report(result)
    sys.exit(result.exit_code)


def _report(result: FormatRunResult) -> None:
    for path in result.missing_paths:
        click.echo(f"❌ No such file or directory: {path}", err=True)

    for file_result in result.files:
        if not file_result.success:
            click.echo(file_result.error, err=True)
        elif file_result.changed:
            verb = "Would reformat" if result.check_only else "Reformatted"
            click.echo(f"{verb} {file_result.path}")

    changed = len(result.changed)
    failed = len(result.failed)
    unchanged = len(result.files) - changed - failed
    if result.check_only:
        summary = f"{changed} files would be reformatted, {unchanged} files already formatted"
    else:
        summary = f"{changed} files reformatted, {unchanged} files left unchanged"
    if failed:
        summary += f", {failed} files failed"
    icon = "❌" if result.exit_code else "✅"
    click.echo(f"{icon} {summary}", err=bool(result.exit_code))


@click.group()
@click.version_option(version=__version__)
def main():
    """Eon - format and check Eon configuration files."""
    pass


@main.command(name="format")
@click.argument('paths', nargs=-1, required=True)
@click.option('--check', is_flag=True, help='Report files that would change without writing them')
@click.option('--ext', default='eon', show_default=True, help='Extension of files to format in directories')
@click.option('--indent', default=None, help=r'Indentation unit (default: a tab, e.g. "  " or "\t")')
@click.option('--jobs', '-j', type=click.IntRange(min=1), default=None,
              help='Number of files to process in parallel')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def format_command(paths: Tuple[str, ...], check: bool, ext: str, indent: Optional[str],
                   jobs: Optional[int], verbose: bool):
    """Format Eon files and directories in place."""
    _run_format(paths, check, ext, indent, jobs, verbose)


@main.command()
@click.argument('paths', nargs=-1, required=True)
@click.option('--ext', default='eon', show_default=True, help='Extension of files to check in directories')
@click.option('--indent', default=None, help='Indentation unit (default: a tab)')
@click.option('--jobs', '-j', type=click.IntRange(min=1), default=None,
              help='Number of files to process in parallel')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def check(paths: Tuple[str, ...], ext: str, indent: Optional[str], jobs: Optional[int], verbose: bool):
    """Check that Eon files are formatted, without changing them."""
    _run_format(paths, True, ext, indent, jobs, verbose)


@main.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--iterations', '-n', type=click.IntRange(min=1), default=100, show_default=True,
              help='Number of parse/format cycles')
@click.option('--format', 'export_format', type=click.Choice(['summary', 'json', 'csv']),
              default='summary', show_default=True, help='Output format of the metrics')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def bench(input_file: Path, iterations: int, export_format: str, verbose: bool):
    """Measure how fast a document parses and formats."""
    _configure_logging(verbose)
    error_handler = ErrorHandler()
    source = None
    try:
        source = FileWriter(error_handler=error_handler).read_document(input_file)
        parser = Parser(error_handler=error_handler)
        formatter = Formatter()
        document = parser.parse(source)
    except ParseError as e:
        click.echo(error_handler.render(e, source, str(input_file)), err=True)
        sys.exit(1)

    size = len(source.encode("utf-8"))
    profiler = PerformanceProfiler()

    with profiler.profile_operation("parse", size, iterations):
        for _ in range(iterations):
            parser.parse(source)
            profiler.sample_performance()

    with profiler.profile_operation("format", size, iterations) as p:
        for _ in range(iterations):
            output = formatter.format_document(document)
            profiler.sample_performance()
        p.output_size = len(output.encode("utf-8"))

    click.echo(f"📊 {input_file} ({size} bytes)")
    click.echo(profiler.export_metrics(export_format))


if __name__ == '__main__':
    main()
