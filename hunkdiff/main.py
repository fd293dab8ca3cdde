"""
Command line entry point for hunkdiff.

This module handles:
- Command line argument parsing
- Logging configuration
- Settings loading
- Running file or folder diffs and printing the result
- Exit status (0 identical, 1 differences, 2 error)
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional, TextIO

from hunkdiff.core.diff import InvalidObjectError, format_unified
from hunkdiff.core.models import ChangeType, DiffEntry, TextDiffResult
from hunkdiff.services.classifier import ContentClassifier
from hunkdiff.services.diff_service import (
    DiffService,
    EntryDiffOutcome,
    FileSystemContentProvider,
)
from hunkdiff.services.settings import ApplicationSettings, OutputFormat, SettingsManager
from hunkdiff.services.hashing import HashingService
from hunkdiff.services.tree_walk import same_content, scan_changes


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "hunkdiff"
APP_VERSION = "0.3.0"

EXIT_IDENTICAL = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2


# =============================================================================
# Enums
# =============================================================================

class CompareMode(Enum):
    """What the two positional paths are."""
    FILE_COMPARE = auto()
    FOLDER_COMPARE = auto()


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    old_path: str = ""
    new_path: str = ""
    mode: CompareMode = CompareMode.FILE_COMPARE
    output_format: Optional[OutputFormat] = None
    context_lines: Optional[int] = None
    config_file: Optional[str] = None
    log_level: Optional[str] = None
    log_file: Optional[str] = None


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%H:%M:%S'
        )
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Diff output goes to stdout, so log records go to stderr.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=sys.stderr.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return root_logger


# =============================================================================
# Command Line Parsing
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Unified diff with git-style hunks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s old.txt new.txt               Diff two files
  %(prog)s old_dir new_dir               Diff every changed file in two trees
  %(prog)s --stat old_dir new_dir        Per-file added/removed counts
        """
    )

    parser.add_argument('old', help='Old file or folder')
    parser.add_argument('new', help='New file or folder')

    format_group = parser.add_mutually_exclusive_group()
    format_group.add_argument(
        '--stat',
        action='store_true',
        help='Print added/removed line counts per file'
    )
    format_group.add_argument(
        '--name-only',
        action='store_true',
        help='Print only the names of changed files'
    )

    parser.add_argument(
        '-U', '--unified',
        type=int,
        metavar='N',
        help='Lines of context around each change'
    )
    parser.add_argument(
        '-c', '--config',
        help='Configuration file path'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Log level'
    )
    parser.add_argument(
        '--log-file',
        help='Also write logs to this file'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    result = CommandLineArgs()
    result.old_path = parsed.old
    result.new_path = parsed.new
    result.context_lines = parsed.unified
    result.config_file = parsed.config
    result.log_file = parsed.log_file

    if parsed.stat:
        result.output_format = OutputFormat.STAT
    elif parsed.name_only:
        result.output_format = OutputFormat.NAME_ONLY

    if parsed.verbose:
        result.log_level = 'DEBUG'
    elif parsed.log_level:
        result.log_level = parsed.log_level

    if Path(parsed.old).is_dir() or Path(parsed.new).is_dir():
        result.mode = CompareMode.FOLDER_COMPARE

    return result


# =============================================================================
# Running
# =============================================================================

def file_entry(old_path: Path, new_path: Path) -> DiffEntry:
    """Diff entry for comparing two single files."""
    if not old_path.exists():
        return DiffEntry(None, new_path.name, ChangeType.ADD)
    if not new_path.exists():
        return DiffEntry(old_path.name, None, ChangeType.DELETE)
    return DiffEntry(old_path.name, new_path.name, ChangeType.MODIFY)


def print_outcomes(
    outcomes: list[EntryDiffOutcome],
    output_format: OutputFormat,
    out: TextIO
) -> int:
    """Print diff outcomes and return the exit status."""
    status = EXIT_IDENTICAL

    for outcome in outcomes:
        if not outcome.success:
            logging.error(f"{outcome.diff_entry.file_path}: {outcome.error}")
            status = EXIT_ERROR
            continue

        result = outcome.result
        if result.is_identical:
            continue
        if status == EXIT_IDENTICAL:
            status = EXIT_DIFFERENT

        path = result.diff_entry.file_path
        if output_format == OutputFormat.NAME_ONLY:
            out.write(f"{path}\n")
        elif output_format == OutputFormat.STAT:
            if isinstance(result, TextDiffResult):
                out.write(f" {path} | {result.statistics}\n")
            else:
                out.write(f" {path} | Bin\n")
        else:
            out.write(format_unified(result))

    return status


def run(args: CommandLineArgs, settings: ApplicationSettings, out: Optional[TextIO] = None) -> int:
    """Run the diff described by ``args``, writing the output to ``out`` (stdout by default)."""
    out = out or sys.stdout
    old_path = Path(args.old_path)
    new_path = Path(args.new_path)

    if not old_path.exists() and not new_path.exists():
        logging.error(f"Neither {old_path} nor {new_path} exists")
        return EXIT_ERROR

    diff_settings = settings.diff
    if args.context_lines is not None:
        diff_settings.context_lines = args.context_lines
    output_format = args.output_format or settings.output.output_format

    with ContentClassifier(diff_settings) as classifier:
        if args.mode == CompareMode.FOLDER_COMPARE:
            provider = FileSystemContentProvider(
                old_path, new_path, max_size=diff_settings.max_text_size
            )
            service = DiffService(provider, classifier=classifier)
            entries = scan_changes(old_path, new_path)
            outcomes = service.diff_entries(entries)
        else:
            provider = FileSystemContentProvider(
                old_path.parent, new_path.parent, max_size=diff_settings.max_text_size
            )
            service = DiffService(provider, classifier=classifier)
            entry = file_entry(old_path, new_path)
            if entry.change_type == ChangeType.MODIFY and same_content(old_path, new_path, HashingService()):
                return EXIT_IDENTICAL
            try:
                outcomes = [EntryDiffOutcome(entry, result=service.diff_entry(entry))]
            except InvalidObjectError as e:
                outcomes = [EntryDiffOutcome(entry, error=str(e))]

        return print_outcomes(outcomes, output_format, out)


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    args = parse_arguments(argv)

    config_path = Path(args.config_file) if args.config_file else None
    settings = SettingsManager(config_path).settings

    setup_logging(
        args.log_level or settings.output.log_level,
        Path(args.log_file) if args.log_file else None
    )
    logging.debug(f"Starting {APP_NAME} {APP_VERSION}")

    try:
        return run(args, settings)
    except OSError as e:
        logging.error(f"Diff failed: {e}")
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
