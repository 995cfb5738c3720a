"""
Command line entry point for repodrift.

This module handles:
- Command line argument parsing
- Settings file loading
- Logging configuration
- Running one comparison and printing the report or JSON
- Mapping errors to exit codes
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TextIO

from repodrift import __version__
from repodrift.core.errors import RepoDriftError
from repodrift.core.folder.comparer import RepoComparator
from repodrift.report import format_comparison
from repodrift.services.settings import ApplicationSettings, SettingsManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "repodrift"

EXIT_OK = 0
EXIT_ERROR = 1


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    repo1: str = ""
    repo2: str = ""
    threshold: Optional[float] = None
    ignore_patterns: list[str] = field(default_factory=list)
    json_output: bool = False
    workers: Optional[int] = None
    config_file: Optional[str] = None
    no_color: bool = False
    log_level: Optional[str] = None


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

    def __init__(self, use_colors: bool = True, stream: Optional[TextIO] = None):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        stream = stream or sys.stderr
        self.use_colors = use_colors and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "WARNING", use_colors: bool = True) -> logging.Logger:
    """
    Configure application logging.

    Records go to stderr so that stdout only carries the report.

    Args:
        level: Log level string
        use_colors: Color records when stderr is a terminal

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=use_colors, stream=sys.stderr))
    root_logger.addHandler(console_handler)

    return root_logger


# =============================================================================
# Command Line Parsing
# =============================================================================

def split_patterns(value: Optional[str]) -> list[str]:
    """Split a comma-separated pattern list, dropping empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


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
        description="Compare two repositories and analyze their similarities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ./upstream ./fork                  Compare two checkouts
  %(prog)s -t 90 --ignore vendor,tmp a b      Stricter threshold, extra ignores
  %(prog)s --json a b > drift.json            Machine-readable output
        """
    )

    parser.add_argument('repo1', help='Path to first repository')
    parser.add_argument('repo2', help='Path to second repository')

    parser.add_argument(
        '-t', '--threshold',
        type=float,
        default=None,
        help='Similarity threshold percentage (default: 80)'
    )
    parser.add_argument(
        '--ignore',
        default=None,
        help='Additional ignore patterns (comma-separated)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Output results as JSON'
    )
    parser.add_argument(
        '-j', '--workers',
        type=int,
        default=None,
        help='Parallel file comparison workers'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Settings file path'
    )
    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output'
    )

    # Logging
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default=None,
        help='Log level'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {__version__}'
    )

    parsed = parser.parse_args(args)

    result = CommandLineArgs()
    result.repo1 = parsed.repo1
    result.repo2 = parsed.repo2
    result.threshold = parsed.threshold
    result.ignore_patterns = split_patterns(parsed.ignore)
    result.json_output = parsed.json
    result.workers = parsed.workers
    result.config_file = parsed.config
    result.no_color = parsed.no_color

    if parsed.verbose:
        result.log_level = 'DEBUG'
    else:
        result.log_level = parsed.log_level

    return result


# =============================================================================
# Comparison
# =============================================================================

def build_comparator(args: CommandLineArgs, settings: ApplicationSettings) -> RepoComparator:
    """Create the engine from arguments, falling back to settings."""
    comparison = settings.comparison

    threshold = args.threshold if args.threshold is not None else comparison.similarity_threshold
    patterns = list(comparison.ignore_patterns) + args.ignore_patterns

    return RepoComparator(
        args.repo1,
        args.repo2,
        similarity_threshold=threshold,
        additional_ignore_patterns=patterns,
        options=comparison.to_options(parallel_workers=args.workers),
    )


def run(args: CommandLineArgs, stdout: TextIO, stderr: TextIO) -> int:
    """
    Run one comparison and print its result.

    Returns:
        Exit code
    """
    try:
        settings = SettingsManager(Path(args.config_file) if args.config_file else None).settings
        use_colors = settings.output.use_colors and not args.no_color

        setup_logging(args.log_level or settings.output.log_level, use_colors)
        logging.info(f"Comparing {args.repo1} with {args.repo2}")

        print("Comparing repositories...", file=stderr)
        print(f"Repo 1: {args.repo1}", file=stderr)
        print(f"Repo 2: {args.repo2}\n", file=stderr)

        comparator = build_comparator(args, settings)
        comparison = comparator.compare_repositories()
    except (RepoDriftError, OSError) as e:
        logging.debug("Comparison failed", exc_info=True)
        print(f"Error: {e}", file=stderr)
        return EXIT_ERROR

    if args.json_output:
        stdout.write(json.dumps(comparison.to_dict(), indent=2))
        stdout.write('\n')
    else:
        stdout.write(format_comparison(
            comparison,
            use_colors=use_colors and stdout.isatty(),
            similarity_threshold=comparator.similarity_threshold,
        ))

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code (0 for success)
    """
    args = parse_arguments(argv)
    return run(args, sys.stdout, sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
