"""
Diff module for repository comparison.

Provides the line diff used to score common files.
"""

from repodrift.core.diff.line_diff import (
    LineDiffOptions,
    WhitespaceMode,
    count_lines,
    diff_lines,
    get_opcodes,
    split_lines,
)

__all__ = [
    'LineDiffOptions',
    'WhitespaceMode',
    'count_lines',
    'diff_lines',
    'get_opcodes',
    'split_lines',
]
