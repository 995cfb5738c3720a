"""
Core data models for repository comparison.

This module defines the structures passed between the tree walker,
the comparison engine and the report formatter:
- Line diff models (ChangeSegment)
- Per-file comparison results
- Run summary and the top-level DetailedComparison

All models are:
- Immutable once returned by the engine
- Serializable through to_dict() (the JSON output of the CLI)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Iterator


# Relative POSIX path -> absolute path, one per repository root
FileIndex = dict[str, str]


# =============================================================================
# Enumerations
# =============================================================================

class ChangeType(Enum):
    """Type of a segment in a line diff."""
    UNCHANGED = auto()  # Lines present in both files
    ADDED = auto()      # Lines only in the second/new file
    REMOVED = auto()    # Lines only in the first/old file


class FileStatus(Enum):
    """Classification of a common file."""
    IDENTICAL = auto()
    SIMILAR = auto()
    DIFFERENT = auto()

    @classmethod
    def classify(cls, similarity: float, threshold: float) -> 'FileStatus':
        """Classify a similarity percentage against a threshold."""
        if similarity == 100:
            return cls.IDENTICAL
        if similarity >= threshold:
            return cls.SIMILAR
        return cls.DIFFERENT


# =============================================================================
# Line Diff Models
# =============================================================================

@dataclass(frozen=True)
class ChangeSegment:
    """
    A run of consecutive lines sharing one change type.

    ``value`` holds the lines with their terminators, ``count`` the
    number of lines in the run.
    """
    change_type: ChangeType
    value: str
    count: int

    @classmethod
    def unchanged(cls, value: str, count: int) -> 'ChangeSegment':
        return cls(ChangeType.UNCHANGED, value, count)

    @classmethod
    def added_lines(cls, value: str, count: int) -> 'ChangeSegment':
        return cls(ChangeType.ADDED, value, count)

    @classmethod
    def removed_lines(cls, value: str, count: int) -> 'ChangeSegment':
        return cls(ChangeType.REMOVED, value, count)

    @property
    def added(self) -> bool:
        return self.change_type == ChangeType.ADDED

    @property
    def removed(self) -> bool:
        return self.change_type == ChangeType.REMOVED

    @property
    def is_change(self) -> bool:
        """True for added or removed segments."""
        return self.change_type != ChangeType.UNCHANGED

    @property
    def prefix(self) -> str:
        """Get the diff prefix character."""
        prefixes = {
            ChangeType.UNCHANGED: ' ',
            ChangeType.ADDED: '+',
            ChangeType.REMOVED: '-',
        }
        return prefixes[self.change_type]

    def iter_lines(self) -> Iterator[str]:
        """Iterate over the segment's lines without terminators."""
        yield from self.value.splitlines()

    def to_dict(self) -> dict[str, Any]:
        return {
            'value': self.value,
            'count': self.count,
            'added': self.added,
            'removed': self.removed,
        }


# =============================================================================
# Comparison Models
# =============================================================================

@dataclass(frozen=True)
class FileComparison:
    """Result of comparing one relative path present in both trees."""
    similarity: float                     # 0-100, two decimals
    differences: tuple[ChangeSegment, ...]
    path: str                             # Absolute path in repository 1
    left_hash: str = ""                   # xxh64 of repository 1 bytes
    right_hash: str = ""                  # xxh64 of repository 2 bytes

    def iter_changes(self) -> Iterator[ChangeSegment]:
        """Iterate over only the added/removed segments."""
        for segment in self.differences:
            if segment.is_change:
                yield segment

    def to_dict(self) -> dict[str, Any]:
        return {
            'similarity': self.similarity,
            'differences': [s.to_dict() for s in self.differences],
            'path': self.path,
            'leftHash': self.left_hash,
            'rightHash': self.right_hash,
        }


@dataclass(frozen=True)
class TotalFiles:
    """File counts per repository."""
    repo1: int = 0
    repo2: int = 0


@dataclass(frozen=True)
class ComparisonSummary:
    """Aggregate result of one comparison run."""
    total_files: TotalFiles = field(default_factory=TotalFiles)
    file_extensions: tuple[str, ...] = ()
    unique_to_repo1: tuple[str, ...] = ()
    unique_to_repo2: tuple[str, ...] = ()
    identical_files: tuple[str, ...] = ()
    similar_files: tuple[str, ...] = ()
    different_files: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            'totalFiles': {
                'repo1': self.total_files.repo1,
                'repo2': self.total_files.repo2,
            },
            'fileExtensions': list(self.file_extensions),
            'uniqueToRepo1': list(self.unique_to_repo1),
            'uniqueToRepo2': list(self.unique_to_repo2),
            'identicalFiles': list(self.identical_files),
            'similarFiles': list(self.similar_files),
            'differentFiles': list(self.different_files),
        }


@dataclass(frozen=True)
class DetailedComparison:
    """
    Complete result of a repository comparison.

    The only value the engine returns; the formatter and the JSON
    output are both built from it.
    """
    summary: ComparisonSummary
    file_comparisons: dict[str, FileComparison] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            'summary': self.summary.to_dict(),
            'fileComparisons': {
                rel_path: comparison.to_dict()
                for rel_path, comparison in self.file_comparisons.items()
            },
        }
