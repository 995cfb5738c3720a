"""
Folder comparison module.

Provides functionality for:
- Recursive repository walking with an ignore policy
- Repository-to-repository comparison and classification
"""

from repodrift.core.folder.scanner import (
    DEFAULT_IGNORED_DIRS,
    ExtensionRegistry,
    ScanOptions,
    TreeWalker,
)
from repodrift.core.folder.comparer import (
    DEFAULT_SIMILARITY_THRESHOLD,
    CompareOptions,
    CompareTask,
    RepoComparator,
    calculate_similarity,
)

__all__ = [
    # Scanner
    'DEFAULT_IGNORED_DIRS',
    'ExtensionRegistry',
    'ScanOptions',
    'TreeWalker',
    # Comparer
    'DEFAULT_SIMILARITY_THRESHOLD',
    'CompareOptions',
    'CompareTask',
    'RepoComparator',
    'calculate_similarity',
]
