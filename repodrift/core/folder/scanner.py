"""
Directory walker for repository comparison.

Builds the FileIndex of a repository root:
- Recursive, depth-first traversal
- Ignore policy applied to directories during descent
- File extensions collected into a registry shared by both walks
- Fail-fast on unreadable directories
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from repodrift.core.errors import TraversalError
from repodrift.core.models import FileIndex


DEFAULT_IGNORED_DIRS = frozenset({
    '.git',
    'node_modules',
    'dist',
    'build',
    'coverage',
})


@dataclass(frozen=True)
class ScanOptions:
    """Options for directory walking."""
    ignored_dirs: frozenset[str] = DEFAULT_IGNORED_DIRS
    additional_patterns: tuple[str, ...] = ()
    follow_symlinks: bool = False

    @classmethod
    def with_patterns(cls, patterns: Optional[Iterable[str]]) -> 'ScanOptions':
        """Default ignore set plus user patterns (empty strings dropped)."""
        return cls(additional_patterns=tuple(p for p in (patterns or ()) if p))

    def should_ignore(self, entry_path: str) -> bool:
        """
        Check if a directory should be skipped.

        A directory is ignored when its basename is a default ignored
        name, when the full path contains an additional pattern, or
        when its basename equals an additional pattern.
        """
        basename = os.path.basename(entry_path)

        if basename in self.ignored_dirs:
            return True

        return any(
            pattern in entry_path or basename == pattern
            for pattern in self.additional_patterns
        )


@dataclass
class ExtensionRegistry:
    """
    Set of file extensions seen by the walkers of one engine.

    Both walks may add to it at the same time; adding an extension
    twice is a no-op.
    """
    _extensions: set[str] = field(default_factory=set)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def add(self, extension: str) -> None:
        with self._lock:
            self._extensions.add(extension)

    def snapshot(self) -> tuple[str, ...]:
        """Sorted copy of the extensions seen so far."""
        with self._lock:
            return tuple(sorted(self._extensions))

    def __contains__(self, extension: object) -> bool:
        with self._lock:
            return extension in self._extensions

    def __len__(self) -> int:
        with self._lock:
            return len(self._extensions)


class TreeWalker:
    """
    Walks a repository root and indexes its files.

    Ignored directories are pruned before descent, so nothing beneath
    them is visited. The ignore policy is not applied to file names.
    """

    def __init__(
        self,
        options: Optional[ScanOptions] = None,
        extensions: Optional[ExtensionRegistry] = None
    ):
        self.options = options or ScanOptions()
        self.extensions = extensions if extensions is not None else ExtensionRegistry()

    def walk(self, root_path: Path | str) -> FileIndex:
        """
        Index all non-ignored files under a directory.

        Args:
            root_path: Existing directory to walk

        Returns:
            Mapping of relative POSIX path to absolute path

        Raises:
            TraversalError: A directory could not be listed
        """
        root_path = Path(root_path)
        files: FileIndex = {}

        def on_walk_error(error: OSError) -> None:
            location = error.filename or str(root_path)
            logging.error(f"TreeWalker - Cannot list directory {location}: {error}")
            raise TraversalError(
                f"Failed to read directory {location}: {error.strerror or error}",
                path=location
            ) from error

        for dirpath, dirnames, filenames in os.walk(
            root_path,
            topdown=True,
            followlinks=self.options.follow_symlinks,
            onerror=on_walk_error
        ):
            current_path = Path(dirpath)

            # Filter directories in-place to control recursion
            kept = []
            for dirname in sorted(dirnames):
                if self.options.should_ignore(str(current_path / dirname)):
                    logging.debug(f"TreeWalker - Ignoring directory {current_path / dirname}")
                    continue
                kept.append(dirname)
            dirnames[:] = kept

            for filename in sorted(filenames):
                file_path = current_path / filename
                rel_path = file_path.relative_to(root_path).as_posix()

                self.extensions.add(os.path.splitext(filename)[1])
                files[rel_path] = str(file_path)

        logging.info(f"TreeWalker - Indexed {len(files)} files under {root_path}")
        return files
