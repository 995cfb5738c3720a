"""
Repository comparison engine.

Compares two directory trees and identifies:
- Files only in repository 1
- Files only in repository 2
- Identical, similar and different common files, scored by line diff
"""

from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence

from repodrift.core.diff.line_diff import LineDiffOptions, count_lines, diff_lines
from repodrift.core.errors import ConfigurationError, FileReadError
from repodrift.core.folder.scanner import ExtensionRegistry, ScanOptions, TreeWalker
from repodrift.core.models import (
    ChangeSegment,
    ComparisonSummary,
    DetailedComparison,
    FileComparison,
    FileIndex,
    FileStatus,
    TotalFiles,
)
from repodrift.services.file_io import FileIOService


DEFAULT_SIMILARITY_THRESHOLD = 80


@dataclass
class CompareOptions:
    """Options for repository comparison."""
    # Performance
    parallel_workers: int = 8

    # Content
    encoding: str = 'utf-8'
    diff_options: LineDiffOptions = field(default_factory=LineDiffOptions)


def calculate_similarity(segments: Sequence[ChangeSegment]) -> float:
    """
    Percentage of lines left unchanged by a diff, rounded half up to 2
    decimals.

    Every segment's lines count towards the total; added and removed
    segments count as changed.
    """
    total_lines = sum(segment.count for segment in segments)
    changed_lines = sum(segment.count for segment in segments if segment.is_change)

    # Two empty files are identical
    if total_lines == 0:
        return 100.0

    similarity = (total_lines - changed_lines) / total_lines * 100
    return math.floor(similarity * 100 + 0.5) / 100


class RepoComparator:
    """
    Compares two repository trees.

    The extension registry belongs to the instance, so repeated
    comparisons report every extension seen by this comparator.
    """

    def __init__(
        self,
        repo1_path: Path | str,
        repo2_path: Path | str,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        additional_ignore_patterns: Optional[Iterable[str]] = None,
        options: Optional[CompareOptions] = None
    ):
        self.repo1_path = Path(repo1_path).resolve()
        self.repo2_path = Path(repo2_path).resolve()
        self.similarity_threshold = similarity_threshold
        self.options = options or CompareOptions()
        self.scan_options = ScanOptions.with_patterns(additional_ignore_patterns)
        self.extensions = ExtensionRegistry()
        self._file_io = FileIOService(encoding=self.options.encoding)

        self._validate()

    def _validate(self) -> None:
        """Validate roots and threshold before any traversal."""
        for number, repo_path in ((1, self.repo1_path), (2, self.repo2_path)):
            if not repo_path.exists():
                logging.error(f"RepoComparator - Repository {number} path not found: {repo_path}")
                raise ConfigurationError(f"Repository {number} path does not exist: {repo_path}")
            if not repo_path.is_dir():
                logging.error(f"RepoComparator - Repository {number} path is not a directory: {repo_path}")
                raise ConfigurationError(f"Repository {number} path is not a directory: {repo_path}")

        if not 0 <= self.similarity_threshold <= 100:
            raise ConfigurationError(
                f"Similarity threshold must be between 0 and 100: {self.similarity_threshold}"
            )

        if self.options.parallel_workers < 1:
            raise ConfigurationError(
                f"Parallel workers must be at least 1: {self.options.parallel_workers}"
            )

    def compare_repositories(self) -> DetailedComparison:
        """
        Compare the two repositories.

        Returns:
            DetailedComparison with the summary and one FileComparison
            per common path

        Raises:
            TraversalError: A directory could not be listed
            FileReadError: A common file could not be read or decoded
        """
        walker = TreeWalker(self.scan_options, self.extensions)

        with ThreadPoolExecutor(max_workers=2) as executor:
            repo1_future = executor.submit(walker.walk, self.repo1_path)
            repo2_future = executor.submit(walker.walk, self.repo2_path)

            repo1_files = repo1_future.result()
            repo2_files = repo2_future.result()

        repo1_paths = set(repo1_files)
        repo2_paths = set(repo2_files)

        common_paths = sorted(repo1_paths & repo2_paths)
        unique_to_repo1 = sorted(repo1_paths - repo2_paths)
        unique_to_repo2 = sorted(repo2_paths - repo1_paths)

        logging.info(
            f"RepoComparator - {len(common_paths)} common, "
            f"{len(unique_to_repo1)} only in repository 1, "
            f"{len(unique_to_repo2)} only in repository 2"
        )

        file_comparisons = self._compare_common(common_paths, repo1_files, repo2_files)

        classified: dict[FileStatus, list[str]] = {status: [] for status in FileStatus}
        for rel_path in common_paths:
            status = FileStatus.classify(
                file_comparisons[rel_path].similarity,
                self.similarity_threshold
            )
            classified[status].append(rel_path)

        summary = ComparisonSummary(
            total_files=TotalFiles(repo1=len(repo1_files), repo2=len(repo2_files)),
            file_extensions=self.extensions.snapshot(),
            unique_to_repo1=tuple(unique_to_repo1),
            unique_to_repo2=tuple(unique_to_repo2),
            identical_files=tuple(classified[FileStatus.IDENTICAL]),
            similar_files=tuple(classified[FileStatus.SIMILAR]),
            different_files=tuple(classified[FileStatus.DIFFERENT]),
        )

        return DetailedComparison(
            summary=summary,
            file_comparisons={p: file_comparisons[p] for p in common_paths}
        )

    def compare_async(self) -> 'CompareTask':
        """
        Start the comparison on a background thread.

        Returns a CompareTask whose result() waits for completion.
        """
        task = CompareTask(self)
        task.start()
        return task

    def compare_files(self, file1_path: str, file2_path: str) -> FileComparison:
        """
        Compare one file pair.

        Raises:
            FileReadError: Either file could not be read or decoded
        """
        try:
            content1 = self._file_io.read_text(file1_path)
            content2 = self._file_io.read_text(file2_path)
        except (OSError, UnicodeDecodeError) as e:
            logging.error(f"RepoComparator - Error comparing files {file1_path} and {file2_path}: {e}")
            raise FileReadError(
                f"Error comparing files {file1_path} and {file2_path}: {e}",
                file1_path,
                file2_path
            ) from e

        if content1.digest.matches(content2.digest):
            differences = self._identical_segments(content1.text)
        else:
            differences = diff_lines(content1.text, content2.text, self.options.diff_options)

        return FileComparison(
            similarity=calculate_similarity(differences),
            differences=tuple(differences),
            path=file1_path,
            left_hash=content1.digest.hash_hex,
            right_hash=content2.digest.hash_hex,
        )

    def _identical_segments(self, text: str) -> list[ChangeSegment]:
        """Segments the line diff yields for two equal texts."""
        line_count = count_lines(text)
        if line_count == 0:
            return []
        return [ChangeSegment.unchanged(text, line_count)]

    def _compare_common(
        self,
        common_paths: Sequence[str],
        repo1_files: FileIndex,
        repo2_files: FileIndex
    ) -> dict[str, FileComparison]:
        """Compare every common path; the first failure aborts the rest."""
        results: dict[str, FileComparison] = {}

        if self.options.parallel_workers == 1 or len(common_paths) < 2:
            for rel_path in common_paths:
                results[rel_path] = self.compare_files(repo1_files[rel_path], repo2_files[rel_path])
            return results

        with ThreadPoolExecutor(max_workers=self.options.parallel_workers) as executor:
            futures: dict[Future, str] = {
                executor.submit(
                    self.compare_files,
                    repo1_files[rel_path],
                    repo2_files[rel_path]
                ): rel_path
                for rel_path in common_paths
            }

            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)

            for future in done:
                error = future.exception()
                if error is not None:
                    for pending in not_done:
                        pending.cancel()
                    logging.error(f"RepoComparator - Comparison aborted at {futures[future]}")
                    raise error

            for future in done:
                results[futures[future]] = future.result()

        return results


class CompareTask:
    """
    Background comparison wrapper.

    Runs RepoComparator.compare_repositories() on its own thread.
    """

    def __init__(self, comparator: RepoComparator):
        self._comparator = comparator
        self._result: Optional[DetailedComparison] = None
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self.run, name='repodrift-compare', daemon=True)

    @property
    def is_done(self) -> bool:
        return not self._thread.is_alive() and (self._result is not None or self._error is not None)

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def start(self) -> None:
        self._thread.start()

    def run(self) -> None:
        """Run the comparison, recording its result or error."""
        try:
            self._result = self._comparator.compare_repositories()
        except Exception as e:
            self._error = e

    def result(self, timeout: Optional[float] = None) -> DetailedComparison:
        """
        Wait for the comparison and return its result.

        Re-raises the comparison's exception if it failed.
        """
        self._thread.join(timeout)
        if self._thread.is_alive():
            raise TimeoutError("Comparison still running")
        if self._error is not None:
            raise self._error
        return self._result
