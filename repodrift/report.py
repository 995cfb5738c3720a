"""
Human-readable report for a DetailedComparison.
"""

from __future__ import annotations

from repodrift.core.folder.comparer import DEFAULT_SIMILARITY_THRESHOLD
from repodrift.core.models import DetailedComparison, FileComparison, FileStatus


class Style:
    """ANSI escape sequences used by the report."""
    BOLD = '\033[1m'
    GRAY = '\033[90m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    RESET = '\033[0m'


class ReportFormatter:
    """Renders the summary block and one block per common file."""

    STATUS_COLORS = {
        FileStatus.IDENTICAL: Style.GREEN,
        FileStatus.SIMILAR: Style.BLUE,
        FileStatus.DIFFERENT: Style.RED,
    }

    def __init__(
        self,
        use_colors: bool = True,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    ):
        self.use_colors = use_colors
        self.similarity_threshold = similarity_threshold

    def format(self, comparison: DetailedComparison) -> str:
        summary = comparison.summary
        lines: list[str] = []

        lines.append(self._style('Repository Comparison Summary', Style.BOLD, Style.BLUE))
        lines.append(self._style('=============================', Style.GRAY))
        lines.append('')
        lines.append(f"Files in Repository 1: {summary.total_files.repo1}")
        lines.append(f"Files in Repository 2: {summary.total_files.repo2}")
        lines.append('')
        lines.append(f"File Extensions: {', '.join(summary.file_extensions)}")
        lines.append('')
        lines.append(self._style('Quick Stats:', Style.BOLD))
        lines.append(self._style(f"  - Unique to Repo 1: {len(summary.unique_to_repo1)} files", Style.YELLOW))
        lines.append(self._style(f"  - Unique to Repo 2: {len(summary.unique_to_repo2)} files", Style.YELLOW))
        lines.append(self._style(f"  - Identical Files: {len(summary.identical_files)}", Style.GREEN))
        lines.append(self._style(f"  - Similar Files: {len(summary.similar_files)}", Style.BLUE))
        lines.append(self._style(f"  - Different Files: {len(summary.different_files)}", Style.RED))
        lines.append('')
        lines.append(self._style('Detailed File Comparisons', Style.BOLD, Style.BLUE))
        lines.append(self._style('-------------------------', Style.GRAY))
        lines.append('')

        for rel_path, file_comparison in comparison.file_comparisons.items():
            lines.extend(self._format_file(rel_path, file_comparison))
            lines.append('')

        return '\n'.join(lines) + '\n'

    def _format_file(self, rel_path: str, comparison: FileComparison) -> list[str]:
        status = FileStatus.classify(comparison.similarity, self.similarity_threshold)
        lines = [
            self._style(f"File: {rel_path}", Style.BOLD),
            self._style(f"Similarity: {comparison.similarity:g}%", self.STATUS_COLORS[status]),
        ]

        if len(comparison.differences) > 1:
            lines.append('Changes:')
            for segment in comparison.iter_changes():
                color = Style.GREEN if segment.added else Style.RED
                for line in segment.iter_lines():
                    # Blank-only lines are not listed
                    if not line.strip():
                        continue
                    lines.append(self._style(f"  {segment.prefix} {line}", color))

        return lines

    def _style(self, text: str, *codes: str) -> str:
        if not self.use_colors:
            return text
        return f"{''.join(codes)}{text}{Style.RESET}"


def format_comparison(
    comparison: DetailedComparison,
    use_colors: bool = True,
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
) -> str:
    """Render a comparison as a multi-section text report."""
    return ReportFormatter(use_colors, similarity_threshold).format(comparison)
