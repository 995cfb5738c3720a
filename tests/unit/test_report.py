from __future__ import annotations

from repodrift.core.models import (
    ChangeSegment,
    ComparisonSummary,
    DetailedComparison,
    FileComparison,
    TotalFiles,
)
from repodrift.report import Style, format_comparison


def _comparison() -> DetailedComparison:
    changed = FileComparison(
        similarity=66.67,
        differences=(
            ChangeSegment.unchanged("line1\nline2\n", 2),
            ChangeSegment.removed_lines("old\n   \n", 2),
            ChangeSegment.added_lines("line3\n", 1),
        ),
        path="/r1/a.txt",
    )
    same = FileComparison(
        similarity=100.0,
        differences=(ChangeSegment.unchanged("X", 1),),
        path="/r1/b.txt",
    )
    summary = ComparisonSummary(
        total_files=TotalFiles(repo1=3, repo2=2),
        file_extensions=("", ".txt"),
        unique_to_repo1=("c.txt",),
        identical_files=("b.txt",),
        different_files=("a.txt",),
    )
    return DetailedComparison(summary=summary, file_comparisons={"a.txt": changed, "b.txt": same})


def test_plain_report_has_summary_and_file_blocks() -> None:
    report = format_comparison(_comparison(), use_colors=False)

    assert "Files in Repository 1: 3" in report
    assert "Files in Repository 2: 2" in report
    assert "File Extensions: , .txt" in report
    assert "  - Unique to Repo 1: 1 files" in report
    assert "  - Identical Files: 1" in report
    assert "  - Different Files: 1" in report
    assert "File: a.txt\nSimilarity: 66.67%\nChanges:\n  - old\n  + line3\n" in report
    assert "File: b.txt\nSimilarity: 100%\n\n" in report
    assert "\033[" not in report


def test_blank_only_changed_lines_are_not_listed() -> None:
    report = format_comparison(_comparison(), use_colors=False)

    assert "  -    " not in report
    assert "line1" not in report


def test_colored_report_uses_threshold_for_similarity_color() -> None:
    strict = format_comparison(_comparison(), use_colors=True, similarity_threshold=80)
    lenient = format_comparison(_comparison(), use_colors=True, similarity_threshold=50)

    assert f"{Style.RED}Similarity: 66.67%{Style.RESET}" in strict
    assert f"{Style.BLUE}Similarity: 66.67%{Style.RESET}" in lenient
    assert f"{Style.GREEN}  + line3{Style.RESET}" in strict
