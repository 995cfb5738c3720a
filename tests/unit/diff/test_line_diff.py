from __future__ import annotations

import random

import pytest

from repodrift.core.diff import (
    LineDiffOptions,
    WhitespaceMode,
    count_lines,
    diff_lines,
    get_opcodes,
    split_lines,
)
from repodrift.core.models import ChangeSegment, ChangeType


def _shape(segments: list[ChangeSegment]) -> list[tuple[ChangeType, int]]:
    return [(s.change_type, s.count) for s in segments]


def test_split_lines_keeps_terminators_and_last_partial_line() -> None:
    assert split_lines("a\nb\r\nc") == ["a\n", "b\r\n", "c"]
    assert split_lines("a\n\n") == ["a\n", "\n"]
    assert split_lines("") == []
    assert count_lines("one\ntwo\n") == 2


def test_two_empty_texts_give_no_segments() -> None:
    assert diff_lines("", "") == []


def test_equal_texts_give_one_unchanged_segment() -> None:
    segments = diff_lines("X", "X")

    assert segments == [ChangeSegment.unchanged("X", 1)]


def test_appended_line_matches_unterminated_last_line() -> None:
    segments = diff_lines("line1\nline2", "line1\nline2\nline3")

    assert _shape(segments) == [(ChangeType.UNCHANGED, 2), (ChangeType.ADDED, 1)]
    assert segments[0].value == "line1\nline2"
    assert segments[1].value == "line3"


def test_replaced_line_is_removed_then_added() -> None:
    segments = diff_lines("a\nb\nc\n", "a\nx\nc\n")

    assert _shape(segments) == [
        (ChangeType.UNCHANGED, 1),
        (ChangeType.REMOVED, 1),
        (ChangeType.ADDED, 1),
        (ChangeType.UNCHANGED, 1),
    ]
    assert segments[1].removed and segments[1].value == "b\n"
    assert segments[2].added and segments[2].value == "x\n"


def test_disjoint_texts_have_no_unchanged_segment() -> None:
    segments = diff_lines("a\nb\n", "c\nd\n")

    assert _shape(segments) == [(ChangeType.REMOVED, 2), (ChangeType.ADDED, 2)]


def test_reordered_lines_count_as_changes() -> None:
    segments = diff_lines("first\nsecond\n", "second\nfirst\n")

    changed = sum(s.count for s in segments if s.is_change)
    assert changed == 2


def test_line_endings_respected_when_not_ignored() -> None:
    options = LineDiffOptions(ignore_line_endings=False)

    assert _shape(diff_lines("a\r\n", "a\n")) == [(ChangeType.UNCHANGED, 1)]
    assert _shape(diff_lines("a\r\n", "a\n", options)) == [
        (ChangeType.REMOVED, 1),
        (ChangeType.ADDED, 1),
    ]


def test_case_and_whitespace_options_relax_matching() -> None:
    assert _shape(diff_lines("Hello\n", "hello\n", LineDiffOptions(ignore_case=True))) == [
        (ChangeType.UNCHANGED, 1)
    ]

    trailing = LineDiffOptions(whitespace_mode=WhitespaceMode.IGNORE_TRAILING)
    assert _shape(diff_lines("x = 1   \n", "x = 1\n", trailing)) == [(ChangeType.UNCHANGED, 1)]

    collapse = LineDiffOptions(whitespace_mode=WhitespaceMode.IGNORE_ALL)
    assert _shape(diff_lines("x  =  1\n", "x=1\n", collapse)) == [(ChangeType.UNCHANGED, 1)]


def test_whitespace_mode_from_string_accepts_aliases_and_names() -> None:
    assert WhitespaceMode.from_string("trailing") is WhitespaceMode.IGNORE_TRAILING
    assert WhitespaceMode.from_string("ALL") is WhitespaceMode.IGNORE_ALL
    assert WhitespaceMode.from_string("ignore_trailing") is WhitespaceMode.IGNORE_TRAILING


def test_whitespace_mode_from_string_rejects_non_strings() -> None:
    with pytest.raises(KeyError):
        WhitespaceMode.from_string(1)  # type: ignore[arg-type]
    with pytest.raises(KeyError):
        WhitespaceMode.from_string("sometimes")


def _unchanged_count(old: str, new: str) -> int:
    return sum(s.count for s in diff_lines(old, new) if not s.is_change)


def _lcs_length(left: list[str], right: list[str]) -> int:
    previous = [0] * (len(right) + 1)
    for item in left:
        current = [0]
        for j, other in enumerate(right):
            current.append(previous[j] + 1 if item == other else max(previous[j + 1], current[j]))
        previous = current
    return previous[-1]


def test_opcodes_follow_a_longest_common_subsequence() -> None:
    assert get_opcodes(["a", "c", "a"], ["c", "b", "a"]) == [
        ("delete", 0, 1, 0, 0),
        ("equal", 1, 2, 0, 1),
        ("insert", 2, 2, 1, 2),
        ("equal", 2, 3, 2, 3),
    ]
    assert get_opcodes([], []) == []
    assert get_opcodes(["x"], []) == [("delete", 0, 1, 0, 0)]


def test_unchanged_count_is_the_same_in_both_directions() -> None:
    assert _unchanged_count("a\nc\na\n", "c\nb\na\n") == 2
    assert _unchanged_count("c\nb\na\n", "a\nc\na\n") == 2


def test_unchanged_count_is_maximal_for_generated_texts() -> None:
    rng = random.Random(20240601)

    for _ in range(300):
        left = [rng.choice("abc") for _ in range(rng.randint(0, 9))]
        right = [rng.choice("abc") for _ in range(rng.randint(0, 9))]
        old = "".join(f"{line}\n" for line in left)
        new = "".join(f"{line}\n" for line in right)

        expected = _lcs_length(left, right)
        assert _unchanged_count(old, new) == expected
        assert _unchanged_count(new, old) == expected


def test_segments_rebuild_both_texts() -> None:
    old = "keep\ndrop\nkeep too\nmove\n"
    new = "move\nkeep\nkeep too\nnew\n"

    segments = diff_lines(old, new)

    assert "".join(s.value for s in segments if not s.added) == old
    assert "".join(s.value for s in segments if not s.removed) == new
