"""
Line diff engine.

Turns two texts into an ordered list of ChangeSegments:
- Lines are matched by a minimal (longest common subsequence) diff
- Matching keys can ignore line endings, whitespace and case
- Consecutive lines with the same change type are grouped into one segment
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Hashable, Optional, Sequence

from repodrift.core.models import ChangeSegment, ChangeType


_LINE_RE = re.compile(r'[^\n]*\n|[^\n]+')


class WhitespaceMode(Enum):
    """Whitespace handling modes."""
    EXACT = auto()            # Compare whitespace exactly
    IGNORE_TRAILING = auto()  # Ignore trailing whitespace
    IGNORE_ALL = auto()       # Ignore all whitespace

    @classmethod
    def from_string(cls, value: str) -> 'WhitespaceMode':
        """
        Create from a settings/CLI value ('exact', 'trailing', 'all').

        Raises:
            KeyError: Unknown mode or a value that is not a string
        """
        if not isinstance(value, str):
            raise KeyError(value)

        aliases = {
            'exact': cls.EXACT,
            'trailing': cls.IGNORE_TRAILING,
            'all': cls.IGNORE_ALL,
        }
        try:
            return aliases[value.lower()]
        except KeyError:
            return cls[value.upper()]


@dataclass(frozen=True)
class LineDiffOptions:
    """Options controlling how lines are matched."""
    ignore_line_endings: bool = True
    whitespace_mode: WhitespaceMode = WhitespaceMode.EXACT
    ignore_case: bool = False

    def normalize_line(self, line: str) -> str:
        """Normalize a line into its matching key."""
        result = line

        if self.ignore_line_endings:
            result = result.rstrip('\r\n')

        if self.whitespace_mode == WhitespaceMode.IGNORE_TRAILING:
            result = result.rstrip()
        elif self.whitespace_mode == WhitespaceMode.IGNORE_ALL:
            result = ''.join(result.split())

        if self.ignore_case:
            result = result.lower()

        return result


def split_lines(text: str) -> list[str]:
    """Split text into lines, keeping each line's terminator."""
    return _LINE_RE.findall(text)


def count_lines(text: str) -> int:
    """Number of lines split_lines() would return."""
    return len(split_lines(text))


def diff_lines(
    old: str,
    new: str,
    options: Optional[LineDiffOptions] = None
) -> list[ChangeSegment]:
    """
    Diff two texts line by line.

    Args:
        old: Text from repository 1
        new: Text from repository 2
        options: Line matching options

    Returns:
        Segments in document order. Unchanged segments carry the text
        of ``old``; a replaced block yields a removed segment followed
        by an added one. Two empty texts give an empty list.
    """
    options = options or LineDiffOptions()

    old_lines = split_lines(old)
    new_lines = split_lines(new)

    old_keys = [options.normalize_line(line) for line in old_lines]
    new_keys = [options.normalize_line(line) for line in new_lines]

    segments: list[ChangeSegment] = []
    for tag, i1, i2, j1, j2 in get_opcodes(old_keys, new_keys):
        if tag == 'equal':
            _append(segments, ChangeType.UNCHANGED, old_lines[i1:i2])
        elif tag == 'delete':
            _append(segments, ChangeType.REMOVED, old_lines[i1:i2])
        elif tag == 'insert':
            _append(segments, ChangeType.ADDED, new_lines[j1:j2])
        elif tag == 'replace':
            _append(segments, ChangeType.REMOVED, old_lines[i1:i2])
            _append(segments, ChangeType.ADDED, new_lines[j1:j2])

    return segments


def _append(
    segments: list[ChangeSegment],
    change_type: ChangeType,
    lines: Sequence[str]
) -> None:
    """Append lines as a segment, merging with a preceding one of the same type."""
    if not lines:
        return

    if segments and segments[-1].change_type == change_type:
        previous = segments.pop()
        segments.append(ChangeSegment(
            change_type,
            previous.value + ''.join(lines),
            previous.count + len(lines)
        ))
        return

    segments.append(ChangeSegment(change_type, ''.join(lines), len(lines)))


# =============================================================================
# Minimal Diff
# =============================================================================

def get_opcodes(
    left: Sequence[Hashable],
    right: Sequence[Hashable]
) -> list[tuple[str, int, int, int, int]]:
    """
    Opcodes of a minimal diff, in difflib's (tag, i1, i2, j1, j2) format.

    Equal runs form a longest common subsequence, so the number of
    unchanged items is the same whichever sequence is ``left``.
    """
    opcodes: list[tuple[str, int, int, int, int]] = []

    left_pos = 0
    right_pos = 0

    for left_idx, right_idx in _matching_pairs(left, right):
        _append_gap(opcodes, left_pos, left_idx, right_pos, right_idx)

        if opcodes and opcodes[-1][0] == 'equal' and opcodes[-1][2] == left_idx:
            _, i1, _, j1, _ = opcodes.pop()
            opcodes.append(('equal', i1, left_idx + 1, j1, right_idx + 1))
        else:
            opcodes.append(('equal', left_idx, left_idx + 1, right_idx, right_idx + 1))

        left_pos = left_idx + 1
        right_pos = right_idx + 1

    _append_gap(opcodes, left_pos, len(left), right_pos, len(right))
    return opcodes


def _append_gap(
    opcodes: list[tuple[str, int, int, int, int]],
    i1: int,
    i2: int,
    j1: int,
    j2: int
) -> None:
    """Append the opcode for an unmatched region, if it is not empty."""
    if i2 > i1 and j2 > j1:
        opcodes.append(('replace', i1, i2, j1, j2))
    elif i2 > i1:
        opcodes.append(('delete', i1, i2, j1, j1))
    elif j2 > j1:
        opcodes.append(('insert', i1, i1, j1, j2))


def _matching_pairs(
    left: Sequence[Hashable],
    right: Sequence[Hashable]
) -> list[tuple[int, int]]:
    """Index pairs of a longest common subsequence, in ascending order."""
    pairs: list[tuple[int, int]] = []
    pending = [(0, len(left), 0, len(right))]

    while pending:
        left_lo, left_hi, right_lo, right_hi = pending.pop()

        # Common prefix and suffix
        while left_lo < left_hi and right_lo < right_hi and left[left_lo] == right[right_lo]:
            pairs.append((left_lo, right_lo))
            left_lo += 1
            right_lo += 1
        while left_lo < left_hi and right_lo < right_hi and left[left_hi - 1] == right[right_hi - 1]:
            left_hi -= 1
            right_hi -= 1
            pairs.append((left_hi, right_hi))

        if left_lo == left_hi or right_lo == right_hi:
            continue

        split = _middle_snake(left, right, left_lo, left_hi, right_lo, right_hi)
        if split is None:
            continue

        left_mid, right_mid = split
        pending.append((left_lo, left_mid, right_lo, right_mid))
        pending.append((left_mid, left_hi, right_mid, right_hi))

    pairs.sort()
    return pairs


def _middle_snake(
    left: Sequence[Hashable],
    right: Sequence[Hashable],
    left_lo: int,
    left_hi: int,
    right_lo: int,
    right_hi: int
) -> Optional[tuple[int, int]]:
    """
    Find a split point on a shortest edit path between two ranges.

    Runs the forward and reverse passes of Myers' O(ND) search until
    they overlap, using linear space. Both ranges must be non-empty and
    differ in their first and last items.

    Returns:
        Absolute (left, right) indices of the split, or None when the
        ranges have no item in common
    """
    left_len = left_hi - left_lo
    right_len = right_hi - right_lo
    max_d = (left_len + right_len + 1) // 2
    v_offset = max_d
    v_length = 2 * max_d + 2

    forward = [-1] * v_length
    reverse = [-1] * v_length
    forward[v_offset + 1] = 0
    reverse[v_offset + 1] = 0

    delta = left_len - right_len
    # With an odd delta the paths meet on a forward pass
    front = delta % 2 != 0

    k1_start = k1_end = k2_start = k2_end = 0

    for d in range(max_d):
        for k1 in range(-d + k1_start, d + 1 - k1_end, 2):
            k1_offset = v_offset + k1
            if k1 == -d or (k1 != d and forward[k1_offset - 1] < forward[k1_offset + 1]):
                x1 = forward[k1_offset + 1]
            else:
                x1 = forward[k1_offset - 1] + 1
            y1 = x1 - k1

            while (x1 < left_len and y1 < right_len
                   and left[left_lo + x1] == right[right_lo + y1]):
                x1 += 1
                y1 += 1
            forward[k1_offset] = x1

            if x1 > left_len:
                k1_end += 2
            elif y1 > right_len:
                k1_start += 2
            elif front:
                k2_offset = v_offset + delta - k1
                if 0 <= k2_offset < v_length and reverse[k2_offset] != -1:
                    if x1 >= left_len - reverse[k2_offset]:
                        return left_lo + x1, right_lo + y1

        for k2 in range(-d + k2_start, d + 1 - k2_end, 2):
            k2_offset = v_offset + k2
            if k2 == -d or (k2 != d and reverse[k2_offset - 1] < reverse[k2_offset + 1]):
                x2 = reverse[k2_offset + 1]
            else:
                x2 = reverse[k2_offset - 1] + 1
            y2 = x2 - k2

            while (x2 < left_len and y2 < right_len
                   and left[left_hi - 1 - x2] == right[right_hi - 1 - y2]):
                x2 += 1
                y2 += 1
            reverse[k2_offset] = x2

            if x2 > left_len:
                k2_end += 2
            elif y2 > right_len:
                k2_start += 2
            elif not front:
                k1_offset = v_offset + delta - k2
                if 0 <= k1_offset < v_length and forward[k1_offset] != -1:
                    x1 = forward[k1_offset]
                    y1 = x1 - (k1_offset - v_offset)
                    if x1 >= left_len - x2:
                        return left_lo + x1, right_lo + y1

    return None
