"""
Unified diff and patch fragment output.

Provides:
- Whole-result unified diff rendering
- Single hunk patch fragments for stage/unstage hunk actions
- Hunk reversal for unstaging
"""

from __future__ import annotations

import re
from typing import Iterator

from hunkdiff.core.diff.hunk_diff import create_hunk_header
from hunkdiff.core.models import (
    ChangeType,
    DiffEntry,
    DiffResult,
    Hunk,
    Line,
    LineType,
    NonTextDiffResult,
)


HUNK_HEADER_PATTERN = re.compile(r'^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@')
NO_NEWLINE_MARKER = "\\ No newline at end of file"
DEV_NULL = "/dev/null"
REGULAR_FILE_MODE = "100644"


def parse_hunk_header(header: str) -> tuple[int, int, int, int]:
    """
    Parse a hunk header back into 0-based half-open ranges.

    Returns:
        Tuple of (old_start, old_end, new_start, new_end)

    Raises:
        ValueError: If the header is not a unified diff hunk header
    """
    match = HUNK_HEADER_PATTERN.match(header)
    if match is None:
        raise ValueError(f"Not a hunk header: {header!r}")

    def to_range(begin: str, count: str | None) -> tuple[int, int]:
        lines_count = 1 if count is None else int(count)
        if lines_count == 0:
            # An empty range is written as the line before it
            start = int(begin)
        else:
            start = int(begin) - 1
        return start, start + lines_count

    old_start, old_end = to_range(match.group(1), match.group(2))
    new_start, new_end = to_range(match.group(3), match.group(4))
    return old_start, old_end, new_start, new_end


def format_line(line: Line) -> str:
    """Render a hunk line with its prefix, marking a missing final newline."""
    text = f"{line.prefix}{line.text}"
    if not line.has_newline:
        text += "\n" + NO_NEWLINE_MARKER + "\n"
    return text


def format_hunk(hunk: Hunk) -> str:
    """Render a hunk header and its lines."""
    return hunk.header + "\n" + "".join(format_line(line) for line in hunk.lines)


def git_header(diff_entry: DiffEntry) -> str:
    """Render the ``diff --git`` line and, for added or deleted files, the file mode line."""
    old_path = diff_entry.old_path or diff_entry.new_path or ''
    new_path = diff_entry.new_path or diff_entry.old_path or ''

    header = f"diff --git a/{old_path} b/{new_path}\n"
    if diff_entry.change_type == ChangeType.ADD:
        header += f"new file mode {REGULAR_FILE_MODE}\n"
    elif diff_entry.change_type == ChangeType.DELETE:
        header += f"deleted file mode {REGULAR_FILE_MODE}\n"
    return header


def side_labels(diff_entry: DiffEntry) -> tuple[str, str]:
    """Old and new file labels, ``/dev/null`` for a side that does not exist."""
    old_path = diff_entry.old_path or diff_entry.new_path or ''
    new_path = diff_entry.new_path or diff_entry.old_path or ''

    old_label = DEV_NULL if diff_entry.change_type == ChangeType.ADD else f"a/{old_path}"
    new_label = DEV_NULL if diff_entry.change_type == ChangeType.DELETE else f"b/{new_path}"
    return old_label, new_label


def file_header(diff_entry: DiffEntry) -> str:
    """Render the git header followed by the ``---`` / ``+++`` lines."""
    old_label, new_label = side_labels(diff_entry)
    return (
        git_header(diff_entry) +
        f"--- {old_label}\n"
        f"+++ {new_label}\n"
    )


def hunk_to_patch(diff_entry: DiffEntry, hunk: Hunk) -> str:
    """
    Build an applicable patch containing only ``hunk``.

    The output is byte-exact unified diff syntax that can be handed to a
    patch-apply facility to stage a single hunk.
    """
    return file_header(diff_entry) + format_hunk(hunk)


def reverse_hunk(hunk: Hunk) -> Hunk:
    """
    Swap the sides of a hunk, for unstaging it.

    Removed lines become added lines and vice versa; within each run of
    changes the removed lines are kept before the added ones.
    """
    old_start, old_end, new_start, new_end = parse_hunk_header(hunk.header)
    header = create_hunk_header(new_start, new_end, old_start, old_end)

    swapped = {
        LineType.CONTEXT: LineType.CONTEXT,
        LineType.ADDED: LineType.REMOVED,
        LineType.REMOVED: LineType.ADDED,
    }

    lines: list[Line] = []
    removed: list[Line] = []
    added: list[Line] = []

    for line in hunk.lines:
        reversed_line = Line(
            text=line.text,
            display_old_line_number=line.display_new_line_number,
            display_new_line_number=line.display_old_line_number,
            line_type=swapped[line.line_type],
        )
        if reversed_line.line_type == LineType.REMOVED:
            removed.append(reversed_line)
        elif reversed_line.line_type == LineType.ADDED:
            added.append(reversed_line)
        else:
            lines.extend(removed)
            lines.extend(added)
            removed.clear()
            added.clear()
            lines.append(reversed_line)

    lines.extend(removed)
    lines.extend(added)

    return Hunk(header=header, lines=tuple(lines))


def iter_unified_diff(result: DiffResult) -> Iterator[str]:
    """Yield the unified diff of a result, one file header or hunk at a time."""
    diff_entry = result.diff_entry

    if isinstance(result, NonTextDiffResult):
        old_label, new_label = side_labels(diff_entry)
        yield git_header(diff_entry)
        yield f"Binary files {old_label} and {new_label} differ\n"
        return

    if not result.hunks:
        return

    yield file_header(diff_entry)
    for hunk in result.hunks:
        yield format_hunk(hunk)


def format_unified(result: DiffResult) -> str:
    """Render a whole diff result as unified diff text."""
    return "".join(iter_unified_diff(result))
