"""
Hunk diff generator.

Turns the classified content of both sides of a diff entry into a
diff result:
- Edits closer than twice the context window are merged into one hunk
- Context is clipped at the start and end of each file
- Headers follow the unified diff ``@@ -a,b +c,d @@`` conventions
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from hunkdiff.core.diff.edit_list import EditListComputer
from hunkdiff.core.models import (
    DiffEntry,
    DiffResult,
    Edit,
    EntryContent,
    Hunk,
    Line,
    LineType,
    MissingContent,
    NonTextDiffResult,
    RawText,
    TextContent,
    TextDiffResult,
    UnreadableContent,
)


CONTEXT_LINES = 3


class InvalidObjectError(IOError):
    """Raised when either side's object cannot be resolved from storage."""


def create_range(symbol: str, begin: int, lines_count: int) -> str:
    """Render one side of a hunk header range."""
    if lines_count == 0:
        return f" {symbol}{begin - 1},0"
    if lines_count == 1:
        # Exactly one line: the count is omitted
        return f" {symbol}{begin}"
    return f" {symbol}{begin},{lines_count}"


def create_hunk_header(
    old_start_line: int,
    old_end_line: int,
    new_start_line: int,
    new_end_line: int
) -> str:
    """
    Generate a unified diff hunk header.

    Args:
        old_start_line: 0-based first old line of the hunk
        old_end_line: 0-based exclusive end of the old range
        new_start_line: 0-based first new line of the hunk
        new_end_line: 0-based exclusive end of the new range
    """
    content_removed = create_range('-', old_start_line + 1, old_end_line - old_start_line)
    content_added = create_range('+', new_start_line + 1, new_end_line - new_start_line)
    return "@@" + content_removed + content_added + " @@"


class HunkDiffGenerator:
    """
    Generator of hunk lists from the content of both sides of a diff entry.

    Stateless between requests; a single instance may be shared by
    concurrent callers.
    """

    def __init__(
        self,
        context_lines: int = CONTEXT_LINES,
        edit_list_computer: Optional[EditListComputer] = None
    ):
        self.context_lines = context_lines
        self.edit_list_computer = edit_list_computer or EditListComputer()

    def format(
        self,
        diff_entry: DiffEntry,
        old_content: EntryContent,
        new_content: EntryContent
    ) -> DiffResult:
        """
        Build the diff result for one entry.

        Raises:
            InvalidObjectError: If either side is unreadable
        """
        if isinstance(old_content, UnreadableContent) or isinstance(new_content, UnreadableContent):
            raise InvalidObjectError(f"Invalid object in diff format: {diff_entry.file_path}")

        old_raw_text = self._as_raw_text(old_content)
        new_raw_text = self._as_raw_text(new_content)

        if old_raw_text is None or new_raw_text is None:
            logging.debug(f"HunkDiffGenerator - Non text diff for {diff_entry.file_path}")
            return NonTextDiffResult(
                diff_entry=diff_entry,
                old_binary_content=old_content,
                new_binary_content=new_content,
            )

        hunks = self.format_text(old_raw_text, new_raw_text)
        return TextDiffResult(diff_entry=diff_entry, hunks=tuple(hunks))

    def format_text(self, old_raw_text: RawText, new_raw_text: RawText) -> list[Hunk]:
        """Diff two raw texts into hunks."""
        edits = self.edit_list_computer.compute(old_raw_text, new_raw_text)
        return self.format_edits(edits, old_raw_text, new_raw_text)

    def format_edits(
        self,
        edits: Sequence[Edit],
        old_raw_text: RawText,
        new_raw_text: RawText
    ) -> list[Hunk]:
        """Group an edit list into hunks and render their lines."""
        hunks: list[Hunk] = []
        cur_idx = 0

        while cur_idx < len(edits):
            end_idx = self.find_combined_end(edits, cur_idx)
            first_edit = edits[cur_idx]
            end_edit = edits[end_idx]

            old_current_line = max(0, first_edit.begin_a - self.context_lines)
            new_current_line = max(0, first_edit.begin_b - self.context_lines)
            old_end_line = min(old_raw_text.size(), end_edit.end_a + self.context_lines)
            new_end_line = min(new_raw_text.size(), end_edit.end_b + self.context_lines)

            header = create_hunk_header(
                old_current_line, old_end_line, new_current_line, new_end_line
            )
            lines: list[Line] = []

            edit_idx = cur_idx
            while old_current_line < old_end_line or new_current_line < new_end_line:
                exhausted = edit_idx > end_idx
                cur_edit = edits[min(edit_idx, end_idx)]

                if exhausted or old_current_line < cur_edit.begin_a:
                    lines.append(Line(
                        text=old_raw_text.rendered_line(old_current_line),
                        display_old_line_number=old_current_line,
                        display_new_line_number=new_current_line,
                        line_type=LineType.CONTEXT,
                    ))
                    old_current_line += 1
                    new_current_line += 1
                elif old_current_line < cur_edit.end_a:
                    lines.append(Line(
                        text=old_raw_text.rendered_line(old_current_line),
                        display_old_line_number=old_current_line,
                        display_new_line_number=new_current_line,
                        line_type=LineType.REMOVED,
                    ))
                    old_current_line += 1
                elif new_current_line < cur_edit.end_b:
                    lines.append(Line(
                        text=new_raw_text.rendered_line(new_current_line),
                        display_old_line_number=old_current_line,
                        display_new_line_number=new_current_line,
                        line_type=LineType.ADDED,
                    ))
                    new_current_line += 1

                if not exhausted and self._edit_ended(cur_edit, old_current_line, new_current_line):
                    edit_idx += 1

            hunks.append(Hunk(header=header, lines=tuple(lines)))
            cur_idx = end_idx + 1

        return hunks

    def find_combined_end(self, edits: Sequence[Edit], i: int) -> int:
        """Index of the last edit merged into the hunk starting at ``i``."""
        end = i + 1
        while end < len(edits) and (self._combine_a(edits, end) or self._combine_b(edits, end)):
            end += 1
        return end - 1

    def _combine_a(self, edits: Sequence[Edit], i: int) -> bool:
        return edits[i].begin_a - edits[i - 1].end_a <= 2 * self.context_lines

    def _combine_b(self, edits: Sequence[Edit], i: int) -> bool:
        return edits[i].begin_b - edits[i - 1].end_b <= 2 * self.context_lines

    @staticmethod
    def _edit_ended(edit: Edit, a: int, b: int) -> bool:
        return edit.end_a <= a and edit.end_b <= b

    @staticmethod
    def _as_raw_text(content: EntryContent) -> Optional[RawText]:
        """Text-representable content as raw text, None otherwise."""
        if isinstance(content, TextContent):
            return content.raw_text
        if isinstance(content, MissingContent):
            return RawText.EMPTY
        return None
