"""
Core data models for the hunk diff engine.

This module defines all data structures used across the engine:
- Raw text models
- Edit list models
- Hunk and line models
- Entry content classification models
- Diff result models

All models are:
- UI-agnostic (can be used with any frontend)
- Immutable (created fresh per diff request, never shared)
- Type-hinted for IDE support
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import ClassVar, Iterator, Optional, Union


# =============================================================================
# Enumerations
# =============================================================================

class LineType(Enum):
    """Type of line in a hunk."""
    CONTEXT = auto()  # Unchanged line shown for context
    ADDED = auto()    # Line exists only in the new side
    REMOVED = auto()  # Line exists only in the old side


class EditType(Enum):
    """Type of an edit region."""
    EMPTY = auto()    # Both ranges empty (never produced)
    INSERT = auto()   # Old range empty
    DELETE = auto()   # New range empty
    REPLACE = auto()  # Both ranges non-empty


class DiffSide(Enum):
    """Side of a diff request."""
    OLD = auto()
    NEW = auto()


class ChangeType(Enum):
    """How a path changed between the two tree states."""
    ADD = auto()
    MODIFY = auto()
    DELETE = auto()


# =============================================================================
# Raw Text Models
# =============================================================================

@dataclass(frozen=True)
class RawText:
    """
    Line-split, delimiter-aware content of one side.

    Lines are stored without their delimiter. The recorded delimiter is
    appended back when lines are rendered, except for a final line that
    genuinely had no newline.
    """
    lines: tuple[str, ...] = ()
    line_delimiter: Optional[str] = None
    missing_newline_at_end: bool = False

    EMPTY: ClassVar[RawText]

    def size(self) -> int:
        """Number of lines."""
        return len(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def line_at(self, index: int) -> str:
        """Get the line at ``index`` without its delimiter."""
        if index < 0 or index >= len(self.lines):
            raise IndexError(f"Line {index} out of range [0, {len(self.lines)})")
        return self.lines[index]

    def is_last_line(self, index: int) -> bool:
        return index == len(self.lines) - 1

    def rendered_line(self, index: int) -> str:
        """Line text with the delimiter appended per the trailing newline rule."""
        text = self.line_at(index)
        if not (self.is_last_line(index) and self.missing_newline_at_end):
            text += self.line_delimiter or ''
        return text


RawText.EMPTY = RawText()


# =============================================================================
# Edit Models
# =============================================================================

@dataclass(frozen=True)
class Edit:
    """
    One contiguous differing region between two line sequences.

    Ranges are half-open: ``[begin_a, end_a)`` on the old side and
    ``[begin_b, end_b)`` on the new side.
    """
    begin_a: int
    end_a: int
    begin_b: int
    end_b: int

    @property
    def edit_type(self) -> EditType:
        if self.begin_a == self.end_a:
            if self.begin_b == self.end_b:
                return EditType.EMPTY
            return EditType.INSERT
        if self.begin_b == self.end_b:
            return EditType.DELETE
        return EditType.REPLACE

    @property
    def length_a(self) -> int:
        return self.end_a - self.begin_a

    @property
    def length_b(self) -> int:
        return self.end_b - self.begin_b

    def __str__(self) -> str:
        return (f"{self.edit_type.name}({self.begin_a}-{self.end_a},"
                f"{self.begin_b}-{self.end_b})")


# =============================================================================
# Hunk Models
# =============================================================================

@dataclass(frozen=True)
class Line:
    """
    A single rendered line of a hunk.

    Line numbers are 0-based cursor positions on each side at the time the
    line was emitted.
    """
    text: str
    display_old_line_number: int
    display_new_line_number: int
    line_type: LineType

    @property
    def prefix(self) -> str:
        """Get the unified diff prefix character."""
        prefixes = {
            LineType.CONTEXT: ' ',
            LineType.ADDED: '+',
            LineType.REMOVED: '-',
        }
        return prefixes[self.line_type]

    @property
    def has_newline(self) -> bool:
        return self.text.endswith('\n')


@dataclass(frozen=True)
class Hunk:
    """
    A group of related changes (a "hunk" in unified diff terminology).

    The header's ranges always equal the number of CONTEXT+REMOVED lines
    on the old side and CONTEXT+ADDED lines on the new side.
    """
    header: str
    lines: tuple[Line, ...] = ()

    @property
    def added_count(self) -> int:
        return sum(1 for line in self.lines if line.line_type == LineType.ADDED)

    @property
    def removed_count(self) -> int:
        return sum(1 for line in self.lines if line.line_type == LineType.REMOVED)

    @property
    def context_count(self) -> int:
        return sum(1 for line in self.lines if line.line_type == LineType.CONTEXT)

    @property
    def max_line_number_width(self) -> int:
        """Width of the widest 1-based line number, for gutter rendering."""
        if not self.lines:
            return 1
        highest = max(
            max(line.display_old_line_number, line.display_new_line_number)
            for line in self.lines
        )
        return len(str(highest + 1))

    def iter_changes(self) -> Iterator[Line]:
        """Iterate over only the changed lines."""
        for line in self.lines:
            if line.line_type != LineType.CONTEXT:
                yield line


# =============================================================================
# Entry Content Models
# =============================================================================

@dataclass(frozen=True)
class TextContent:
    """Side content that can be diffed line by line."""
    raw_text: RawText


@dataclass(frozen=True)
class BinaryContent:
    """Side content that is binary and not an image."""


@dataclass(frozen=True)
class ImageBinaryContent:
    """Binary image content, materialised to a temp file for preview."""
    temp_file_path: Path


@dataclass(frozen=True)
class MissingContent:
    """The path does not exist on this side."""


@dataclass(frozen=True)
class TooLargeContent:
    """Content above the configured text size ceiling."""


@dataclass(frozen=True)
class UnreadableContent:
    """The underlying object could not be resolved."""


EntryContent = Union[
    TextContent,
    BinaryContent,
    ImageBinaryContent,
    MissingContent,
    TooLargeContent,
    UnreadableContent,
]

BINARY = BinaryContent()
MISSING = MissingContent()
TOO_LARGE = TooLargeContent()
UNREADABLE = UnreadableContent()


# =============================================================================
# Diff Result Models
# =============================================================================

@dataclass(frozen=True)
class DiffEntry:
    """A path that changed between two tree states."""
    old_path: Optional[str]
    new_path: Optional[str]
    change_type: ChangeType = ChangeType.MODIFY

    @property
    def file_path(self) -> str:
        """Path shown for this entry: the new path unless it was deleted."""
        if self.change_type == ChangeType.DELETE or self.new_path is None:
            return self.old_path or ''
        return self.new_path

    @classmethod
    def for_path(cls, path: str) -> DiffEntry:
        return cls(old_path=path, new_path=path, change_type=ChangeType.MODIFY)


@dataclass
class DiffStatistics:
    """Statistics about a text diff result."""
    added_lines: int = 0
    removed_lines: int = 0
    context_lines: int = 0

    def __str__(self) -> str:
        return f"+{self.added_lines} -{self.removed_lines}"


@dataclass(frozen=True)
class TextDiffResult:
    """Line-level diff of two text-representable sides."""
    diff_entry: DiffEntry
    hunks: tuple[Hunk, ...] = field(default_factory=tuple)

    @property
    def is_identical(self) -> bool:
        return not self.hunks

    @property
    def statistics(self) -> DiffStatistics:
        stats = DiffStatistics()
        for hunk in self.hunks:
            stats.added_lines += hunk.added_count
            stats.removed_lines += hunk.removed_count
            stats.context_lines += hunk.context_count
        return stats


@dataclass(frozen=True)
class NonTextDiffResult:
    """Result for sides that could not both be diffed as text."""
    diff_entry: DiffEntry
    old_binary_content: EntryContent
    new_binary_content: EntryContent

    @property
    def is_identical(self) -> bool:
        return False


DiffResult = Union[TextDiffResult, NonTextDiffResult]
