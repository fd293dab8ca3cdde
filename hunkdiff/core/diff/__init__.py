"""
Diff module for hunk generation.

Provides:
- Edit list computation (Myers line diff)
- Hunk assembly, line rendering and header formatting
- Unified diff and patch fragment output
"""

from hunkdiff.core.diff.edit_list import EditListComputer
from hunkdiff.core.diff.hunk_diff import (
    CONTEXT_LINES,
    HunkDiffGenerator,
    InvalidObjectError,
    create_hunk_header,
)
from hunkdiff.core.diff.patch import (
    format_unified,
    hunk_to_patch,
    parse_hunk_header,
    reverse_hunk,
)

__all__ = [
    # Edit list
    'EditListComputer',
    # Hunks
    'CONTEXT_LINES',
    'HunkDiffGenerator',
    'InvalidObjectError',
    'create_hunk_header',
    # Patch output
    'format_unified',
    'hunk_to_patch',
    'parse_hunk_header',
    'reverse_hunk',
]
