from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from hunkdiff.core.diff import (
    HunkDiffGenerator,
    format_unified,
    hunk_to_patch,
    parse_hunk_header,
    reverse_hunk,
)
from hunkdiff.core.models import (
    BINARY,
    MISSING,
    ChangeType,
    DiffEntry,
    LineType,
    NonTextDiffResult,
    TextContent,
    TextDiffResult,
)
from hunkdiff.services.file_io import FileIOService


def text_result(entry: DiffEntry, old: str, new: str) -> TextDiffResult:
    to_raw = FileIOService().to_raw_text
    result = HunkDiffGenerator().format(entry, TextContent(to_raw(old)), TextContent(to_raw(new)))
    assert isinstance(result, TextDiffResult)
    return result


def test_hunk_to_patch() -> None:
    entry = DiffEntry.for_path("src/app.py")
    result = text_result(entry, "a\nb\nc\n", "a\nx\nc\n")

    assert hunk_to_patch(entry, result.hunks[0]) == (
        "diff --git a/src/app.py b/src/app.py\n"
        "--- a/src/app.py\n"
        "+++ b/src/app.py\n"
        "@@ -1,3 +1,3 @@\n"
        " a\n"
        "-b\n"
        "+x\n"
        " c\n"
    )


def test_no_newline_marker() -> None:
    entry = DiffEntry.for_path("f")
    result = text_result(entry, "a\n", "a\nb")

    assert format_unified(result).endswith(
        "@@ -1 +1,2 @@\n"
        " a\n"
        "+b\n"
        "\\ No newline at end of file\n"
    )


def test_added_file_uses_dev_null() -> None:
    entry = DiffEntry(None, "new.txt", ChangeType.ADD)
    result = HunkDiffGenerator().format(
        entry, MISSING, TextContent(FileIOService().to_raw_text("hi\n"))
    )

    assert format_unified(result) == (
        "diff --git a/new.txt b/new.txt\n"
        "new file mode 100644\n"
        "--- /dev/null\n"
        "+++ b/new.txt\n"
        "@@ -0,0 +1 @@\n"
        "+hi\n"
    )


def test_binary_result_output() -> None:
    entry = DiffEntry("logo.bin", None, ChangeType.DELETE)
    result = NonTextDiffResult(entry, BINARY, MISSING)

    assert format_unified(result) == (
        "diff --git a/logo.bin b/logo.bin\n"
        "deleted file mode 100644\n"
        "Binary files a/logo.bin and /dev/null differ\n"
    )


def test_identical_result_has_no_output() -> None:
    entry = DiffEntry.for_path("same.txt")
    assert format_unified(text_result(entry, "a\n", "a\n")) == ""


def test_parse_hunk_header() -> None:
    assert parse_hunk_header("@@ -2,3 +2,3 @@") == (1, 4, 1, 4)
    assert parse_hunk_header("@@ -5 +5 @@") == (4, 5, 4, 5)
    assert parse_hunk_header("@@ -5,0 +6,2 @@") == (5, 5, 5, 7)

    with pytest.raises(ValueError):
        parse_hunk_header("not a header")


def test_reverse_hunk() -> None:
    entry = DiffEntry.for_path("f")
    hunk = text_result(entry, "a\nb\nc\nd\n", "a\nc\nx\ny\nd\n").hunks[0]

    reversed_hunk = reverse_hunk(hunk)

    assert hunk.header == "@@ -1,4 +1,5 @@"
    assert reversed_hunk.header == "@@ -1,5 +1,4 @@"
    assert reversed_hunk.added_count == hunk.removed_count
    assert reversed_hunk.removed_count == hunk.added_count
    assert [(line.line_type, line.text) for line in reversed_hunk.lines] == [
        (LineType.CONTEXT, "a\n"),
        (LineType.ADDED, "b\n"),
        (LineType.CONTEXT, "c\n"),
        (LineType.REMOVED, "x\n"),
        (LineType.REMOVED, "y\n"),
        (LineType.CONTEXT, "d\n"),
    ]


def test_reverse_keeps_removed_before_added() -> None:
    entry = DiffEntry.for_path("f")
    hunk = text_result(entry, "a\nb\nc\n", "a\nx\nc\n").hunks[0]

    reversed_hunk = reverse_hunk(hunk)

    assert [(line.line_type, line.text) for line in reversed_hunk.lines] == [
        (LineType.CONTEXT, "a\n"),
        (LineType.REMOVED, "x\n"),
        (LineType.ADDED, "b\n"),
        (LineType.CONTEXT, "c\n"),
    ]


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git_apply(repo: Path, patch: str) -> None:
    subprocess.run(
        ["git", "apply", "-"],
        input=patch.encode("utf-8"),
        cwd=repo,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)
    return tmp_path


@requires_git
@pytest.mark.parametrize(
    "old, new",
    [
        (b"a\r\nb\r\n", b"a\r\nb\n"),
        (b"a\r\nb\r\n", b"a\nb\n"),
        (b"a\nb", b"a\nb\nc\n"),
    ],
)
def test_patch_applies_byte_exact(repo: Path, old: bytes, new: bytes) -> None:
    (repo / "f.txt").write_bytes(old)
    entry = DiffEntry.for_path("f.txt")
    to_raw = FileIOService().bytes_to_raw_text
    hunks = HunkDiffGenerator().format_text(to_raw(old), to_raw(new))

    for hunk in hunks:
        git_apply(repo, hunk_to_patch(entry, hunk))
    assert (repo / "f.txt").read_bytes() == new

    for hunk in reversed(hunks):
        git_apply(repo, hunk_to_patch(entry, reverse_hunk(hunk)))
    assert (repo / "f.txt").read_bytes() == old


@requires_git
def test_added_and_deleted_file_patches_apply(repo: Path) -> None:
    to_raw = FileIOService().to_raw_text
    added = DiffEntry(None, "n.txt", ChangeType.ADD)
    result = HunkDiffGenerator().format(added, MISSING, TextContent(to_raw("one\ntwo\n")))

    git_apply(repo, hunk_to_patch(added, result.hunks[0]))
    assert (repo / "n.txt").read_bytes() == b"one\ntwo\n"

    deleted = DiffEntry("n.txt", None, ChangeType.DELETE)
    result = HunkDiffGenerator().format(deleted, TextContent(to_raw("one\ntwo\n")), MISSING)

    git_apply(repo, hunk_to_patch(deleted, result.hunks[0]))
    assert not (repo / "n.txt").exists()
