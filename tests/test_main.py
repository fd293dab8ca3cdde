from __future__ import annotations

from pathlib import Path

import pytest

from hunkdiff.main import (
    APP_VERSION,
    EXIT_DIFFERENT,
    EXIT_ERROR,
    EXIT_IDENTICAL,
    CompareMode,
    main,
    parse_arguments,
)
from hunkdiff.services.settings import OutputFormat


@pytest.fixture
def config(tmp_path: Path) -> str:
    return str(tmp_path / "settings.json")


def test_parse_arguments(tmp_path: Path) -> None:
    args = parse_arguments([str(tmp_path), "other", "--stat", "-U", "1", "-v"])

    assert args.mode == CompareMode.FOLDER_COMPARE
    assert args.output_format == OutputFormat.STAT
    assert args.context_lines == 1
    assert args.log_level == "DEBUG"


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        main(["--version"])
    assert APP_VERSION in capsys.readouterr().out


def test_identical_files(tmp_path: Path, config: str, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "a.txt").write_text("same\n", encoding="utf-8")
    (tmp_path / "b.txt").write_text("same\n", encoding="utf-8")

    status = main([str(tmp_path / "a.txt"), str(tmp_path / "b.txt"), "-c", config])

    assert status == EXIT_IDENTICAL
    assert capsys.readouterr().out == ""


def test_changed_files(tmp_path: Path, config: str, capsys: pytest.CaptureFixture[str]) -> None:
    old_dir = tmp_path / "old"
    new_dir = tmp_path / "new"
    old_dir.mkdir()
    new_dir.mkdir()
    (old_dir / "f.txt").write_text("a\nb\nc\n", encoding="utf-8")
    (new_dir / "f.txt").write_text("a\nB\nc\n", encoding="utf-8")

    status = main([str(old_dir / "f.txt"), str(new_dir / "f.txt"), "-c", config])

    assert status == EXIT_DIFFERENT
    assert capsys.readouterr().out == (
        "diff --git a/f.txt b/f.txt\n"
        "--- a/f.txt\n"
        "+++ b/f.txt\n"
        "@@ -1,3 +1,3 @@\n"
        " a\n"
        "-b\n"
        "+B\n"
        " c\n"
    )


def test_context_option(tmp_path: Path, config: str, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "a.txt").write_text("a\nb\nc\n", encoding="utf-8")
    (tmp_path / "b.txt").write_text("a\nB\nc\n", encoding="utf-8")

    main([str(tmp_path / "a.txt"), str(tmp_path / "b.txt"), "-U", "0", "-c", config])

    assert "@@ -2 +2 @@\n-b\n+B\n" in capsys.readouterr().out


def test_folder_stat(tmp_path: Path, config: str, capsys: pytest.CaptureFixture[str]) -> None:
    old_dir = tmp_path / "old"
    new_dir = tmp_path / "new"
    old_dir.mkdir()
    new_dir.mkdir()
    (old_dir / "text.txt").write_text("a\nb\n", encoding="utf-8")
    (new_dir / "text.txt").write_text("a\nc\nd\n", encoding="utf-8")
    (new_dir / "blob.bin").write_bytes(b"\x00\x01\x02")

    status = main([str(old_dir), str(new_dir), "--stat", "-c", config])

    assert status == EXIT_DIFFERENT
    assert capsys.readouterr().out == (
        " blob.bin | Bin\n"
        " text.txt | +2 -1\n"
    )


def test_folder_name_only(tmp_path: Path, config: str, capsys: pytest.CaptureFixture[str]) -> None:
    old_dir = tmp_path / "old"
    new_dir = tmp_path / "new"
    old_dir.mkdir()
    new_dir.mkdir()
    (old_dir / "gone.txt").write_text("x\n", encoding="utf-8")

    status = main([str(old_dir), str(new_dir), "--name-only", "-c", config])

    assert status == EXIT_DIFFERENT
    assert capsys.readouterr().out == "gone.txt\n"


def test_missing_paths_are_an_error(tmp_path: Path, config: str) -> None:
    status = main([str(tmp_path / "nope1"), str(tmp_path / "nope2"), "-c", config])
    assert status == EXIT_ERROR


def test_line_ending_change_is_reported(tmp_path: Path, config: str, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "a.txt").write_bytes(b"a\r\nb\r\n")
    (tmp_path / "b.txt").write_bytes(b"a\r\nb\n")

    status = main([str(tmp_path / "a.txt"), str(tmp_path / "b.txt"), "-c", config])

    assert status == EXIT_DIFFERENT
    assert "-b\r\n+b\n" in capsys.readouterr().out
