from __future__ import annotations

import json
from pathlib import Path

from hunkdiff.services.settings import (
    ApplicationSettings,
    DiffSettings,
    OutputFormat,
    SettingsManager,
)


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    settings = SettingsManager(tmp_path / "settings.json").settings

    assert settings == ApplicationSettings()
    assert settings.diff.context_lines == 3
    assert settings.diff.max_text_size == 50 * 1024 * 1024
    assert settings.diff.binary_check_size == 8000


def test_save_and_load(tmp_path: Path) -> None:
    path = tmp_path / "config" / "settings.json"
    manager = SettingsManager(path)
    settings = ApplicationSettings()
    settings.diff.context_lines = 5
    settings.diff.image_extensions = [".png"]
    settings.output.output_format = OutputFormat.STAT

    assert manager.save(settings)

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["output"]["output_format"] == "STAT"

    loaded = SettingsManager(path).load()
    assert loaded.diff.context_lines == 5
    assert loaded.diff.image_extensions == [".png"]
    assert loaded.output.output_format == OutputFormat.STAT


def test_partial_file_fills_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"diff": {"max_text_size": 10}, "output": {"output_format": "name_only"}}),
        encoding="utf-8",
    )

    settings = SettingsManager(path).load()

    assert settings.diff.max_text_size == 10
    assert settings.diff.context_lines == DiffSettings().context_lines
    assert settings.output.output_format == OutputFormat.NAME_ONLY


def test_bad_json_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    assert SettingsManager(path).load() == ApplicationSettings()


def test_save_writes_loaded_settings(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    manager = SettingsManager(path)

    assert not manager.save()
    assert not path.exists()

    manager.settings.diff.max_workers = 2
    assert manager.save()
    assert SettingsManager(path).settings.diff.max_workers == 2
