"""
Application settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from enum import Enum, auto
from pathlib import Path
from typing import Any, Optional


class OutputFormat(Enum):
    """How diff results are printed."""
    UNIFIED = auto()
    STAT = auto()
    NAME_ONLY = auto()


DEFAULT_IMAGE_EXTENSIONS = [
    '.png', '.jpg', '.jpeg', '.gif', '.bmp', '.webp', '.ico', '.tif', '.tiff',
]


@dataclass
class DiffSettings:
    """Settings for diff generation and content classification."""
    context_lines: int = 3
    max_text_size: int = 50 * 1024 * 1024  # 50MB
    binary_check_size: int = 8000
    non_text_ratio: float = 0.3
    detect_images: bool = True
    image_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS))
    default_encoding: str = 'utf-8'
    fallback_encoding: str = 'latin-1'
    temp_prefix: str = 'hunkdiff_'
    max_workers: int = 4


@dataclass
class OutputSettings:
    """Settings for printing results."""
    output_format: OutputFormat = OutputFormat.UNIFIED
    log_level: str = "WARNING"


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    diff: DiffSettings = field(default_factory=DiffSettings)
    output: OutputSettings = field(default_factory=OutputSettings)


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = settings_path or self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'hunkdiff' / 'settings.json'
        else:
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'hunkdiff' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """Load settings from disk, falling back to defaults."""
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return self._from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logging.warning(f"SettingsManager - Could not load {self.settings_path}, using defaults: {e}")
            return ApplicationSettings()

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._to_dict(settings), f, indent=2)

            self._settings = settings
            return True

        except OSError as e:
            logging.error(f"SettingsManager - Could not save {self.settings_path}: {e}")
            return False

    def _to_dict(self, settings: ApplicationSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        def convert(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.name
            elif hasattr(obj, '__dataclass_fields__'):
                return {k: convert(getattr(obj, k)) for k in asdict(obj)}
            elif isinstance(obj, list):
                return [convert(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            else:
                return obj

        return convert(settings)

    def _from_dict(self, data: dict) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        def get_enum(enum_class: type, value: Any) -> Enum:
            if isinstance(value, str):
                try:
                    return enum_class[value.upper()]
                except KeyError:
                    return list(enum_class)[0]
            return value

        defaults = DiffSettings()
        diff_data = data.get('diff', {})
        diff = DiffSettings(
            context_lines=int(diff_data.get('context_lines', defaults.context_lines)),
            max_text_size=int(diff_data.get('max_text_size', defaults.max_text_size)),
            binary_check_size=int(diff_data.get('binary_check_size', defaults.binary_check_size)),
            non_text_ratio=float(diff_data.get('non_text_ratio', defaults.non_text_ratio)),
            detect_images=bool(diff_data.get('detect_images', defaults.detect_images)),
            image_extensions=[
                ext.lower() for ext in diff_data.get('image_extensions', defaults.image_extensions)
            ],
            default_encoding=diff_data.get('default_encoding', defaults.default_encoding),
            fallback_encoding=diff_data.get('fallback_encoding', defaults.fallback_encoding),
            temp_prefix=diff_data.get('temp_prefix', defaults.temp_prefix),
            max_workers=int(diff_data.get('max_workers', defaults.max_workers)),
        )

        output_data = data.get('output', {})
        output = OutputSettings(
            output_format=get_enum(OutputFormat, output_data.get('output_format', 'UNIFIED')),
            log_level=output_data.get('log_level', 'WARNING'),
        )

        return ApplicationSettings(diff=diff, output=output)
