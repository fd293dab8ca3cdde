"""
Content classifier.

Resolves one side's raw content into an entry content variant:
- Missing when the path does not exist on that side
- TooLarge above the configured size ceiling
- ImageBinary (materialised to a temp file) or Binary for binary content
- Text otherwise
"""

from __future__ import annotations

import io
import logging
from pathlib import Path, PurePosixPath
from typing import Optional

from PIL import Image, UnidentifiedImageError

from hunkdiff.core.models import (
    BINARY,
    MISSING,
    TOO_LARGE,
    UNREADABLE,
    DiffSide,
    EntryContent,
    ImageBinaryContent,
    TextContent,
)
from hunkdiff.services.file_io import FileIOService, TempFileManager
from hunkdiff.services.hashing import HashingService
from hunkdiff.services.settings import DiffSettings


class ContentClassifier:
    """
    Classifies the content of one side of a diff.

    Image previews are written to temp files owned by this classifier;
    use it as a context manager (or call ``close``) to remove them.
    """

    def __init__(
        self,
        settings: Optional[DiffSettings] = None,
        file_io: Optional[FileIOService] = None,
        hashing: Optional[HashingService] = None,
        temp_files: Optional[TempFileManager] = None
    ):
        self.settings = settings or DiffSettings()
        self.file_io = file_io or FileIOService(
            default_encoding=self.settings.default_encoding,
            fallback_encoding=self.settings.fallback_encoding,
            binary_check_size=self.settings.binary_check_size,
            non_text_ratio=self.settings.non_text_ratio,
        )
        self.hashing = hashing or HashingService()
        self.temp_files = temp_files or TempFileManager(prefix=self.settings.temp_prefix)

    def classify(self, side: DiffSide, path: str, data: Optional[bytes]) -> EntryContent:
        """
        Classify raw bytes of ``path`` on ``side``.

        Args:
            side: Which side of the diff the bytes belong to
            path: Repository-relative path, used for extension checks
            data: Raw bytes, or None when the path does not exist on that side
        """
        if data is None:
            return MISSING

        if len(data) > self.settings.max_text_size:
            logging.info(f"ContentClassifier - {side.name} {path} is too large ({len(data)} bytes)")
            return TOO_LARGE

        if not self.file_io.is_binary(data):
            raw_text = self.file_io.bytes_to_raw_text(data)
            return TextContent(raw_text)

        if self.settings.detect_images:
            image_suffix = self._image_suffix(path, data)
            if image_suffix is not None:
                digest = self.hashing.hash_bytes(data).hash_hex
                temp_path = self.temp_files.create_temp_file(
                    data, suffix=image_suffix, name_hint=f"{digest}_"
                )
                logging.debug(f"ContentClassifier - {side.name} {path} materialised to {temp_path}")
                return ImageBinaryContent(temp_path)

        return BINARY

    def classify_path(self, side: DiffSide, path: Path | str) -> EntryContent:
        """Classify a file on disk, mapping read failures to Unreadable."""
        path = Path(path)
        result = self.file_io.read_file(path, max_size=self.settings.max_text_size)

        if result.success:
            return self.classify(side, path.name, result.data)
        if result.missing:
            return MISSING
        if result.too_large:
            return TOO_LARGE

        logging.error(f"ContentClassifier - {side.name} {path} is unreadable: {result.error}")
        return UNREADABLE

    def _image_suffix(self, path: str, data: bytes) -> Optional[str]:
        """Temp file suffix when the content is an image, None otherwise."""
        suffix = PurePosixPath(path).suffix.lower()
        if suffix in self.settings.image_extensions:
            return suffix

        try:
            with Image.open(io.BytesIO(data)) as image:
                image_format = image.format
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
            return None

        return f".{image_format.lower()}" if image_format else None

    def close(self) -> None:
        self.temp_files.cleanup()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
