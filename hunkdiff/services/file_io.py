"""
File I/O service for reading side content safely.

Handles:
- Encoding detection
- Line ending detection
- Raw text construction (delimiter and missing final newline)
- Binary content sniffing
- Temporary files for materialised content
"""

from __future__ import annotations

import os
import tempfile
import logging
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional

import chardet

from hunkdiff.core.models import RawText


class LineEnding(Enum):
    """Line ending style."""
    LF = auto()      # Unix: \n
    CRLF = auto()    # Windows: \r\n
    CR = auto()      # Old Mac: \r
    MIXED = auto()   # Mixed endings
    NONE = auto()    # No line endings (single line or empty)


@dataclass
class DecodedContent:
    """Decoded text content with metadata."""
    content: str
    encoding: str
    line_ending: LineEnding
    bom: bool
    size: int


@dataclass
class ReadResult:
    """Result of a file read operation."""
    success: bool
    data: Optional[bytes] = None
    error: Optional[str] = None
    missing: bool = False
    too_large: bool = False


class FileIOService:
    """Service for reading side content and turning it into raw text."""

    # Binary file signatures (magic bytes)
    BINARY_SIGNATURES = [
        b'\x89PNG',        # PNG
        b'\xff\xd8\xff',   # JPEG
        b'GIF8',           # GIF
        b'PK\x03\x04',     # ZIP
        b'\x1f\x8b',       # GZIP
        b'%PDF',           # PDF
        b'\x7fELF',        # ELF
    ]

    def __init__(
        self,
        default_encoding: str = 'utf-8',
        fallback_encoding: str = 'latin-1',
        binary_check_size: int = 8000,
        non_text_ratio: float = 0.3
    ):
        self.default_encoding = default_encoding
        self.fallback_encoding = fallback_encoding
        self.binary_check_size = binary_check_size
        self.non_text_ratio = non_text_ratio

    def read_file(
        self,
        path: Path | str,
        max_size: Optional[int] = None
    ) -> ReadResult:
        """
        Read the raw bytes of a file.

        Args:
            path: Path to the file
            max_size: Size ceiling in bytes; larger files are not read

        Returns:
            ReadResult with the bytes, or flags/error describing why not
        """
        path = Path(path)

        if not path.exists():
            return ReadResult(success=False, missing=True, error=f"File not found: {path}")

        if not path.is_file():
            return ReadResult(success=False, error=f"Not a file: {path}")

        try:
            file_size = path.stat().st_size
            if max_size is not None and file_size > max_size:
                return ReadResult(
                    success=False,
                    too_large=True,
                    error=f"File too large for text comparison ({file_size / 1024 / 1024:.2f} MB). Max size is {max_size / 1024 / 1024:.2f} MB."
                )
            return ReadResult(success=True, data=path.read_bytes())
        except PermissionError:
            return ReadResult(success=False, error=f"Permission denied: {path}")
        except OSError as e:
            return ReadResult(success=False, error=f"OS error: {e}")

    def is_binary(self, data: bytes) -> bool:
        """Check if content looks binary."""
        chunk = data[:self.binary_check_size]

        for sig in self.BINARY_SIGNATURES:
            if chunk.startswith(sig):
                return True

        if b'\x00' in chunk:
            return True

        # Check ratio of non-text bytes
        non_text = sum(1 for b in chunk if b < 9 or (b > 13 and b < 32 and b != 27))
        if len(chunk) > 0 and non_text / len(chunk) > self.non_text_ratio:
            return True

        return False

    def decode(self, raw_content: bytes, encoding: Optional[str] = None) -> DecodedContent:
        """Decode bytes to text, detecting the encoding when not given."""
        detected_encoding = encoding or self._detect_encoding(raw_content)

        # Check for BOM
        bom = False
        if raw_content.startswith(b'\xef\xbb\xbf'):
            bom = True
            detected_encoding = 'utf-8-sig'
        elif raw_content.startswith(b'\xff\xfe'):
            bom = True
            detected_encoding = 'utf-16-le'
        elif raw_content.startswith(b'\xfe\xff'):
            bom = True
            detected_encoding = 'utf-16-be'

        try:
            content = raw_content.decode(detected_encoding)
            if bom and content.startswith('\ufeff'):
                content = content[1:]
        except (UnicodeDecodeError, LookupError):
            logging.warning(
                f"FileIOService - Could not decode as {detected_encoding}, "
                f"falling back to {self.fallback_encoding}"
            )
            content = raw_content.decode(self.fallback_encoding, errors='replace')
            detected_encoding = self.fallback_encoding

        return DecodedContent(
            content=content,
            encoding=detected_encoding,
            line_ending=self.detect_line_ending(content),
            bom=bom,
            size=len(raw_content)
        )

    def to_raw_text(self, content: str) -> RawText:
        """
        Split text into a RawText.

        The delimiter is ``\\r\\n`` only when every line ends with it, so
        lines of mixed-ending files keep their ``\\r`` and render back
        byte for byte.
        """
        if not content:
            return RawText.EMPTY

        line_ending = self.detect_line_ending(content)
        if line_ending == LineEnding.CRLF:
            delimiter = '\r\n'
        elif '\n' in content:
            delimiter = '\n'
        else:
            delimiter = None

        missing_newline = not content.endswith('\n')
        parts = content.split('\n')
        if not missing_newline:
            parts.pop()

        if delimiter == '\r\n':
            terminated = len(parts) - 1 if missing_newline else len(parts)
            parts = [p[:-1] if i < terminated else p for i, p in enumerate(parts)]

        return RawText(
            lines=tuple(parts),
            line_delimiter=delimiter,
            missing_newline_at_end=missing_newline
        )

    def bytes_to_raw_text(self, raw_content: bytes, encoding: Optional[str] = None) -> RawText:
        """Decode bytes and split them into a RawText."""
        return self.to_raw_text(self.decode(raw_content, encoding).content)

    def detect_line_ending(self, content: str) -> LineEnding:
        """Detect line ending style in content."""
        crlf_count = content.count('\r\n')
        lf_count = content.count('\n') - crlf_count
        cr_count = content.count('\r') - crlf_count

        if crlf_count == 0 and lf_count == 0 and cr_count == 0:
            return LineEnding.NONE

        total = crlf_count + lf_count + cr_count

        if crlf_count == total:
            return LineEnding.CRLF
        elif lf_count == total:
            return LineEnding.LF
        elif cr_count == total:
            return LineEnding.CR
        else:
            return LineEnding.MIXED

    def _detect_encoding(self, content: bytes) -> str:
        """Detect encoding of content."""
        if not content:
            return self.default_encoding

        # Plain UTF-8 needs no guessing
        try:
            content.decode(self.default_encoding)
            return self.default_encoding
        except (UnicodeDecodeError, LookupError):
            pass

        result = chardet.detect(content)

        if result['confidence'] > 0.7 and result['encoding']:
            encoding = result['encoding'].lower()
            if encoding == 'ascii':
                return 'utf-8'  # ASCII is subset of UTF-8
            return encoding

        return self.default_encoding


class TempFileManager:
    """Manager for temporary files with automatic cleanup."""

    def __init__(self, prefix: str = "hunkdiff_", suffix: str = ""):
        self.prefix = prefix
        self.suffix = suffix
        self._temp_files: list[Path] = []

    def create_temp_file(
        self,
        content: bytes = b"",
        suffix: Optional[str] = None,
        name_hint: str = ""
    ) -> Path:
        """Create a temporary file holding ``content``."""
        fd, path = tempfile.mkstemp(
            prefix=f"{self.prefix}{name_hint}",
            suffix=self.suffix if suffix is None else suffix
        )
        path = Path(path)

        try:
            if content:
                os.write(fd, content)
        finally:
            os.close(fd)

        self._temp_files.append(path)
        return path

    def cleanup(self):
        """Remove all temporary files."""
        for path in self._temp_files:
            try:
                if path.exists():
                    path.unlink()
            except OSError as e:
                logging.warning(f"TempFileManager - Cleanup failed for temp file {path}: {e}")

        self._temp_files.clear()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.cleanup()
