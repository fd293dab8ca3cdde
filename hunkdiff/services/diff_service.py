"""
Diff service.

Drives one diff request end to end:
- Reads both sides from a content provider
- Classifies each side
- Hands the classified content to the hunk diff generator

Independent requests can be run concurrently on a thread pool; the
engine keeps no state between requests.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence

from hunkdiff.core.diff.hunk_diff import HunkDiffGenerator, InvalidObjectError
from hunkdiff.core.models import (
    TOO_LARGE,
    UNREADABLE,
    ChangeType,
    DiffEntry,
    DiffResult,
    DiffSide,
    EntryContent,
)
from hunkdiff.services.classifier import ContentClassifier
from hunkdiff.services.file_io import FileIOService
from hunkdiff.services.settings import DiffSettings


class ContentTooLargeError(IOError):
    """Raised by a content provider when a side exceeds its size ceiling."""


class ContentProvider(Protocol):
    """Storage collaborator that yields the raw bytes of one side."""

    def read(self, side: DiffSide, diff_entry: DiffEntry) -> Optional[bytes]:
        """
        Raw bytes of the entry on ``side``.

        Returns None when the path does not exist on that side. Raises
        ContentTooLargeError when the content is above the provider's size
        ceiling and OSError when the object cannot be resolved.
        """
        ...


class FileSystemContentProvider:
    """
    Content provider reading the two sides from two directory trees.

    Files larger than ``max_size`` are not read.
    """

    def __init__(
        self,
        old_root: Path | str,
        new_root: Path | str,
        file_io: Optional[FileIOService] = None,
        max_size: Optional[int] = None
    ):
        self.old_root = Path(old_root)
        self.new_root = Path(new_root)
        self.file_io = file_io or FileIOService()
        self.max_size = max_size

    def read(self, side: DiffSide, diff_entry: DiffEntry) -> Optional[bytes]:
        if side == DiffSide.OLD:
            if diff_entry.change_type == ChangeType.ADD or diff_entry.old_path is None:
                return None
            path = self.old_root / diff_entry.old_path
        else:
            if diff_entry.change_type == ChangeType.DELETE or diff_entry.new_path is None:
                return None
            path = self.new_root / diff_entry.new_path

        result = self.file_io.read_file(path, max_size=self.max_size)
        if result.success:
            return result.data
        if result.missing:
            return None
        if result.too_large:
            raise ContentTooLargeError(result.error)
        raise OSError(result.error)


@dataclass
class EntryDiffOutcome:
    """Outcome of one request in a batch."""
    diff_entry: DiffEntry
    result: Optional[DiffResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class DiffService:
    """Provider -> classifier -> generator pipeline."""

    def __init__(
        self,
        provider: ContentProvider,
        classifier: Optional[ContentClassifier] = None,
        generator: Optional[HunkDiffGenerator] = None,
        settings: Optional[DiffSettings] = None
    ):
        self.settings = settings or (classifier.settings if classifier else DiffSettings())
        self.provider = provider
        self.classifier = classifier or ContentClassifier(self.settings)
        self.generator = generator or HunkDiffGenerator(context_lines=self.settings.context_lines)

    def load_content(self, side: DiffSide, diff_entry: DiffEntry) -> EntryContent:
        """Read and classify one side, mapping oversized content to TooLarge and storage failures to Unreadable."""
        try:
            data = self.provider.read(side, diff_entry)
        except ContentTooLargeError as e:
            logging.info(f"DiffService - {side.name} side of {diff_entry.file_path} is too large: {e}")
            return TOO_LARGE
        except OSError as e:
            logging.error(f"DiffService - Could not read {side.name} side of {diff_entry.file_path}: {e}")
            return UNREADABLE

        path = diff_entry.old_path if side == DiffSide.OLD else diff_entry.new_path
        return self.classifier.classify(side, path or diff_entry.file_path, data)

    def diff_entry(self, diff_entry: DiffEntry) -> DiffResult:
        """
        Diff a single entry.

        Raises:
            InvalidObjectError: If either side cannot be resolved
        """
        old_content = self.load_content(DiffSide.OLD, diff_entry)
        new_content = self.load_content(DiffSide.NEW, diff_entry)
        return self.generator.format(diff_entry, old_content, new_content)

    def diff_entries(
        self,
        diff_entries: Sequence[DiffEntry],
        max_workers: Optional[int] = None
    ) -> list[EntryDiffOutcome]:
        """
        Diff many entries concurrently.

        Each entry is an independent request; an unreadable entry fails
        only its own outcome. Outcomes keep the order of ``diff_entries``.
        """
        workers = max_workers or self.settings.max_workers

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.diff_entry, entry) for entry in diff_entries]

            outcomes = []
            for entry, future in zip(diff_entries, futures):
                try:
                    outcomes.append(EntryDiffOutcome(entry, result=future.result()))
                except (InvalidObjectError, OSError) as e:
                    logging.error(f"DiffService - Diff failed for {entry.file_path}: {e}")
                    outcomes.append(EntryDiffOutcome(entry, error=str(e)))

        return outcomes
