"""
Tree walk for scoping a diff to the paths that changed.

Compares two directory trees and produces the ordered list of diff
entries (added, deleted and modified files).
"""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from hunkdiff.core.models import ChangeType, DiffEntry
from hunkdiff.services.hashing import HashingService


@dataclass
class ScanOptions:
    """Options for tree scanning."""
    include_hidden: bool = False
    follow_symlinks: bool = False
    exclude_patterns: list[str] = field(default_factory=lambda: [
        '.git', '.svn', '.hg',
        '__pycache__', '*.pyc',
        '.DS_Store', 'Thumbs.db',
    ])

    def should_include(self, name: str) -> bool:
        """Check if a file or directory name should be scanned."""
        if not self.include_hidden and name.startswith('.'):
            return False

        for pattern in self.exclude_patterns:
            if fnmatch.fnmatch(name, pattern):
                return False

        return True


def list_files(root: Path, options: Optional[ScanOptions] = None) -> dict[str, Path]:
    """Map of POSIX relative path -> absolute path for every file under root."""
    options = options or ScanOptions()
    files: dict[str, Path] = {}

    if not root.is_dir():
        return files

    for dirpath, dirnames, filenames in os.walk(root, followlinks=options.follow_symlinks):
        dirnames[:] = sorted(d for d in dirnames if options.should_include(d))
        for name in filenames:
            if not options.should_include(name):
                continue
            path = Path(dirpath) / name
            files[path.relative_to(root).as_posix()] = path

    return files


def scan_changes(
    old_root: Path | str,
    new_root: Path | str,
    options: Optional[ScanOptions] = None,
    hashing: Optional[HashingService] = None
) -> list[DiffEntry]:
    """
    Diff entries for every file that differs between two trees.

    Files present in both trees are compared by size and then by content
    hash. Entries are sorted by path.
    """
    hashing = hashing or HashingService()
    old_files = list_files(Path(old_root), options)
    new_files = list_files(Path(new_root), options)

    entries: list[DiffEntry] = []
    for rel_path in sorted(old_files.keys() | new_files.keys()):
        old_path = old_files.get(rel_path)
        new_path = new_files.get(rel_path)

        if old_path is None:
            entries.append(DiffEntry(None, rel_path, ChangeType.ADD))
        elif new_path is None:
            entries.append(DiffEntry(rel_path, None, ChangeType.DELETE))
        elif not same_content(old_path, new_path, hashing):
            entries.append(DiffEntry(rel_path, rel_path, ChangeType.MODIFY))

    logging.debug(f"TreeWalk - {len(entries)} changed paths between {old_root} and {new_root}")
    return entries


def same_content(old_path: Path, new_path: Path, hashing: HashingService) -> bool:
    try:
        if old_path.stat().st_size != new_path.stat().st_size:
            return False
        return hashing.hash_file(old_path).matches(hashing.hash_file(new_path))
    except OSError as e:
        # Let the diff itself report the unreadable side
        logging.warning(f"TreeWalk - Could not compare {old_path} and {new_path}: {e}")
        return False
