"""
Hashing service for content identity.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional

import xxhash


class HashAlgorithm(Enum):
    """Supported hash algorithms."""
    SHA1 = auto()
    SHA256 = auto()
    XXH64 = auto()  # Fast non-cryptographic hash


@dataclass
class HashResult:
    """Result of a hash operation."""
    algorithm: HashAlgorithm
    hash_hex: str
    size: int

    def matches(self, other: 'HashResult') -> bool:
        """Check if this hash matches another."""
        return (self.algorithm == other.algorithm and
                self.size == other.size and
                self.hash_hex == other.hash_hex)


class HashingService:
    """Service for computing content hashes."""

    def __init__(
        self,
        default_algorithm: HashAlgorithm = HashAlgorithm.XXH64,
        chunk_size: int = 65536
    ):
        self.default_algorithm = default_algorithm
        self.chunk_size = chunk_size

    def hash_bytes(
        self,
        data: bytes,
        algorithm: Optional[HashAlgorithm] = None
    ) -> HashResult:
        """Compute the hash of in-memory content."""
        algorithm = algorithm or self.default_algorithm
        hasher = self._create_hasher(algorithm)
        hasher.update(data)
        return HashResult(algorithm=algorithm, hash_hex=hasher.hexdigest(), size=len(data))

    def hash_file(
        self,
        path: Path | str,
        algorithm: Optional[HashAlgorithm] = None
    ) -> HashResult:
        """Compute the hash of a file, reading it in chunks."""
        path = Path(path)
        algorithm = algorithm or self.default_algorithm
        hasher = self._create_hasher(algorithm)

        size = 0
        with open(path, 'rb') as f:
            while chunk := f.read(self.chunk_size):
                hasher.update(chunk)
                size += len(chunk)

        return HashResult(algorithm=algorithm, hash_hex=hasher.hexdigest(), size=size)

    def _create_hasher(self, algorithm: HashAlgorithm):
        """Create a hasher for the given algorithm."""
        if algorithm == HashAlgorithm.SHA1:
            return hashlib.sha1()
        elif algorithm == HashAlgorithm.SHA256:
            return hashlib.sha256()
        elif algorithm == HashAlgorithm.XXH64:
            return xxhash.xxh64()
        else:
            raise ValueError(f"Unknown algorithm: {algorithm}")
