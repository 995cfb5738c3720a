"""
Hashing service for file content fingerprints.
"""

from __future__ import annotations

from dataclasses import dataclass

import xxhash


@dataclass(frozen=True)
class HashResult:
    """Result of a hash operation."""
    hash_hex: str
    size: int

    def matches(self, other: 'HashResult') -> bool:
        """Check if this hash matches another."""
        return self.size == other.size and self.hash_hex == other.hash_hex


class HashingService:
    """Computes xxHash64 digests of file contents."""

    def __init__(self, seed: int = 0):
        self.seed = seed

    def hash_bytes(self, data: bytes) -> HashResult:
        """Compute hash of bytes."""
        return HashResult(
            hash_hex=xxhash.xxh64_hexdigest(data, seed=self.seed),
            size=len(data)
        )
