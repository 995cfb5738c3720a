"""
File I/O service for reading files under comparison.

Files are read as bytes once, then decoded strictly: content that is
not valid in the configured encoding is an error, not replaced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from repodrift.services.hashing import HashingService, HashResult


@dataclass(frozen=True)
class FileContent:
    """Decoded file content with its fingerprint."""
    path: str
    text: str
    encoding: str
    digest: HashResult

    @property
    def size(self) -> int:
        return self.digest.size


class FileIOService:
    """Service for reading text files."""

    def __init__(
        self,
        encoding: str = 'utf-8',
        hashing: HashingService | None = None
    ):
        self.encoding = encoding
        self.hashing = hashing or HashingService()

    def read_text(self, path: Path | str) -> FileContent:
        """
        Read and decode a file.

        Raises:
            OSError: The file could not be read
            UnicodeDecodeError: The content is not valid in ``self.encoding``
        """
        path = Path(path)
        data = path.read_bytes()
        text = data.decode(self.encoding)

        logging.debug(f"FileIOService - Read {len(data)} bytes from {path}")

        return FileContent(
            path=str(path),
            text=text,
            encoding=self.encoding,
            digest=self.hashing.hash_bytes(data)
        )
