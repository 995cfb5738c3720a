"""
Exceptions raised by the comparison engine.

Every error aborts the comparison it occurs in; nothing here is retried.
"""

from __future__ import annotations

from typing import Optional


class RepoDriftError(Exception):
    """Base class for all repodrift errors."""


class ConfigurationError(RepoDriftError, ValueError):
    """Invalid engine or settings configuration (missing root, bad threshold)."""


class TraversalError(RepoDriftError, OSError):
    """A directory could not be listed while walking a repository."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class FileReadError(RepoDriftError, OSError):
    """One side of a common file could not be read or decoded."""

    def __init__(self, message: str, file1_path: str, file2_path: str):
        super().__init__(message)
        self.file1_path = file1_path
        self.file2_path = file2_path

    def __str__(self) -> str:
        return self.args[0] if self.args else ""
