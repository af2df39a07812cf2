from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class SaveFileError(Exception):
    """Base class for all save file errors."""


class EncodingError(SaveFileError, ValueError):
    """Raised when a value cannot be converted to the uniform JSON encoding."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class DecodingError(SaveFileError, ValueError):
    """Raised when stored bytes do not match the shape requested by the caller."""

    def __init__(self, message: str, key: Optional[str] = None, target_type: Any = None) -> None:
        super().__init__(message)
        self.key = key
        self.target_type = target_type


class MissingKeyError(SaveFileError, KeyError):
    """Raised when a component key is not present in the store."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"No component stored under key {self.key!r}"


class PersistenceError(SaveFileError, OSError):
    """Raised when persistence (save/load) operations fail."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return str(self.args[0])


class CorruptSaveError(PersistenceError):
    """Raised when a save file's contents are not a valid document."""


__all__ = [
    "SaveFileError",
    "EncodingError",
    "DecodingError",
    "MissingKeyError",
    "PersistenceError",
    "CorruptSaveError",
]
