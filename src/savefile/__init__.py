"""Type-erased persistent key/value store for application state."""
from importlib.metadata import version, PackageNotFoundError

from .errors import (
    CorruptSaveError,
    DecodingError,
    EncodingError,
    MissingKeyError,
    PersistenceError,
    SaveFileError,
)
from .settings import SaveFileSettings
from .store import SaveFile

__all__ = [
    "__version__",
    "SaveFile",
    "SaveFileSettings",
    "SaveFileError",
    "EncodingError",
    "DecodingError",
    "MissingKeyError",
    "PersistenceError",
    "CorruptSaveError",
]

try:
    __version__ = version("savefile")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"
