from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from .codec import decode_document, decode_value, encode_document, encode_value
from .errors import EncodingError, MissingKeyError, PersistenceError
from .fs import atomic_write_bytes, ensure_dir, read_bytes, write_bytes
from .paths import resolve_save_dir
from .settings import SaveFileSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")
PathLike = Union[str, Path]

_MISSING: Any = object()


class SaveFile:
    """Type-erased key/value store for application state.

    Every component is encoded independently to JSON bytes on insert and
    decoded into the caller's requested type on retrieval. The store records
    no type information, so retrieving with a different shape than the one
    inserted raises :class:`~savefile.errors.DecodingError`.

    Persistence uses one of two strategies:
    - with a namespace, files live under ``<data dir>/<namespace>/``
    - without one, the path passed to save/load is used as given

    Settings default to ``SaveFileSettings.from_env()``.

    Not thread-safe; callers sharing a store must serialize access.
    """

    def __init__(
        self,
        namespace: Optional[str] = None,
        *,
        base_dir: Optional[PathLike] = None,
        settings: Optional[SaveFileSettings] = None,
    ) -> None:
        self._entries: Dict[str, bytes] = {}
        self._namespace: Optional[str] = None
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.settings = settings if settings is not None else SaveFileSettings.from_env()
        self.set_namespace(namespace)

    def __repr__(self) -> str:
        return f"SaveFile(namespace={self._namespace!r}, entries={len(self._entries)})"

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    @property
    def namespace(self) -> Optional[str]:
        return self._namespace

    def set_namespace(self, name: Optional[str]) -> None:
        """Replace the namespace. Stored components are not affected."""
        if name is not None and (not isinstance(name, str) or not name):
            raise ValueError(f"namespace must be a non-empty string, got {name!r}")
        self._namespace = name

    # --------------------- Components ---------------------

    def add_component(self, key: str, value: Any) -> None:
        """Encode ``value`` and store it under ``key``, replacing any previous value.

        Raises:
            EncodingError: if ``value`` cannot be encoded. The previous value
                under ``key`` (if any) is kept.
        """
        _check_key(key)
        try:
            encoded = encode_value(value)
        except EncodingError as exc:
            logger.debug("Failed to encode component %r: %s", key, exc)
            exc.key = key
            raise
        self._entries[key] = encoded
        logger.debug("Stored component %r (%d bytes)", key, len(encoded))

    def get_component(self, key: str, target_type: Type[T], default: Any = _MISSING) -> T:
        """Decode the component stored under ``key`` as ``target_type``.

        ``target_type`` is anything pydantic accepts: builtins, ``list[int]``,
        dataclasses, ``BaseModel`` subclasses and so on.

        Raises:
            MissingKeyError: if ``key`` is absent and no ``default`` was given.
            DecodingError: if the stored value does not fit ``target_type``.
        """
        raw = self._entries.get(key)
        if raw is None:
            if default is not _MISSING:
                return default
            raise MissingKeyError(key)
        return decode_value(raw, target_type, strict=self.settings.strict, key=key)

    def get_raw(self, key: str) -> bytes:
        """Return the encoded bytes stored under ``key``."""
        try:
            return self._entries[key]
        except KeyError:
            raise MissingKeyError(key) from None

    def has_component(self, key: str) -> bool:
        return key in self._entries

    def remove_component(self, key: str) -> None:
        try:
            del self._entries[key]
        except KeyError:
            raise MissingKeyError(key) from None
        logger.debug("Removed component %r", key)

    def keys(self) -> List[str]:
        return list(self._entries)

    # --------------------- Persistence ---------------------

    def get_save_dir(self, create: bool = False) -> Path:
        """Return ``<data dir>/<namespace>`` for namespaced stores.

        Falls back to the bare namespace (relative to the working directory)
        when the platform data directory cannot be determined.
        """
        if self._namespace is None:
            raise ValueError("get_save_dir() requires a namespaced store")
        return resolve_save_dir(
            self._namespace, base_dir=self.base_dir, settings=self.settings, create=create
        )

    def _resolve_path(self, path: PathLike) -> Path:
        if self._namespace is None:
            return Path(path)
        return self.get_save_dir() / path

    def save_to_file(self, path: PathLike) -> Path:
        """Write the whole store as one JSON document and return the file path.

        Raises:
            PersistenceError: if the directory cannot be created or the file
                cannot be written.
        """
        target = self._resolve_path(path)
        payload = encode_document(self._entries, self._namespace, indent=self.settings.indent)
        writer = atomic_write_bytes if self.settings.atomic_writes else write_bytes
        try:
            ensure_dir(target.parent)
            writer(target, payload)
        except OSError as exc:
            logger.error("Failed to write save file %s: %s", target, exc)
            raise PersistenceError(f"Failed to write save file {target}: {exc}", path=target) from exc
        logger.info("Saved %d component(s) to %s", len(self._entries), target)
        return target

    def load(self, path: PathLike) -> "SaveFile":
        """Load ``path`` using this store's namespace and directory settings.

        Returns a new store; this instance is left untouched.
        """
        return self._read(self._resolve_path(path), self._namespace, self.base_dir, self.settings)

    @classmethod
    def load_from_file(
        cls,
        path: PathLike,
        namespace: Optional[str] = None,
        *,
        base_dir: Optional[PathLike] = None,
        settings: Optional[SaveFileSettings] = None,
    ) -> "SaveFile":
        """Load a store from ``path``.

        Without a namespace ``path`` is read as given; with one it is
        resolved under the namespace's save directory.

        Raises:
            PersistenceError: if the file is missing or unreadable.
            CorruptSaveError: if the contents are not a valid save document.
        """
        locator = cls(namespace, base_dir=base_dir, settings=settings)
        return locator.load(path)

    @classmethod
    def _read(
        cls,
        target: Path,
        namespace: Optional[str],
        base_dir: Optional[Path],
        settings: SaveFileSettings,
    ) -> "SaveFile":
        try:
            data = read_bytes(target)
        except OSError as exc:
            logger.error("Failed to read save file %s: %s", target, exc)
            raise PersistenceError(f"Failed to read save file {target}: {exc}", path=target) from exc
        entries, stored_namespace = decode_document(data, path=target)
        store = cls(stored_namespace or namespace, base_dir=base_dir, settings=settings)
        store._entries = entries
        logger.info("Loaded %d component(s) from %s", len(entries), target)
        return store


def _check_key(key: Any) -> None:
    if not isinstance(key, str):
        raise TypeError(f"component keys must be str, got {type(key).__name__}")


__all__ = ["SaveFile"]
