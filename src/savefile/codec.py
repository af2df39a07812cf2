"""Uniform JSON encoding used for every component and for whole documents.

Components are encoded independently to compact UTF-8 JSON bytes. Decoding
goes through a pydantic ``TypeAdapter`` for the caller's target type, so a
stored shape that does not fit the requested type surfaces as a
:class:`~savefile.errors.DecodingError` instead of a silently wrong value.

The document layout nests every component as a JSON value::

    {"entries": {"player": {"health": 100}, "flag": true}, "namespace": "my-game"}
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, JsonValue, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from .errors import CorruptSaveError, DecodingError, EncodingError

logger = logging.getLogger(__name__)

_SEPARATORS = (",", ":")

# pydantic-core's JSON parser stops at 200 levels; documents wrap components in two more.
MAX_DEPTH = 128


class SaveDocument(BaseModel):
    """On-disk shape of a whole store."""

    model_config = ConfigDict(extra="forbid")

    entries: Dict[str, JsonValue] = Field(default_factory=dict)
    namespace: Optional[str] = None


def _dumps(obj: Any) -> bytes:
    return json.dumps(obj, allow_nan=False, ensure_ascii=False, separators=_SEPARATORS).encode("utf-8")


def _depth(obj: Any) -> int:
    deepest = 0
    stack = [(obj, 0)]
    while stack:
        node, level = stack.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        level += 1
        deepest = max(deepest, level)
        stack.extend((child, level) for child in children)
    return deepest


def encode_value(value: Any) -> bytes:
    """Encode ``value`` to compact JSON bytes.

    ``bytes`` values are stored as UTF-8 text, so binary blobs must be
    base64-encoded by the caller before insert.

    Raises:
        EncodingError: for NaN/infinity, cyclic structures, nesting deeper
            than ``MAX_DEPTH``, non-UTF-8 bytes, or types pydantic cannot
            serialize.
    """
    name = type(value).__name__
    try:
        jsonable = to_jsonable_python(value)
        encoded = _dumps(jsonable)
    except (PydanticSerializationError, ValueError, TypeError, RecursionError) as exc:
        raise EncodingError(f"Cannot encode value of type {name}: {exc}") from exc
    if _depth(jsonable) > MAX_DEPTH:
        raise EncodingError(f"Cannot encode value of type {name}: nested deeper than {MAX_DEPTH} levels")
    return encoded


@lru_cache(maxsize=256)
def _cached_adapter(target_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target_type)


def type_adapter(target_type: Any) -> TypeAdapter[Any]:
    """Return a (cached where possible) TypeAdapter for ``target_type``."""
    try:
        hash(target_type)
    except TypeError:
        return TypeAdapter(target_type)
    return _cached_adapter(target_type)


def _type_name(target_type: Any) -> str:
    return getattr(target_type, "__name__", None) or repr(target_type)


def decode_value(data: bytes, target_type: Any, *, strict: bool = True, key: Optional[str] = None) -> Any:
    """Decode JSON bytes into ``target_type``.

    Raises:
        DecodingError: when the stored shape is incompatible with ``target_type``.
    """
    adapter = type_adapter(target_type)
    try:
        return adapter.validate_json(data, strict=strict)
    except ValidationError as exc:
        where = f" under key {key!r}" if key is not None else ""
        raise DecodingError(
            f"Stored value{where} does not decode as {_type_name(target_type)}: "
            f"{exc.error_count()} validation error(s)",
            key=key,
            target_type=target_type,
        ) from exc


def encode_document(entries: Dict[str, bytes], namespace: Optional[str] = None, indent: Optional[int] = None) -> bytes:
    """Encode a whole store, nesting each component as a JSON value."""
    doc = SaveDocument(
        entries={key: json.loads(raw) for key, raw in entries.items()},
        namespace=namespace,
    )
    exclude = {"namespace"} if namespace is None else None
    return doc.model_dump_json(exclude=exclude, indent=indent).encode("utf-8")


def decode_document(data: bytes, path: Optional[Path] = None) -> Tuple[Dict[str, bytes], Optional[str]]:
    """Decode a whole document back into per-key bytes and the namespace.

    Raises:
        CorruptSaveError: if ``data`` is not a valid document.
    """
    try:
        doc = SaveDocument.model_validate_json(data)
        entries = {key: _dumps(value) for key, value in doc.entries.items()}
    except (ValidationError, ValueError) as exc:
        logger.error("Invalid save document%s: %s", f" at {path}" if path else "", exc)
        raise CorruptSaveError(f"Invalid save document{f' at {path}' if path else ''}", path=path) from exc
    return entries, doc.namespace


__all__ = [
    "SaveDocument",
    "encode_value",
    "decode_value",
    "type_adapter",
    "encode_document",
    "decode_document",
]
