from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Environment variable overrides (useful for tests and power users)
ENV_DATA_DIR = "SAVEFILE_DATA_DIR"
ENV_STRICT = "SAVEFILE_STRICT"
ENV_ATOMIC_WRITES = "SAVEFILE_ATOMIC_WRITES"
ENV_INDENT = "SAVEFILE_INDENT"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass
class SaveFileSettings:
    """Runtime configuration for a :class:`~savefile.store.SaveFile`.

    - data_dir: base directory used instead of the platform user data dir.
    - strict: reject lossy coercions when decoding (e.g. ``true`` as an int).
    - atomic_writes: write documents through a temp file and ``os.replace``.
    - indent: pretty-print saved documents with this indent; compact if None.
    """

    data_dir: Optional[Path] = None
    strict: bool = True
    atomic_writes: bool = True
    indent: Optional[int] = None

    def __post_init__(self) -> None:
        if self.data_dir is not None:
            self.data_dir = Path(self.data_dir).expanduser()
        if self.indent is not None and self.indent < 0:
            raise ValueError(f"indent must be non-negative, got {self.indent}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SaveFileSettings":
        """Build settings from ``SAVEFILE_*`` environment variables.

        Unset or empty variables fall back to the dataclass defaults.
        """
        env = os.environ if environ is None else environ
        data_dir = env.get(ENV_DATA_DIR, "").strip()
        settings = cls(
            data_dir=Path(data_dir) if data_dir else None,
            strict=_parse_bool(env.get(ENV_STRICT), default=True, name=ENV_STRICT),
            atomic_writes=_parse_bool(env.get(ENV_ATOMIC_WRITES), default=True, name=ENV_ATOMIC_WRITES),
            indent=_parse_int(env.get(ENV_INDENT), name=ENV_INDENT),
        )
        logger.debug("Loaded settings from environment: %s", settings)
        return settings


def _parse_bool(raw: Optional[str], *, default: bool, name: str) -> bool:
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    logger.warning("Ignoring unrecognised value %r for %s; using %s", raw, name, default)
    return default


def _parse_int(raw: Optional[str], *, name: str) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


__all__ = ["SaveFileSettings", "ENV_DATA_DIR", "ENV_STRICT", "ENV_ATOMIC_WRITES", "ENV_INDENT"]
