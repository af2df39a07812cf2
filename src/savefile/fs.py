from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> None:
    """Create the directory and any missing parents. Log and raise on failure."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Failed to create directory '%s': %s", path, exc)
        raise


def write_bytes(path: Path, data: bytes) -> None:
    """Plain overwrite of ``path``; not crash-safe."""
    ensure_dir(path.parent)
    with open(path, "wb") as f:
        f.write(data)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write ``data`` to a sibling temp file, fsync it, then swap it into place.

    Readers see either the previous file or the complete new one.
    """
    ensure_dir(path.parent)
    tmp = tempfile.NamedTemporaryFile(
        "wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
    )
    tmp_path = Path(tmp.name)
    try:
        with tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.debug("Atomically replaced %s (%d bytes)", path, len(data))


def read_bytes(path: Path) -> bytes:
    with open(path, "rb") as f:
        return f.read()
