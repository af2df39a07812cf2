from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from platformdirs import user_data_dir

from .fs import ensure_dir
from .settings import SaveFileSettings

__all__ = [
    "platform_data_dir",
    "resolve_base_dir",
    "resolve_save_dir",
]

logger = logging.getLogger(__name__)


def platform_data_dir() -> Optional[Path]:
    """Return the OS-conventional per-user data directory, or None.

    Windows: %APPDATA% (or %LOCALAPPDATA%, depending on platformdirs)
    macOS:   ~/Library/Application Support
    Linux:   $XDG_DATA_HOME or ~/.local/share
    """
    try:
        raw = user_data_dir(appname=None, appauthor=False)
    except Exception as exc:  # platformdirs can fail on unusual platforms
        logger.warning("Unable to determine platform data directory: %s", exc)
        return None
    if not raw:
        logger.warning("Platform data directory resolved to an empty path")
        return None
    return Path(raw)


def resolve_base_dir(
    base_dir: Optional[Path] = None, settings: Optional[SaveFileSettings] = None
) -> Optional[Path]:
    """Pick the base directory: explicit argument, then settings, then the platform."""
    if base_dir is not None:
        return Path(base_dir).expanduser()
    if settings is not None and settings.data_dir is not None:
        return settings.data_dir
    return platform_data_dir()


def resolve_save_dir(
    namespace: str,
    *,
    base_dir: Optional[Path] = None,
    settings: Optional[SaveFileSettings] = None,
    create: bool = False,
) -> Path:
    """Return ``<base>/<namespace>``.

    When no base directory can be determined, the namespace alone is used,
    relative to the current working directory.
    """
    if not namespace:
        raise ValueError("namespace must be a non-empty string")
    base = resolve_base_dir(base_dir, settings)
    if base is None:
        logger.warning("Falling back to working-directory save dir for namespace %r", namespace)
        save_dir = Path(namespace)
    else:
        save_dir = base / namespace
    if create:
        ensure_dir(save_dir)
    return save_dir
