from __future__ import annotations

import logging
import os
from typing import Optional

ENV_LOG_LEVEL = "SAVEFILE_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def _level_from_env(env_var: str, default_level: int) -> int:
    name = os.getenv(env_var, "").strip()
    if not name:
        return default_level
    level = logging.getLevelName(name.upper())
    if isinstance(level, int):
        return level
    logger.warning("Unknown log level %r in %s; using %s", name, env_var, logging.getLevelName(default_level))
    return default_level


def configure_logging(
    default_level: int = logging.INFO,
    *,
    env_var: str = ENV_LOG_LEVEL,
    fmt: Optional[str] = None,
) -> int:
    """Configure the root logger for an application embedding the store.

    The level named by ``env_var`` (SAVEFILE_LOG_LEVEL by default) overrides
    ``default_level``. Returns the level that was applied.
    """
    level = _level_from_env(env_var, default_level)
    logging.basicConfig(level=level, format=fmt or LOG_FORMAT)
    logging.getLogger("savefile").setLevel(level)
    return level
