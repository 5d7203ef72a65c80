import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "ROOMGEN_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def _env_level() -> Optional[int]:
    """Level named by ROOMGEN_LOG_LEVEL, or None when unset or not a level name."""
    level_name = os.getenv(LOG_LEVEL_ENV, "").strip()
    if not level_name:
        return None
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else None


def resolve_level(debug: bool = False, default_level: int = logging.WARNING) -> int:
    """Pick the log level: --debug wins, then ROOMGEN_LOG_LEVEL, then the default."""
    if debug:
        return logging.DEBUG
    env_level = _env_level()
    return default_level if env_level is None else env_level


def configure_logging(debug: bool = False, default_level: int = logging.WARNING) -> int:
    """Configure the root logger for a roomgen run and return the level in effect.

    Generation logs per-stage progress at DEBUG and a one-line room summary at
    INFO, so the CLI stays quiet (WARNING) unless asked.
    """
    level = resolve_level(debug, default_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if os.getenv(LOG_LEVEL_ENV, "").strip() and _env_level() is None:
        logging.getLogger(__name__).warning(
            "Ignoring unknown %s=%r", LOG_LEVEL_ENV, os.getenv(LOG_LEVEL_ENV)
        )
    return level
