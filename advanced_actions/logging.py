import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from advanced_actions.config import get_settings

_INITIALIZED = False


def configure_logging(level: Optional[str] = None, *, log_path: Optional[Path] = None) -> None:
    """Attach console (and optionally rotating file) handlers to the package logger."""

    global _INITIALIZED
    if _INITIALIZED:
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger = logging.getLogger("advanced_actions")
    level_name = (level or get_settings().log_level).upper()
    logger.setLevel(getattr(logging, level_name, logging.WARNING))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(str(log_path), maxBytes=1_000_000, backupCount=5)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _INITIALIZED = True
    logger.debug("Logging configured at %s", level_name)


__all__ = ["configure_logging"]
