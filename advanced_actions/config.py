"""Runtime settings for the action list engine, read from the environment."""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    action_endpoint: str = "/"
    site_origin: str = "localhost"
    popup_default_width: int = 340
    popup_viewport_gutter: int = 40
    popup_edge_margin: int = 10
    honor_row_visibility_in_preview: bool = False
    log_level: str = "WARNING"


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        action_endpoint=os.getenv("ADVANCED_ACTIONS_ENDPOINT", "/"),
        site_origin=os.getenv("ADVANCED_ACTIONS_SITE_ORIGIN", "localhost"),
        popup_default_width=_int_from_env("ADVANCED_ACTIONS_POPUP_WIDTH", 340),
        popup_viewport_gutter=_int_from_env("ADVANCED_ACTIONS_POPUP_GUTTER", 40),
        popup_edge_margin=_int_from_env("ADVANCED_ACTIONS_POPUP_EDGE_MARGIN", 10),
        honor_row_visibility_in_preview=_bool_from_env(
            "ADVANCED_ACTIONS_PREVIEW_HONORS_HIDE", False
        ),
        log_level=os.getenv("ADVANCED_ACTIONS_LOG_LEVEL", "WARNING"),
    )


__all__ = ["Settings", "get_settings"]
