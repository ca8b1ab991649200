"""Environment-driven settings for game sessions."""

import os
from typing import Optional

from dotenv import load_dotenv

# Ensure environment variables from .env are loaded when this module is imported.
load_dotenv()


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable '{name}' must be a number, got {raw!r}") from exc


AUTO_DRAW_INTERVAL: float = _float_env("TAMBOLA_AUTO_DRAW_INTERVAL", 3.0)
ANNOUNCE_MODE: str = os.getenv("TAMBOLA_ANNOUNCE_MODE", "auto").strip().lower()
DISPLAY_URL: Optional[str] = os.getenv("TAMBOLA_DISPLAY_URL") or None
HTTP_TIMEOUT: float = _float_env("TAMBOLA_HTTP_TIMEOUT", 10.0)
GAME_TITLE: str = os.getenv("TAMBOLA_GAME_TITLE", "Tambola Game")
