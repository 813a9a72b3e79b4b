"""Environment driven runtime settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path


logger = logging.getLogger(__name__)

_DB_PATH_ENV = "FANTASYTOOLBOX_DB_PATH"
_ESPN_BASE_ENV = "ESPN_API_BASE"
_GEMINI_BASE_ENV = "GEMINI_API_BASE"
_GEMINI_KEY_ENV = "GEMINI_API_KEY"
_GEMINI_MODEL_ENV = "GEMINI_MODEL"
_TIMEOUT_ENV = "FANTASYTOOLBOX_HTTP_TIMEOUT"
_WAIVER_CAP_ENV = "FANTASYTOOLBOX_WAIVER_CAP"
_PLAYERS_CAP_ENV = "FANTASYTOOLBOX_PLAYERS_CAP"

DEFAULT_ESPN_BASE = "https://lm-api-reads.fantasy.espn.com"
DEFAULT_GEMINI_BASE = "https://generativelanguage.googleapis.com"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_TIMEOUT = 30.0
DEFAULT_WAIVER_CAP = 300
DEFAULT_PLAYERS_CAP = 500


def _env_float(name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def _default_db_path() -> Path:
    return Path(__file__).resolve().parent.parent / "fantasytoolbox.sqlite"


@dataclass(frozen=True)
class Settings:
    db_path: Path | str = field(default_factory=_default_db_path)
    espn_base_url: str = DEFAULT_ESPN_BASE
    gemini_base_url: str = DEFAULT_GEMINI_BASE
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    http_timeout: float = DEFAULT_TIMEOUT
    waiver_cap: int = DEFAULT_WAIVER_CAP
    players_cap: int = DEFAULT_PLAYERS_CAP

    @classmethod
    def from_env(cls) -> "Settings":
        api_key = os.getenv(_GEMINI_KEY_ENV, "")
        if not api_key:
            logger.warning("%s not set; AI recommendations will be unavailable", _GEMINI_KEY_ENV)
        return cls(
            db_path=os.getenv(_DB_PATH_ENV) or _default_db_path(),
            espn_base_url=os.getenv(_ESPN_BASE_ENV, DEFAULT_ESPN_BASE).rstrip("/"),
            gemini_base_url=os.getenv(_GEMINI_BASE_ENV, DEFAULT_GEMINI_BASE).rstrip("/"),
            gemini_api_key=api_key,
            gemini_model=os.getenv(_GEMINI_MODEL_ENV, DEFAULT_GEMINI_MODEL),
            http_timeout=_env_float(_TIMEOUT_ENV, DEFAULT_TIMEOUT, clamp_min=1.0),
            waiver_cap=_env_int(_WAIVER_CAP_ENV, DEFAULT_WAIVER_CAP, min_value=1),
            players_cap=_env_int(_PLAYERS_CAP_ENV, DEFAULT_PLAYERS_CAP, min_value=1),
        )
