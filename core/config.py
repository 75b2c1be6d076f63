import os
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field

from core.constants import DEFAULT_CONTINUITY, DEFAULT_POINTS_PER_SET_WIN
from core.logging import configure_logging


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


LOG_LEVEL = os.environ.get("ESCALAPP_LOG_LEVEL", "INFO")
LOG_JSON = _env_bool("ESCALAPP_LOG_JSON", False)
CACHE_TTL_SECONDS = int(os.environ.get("ESCALAPP_CACHE_TTL", "300"))
LOCK_TIMEOUT_SECONDS = float(os.environ.get("ESCALAPP_LOCK_TIMEOUT", "10"))


def get_data_dir() -> Path:
    # leído en cada llamada para que los tests puedan cambiar la variable
    return Path(os.environ.get("ESCALAPP_DATA_DIR", "escalapp_data"))


def setup_logging() -> None:
    configure_logging(json_mode=LOG_JSON, log_level=LOG_LEVEL)


class ContinuityBonusConfig(BaseModel):
    """Continuity (streak) bonus of a tournament."""
    enabled: bool = bool(DEFAULT_CONTINUITY["enabled"])
    points_per_unit: float = Field(default=float(DEFAULT_CONTINUITY["points_per_unit"]), ge=0)
    max_bonus: float = Field(default=float(DEFAULT_CONTINUITY["max_bonus"]), ge=0)
    min_rounds: int = Field(default=int(DEFAULT_CONTINUITY["min_rounds"]), ge=0)


class TournamentSettings(BaseModel):
    points_per_set_win: float = Field(default=DEFAULT_POINTS_PER_SET_WIN, ge=0)
    continuity: ContinuityBonusConfig = ContinuityBonusConfig()


def settings_from_tournament(t: Dict) -> TournamentSettings:
    raw: Optional[Dict] = t.get("settings")
    if not raw:
        return TournamentSettings()
    return TournamentSettings.model_validate(raw)
