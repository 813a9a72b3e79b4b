"""Player models shared by the ESPN, ranking, export and prompt layers."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class PlayerRecord(BaseModel):
    """Normalized free-agent or database player built from one ESPN payload."""

    player_id: int = 0
    full_name: str = ""
    position: str = "UNKNOWN"
    pro_team: str = "FA"
    ownership_percentage: float = Field(default=0.0, ge=0.0, le=100.0, allow_inf_nan=False)
    fantasy_points: float = Field(default=0.0, allow_inf_nan=False)
    projected_points: float = Field(default=0.0, allow_inf_nan=False)
    rank: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(frozen=True)


class RosterPlayer(BaseModel):
    """Player already on the user's fantasy team."""

    player_id: int = 0
    full_name: str = ""
    position: str = "UNKNOWN"
    pro_team: str = "FA"
    slot: str = ""

    model_config = ConfigDict(frozen=True)
