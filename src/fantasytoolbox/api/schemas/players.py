from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from fantasytoolbox.models import PlayerRecord, RosterPlayer


class WaiverWireResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    players: List[PlayerRecord]
    total: int
    league_id: str = Field(alias="leagueId")
    position: str | None = None
    mode: str = "best_available"
    fallback: bool = False
    partial: bool = False


class SeasonPlayersResponse(BaseModel):
    players: List[PlayerRecord]
    total: int
    season: int
    partial: bool = False


class LineupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    league_id: str = Field(alias="leagueId")
    team_id: int = Field(alias="teamId")
    starters: List[RosterPlayer]
    bench: List[RosterPlayer]
    injured_reserve: List[RosterPlayer] = Field(alias="ir")
