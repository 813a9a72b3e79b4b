from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class EspnConnectionRequest(BaseModel):
    swid: str = Field(min_length=1)
    espn_s2: str = Field(min_length=1)
    league_id: str = Field(min_length=1)
    league_year: int = Field(ge=2000, le=2100)
    team_id: int | None = Field(default=None, ge=1)


class EspnConnectionResponse(BaseModel):
    user_email: str
    connected: bool
    league_id: str | None = None
    league_year: int | None = None
    team_id: int | None = None
    league_name: str | None = None
    updated_at: datetime | None = None
