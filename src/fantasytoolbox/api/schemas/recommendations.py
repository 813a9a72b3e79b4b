from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from fantasytoolbox.ai import AnalysisType
from fantasytoolbox.models import PlayerRecord, RosterPlayer


class WaiverRecommendationRequest(BaseModel):
    position_filter: str | None = None
    top_n: int = Field(default=10, ge=1, le=50)
    roster: List[RosterPlayer] | None = None
    waiver_players: List[PlayerRecord] | None = None


class RecommendationResponse(BaseModel):
    recommendations: str
    degraded: bool = False
    season: int
    week: int


class PlayerAnalysisRequest(BaseModel):
    analysis_type: AnalysisType = "general"


class PlayerAnalysisResponse(BaseModel):
    player_id: int
    analysis_type: str
    analysis: str
    degraded: bool = False
