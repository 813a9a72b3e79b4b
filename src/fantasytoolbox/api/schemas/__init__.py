"""Pydantic models for API I/O."""

from .connection import EspnConnectionRequest, EspnConnectionResponse
from .players import LineupResponse, SeasonPlayersResponse, WaiverWireResponse
from .recommendations import (
    PlayerAnalysisRequest,
    PlayerAnalysisResponse,
    RecommendationResponse,
    WaiverRecommendationRequest,
)

__all__ = [
    "EspnConnectionRequest",
    "EspnConnectionResponse",
    "LineupResponse",
    "PlayerAnalysisRequest",
    "PlayerAnalysisResponse",
    "RecommendationResponse",
    "SeasonPlayersResponse",
    "WaiverRecommendationRequest",
    "WaiverWireResponse",
]
