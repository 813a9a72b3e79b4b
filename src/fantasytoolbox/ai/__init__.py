"""AI prompt building and Gemini text generation."""

from .gemini import (
    EMPTY_RESPONSE_MESSAGE,
    GENERIC_FAILURE_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    RATE_LIMIT_RETRY_SECONDS,
    GeminiClient,
    GenerationResult,
    extract_text,
)
from .prompts import (
    ANALYSIS_TYPES,
    AnalysisType,
    build_player_analysis_prompt,
    build_waiver_prompt,
    current_nfl_week,
    infer_season,
    season_start,
)

__all__ = [
    "ANALYSIS_TYPES",
    "AnalysisType",
    "EMPTY_RESPONSE_MESSAGE",
    "GENERIC_FAILURE_MESSAGE",
    "GeminiClient",
    "GenerationResult",
    "NOT_CONFIGURED_MESSAGE",
    "RATE_LIMIT_RETRY_SECONDS",
    "build_player_analysis_prompt",
    "build_waiver_prompt",
    "current_nfl_week",
    "extract_text",
    "infer_season",
    "season_start",
]
