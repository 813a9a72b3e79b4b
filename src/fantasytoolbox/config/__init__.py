"""Static ESPN lookup tables."""

from .codes import (
    ALL_FILTER_SLOT_IDS,
    FREE_AGENT_TEAM,
    UNKNOWN_POSITION,
    filter_slot_ids,
    iter_team_codes,
    lineup_slot,
    parse_position_filter,
    position_code,
    pro_team_code,
)

__all__ = [
    "ALL_FILTER_SLOT_IDS",
    "FREE_AGENT_TEAM",
    "UNKNOWN_POSITION",
    "filter_slot_ids",
    "iter_team_codes",
    "lineup_slot",
    "parse_position_filter",
    "position_code",
    "pro_team_code",
]
