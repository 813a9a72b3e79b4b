"""Input adapters that normalize raw ESPN payloads."""

from .players import (
    LineupGroups,
    StatSelection,
    group_lineup,
    is_rostered,
    normalize_player,
    normalize_players,
    normalize_roster,
    select_applied_total,
)

__all__ = [
    "LineupGroups",
    "StatSelection",
    "group_lineup",
    "is_rostered",
    "normalize_player",
    "normalize_players",
    "normalize_roster",
    "select_applied_total",
]
