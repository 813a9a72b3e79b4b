"""ESPN numeric code tables for positions, pro teams and lineup slots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple


UNKNOWN_POSITION = "UNKNOWN"
FREE_AGENT_TEAM = "FA"
OTHER_SLOT = "Other"


@dataclass(frozen=True)
class PositionCode:
    code: str
    position_id: int
    slot_id: int


_POSITIONS: Tuple[PositionCode, ...] = (
    PositionCode(code="QB", position_id=1, slot_id=0),
    PositionCode(code="RB", position_id=2, slot_id=2),
    PositionCode(code="WR", position_id=3, slot_id=4),
    PositionCode(code="TE", position_id=4, slot_id=6),
    PositionCode(code="K", position_id=5, slot_id=17),
    PositionCode(code="D/ST", position_id=16, slot_id=16),
)

POSITION_BY_ID: Mapping[int, str] = {pos.position_id: pos.code for pos in _POSITIONS}

# Order matters for the X-Fantasy-Filter payload: QB, RB, WR, TE, K, D/ST.
FILTER_SLOT_IDS: Mapping[str, int] = {pos.code: pos.slot_id for pos in _POSITIONS}
ALL_FILTER_SLOT_IDS: Tuple[int, ...] = (0, 2, 4, 6, 17, 16)

# Codes a PlayerRecord may carry; FLEX only ever comes from lineup slots.
POSITION_CODES: Tuple[str, ...] = (*(pos.code for pos in _POSITIONS), "FLEX", UNKNOWN_POSITION)

PRO_TEAM_BY_ID: Mapping[int, str] = {
    1: "ATL", 2: "BUF", 3: "CHI", 4: "CIN", 5: "CLE", 6: "DAL", 7: "DEN", 8: "DET",
    9: "GB", 10: "TEN", 11: "IND", 12: "KC", 13: "LV", 14: "LAR", 15: "MIA", 16: "MIN",
    17: "NE", 18: "NO", 19: "NYG", 20: "NYJ", 21: "PHI", 22: "ARI", 23: "PIT", 24: "LAC",
    25: "SF", 26: "SEA", 27: "TB", 28: "WSH", 29: "CAR", 30: "JAX", 33: "BAL", 34: "HOU",
}

LINEUP_SLOT_BY_ID: Mapping[int, str] = {
    0: "QB",
    2: "RB",
    4: "WR",
    6: "TE",
    16: "D/ST",
    17: "K",
    20: "Bench",
    21: "IR",
    23: "FLEX",
}

_POSITION_FILTER_ALIASES: Dict[str, str] = {
    "QB": "QB",
    "RB": "RB",
    "WR": "WR",
    "TE": "TE",
    "K": "K",
    "D/ST": "D/ST",
    "D-ST": "D/ST",
    "DST": "D/ST",
    "DEF": "D/ST",
}


def position_code(position_id: Optional[int]) -> str:
    """Map ESPN's ``defaultPositionId`` to a display code."""

    if position_id is None:
        return UNKNOWN_POSITION
    return POSITION_BY_ID.get(position_id, UNKNOWN_POSITION)


def pro_team_code(pro_team_id: Optional[int]) -> str:
    """Map ESPN's ``proTeamId`` to a team abbreviation, ``FA`` when unknown."""

    if pro_team_id is None:
        return FREE_AGENT_TEAM
    return PRO_TEAM_BY_ID.get(pro_team_id, FREE_AGENT_TEAM)


def lineup_slot(slot_id: Optional[int]) -> str:
    if slot_id is None:
        return OTHER_SLOT
    return LINEUP_SLOT_BY_ID.get(slot_id, OTHER_SLOT)


def parse_position_filter(value: Optional[str]) -> Optional[str]:
    """Normalize a user supplied position filter, ``None`` meaning all positions.

    Raises ValueError for anything outside QB/RB/WR/TE/K/D-ST.
    """

    if value is None:
        return None
    token = value.strip().upper()
    if not token or token == "ALL":
        return None
    if token not in _POSITION_FILTER_ALIASES:
        raise ValueError(f"Unsupported position filter {value!r}")
    return _POSITION_FILTER_ALIASES[token]


def filter_slot_ids(position: Optional[str]) -> Tuple[int, ...]:
    """Slot ids sent to ESPN for a normalized position filter."""

    if position is None:
        return ALL_FILTER_SLOT_IDS
    return (FILTER_SLOT_IDS[position],)


def iter_team_codes() -> Iterable[str]:
    return PRO_TEAM_BY_ID.values()
