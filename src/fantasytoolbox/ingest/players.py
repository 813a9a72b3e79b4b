"""Turn loosely shaped ESPN player payloads into canonical records."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

from fantasytoolbox.config import lineup_slot, position_code, pro_team_code
from fantasytoolbox.models import PlayerRecord, RosterPlayer


logger = logging.getLogger(__name__)

StatSelection = Literal["last", "latest_season"]

ACTUAL_STAT_SOURCE = 0
PROJECTED_STAT_SOURCE = 1

# Where each field may live, probed in order. "player" is the object nested
# under the ``player`` key of a kona_player_info entry, "root" the entry itself
# (the global season-players endpoint returns flat objects).
_DECISION_TABLE: Mapping[str, Tuple[Tuple[str, Tuple[str, ...]], ...]] = {
    "player_id": (("root", ("id",)), ("player", ("id",))),
    "on_team_id": (("root", ("onTeamId",)), ("player", ("onTeamId",))),
    "full_name": (("player", ("fullName",)), ("root", ("fullName",))),
    "position_id": (("player", ("defaultPositionId",)), ("root", ("defaultPositionId",))),
    "pro_team_id": (("player", ("proTeamId",)), ("root", ("proTeamId",))),
    "percent_owned": (
        ("player", ("ownership", "percentOwned")),
        ("root", ("ownership", "percentOwned")),
    ),
    "stats": (("player", ("stats",)), ("root", ("stats",))),
}

_MISSING = object()


def _sources(raw: Any) -> dict[str, Mapping[str, Any]]:
    if not isinstance(raw, Mapping):
        raise TypeError(f"player payload must be an object, got {type(raw).__name__}")
    sources: dict[str, Mapping[str, Any]] = {"root": raw}
    nested = raw.get("player")
    if nested is not None:
        if not isinstance(nested, Mapping):
            raise TypeError("'player' must be an object")
        sources["player"] = nested
    return sources


def _walk(source: Mapping[str, Any], path: Sequence[str]) -> Any:
    value: Any = source
    for key in path:
        if not isinstance(value, Mapping) or key not in value:
            return _MISSING
        value = value[key]
    return value


def _probe(sources: Mapping[str, Mapping[str, Any]], field_name: str) -> Any:
    for source_name, path in _DECISION_TABLE[field_name]:
        source = sources.get(source_name)
        if source is None:
            continue
        value = _walk(source, path)
        if value is not _MISSING and value is not None:
            return value
    return None


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError("boolean is not a valid identifier")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"non-finite identifier {value!r}")
    return int(value)


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("boolean is not a valid number")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite number {value!r}")
    return number


def select_applied_total(
    stats: Any,
    stat_source_id: int,
    *,
    selection: StatSelection = "last",
) -> float:
    """Pick ``appliedTotal`` for one ``statSourceId`` from a stats array.

    ``"last"`` keeps the last matching entry in array order. ``"latest_season"``
    keeps the matching entry with the highest ``seasonId`` (later entries win
    ties). Entries without ``appliedTotal`` never match. Returns 0.0 when
    nothing matches.
    """

    if stats is None:
        return 0.0
    if not isinstance(stats, list):
        raise TypeError("'stats' must be a list")

    chosen: Optional[float] = None
    chosen_season: Optional[int] = None
    for entry in stats:
        if not isinstance(entry, Mapping):
            continue
        if entry.get("statSourceId") != stat_source_id:
            continue
        total = entry.get("appliedTotal")
        if total is None:
            continue
        if selection == "latest_season":
            season = entry.get("seasonId")
            season_key = season if isinstance(season, int) and not isinstance(season, bool) else -1
            if chosen_season is not None and season_key < chosen_season:
                continue
            chosen_season = season_key
        chosen = _as_float(total)
    return round(chosen, 1) if chosen is not None else 0.0


def is_rostered(raw: Mapping[str, Any]) -> bool:
    on_team_id = _as_int(_probe(_sources(raw), "on_team_id"))
    return on_team_id is not None and on_team_id > 0


def normalize_player(raw: Any, *, stat_selection: StatSelection = "last") -> PlayerRecord:
    """Build a PlayerRecord from either the nested or the flat payload shape."""

    sources = _sources(raw)

    full_name = _probe(sources, "full_name")
    if full_name is not None and not isinstance(full_name, str):
        raise TypeError("'fullName' must be a string")

    percent_owned = _probe(sources, "percent_owned")
    ownership = round(_as_float(percent_owned), 1) if percent_owned is not None else 0.0

    stats = _probe(sources, "stats")
    return PlayerRecord(
        player_id=_as_int(_probe(sources, "player_id")) or 0,
        full_name=full_name or "",
        position=position_code(_as_int(_probe(sources, "position_id"))),
        pro_team=pro_team_code(_as_int(_probe(sources, "pro_team_id"))),
        ownership_percentage=ownership,
        fantasy_points=select_applied_total(stats, ACTUAL_STAT_SOURCE, selection=stat_selection),
        projected_points=select_applied_total(stats, PROJECTED_STAT_SOURCE, selection=stat_selection),
    )


def normalize_players(
    raws: Iterable[Any],
    *,
    free_agents_only: bool = False,
    stat_selection: StatSelection = "last",
) -> List[PlayerRecord]:
    """Normalize a batch, skipping (and logging) records that fail to parse.

    With ``free_agents_only`` set, entries whose ``onTeamId`` is above zero are
    dropped; only waiver-wire contexts should ask for that.
    """

    records: List[PlayerRecord] = []
    skipped = 0
    for index, raw in enumerate(raws):
        try:
            if free_agents_only and is_rostered(raw):
                continue
            records.append(normalize_player(raw, stat_selection=stat_selection))
        except (TypeError, ValueError) as exc:
            skipped += 1
            hint = raw.get("id") if isinstance(raw, Mapping) else None
            logger.warning("Skipping malformed player record #%d (id=%s): %s", index, hint, exc)
    if skipped:
        logger.info("Normalized %d players, skipped %d malformed records", len(records), skipped)
    return records


def normalize_roster(team: Mapping[str, Any]) -> List[RosterPlayer]:
    """Convert ``team.roster.entries`` from the mRoster view into roster players."""

    entries = _walk(team, ("roster", "entries"))
    if entries is _MISSING or not isinstance(entries, list):
        return []

    roster: List[RosterPlayer] = []
    for entry in entries:
        try:
            if not isinstance(entry, Mapping):
                raise TypeError("roster entry must be an object")
            info = _walk(entry, ("playerPoolEntry", "player"))
            if info is _MISSING or not isinstance(info, Mapping):
                info = {}
            full_name = info.get("fullName") or ""
            if not isinstance(full_name, str):
                raise TypeError("'fullName' must be a string")
            roster.append(
                RosterPlayer(
                    player_id=_as_int(entry.get("playerId")) or 0,
                    full_name=full_name,
                    position=position_code(_as_int(info.get("defaultPositionId"))),
                    pro_team=pro_team_code(_as_int(info.get("proTeamId"))),
                    slot=lineup_slot(_as_int(entry.get("lineupSlotId"))),
                )
            )
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping malformed roster entry: %s", exc)
    return roster


@dataclass(frozen=True)
class LineupGroups:
    starters: List[RosterPlayer] = field(default_factory=list)
    bench: List[RosterPlayer] = field(default_factory=list)
    injured_reserve: List[RosterPlayer] = field(default_factory=list)


def group_lineup(roster: Iterable[RosterPlayer]) -> LineupGroups:
    groups = LineupGroups()
    for player in roster:
        if player.slot == "IR":
            groups.injured_reserve.append(player)
        elif player.slot == "Bench":
            groups.bench.append(player)
        else:
            groups.starters.append(player)
    return groups
