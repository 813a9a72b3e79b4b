"""Ordering and rank assignment for free-agent pools."""

from __future__ import annotations

from typing import Callable, Iterable, List, Literal, Mapping, Optional, Tuple

from fantasytoolbox.models import PlayerRecord


RankMode = Literal["best_available", "most_added"]

RANK_MODES: Tuple[str, ...] = ("best_available", "most_added")


def _best_available_key(record: PlayerRecord) -> tuple[float, float, float]:
    # projected desc, season points desc, ownership asc
    return (-record.projected_points, -record.fantasy_points, record.ownership_percentage)


def _most_added_key(record: PlayerRecord) -> tuple[float, float]:
    return (-record.ownership_percentage, -record.projected_points)


_SORT_KEYS: Mapping[str, Callable[[PlayerRecord], tuple]] = {
    "best_available": _best_available_key,
    "most_added": _most_added_key,
}


def parse_rank_mode(value: Optional[str]) -> RankMode:
    if value is None or not value.strip():
        return "best_available"
    mode = value.strip().lower().replace("-", "_")
    if mode not in _SORT_KEYS:
        raise ValueError(f"Unsupported rank mode {value!r}; expected one of {', '.join(RANK_MODES)}")
    return mode  # type: ignore[return-value]


def rank_players(records: Iterable[PlayerRecord], *, mode: RankMode = "best_available") -> List[PlayerRecord]:
    """Return records sorted for ``mode`` with ``rank`` set to 1..n.

    ``sorted`` is stable, so records equal on every key keep their input order.
    """

    key = _SORT_KEYS[mode]
    ordered = sorted(records, key=key)
    return [record.model_copy(update={"rank": index}) for index, record in enumerate(ordered, start=1)]


def filter_by_position(records: Iterable[PlayerRecord], position: Optional[str]) -> List[PlayerRecord]:
    """Keep records whose position matches ``position`` (case-insensitive)."""

    if not position:
        return list(records)
    wanted = position.upper()
    return [record for record in records if record.position.upper() == wanted]
