import pytest

from fantasytoolbox.ingest import normalize_players
from fantasytoolbox.models import PlayerRecord
from fantasytoolbox.pool import filter_by_position, parse_rank_mode, rank_players


def _player(player_id: int, name: str, *, proj: float, season: float, own: float, position: str = "WR") -> PlayerRecord:
    return PlayerRecord(
        player_id=player_id,
        full_name=name,
        position=position,
        projected_points=proj,
        fantasy_points=season,
        ownership_percentage=own,
    )


def test_projection_tie_is_broken_by_season_points():
    players = [
        _player(1, "A", proj=12.3, season=8.0, own=45.2),
        _player(2, "B", proj=12.3, season=9.1, own=10.0),
    ]
    ranked = rank_players(players, mode="best_available")
    assert [(p.full_name, p.rank) for p in ranked] == [("B", 1), ("A", 2)]


def test_best_available_prefers_lower_ownership_on_full_tie():
    players = [
        _player(1, "Popular", proj=10.0, season=50.0, own=60.0),
        _player(2, "Sleeper", proj=10.0, season=50.0, own=5.0),
    ]
    assert [p.full_name for p in rank_players(players)] == ["Sleeper", "Popular"]


def test_most_added_orders_by_ownership_then_projection():
    players = [
        _player(1, "Low", proj=20.0, season=0.0, own=10.0),
        _player(2, "High", proj=5.0, season=0.0, own=80.0),
        _player(3, "HighProj", proj=9.0, season=0.0, own=80.0),
    ]
    ranked = rank_players(players, mode="most_added")
    assert [p.full_name for p in ranked] == ["HighProj", "High", "Low"]


def test_ranks_are_contiguous_from_one():
    players = [_player(i, f"P{i}", proj=float(i % 3), season=0.0, own=0.0) for i in range(1, 8)]
    assert [p.rank for p in rank_players(players)] == list(range(1, 8))


def test_ranking_is_idempotent():
    players = [
        _player(1, "A", proj=3.0, season=1.0, own=2.0),
        _player(2, "B", proj=7.0, season=1.0, own=2.0),
        _player(3, "C", proj=5.0, season=4.0, own=1.0),
    ]
    once = rank_players(players)
    assert rank_players(once) == once


def test_sort_is_stable_for_equal_keys():
    players = [_player(i, f"Same{i}", proj=4.0, season=4.0, own=4.0) for i in range(5)]
    assert [p.player_id for p in rank_players(players)] == [0, 1, 2, 3, 4]
    assert [p.player_id for p in rank_players(players, mode="most_added")] == [0, 1, 2, 3, 4]


def test_ranking_does_not_mutate_input():
    players = [_player(1, "A", proj=1.0, season=1.0, own=1.0)]
    rank_players(players)
    assert players[0].rank is None


def test_empty_pool():
    assert rank_players([]) == []


@pytest.mark.parametrize(
    "raw, expected",
    [(None, "best_available"), ("", "best_available"), ("most-added", "most_added"), ("MOST_ADDED", "most_added")],
)
def test_parse_rank_mode(raw, expected):
    assert parse_rank_mode(raw) == expected


def test_parse_rank_mode_rejects_unknown():
    with pytest.raises(ValueError):
        parse_rank_mode("trending")


def test_filter_before_rank_keeps_ranks_contiguous():
    players = [
        _player(1, "Runner", proj=9.0, season=0.0, own=0.0, position="RB"),
        _player(2, "Catcher", proj=8.0, season=0.0, own=0.0, position="WR"),
        _player(3, "Runner2", proj=7.0, season=0.0, own=0.0, position="RB"),
    ]
    ranked = rank_players(filter_by_position(players, "rb"))
    assert [(p.full_name, p.rank) for p in ranked] == [("Runner", 1), ("Runner2", 2)]
    assert len(filter_by_position(players, None)) == 3


def test_nan_projection_does_not_disturb_order():
    raws = [
        {"id": 1, "fullName": "A", "stats": [{"statSourceId": 1, "appliedTotal": 5.0}]},
        {"id": 2, "fullName": "N", "stats": [{"statSourceId": 1, "appliedTotal": float("nan")}]},
        {"id": 3, "fullName": "B", "stats": [{"statSourceId": 1, "appliedTotal": 9.0}]},
    ]
    ranked = rank_players(normalize_players(raws), mode="best_available")
    assert [(p.full_name, p.rank) for p in ranked] == [("B", 1), ("A", 2)]
