from datetime import date, datetime

import pytest

from fantasytoolbox.ai import (
    build_player_analysis_prompt,
    build_waiver_prompt,
    current_nfl_week,
    infer_season,
    season_start,
)
from fantasytoolbox.models import PlayerRecord, RosterPlayer


def test_season_start_is_thursday_after_first_monday():
    assert season_start(2024) == date(2024, 9, 5)
    assert season_start(2025) == date(2025, 9, 4)


def test_week_three_of_2024():
    assert current_nfl_week(date(2024, 9, 20), 2024) == 3


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2024, 9, 1), 1),
        (date(2024, 9, 5), 1),
        (date(2024, 9, 12), 2),
        (date(2024, 12, 30), 17),
        (date(2025, 1, 20), 18),
        (date(2025, 6, 1), 18),
    ],
)
def test_week_is_clamped(today, expected):
    assert current_nfl_week(today) == expected


def test_week_accepts_datetime():
    assert current_nfl_week(datetime(2024, 9, 20, 23, 59)) == 3


def test_infer_season():
    assert infer_season(date(2024, 9, 1)) == 2024
    assert infer_season(date(2025, 1, 15)) == 2024
    assert infer_season(date(2024, 8, 31)) == 2023


def _roster() -> list[RosterPlayer]:
    return [
        RosterPlayer(player_id=1, full_name="Wideout One", position="WR", pro_team="KC"),
        RosterPlayer(player_id=2, full_name="Quarter Back", position="QB", pro_team="BUF"),
        RosterPlayer(player_id=3, full_name="Wideout Two", position="WR", pro_team="DAL"),
    ]


def _candidates(count: int = 12) -> list[PlayerRecord]:
    return [
        PlayerRecord(
            player_id=100 + i,
            full_name=f"Runner {i}",
            position="RB",
            pro_team="NYJ",
            fantasy_points=float(i),
            ownership_percentage=3.0,
            projected_points=5.5,
        )
        for i in range(count)
    ]


def test_waiver_prompt_groups_roster_and_limits_candidates():
    prompt = build_waiver_prompt(_roster(), _candidates(), today=date(2024, 9, 20), top_n=10)

    assert "Current Date: September 20, 2024" in prompt
    assert "NFL Season: 2024" in prompt
    assert "Current Week: Week 3" in prompt
    assert "QB: Quarter Back (BUF)\nWR: Wideout One (KC), Wideout Two (DAL)" in prompt
    assert "  - Runner 11 (NYJ) - 11.0 pts, 3.0% owned, Proj: 5.5" in prompt
    assert "Runner 1 (NYJ)" not in prompt
    assert prompt.count("  - Runner ") == 10
    assert prompt.index("Runner 11") < prompt.index("Runner 10")
    assert "TOP 3 RECOMMENDED PICKUPS" in prompt


def test_waiver_prompt_mentions_position_filter():
    prompt = build_waiver_prompt([], _candidates(2), today=date(2024, 9, 20), position_filter="RB")
    assert "(Filtered to RB position)" in prompt


def test_bye_week_guidance_only_during_bye_weeks():
    week_three = build_waiver_prompt([], [], today=date(2024, 9, 20))
    week_eight = build_waiver_prompt([], [], today=date(2024, 10, 24))
    assert "BYE WEEKS ACTIVE" not in week_three
    assert "BYE WEEKS ACTIVE" in week_eight
    assert "Heavy bye weeks" in week_eight


def test_playoff_push_from_week_fifteen():
    prompt = build_waiver_prompt([], [], today=date(2024, 12, 13))
    assert "PLAYOFF PUSH (Week 15)" in prompt
    assert "BYE WEEKS ACTIVE" not in prompt


@pytest.mark.parametrize(
    "analysis_type, phrase",
    [
        ("general", "analyze this player's performance"),
        ("waiver_pickup", "potential waiver wire pickup"),
        ("start_sit", "start/sit advice"),
        ("trade_value", "assess this player's trade value"),
        ("unknown", "analyze this player's performance"),
    ],
)
def test_player_analysis_prompt(analysis_type, phrase):
    prompt = build_player_analysis_prompt({"id": 1, "fullName": "Some Player"}, analysis_type)
    assert phrase in prompt
    assert '"fullName": "Some Player"' in prompt
