import pytest
from pydantic import ValidationError

from fantasytoolbox.models import PlayerRecord, RosterPlayer


def test_player_record_is_frozen():
    record = PlayerRecord(player_id=1, full_name="Test Player", position="RB", pro_team="KC")

    assert record.ownership_percentage == 0.0
    assert record.rank is None

    with pytest.raises((TypeError, ValidationError)):
        record.player_id = 2  # type: ignore[misc]


def test_player_record_defaults():
    record = PlayerRecord()
    assert record.full_name == ""
    assert record.position == "UNKNOWN"
    assert record.pro_team == "FA"


@pytest.mark.parametrize("ownership", [-0.1, 100.5])
def test_player_record_rejects_out_of_range_ownership(ownership):
    with pytest.raises(ValidationError):
        PlayerRecord(player_id=1, ownership_percentage=ownership)


def test_player_record_rejects_zero_rank():
    with pytest.raises(ValidationError):
        PlayerRecord(player_id=1, rank=0)


def test_model_copy_sets_rank_without_mutating_source():
    record = PlayerRecord(player_id=1, full_name="A")
    ranked = record.model_copy(update={"rank": 3})
    assert ranked.rank == 3
    assert record.rank is None


def test_roster_player_slot_defaults_to_empty():
    assert RosterPlayer(player_id=5, full_name="X").slot == ""


@pytest.mark.parametrize("field", ["projected_points", "fantasy_points", "ownership_percentage"])
def test_player_record_rejects_non_finite_numbers(field):
    with pytest.raises(ValidationError):
        PlayerRecord(player_id=1, **{field: float("nan")})
