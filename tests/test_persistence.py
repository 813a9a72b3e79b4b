from pathlib import Path

import pytest

from fantasytoolbox.persistence import CredentialStore, EspnCredentials


def test_credentials_require_auth_and_league(tmp_path: Path):
    store = CredentialStore(tmp_path / "store.sqlite")

    assert store.get_credentials("fan@example.com") is None

    store.upsert_espn_auth("Fan@Example.com", swid="{ABC}", espn_s2="s2")
    assert store.get_credentials("fan@example.com") is None
    status = store.get_status("fan@example.com")
    assert status.has_auth and not status.has_league and not status.connected

    store.upsert_league_data("fan@example.com", league_id=" 12345 ", league_year=2024, team_id=3)
    credentials = store.get_credentials("FAN@example.com")
    assert credentials == EspnCredentials(swid="{ABC}", espn_s2="s2", league_id="12345", league_year=2024, team_id=3)
    assert credentials.cookie_header == "SWID={ABC}; espn_s2=s2"

    status = store.get_status("fan@example.com")
    assert status.connected
    assert status.updated_at is not None


def test_upsert_replaces_existing_values(tmp_path: Path):
    store = CredentialStore(tmp_path / "store.sqlite")
    store.upsert_espn_auth("fan@example.com", swid="{OLD}", espn_s2="old")
    store.upsert_league_data("fan@example.com", league_id="1", league_year=2023)
    store.upsert_espn_auth("fan@example.com", swid="{NEW}", espn_s2="new")
    store.upsert_league_data("fan@example.com", league_id="2", league_year=2024, team_id=7)

    credentials = store.get_credentials("fan@example.com")
    assert credentials is not None
    assert (credentials.swid, credentials.league_id, credentials.league_year, credentials.team_id) == (
        "{NEW}",
        "2",
        2024,
        7,
    )


def test_users_are_isolated(tmp_path: Path):
    store = CredentialStore(tmp_path / "store.sqlite")
    store.upsert_espn_auth("a@example.com", swid="{A}", espn_s2="a")
    store.upsert_league_data("a@example.com", league_id="1", league_year=2024)
    assert store.get_credentials("b@example.com") is None


def test_clear_removes_connection(tmp_path: Path):
    store = CredentialStore(tmp_path / "store.sqlite")
    store.upsert_espn_auth("fan@example.com", swid="{ABC}", espn_s2="s2")
    store.upsert_league_data("fan@example.com", league_id="1", league_year=2024)
    store.clear("fan@example.com")
    assert store.get_credentials("fan@example.com") is None
    assert not store.get_status("fan@example.com").has_auth


def test_empty_email_is_rejected(tmp_path: Path):
    store = CredentialStore(tmp_path / "store.sqlite")
    with pytest.raises(ValueError):
        store.get_credentials("   ")
