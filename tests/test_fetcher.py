import json

import httpx
import pytest

from fantasytoolbox.espn import (
    EspnClient,
    EspnTimeoutError,
    EspnUnavailableError,
    build_player_filter,
)
from fantasytoolbox.persistence import EspnCredentials


CREDENTIALS = EspnCredentials(swid="{ABC}", espn_s2="s2token", league_id="12345", league_year=2024, team_id=3)


def _free_agent(player_id: int, *, on_team_id: int = 0) -> dict:
    return {"id": player_id, "onTeamId": on_team_id, "player": {"id": player_id, "fullName": f"Player {player_id}"}}


def _filter_of(request: httpx.Request) -> dict | None:
    raw = request.headers.get("X-Fantasy-Filter")
    return json.loads(raw) if raw else None


def _client(handler) -> EspnClient:
    return EspnClient(base_url="https://espn.test", timeout=5.0, transport=httpx.MockTransport(handler))


def test_build_player_filter_shape():
    payload = build_player_filter((2,), limit=100, offset=200)
    assert payload == {
        "players": {
            "filterStatus": {"value": ["FREEAGENT", "WAIVERS"]},
            "filterSlotIds": {"value": [2]},
            "sortPercOwned": {"sortPriority": 1, "sortAsc": False},
            "limit": 100,
            "offset": 200,
        }
    }


@pytest.mark.anyio
async def test_pagination_stops_at_empty_page():
    offsets: list[int] = []
    pages = {
        0: [_free_agent(i) for i in range(100)],
        100: [_free_agent(i) for i in range(100, 150)],
        200: [],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/apis/v3/games/ffl/seasons/2024/segments/0/leagues/12345"
        assert request.url.params["view"] == "kona_player_info"
        assert request.headers["Cookie"] == "SWID={ABC}; espn_s2=s2token"
        offset = _filter_of(request)["players"]["offset"]
        offsets.append(offset)
        return httpx.Response(200, json={"players": pages[offset]})

    async with _client(handler) as client:
        result = await client.fetch_waiver_players(CREDENTIALS, page_size=100, cap=300)

    assert offsets == [0, 100, 200]
    assert result.pages == 3
    assert [p["id"] for p in result.players] == list(range(150))
    assert not result.fallback
    assert not result.partial


@pytest.mark.anyio
async def test_rostered_players_are_excluded_and_all_rostered_page_stops():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        offset = _filter_of(request)["players"]["offset"]
        if offset == 0:
            return httpx.Response(200, json={"players": [_free_agent(1), _free_agent(2, on_team_id=4)]})
        return httpx.Response(200, json={"players": [_free_agent(3, on_team_id=7)]})

    async with _client(handler) as client:
        result = await client.fetch_waiver_players(CREDENTIALS, page_size=2)

    assert calls == 2
    assert [p["id"] for p in result.players] == [1]


@pytest.mark.anyio
async def test_cap_truncates_results():
    def handler(request: httpx.Request) -> httpx.Response:
        offset = _filter_of(request)["players"]["offset"]
        return httpx.Response(200, json={"players": [_free_agent(offset + i) for i in range(10)]})

    async with _client(handler) as client:
        result = await client.fetch_waiver_players(CREDENTIALS, page_size=10, cap=25)

    assert result.pages == 3
    assert len(result.players) == 25


@pytest.mark.anyio
async def test_missing_players_key_stops_paging():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"teams": []})

    async with _client(handler) as client:
        result = await client.fetch_waiver_players(CREDENTIALS)

    assert result.players == []
    assert result.pages == 1


@pytest.mark.anyio
async def test_failed_page_uses_unfiltered_fallback_and_dedupes():
    seen_filters: list[dict | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        player_filter = _filter_of(request)
        seen_filters.append(player_filter)
        if player_filter is None:
            return httpx.Response(
                200,
                json={"players": [_free_agent(1), _free_agent(2), _free_agent(9, on_team_id=2)]},
            )
        if player_filter["players"]["offset"] == 0:
            return httpx.Response(200, json={"players": [_free_agent(1)]})
        return httpx.Response(500, text="boom")

    async with _client(handler) as client:
        result = await client.fetch_waiver_players(CREDENTIALS, page_size=1)

    assert result.fallback
    assert not result.partial
    assert [p["id"] for p in result.players] == [1, 2]
    assert seen_filters[-1] is None
    assert result.pages == 3


@pytest.mark.anyio
async def test_fallback_keeps_players_with_unhashable_ids():
    def handler(request: httpx.Request) -> httpx.Response:
        if _filter_of(request) is None:
            return httpx.Response(
                200,
                json={"players": [_free_agent(1), {"id": [1, 2], "onTeamId": 0}, {"id": {"x": 1}, "onTeamId": 0}]},
            )
        return httpx.Response(500, text="boom")

    async with _client(handler) as client:
        result = await client.fetch_waiver_players(CREDENTIALS, page_size=1)

    assert result.fallback
    assert [p["id"] for p in result.players] == [1, [1, 2], {"x": 1}]


@pytest.mark.anyio
async def test_fallback_failure_returns_partial_results():
    def handler(request: httpx.Request) -> httpx.Response:
        player_filter = _filter_of(request)
        if player_filter is not None and player_filter["players"]["offset"] == 0:
            return httpx.Response(200, json={"players": [_free_agent(1), _free_agent(2)]})
        return httpx.Response(503)

    async with _client(handler) as client:
        result = await client.fetch_waiver_players(CREDENTIALS, page_size=2)

    assert result.partial
    assert [p["id"] for p in result.players] == [1, 2]


@pytest.mark.anyio
async def test_fallback_failure_aborts_when_requested():
    def handler(request: httpx.Request) -> httpx.Response:
        player_filter = _filter_of(request)
        if player_filter is not None and player_filter["players"]["offset"] == 0:
            return httpx.Response(200, json={"players": [_free_agent(1)]})
        return httpx.Response(503)

    async with _client(handler) as client:
        with pytest.raises(EspnUnavailableError):
            await client.fetch_waiver_players(CREDENTIALS, page_size=1, on_failure="abort")


@pytest.mark.anyio
async def test_timeout_without_results_raises_timeout_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    async with _client(handler) as client:
        with pytest.raises(EspnTimeoutError):
            await client.fetch_waiver_players(CREDENTIALS)


@pytest.mark.anyio
async def test_non_json_body_is_a_page_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    async with _client(handler) as client:
        with pytest.raises(EspnUnavailableError) as excinfo:
            await client.fetch_waiver_players(CREDENTIALS)

    assert not isinstance(excinfo.value, EspnTimeoutError)


@pytest.mark.anyio
async def test_season_players_paginate_without_filter():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        offset = int(request.url.params["offset"])
        if offset >= 100:
            return httpx.Response(200, json=[])
        return httpx.Response(200, json=[_free_agent(offset + i, on_team_id=1) for i in range(50)])

    async with _client(handler) as client:
        result = await client.fetch_season_players(2024)

    assert [r.url.params["offset"] for r in requests] == ["0", "50", "100"]
    assert all(r.url.path == "/apis/v3/sports/football/nfl/seasons/2024/players" for r in requests)
    assert all("X-Fantasy-Filter" not in r.headers for r in requests)
    assert len(result.players) == 100


@pytest.mark.anyio
async def test_fetch_roster_team_and_league_name():
    def handler(request: httpx.Request) -> httpx.Response:
        view = request.url.params["view"]
        if view == "mRoster":
            return httpx.Response(200, json={"teams": [{"id": 1, "roster": {}}, {"id": 3, "roster": {"entries": []}}]})
        if view == "mSettings":
            return httpx.Response(200, json={"settings": {"name": "Sunday Funday"}})
        return httpx.Response(404)

    async with _client(handler) as client:
        team = await client.fetch_roster_team(CREDENTIALS)
        name = await client.fetch_league_name(CREDENTIALS)

    assert team == {"id": 3, "roster": {"entries": []}}
    assert name == "Sunday Funday"


@pytest.mark.anyio
async def test_league_view_failure_raises_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"messages": ["not authorized"]})

    async with _client(handler) as client:
        with pytest.raises(EspnUnavailableError):
            await client.fetch_league_name(CREDENTIALS)
