"""Async client for ESPN's fantasy football read API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Literal, Mapping, Optional, Sequence

import httpx

from fantasytoolbox.config import ALL_FILTER_SLOT_IDS
from fantasytoolbox.persistence import EspnCredentials
from fantasytoolbox.settings import DEFAULT_ESPN_BASE, DEFAULT_TIMEOUT


logger = logging.getLogger(__name__)

FailurePolicy = Literal["partial", "abort"]

WAIVER_PAGE_SIZE = 100
WAIVER_CAP = 300
SEASON_PAGE_SIZE = 50
SEASON_CAP = 500


class EspnUnavailableError(RuntimeError):
    """Raised when ESPN cannot be reached and no degraded path succeeded."""


class EspnTimeoutError(EspnUnavailableError):
    """Raised when the last failing ESPN call timed out."""


class _PageFailure(Exception):
    def __init__(self, message: str, *, status_code: int | None = None, timed_out: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.timed_out = timed_out


@dataclass(frozen=True)
class FetchResult:
    players: List[Dict[str, Any]] = field(default_factory=list)
    pages: int = 0
    fallback: bool = False
    partial: bool = False


def build_player_filter(
    slot_ids: Sequence[int] = ALL_FILTER_SLOT_IDS,
    *,
    limit: int,
    offset: int,
) -> Dict[str, Any]:
    """Payload for the ``X-Fantasy-Filter`` header (free agents + waivers, by ownership)."""

    return {
        "players": {
            "filterStatus": {"value": ["FREEAGENT", "WAIVERS"]},
            "filterSlotIds": {"value": list(slot_ids)},
            "sortPercOwned": {"sortPriority": 1, "sortAsc": False},
            "limit": limit,
            "offset": offset,
        }
    }


def _is_free_agent(raw: Any) -> bool:
    # Non-object entries are kept so the normalizer can log and skip them.
    if not isinstance(raw, Mapping):
        return True
    on_team_id = raw.get("onTeamId")
    return not (isinstance(on_team_id, int) and on_team_id > 0)


def _extract_players(payload: Any) -> Optional[List[Any]]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        players = payload.get("players")
        if isinstance(players, list):
            return players
    return None


def _merge_unique(*batches: Sequence[Any]) -> List[Any]:
    merged: List[Any] = []
    seen: set[Any] = set()
    for batch in batches:
        for raw in batch:
            key = raw.get("id") if isinstance(raw, Mapping) else None
            if isinstance(key, int) and not isinstance(key, bool):
                if key in seen:
                    continue
                seen.add(key)
            merged.append(raw)
    return merged


class EspnClient:
    """Thin wrapper over ``httpx.AsyncClient``; use as an async context manager."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_ESPN_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "EspnClient":
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    @staticmethod
    def league_path(credentials: EspnCredentials) -> str:
        return (
            f"/apis/v3/games/ffl/seasons/{credentials.league_year}"
            f"/segments/0/leagues/{credentials.league_id}"
        )

    async def _get_json(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        if self._http is None:
            raise RuntimeError("EspnClient must be used inside 'async with'")
        try:
            response = await self._http.get(path, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            logger.error("ESPN request to %s timed out", path)
            raise _PageFailure(f"timed out calling {path}", timed_out=True) from exc
        except httpx.HTTPError as exc:
            logger.error("ESPN request to %s failed: %s", path, exc)
            raise _PageFailure(f"transport error calling {path}") from exc
        if not response.is_success:
            logger.error("ESPN %s returned %s: %s", path, response.status_code, response.text[:300])
            raise _PageFailure(f"ESPN returned {response.status_code}", status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            logger.error("ESPN %s returned a non-JSON body", path)
            raise _PageFailure(f"non-JSON body from {path}") from exc

    async def _paginate(
        self,
        fetch_page: Callable[[int, int], Awaitable[Any]],
        *,
        page_size: int,
        cap: int,
        qualifies: Callable[[Any], bool],
    ) -> tuple[List[Any], int, _PageFailure | None]:
        """Request pages sequentially until an empty page, a missing list or the cap."""

        accumulated: List[Any] = []
        pages = 0
        offset = 0
        while len(accumulated) < cap:
            pages += 1
            try:
                payload = await fetch_page(page_size, offset)
            except _PageFailure as failure:
                return accumulated, pages, failure
            page = _extract_players(payload)
            if page is None:
                break
            qualifying = [raw for raw in page if qualifies(raw)]
            if not qualifying:
                break
            accumulated.extend(qualifying)
            offset += page_size
        logger.info("Fetched %d players across %d ESPN page(s)", len(accumulated), pages)
        return accumulated[:cap], pages, None

    @staticmethod
    def _unavailable(failure: _PageFailure) -> EspnUnavailableError:
        if failure.timed_out:
            return EspnTimeoutError("ESPN API timed out")
        return EspnUnavailableError("ESPN API unreachable")

    async def fetch_waiver_players(
        self,
        credentials: EspnCredentials,
        *,
        slot_ids: Sequence[int] = ALL_FILTER_SLOT_IDS,
        page_size: int = WAIVER_PAGE_SIZE,
        cap: int = WAIVER_CAP,
        on_failure: FailurePolicy = "partial",
    ) -> FetchResult:
        """Page through league free agents using the ``X-Fantasy-Filter`` header.

        A failed page triggers one unfiltered fallback request. If that fails
        too, accumulated players are returned as partial (policy ``"partial"``)
        or EspnUnavailableError is raised.
        """

        path = self.league_path(credentials)
        params = {"view": "kona_player_info"}
        cookie = {"Cookie": credentials.cookie_header}

        async def fetch_page(limit: int, offset: int) -> Any:
            headers = dict(cookie)
            headers["X-Fantasy-Filter"] = json.dumps(
                build_player_filter(slot_ids, limit=limit, offset=offset),
                separators=(",", ":"),
            )
            return await self._get_json(path, params=params, headers=headers)

        accumulated, pages, failure = await self._paginate(
            fetch_page, page_size=page_size, cap=cap, qualifies=_is_free_agent
        )
        if failure is None:
            return FetchResult(players=accumulated, pages=pages)

        logger.warning("Filtered waiver request failed (%s); trying unfiltered fallback", failure)
        pages += 1
        try:
            payload = await self._get_json(path, params=params, headers=cookie)
        except _PageFailure as fallback_failure:
            if on_failure == "partial" and accumulated:
                logger.warning("Fallback failed; returning %d partially fetched players", len(accumulated))
                return FetchResult(players=accumulated, pages=pages, partial=True)
            raise self._unavailable(fallback_failure) from fallback_failure

        fallback_players = [raw for raw in _extract_players(payload) or [] if _is_free_agent(raw)]
        merged = _merge_unique(accumulated, fallback_players)[:cap]
        return FetchResult(players=merged, pages=pages, fallback=True)

    async def fetch_season_players(
        self,
        season: int,
        *,
        credentials: EspnCredentials | None = None,
        page_size: int = SEASON_PAGE_SIZE,
        cap: int = SEASON_CAP,
        on_failure: FailurePolicy = "partial",
    ) -> FetchResult:
        """Page through the global player database for ``season`` (rostered players included)."""

        path = f"/apis/v3/sports/football/nfl/seasons/{season}/players"
        headers = {"Cookie": credentials.cookie_header} if credentials else None

        async def fetch_page(limit: int, offset: int) -> Any:
            return await self._get_json(path, params={"limit": limit, "offset": offset}, headers=headers)

        accumulated, pages, failure = await self._paginate(
            fetch_page, page_size=page_size, cap=cap, qualifies=lambda raw: True
        )
        if failure is None:
            return FetchResult(players=accumulated, pages=pages)
        if on_failure == "partial" and accumulated:
            logger.warning("Season player paging stopped early; returning %d players", len(accumulated))
            return FetchResult(players=accumulated, pages=pages, partial=True)
        raise self._unavailable(failure) from failure

    async def _league_view(self, credentials: EspnCredentials, view: str) -> Any:
        try:
            return await self._get_json(
                self.league_path(credentials),
                params={"view": view},
                headers={"Cookie": credentials.cookie_header},
            )
        except _PageFailure as failure:
            raise self._unavailable(failure) from failure

    async def fetch_roster_team(self, credentials: EspnCredentials) -> Optional[Mapping[str, Any]]:
        """Return the mRoster team object matching ``credentials.team_id``."""

        if credentials.team_id is None:
            return None
        payload = await self._league_view(credentials, "mRoster")
        teams = payload.get("teams") if isinstance(payload, Mapping) else None
        for team in teams or []:
            if isinstance(team, Mapping) and team.get("id") == credentials.team_id:
                return team
        logger.warning("Team %s not found in league %s", credentials.team_id, credentials.league_id)
        return None

    async def fetch_league_name(self, credentials: EspnCredentials) -> Optional[str]:
        payload = await self._league_view(credentials, "mSettings")
        if not isinstance(payload, Mapping):
            return None
        settings = payload.get("settings")
        if isinstance(settings, Mapping) and isinstance(settings.get("name"), str):
            return settings["name"]
        return None

    async def fetch_player(self, credentials: EspnCredentials, player_id: int) -> Optional[Mapping[str, Any]]:
        """Find one player in the league's unfiltered kona_player_info view."""

        payload = await self._league_view(credentials, "kona_player_info")
        for raw in _extract_players(payload) or []:
            if isinstance(raw, Mapping) and raw.get("id") == player_id:
                return raw
        return None


__all__ = [
    "EspnClient",
    "EspnTimeoutError",
    "EspnUnavailableError",
    "FailurePolicy",
    "FetchResult",
    "build_player_filter",
]
