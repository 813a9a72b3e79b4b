"""REST API and HTML pages for the fantasytoolbox service."""

from __future__ import annotations

import logging
from datetime import date
from html import escape
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from fantasytoolbox.ai import (
    GeminiClient,
    GenerationResult,
    build_player_analysis_prompt,
    build_waiver_prompt,
    current_nfl_week,
    infer_season,
)
from fantasytoolbox.api.schemas import (
    EspnConnectionRequest,
    EspnConnectionResponse,
    LineupResponse,
    PlayerAnalysisRequest,
    PlayerAnalysisResponse,
    RecommendationResponse,
    SeasonPlayersResponse,
    WaiverRecommendationRequest,
    WaiverWireResponse,
)
from fantasytoolbox.config import filter_slot_ids, parse_position_filter
from fantasytoolbox.espn import EspnClient, EspnTimeoutError, EspnUnavailableError, FetchResult
from fantasytoolbox.ingest import group_lineup, normalize_players, normalize_roster
from fantasytoolbox.models import PlayerRecord
from fantasytoolbox.persistence import CredentialStore, EspnCredentials
from fantasytoolbox.pool import (
    RANK_MODES,
    RankMode,
    WaiverExportError,
    export_filename,
    export_players_to_csv,
    filter_by_position,
    parse_rank_mode,
    rank_players,
)
from fantasytoolbox.settings import Settings


logger = logging.getLogger(__name__)

# Set by the fronting auth proxy; browsers never send it on their own.
USER_HEADER = "X-User-Email"
NOT_CONNECTED_DETAIL = "Please connect your ESPN account"
POSITION_CHOICES: list[tuple[str, str]] = [
    ("", "All positions"),
    ("QB", "QB"),
    ("RB", "RB"),
    ("WR", "WR"),
    ("TE", "TE"),
    ("K", "K"),
    ("D/ST", "D/ST"),
]


def _render_page(body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang=\"en\">
<head>
    <meta charset=\"utf-8\">
    <title>Fantasy Toolbox</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 2rem; background: #f5f7fa; }}
        main {{ background: #fff; padding: 2rem; border-radius: 12px; box-shadow: 0 2px 6px rgba(0,0,0,0.08); }}
        nav a {{ margin-right: 1rem; color: #2563eb; text-decoration: none; }}
        form {{ display: flex; gap: 1rem; flex-wrap: wrap; align-items: flex-end; margin-bottom: 1.5rem; }}
        label {{ display: flex; flex-direction: column; font-weight: 600; }}
        select {{ margin-top: 0.35rem; padding: 0.4rem; border-radius: 6px; border: 1px solid #cbd5e1; }}
        button {{ padding: 0.6rem 1.2rem; border-radius: 6px; border: none; background: #2563eb; color: #fff; cursor: pointer; }}
        table {{ border-collapse: collapse; width: 100%; margin-top: 1rem; }}
        th, td {{ padding: 0.5rem; border: 1px solid #e2e8f0; text-align: left; }}
        .hint {{ color: #475569; margin: 0; }}
        .notice {{ margin: 0.5rem 0; padding: 0.75rem 1rem; border-radius: 6px; }}
        .notice.warning {{ background: #fffbeb; color: #92400e; border: 1px solid #fde68a; }}
        .notice.error {{ background: #fef2f2; color: #991b1b; border: 1px solid #fecaca; }}
    </style>
</head>
<body>
    <nav><a href=\"/ui/waiver-wire\">Waiver Wire</a></nav>
    <main>{body}</main>
</body>
</html>"""


def _render_waiver_page(
    *,
    league_id: str | None,
    players: list[PlayerRecord],
    position: str | None,
    mode: str,
    notice: str | None = None,
    error: str | None = None,
) -> str:
    position_options = "".join(
        f'<option value="{escape(value)}"{" selected" if (position or "") == value else ""}>{escape(label)}</option>'
        for value, label in POSITION_CHOICES
    )
    mode_options = "".join(
        f'<option value="{value}"{" selected" if value == mode else ""}>{value.replace("_", " ").title()}</option>'
        for value in RANK_MODES
    )
    parts = [
        "<h1>Waiver Wire</h1>",
        f'<p class="hint">League {escape(league_id)}</p>' if league_id else "",
        f'<div class="notice error">{escape(error)}</div>' if error else "",
        f'<div class="notice warning">{escape(notice)}</div>' if notice else "",
        '<form method="get" action="/ui/waiver-wire">',
        f'<label>Position<select name="position">{position_options}</select></label>',
        f'<label>Sort<select name="mode">{mode_options}</select></label>',
        '<button type="submit">Apply</button>',
        "</form>",
    ]
    if error:
        return _render_page("".join(parts))

    query = urlencode({k: v for k, v in (("position", position), ("mode", mode)) if v})
    parts.append(f'<p><a href="/api/leagues/waiver-wire/export?{escape(query)}">Download CSV</a></p>')
    parts.append(
        f'<p class="hint">Downloads need the {USER_HEADER} header; open this page '
        f'through the sign-in proxy that adds it.</p>'
    )
    if not players:
        parts.append('<p class="hint">No available players found.</p>')
        return _render_page("".join(parts))

    rows = "".join(
        "<tr>"
        f"<td>{player.rank}</td>"
        f"<td>{escape(player.full_name)}</td>"
        f"<td>{escape(player.position)}</td>"
        f"<td>{escape(player.pro_team)}</td>"
        f"<td>{player.ownership_percentage:.1f}%</td>"
        f"<td>{player.fantasy_points:.1f}</td>"
        f"<td>{player.projected_points:.1f}</td>"
        "</tr>"
        for player in players
    )
    parts.append(
        "<table><thead><tr><th>Rank</th><th>Player</th><th>Pos</th><th>Team</th>"
        "<th>Owned</th><th>Points</th><th>Projected</th></tr></thead>"
        f"<tbody>{rows}</tbody></table>"
    )
    return _render_page("".join(parts))


def _espn_http_error(exc: EspnUnavailableError) -> HTTPException:
    if isinstance(exc, EspnTimeoutError):
        return HTTPException(status_code=504, detail="ESPN did not respond in time. Please try again later.")
    return HTTPException(status_code=502, detail="Unable to reach ESPN. Please try again later.")


def _parse_position(value: str | None) -> str | None:
    try:
        return parse_position_filter(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _parse_mode(value: str | None) -> RankMode:
    try:
        return parse_rank_mode(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _rate_limited_response(result: GenerationResult) -> JSONResponse:
    retry_after = result.retry_after or 60
    return JSONResponse(
        status_code=503,
        content={"error": result.text, "retry_after": retry_after},
        headers={"Retry-After": str(retry_after)},
    )


def create_app(
    settings: Settings | None = None,
    *,
    espn_transport: httpx.AsyncBaseTransport | None = None,
    gemini_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="fantasytoolbox")
    store = CredentialStore(settings.db_path)
    app.state.settings = settings
    app.state.credential_store = store

    def espn_client() -> EspnClient:
        return EspnClient(
            base_url=settings.espn_base_url,
            timeout=settings.http_timeout,
            transport=espn_transport,
        )

    def gemini_client() -> GeminiClient:
        return GeminiClient(
            settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.http_timeout,
            transport=gemini_transport,
        )

    def _acting_user(request: Request) -> str:
        email = (request.headers.get(USER_HEADER) or "").strip().lower()
        if not email:
            raise HTTPException(status_code=401, detail="Sign in required")
        return email

    def _require_credentials(email: str) -> EspnCredentials:
        credentials = store.get_credentials(email)
        if credentials is None:
            raise HTTPException(status_code=400, detail=NOT_CONNECTED_DETAIL)
        return credentials

    async def _waiver_pool(
        credentials: EspnCredentials,
        *,
        position: str | None,
        mode: RankMode,
    ) -> tuple[list[PlayerRecord], FetchResult]:
        async with espn_client() as client:
            result = await client.fetch_waiver_players(
                credentials,
                slot_ids=filter_slot_ids(position),
                cap=settings.waiver_cap,
            )
        records = normalize_players(result.players, free_agents_only=True)
        # The unfiltered fallback returns every position.
        records = filter_by_position(records, position)
        return rank_players(records, mode=mode), result

    def _status_response(email: str, league_name: str | None = None) -> EspnConnectionResponse:
        status = store.get_status(email)
        return EspnConnectionResponse(
            user_email=status.user_email,
            connected=status.connected,
            league_id=status.league_id,
            league_year=status.league_year,
            team_id=status.team_id,
            league_name=league_name,
            updated_at=status.updated_at,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.put("/api/espn/connection", response_model=EspnConnectionResponse)
    async def connect_espn(payload: EspnConnectionRequest, request: Request):
        email = _acting_user(request)
        candidate = EspnCredentials(
            swid=payload.swid.strip(),
            espn_s2=payload.espn_s2.strip(),
            league_id=payload.league_id.strip(),
            league_year=payload.league_year,
            team_id=payload.team_id,
        )
        try:
            async with espn_client() as client:
                league_name = await client.fetch_league_name(candidate)
        except EspnUnavailableError as exc:
            raise _espn_http_error(exc) from exc

        store.upsert_espn_auth(email, swid=candidate.swid, espn_s2=candidate.espn_s2)
        store.upsert_league_data(
            email,
            league_id=candidate.league_id,
            league_year=candidate.league_year,
            team_id=candidate.team_id,
        )
        logger.info("Linked ESPN league %s for %s", candidate.league_id, email)
        return _status_response(email, league_name)

    @app.get("/api/espn/connection", response_model=EspnConnectionResponse)
    async def connection_status(request: Request):
        return _status_response(_acting_user(request))

    @app.delete("/api/espn/connection")
    async def disconnect_espn(request: Request) -> dict[str, str]:
        store.clear(_acting_user(request))
        return {"status": "disconnected"}

    @app.get("/api/leagues/waiver-wire", response_model=WaiverWireResponse)
    async def waiver_wire(
        request: Request,
        position: Optional[str] = Query(None),
        mode: Optional[str] = Query(None),
        limit: Optional[int] = Query(None, ge=1),
    ):
        credentials = _require_credentials(_acting_user(request))
        position_filter = _parse_position(position)
        rank_mode = _parse_mode(mode)
        try:
            ranked, result = await _waiver_pool(credentials, position=position_filter, mode=rank_mode)
        except EspnUnavailableError as exc:
            raise _espn_http_error(exc) from exc
        if limit is not None:
            ranked = ranked[:limit]
        return WaiverWireResponse(
            players=ranked,
            total=len(ranked),
            league_id=credentials.league_id,
            position=position_filter,
            mode=rank_mode,
            fallback=result.fallback,
            partial=result.partial,
        )

    @app.get("/api/leagues/waiver-wire/export")
    async def export_waiver_wire(
        request: Request,
        position: Optional[str] = Query(None),
        mode: Optional[str] = Query(None),
        layout: str = Query("full"),
    ):
        credentials = _require_credentials(_acting_user(request))
        position_filter = _parse_position(position)
        rank_mode = _parse_mode(mode)
        if layout not in ("full", "compact"):
            raise HTTPException(status_code=400, detail=f"Unsupported CSV layout {layout!r}")
        try:
            ranked, _ = await _waiver_pool(credentials, position=position_filter, mode=rank_mode)
        except EspnUnavailableError as exc:
            raise _espn_http_error(exc) from exc
        try:
            csv_text = export_players_to_csv(ranked, layout=layout)  # type: ignore[arg-type]
        except WaiverExportError:
            logger.exception("Waiver wire export failed for league %s", credentials.league_id)
            return JSONResponse(
                status_code=500,
                content={"error": "Unable to export waiver wire data. Please try again."},
            )
        filename = export_filename(credentials.league_id, today=date.today(), position=position_filter)
        return Response(
            content=csv_text,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.get("/api/players/{season}", response_model=SeasonPlayersResponse)
    async def season_players(season: int, limit: Optional[int] = Query(None, ge=1)):
        if season < 2000 or season > 2100:
            raise HTTPException(status_code=400, detail="Season must be a four digit year")
        cap = min(limit, settings.players_cap) if limit else settings.players_cap
        try:
            async with espn_client() as client:
                result = await client.fetch_season_players(season, cap=cap)
        except EspnUnavailableError as exc:
            raise _espn_http_error(exc) from exc
        records = normalize_players(result.players)
        return SeasonPlayersResponse(players=records, total=len(records), season=season, partial=result.partial)

    @app.get("/api/lineup", response_model=LineupResponse)
    async def lineup(request: Request):
        credentials = _require_credentials(_acting_user(request))
        if credentials.team_id is None:
            raise HTTPException(status_code=400, detail="Select your team in the ESPN connection settings")
        try:
            async with espn_client() as client:
                team = await client.fetch_roster_team(credentials)
        except EspnUnavailableError as exc:
            raise _espn_http_error(exc) from exc
        if team is None:
            raise HTTPException(status_code=404, detail="Team not found in league")
        groups = group_lineup(normalize_roster(team))
        return LineupResponse(
            league_id=credentials.league_id,
            team_id=credentials.team_id,
            starters=groups.starters,
            bench=groups.bench,
            injured_reserve=groups.injured_reserve,
        )

    @app.post("/api/recommendations/waiver-wire", response_model=RecommendationResponse)
    async def waiver_recommendations(payload: WaiverRecommendationRequest, request: Request):
        email = _acting_user(request)
        position_filter = _parse_position(payload.position_filter)
        roster = payload.roster
        candidates = payload.waiver_players

        if roster is None or candidates is None:
            credentials = _require_credentials(email)
            try:
                async with espn_client() as client:
                    if roster is None:
                        team = await client.fetch_roster_team(credentials)
                        roster = normalize_roster(team) if team is not None else []
                if candidates is None:
                    candidates, _ = await _waiver_pool(
                        credentials, position=position_filter, mode="best_available"
                    )
            except EspnUnavailableError as exc:
                raise _espn_http_error(exc) from exc
        elif position_filter:
            candidates = filter_by_position(candidates, position_filter)

        today = date.today()
        prompt = build_waiver_prompt(
            roster,
            candidates,
            today=today,
            position_filter=position_filter,
            top_n=payload.top_n,
        )
        result = await gemini_client().generate(prompt)
        if result.rate_limited:
            return _rate_limited_response(result)
        season = infer_season(today)
        return RecommendationResponse(
            recommendations=result.text,
            degraded=not result.ok,
            season=season,
            week=current_nfl_week(today, season),
        )

    @app.post("/api/analysis/player/{player_id}", response_model=PlayerAnalysisResponse)
    async def player_analysis(player_id: int, request: Request, payload: PlayerAnalysisRequest | None = None):
        credentials = _require_credentials(_acting_user(request))
        analysis_type = payload.analysis_type if payload else "general"
        try:
            async with espn_client() as client:
                raw: Any = await client.fetch_player(credentials, player_id)
        except EspnUnavailableError as exc:
            raise _espn_http_error(exc) from exc
        if raw is None:
            raise HTTPException(status_code=404, detail="Player not found")

        prompt = build_player_analysis_prompt(raw, analysis_type)
        result = await gemini_client().generate(prompt, max_output_tokens=1024)
        if result.rate_limited:
            return _rate_limited_response(result)
        return PlayerAnalysisResponse(
            player_id=player_id,
            analysis_type=analysis_type,
            analysis=result.text,
            degraded=not result.ok,
        )

    @app.get("/ui/waiver-wire", response_class=HTMLResponse)
    async def ui_waiver_wire(
        request: Request,
        position: Optional[str] = Query(None),
        mode: Optional[str] = Query(None),
    ):
        credentials = _require_credentials(_acting_user(request))
        try:
            position_filter = parse_position_filter(position)
            rank_mode = parse_rank_mode(mode)
        except ValueError as exc:
            content = _render_waiver_page(
                league_id=credentials.league_id, players=[], position=None, mode="best_available", error=str(exc)
            )
            return HTMLResponse(content=content, status_code=400)

        try:
            ranked, result = await _waiver_pool(credentials, position=position_filter, mode=rank_mode)
        except EspnUnavailableError:
            logger.exception("Waiver wire page failed for league %s", credentials.league_id)
            content = _render_waiver_page(
                league_id=credentials.league_id,
                players=[],
                position=position_filter,
                mode=rank_mode,
                error="Unable to fetch waiver wire data. Please try again later.",
            )
            return HTMLResponse(content=content, status_code=502)

        notice = None
        if result.partial:
            notice = "ESPN stopped responding part way through; the list may be incomplete."
        elif result.fallback:
            notice = "Filtered results were unavailable; showing ESPN's default player list."
        return HTMLResponse(
            content=_render_waiver_page(
                league_id=credentials.league_id,
                players=ranked,
                position=position_filter,
                mode=rank_mode,
                notice=notice,
            )
        )

    return app


__all__ = ["create_app"]
