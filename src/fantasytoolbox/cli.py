"""Command-line interface for waiver-wire exports and player pulls."""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import date
from pathlib import Path

from fantasytoolbox.ai import current_nfl_week, infer_season
from fantasytoolbox.config import filter_slot_ids, parse_position_filter
from fantasytoolbox.espn import EspnClient, EspnUnavailableError, FetchResult
from fantasytoolbox.ingest import normalize_players
from fantasytoolbox.persistence import CredentialStore, EspnCredentials
from fantasytoolbox.pool import (
    RANK_MODES,
    export_filename,
    export_players_to_csv,
    filter_by_position,
    parse_rank_mode,
    rank_players,
)
from fantasytoolbox.settings import Settings


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="ESPN fantasy football waiver-wire tools")
    parser.add_argument("--verbose", action="store_true", help="Log ESPN requests and skipped records")
    subparsers = parser.add_subparsers(dest="command", required=True)

    waiver = subparsers.add_parser("waiver-wire", help="Rank free agents and write a CSV")
    waiver.add_argument("--user", help="Load linked ESPN credentials for this email from the local store")
    waiver.add_argument("--swid", help="ESPN SWID cookie (including braces)")
    waiver.add_argument("--espn-s2", dest="espn_s2", help="ESPN espn_s2 cookie")
    waiver.add_argument("--league-id", dest="league_id", help="ESPN league id")
    waiver.add_argument("--season", type=int, default=None, help="League season year (defaults to the current season)")
    waiver.add_argument("--position", default=None, help="QB, RB, WR, TE, K or D/ST")
    waiver.add_argument("--mode", default="best_available", choices=RANK_MODES, help="Ranking mode")
    waiver.add_argument("--layout", default="full", choices=("full", "compact"), help="CSV column layout")
    waiver.add_argument("--limit", type=int, default=None, help="Keep only the top N players")
    waiver.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output CSV path (defaults to waiver_wire_<league>_<date>.csv, '-' prints to stdout)",
    )

    players = subparsers.add_parser("players", help="Export the global ESPN player list for a season")
    players.add_argument("season", type=int, help="Season year, e.g. 2024")
    players.add_argument("--limit", type=int, default=None, help="Maximum number of players to fetch")
    players.add_argument("--output", type=Path, default=Path("players.csv"), help="Output CSV path")

    week = subparsers.add_parser("week", help="Print the current NFL week")
    week.add_argument("--date", dest="on_date", type=date.fromisoformat, default=None, help="YYYY-MM-DD")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser.parse_args(argv)


def _resolve_credentials(args: argparse.Namespace, settings: Settings) -> EspnCredentials:
    if args.user:
        credentials = CredentialStore(settings.db_path).get_credentials(args.user)
        if credentials is None:
            raise SystemExit(f"No linked ESPN league for {args.user}")
        return credentials
    missing = [flag for flag, value in (("--swid", args.swid), ("--espn-s2", args.espn_s2), ("--league-id", args.league_id)) if not value]
    if missing:
        raise SystemExit(f"Missing {', '.join(missing)} (or pass --user)")
    return EspnCredentials(
        swid=args.swid,
        espn_s2=args.espn_s2,
        league_id=args.league_id,
        league_year=args.season or infer_season(date.today()),
    )


async def _fetch_waivers(settings: Settings, credentials: EspnCredentials, position: str | None) -> FetchResult:
    async with EspnClient(base_url=settings.espn_base_url, timeout=settings.http_timeout) as client:
        return await client.fetch_waiver_players(
            credentials, slot_ids=filter_slot_ids(position), cap=settings.waiver_cap
        )


async def _fetch_season(settings: Settings, season: int, cap: int) -> FetchResult:
    async with EspnClient(base_url=settings.espn_base_url, timeout=settings.http_timeout) as client:
        return await client.fetch_season_players(season, cap=cap)


def _write_output(csv_text: str, output: Path) -> None:
    if str(output) == "-":
        print(csv_text, end="")
        return
    output.write_text(csv_text, encoding="utf-8", newline="")
    print(f"Wrote {output}")


def _run_waiver_wire(args: argparse.Namespace, settings: Settings) -> None:
    try:
        position = parse_position_filter(args.position)
        mode = parse_rank_mode(args.mode)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    credentials = _resolve_credentials(args, settings)

    try:
        result = asyncio.run(_fetch_waivers(settings, credentials, position))
    except EspnUnavailableError as exc:
        raise SystemExit(f"ESPN request failed: {exc}") from exc

    records = filter_by_position(normalize_players(result.players, free_agents_only=True), position)
    ranked = rank_players(records, mode=mode)
    if args.limit is not None:
        ranked = ranked[: max(0, args.limit)]
    print(f"Ranked {len(ranked)} available players ({result.pages} ESPN request(s))")
    if result.fallback:
        print("Filtered request failed; used ESPN's unfiltered player list")
    if result.partial:
        print("ESPN stopped responding; results are incomplete")

    output = args.output or Path(export_filename(credentials.league_id, today=date.today(), position=position))
    _write_output(export_players_to_csv(ranked, layout=args.layout), output)


def _run_players(args: argparse.Namespace, settings: Settings) -> None:
    cap = min(args.limit, settings.players_cap) if args.limit else settings.players_cap
    try:
        result = asyncio.run(_fetch_season(settings, args.season, cap))
    except EspnUnavailableError as exc:
        raise SystemExit(f"ESPN request failed: {exc}") from exc
    records = normalize_players(result.players)
    print(f"Fetched {len(records)} players for {args.season}")
    _write_output(export_players_to_csv(records, layout="compact"), args.output)


def _run_week(args: argparse.Namespace) -> None:
    today = args.on_date or date.today()
    season = infer_season(today)
    print(f"{season} season, week {current_nfl_week(today, season)}")


def _run_serve(args: argparse.Namespace, settings: Settings) -> None:
    import uvicorn

    from fantasytoolbox.api import create_app

    uvicorn.run(create_app(settings), host=args.host, port=args.port)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "week":
        _run_week(args)
        return

    settings = Settings.from_env()
    if args.command == "waiver-wire":
        _run_waiver_wire(args, settings)
    elif args.command == "players":
        _run_players(args, settings)
    elif args.command == "serve":
        _run_serve(args, settings)


if __name__ == "__main__":
    main()
