"""Lightweight REST client for the fantasytoolbox API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def _raise_for_error(resp: httpx.Response) -> None:
    if resp.status_code >= 400:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        raise SystemExit(f"{resp.request.method} {resp.request.url.path} failed ({resp.status_code}): {detail}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the fantasytoolbox REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--user", required=True, help="Email sent as the X-User-Email header")
    parser.add_argument("--connect", metavar="JSON", help="Link ESPN credentials from a JSON file")
    parser.add_argument("--status", action="store_true", help="Show the ESPN connection status")
    parser.add_argument("--waivers", action="store_true", help="Print the ranked waiver wire")
    parser.add_argument("--position", default=None, help="Position filter for waiver requests")
    parser.add_argument("--mode", default=None, help="best_available or most_added")
    parser.add_argument("--limit", type=int, default=None, help="Maximum players to list")
    parser.add_argument("--export-path", type=Path, help="Download the waiver wire CSV to this path")
    parser.add_argument("--recommend", action="store_true", help="Request AI waiver-wire recommendations")
    args = parser.parse_args()

    params = {k: v for k, v in (("position", args.position), ("mode", args.mode)) if v}

    with httpx.Client(base_url=args.base_url, headers={"X-User-Email": args.user}, timeout=120.0) as client:
        if args.connect:
            try:
                payload = json.loads(Path(args.connect).read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                raise SystemExit(f"Invalid connection JSON: {exc}") from exc
            resp = client.put("/api/espn/connection", json=payload)
            _raise_for_error(resp)
            print("Connected:", json.dumps(resp.json(), indent=2))

        if args.status:
            resp = client.get("/api/espn/connection")
            _raise_for_error(resp)
            print(json.dumps(resp.json(), indent=2))

        if args.waivers:
            query = dict(params)
            if args.limit:
                query["limit"] = str(args.limit)
            resp = client.get("/api/leagues/waiver-wire", params=query)
            _raise_for_error(resp)
            body = resp.json()
            print(f"{body['total']} players (fallback={body['fallback']}, partial={body['partial']})")
            for player in body["players"]:
                print(
                    f"{player['rank']:>3}. {player['full_name']} ({player['position']}, {player['pro_team']}) "
                    f"proj {player['projected_points']:.1f}, {player['ownership_percentage']:.1f}% owned"
                )

        if args.export_path:
            resp = client.get("/api/leagues/waiver-wire/export", params=params)
            _raise_for_error(resp)
            args.export_path.write_text(resp.text, encoding="utf-8", newline="")
            print(f"CSV export saved to {args.export_path}")

        if args.recommend:
            resp = client.post(
                "/api/recommendations/waiver-wire",
                json={"position_filter": args.position, "top_n": args.limit or 10},
            )
            if resp.status_code == 503:
                retry = resp.json().get("retry_after")
                raise SystemExit(f"AI service busy; retry in {retry} seconds")
            _raise_for_error(resp)
            body = resp.json()
            print(f"Week {body['week']} of {body['season']}")
            print(body["recommendations"])


if __name__ == "__main__":
    main()
