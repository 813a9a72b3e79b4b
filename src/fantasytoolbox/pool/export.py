"""Waiver-wire CSV export helpers."""

from __future__ import annotations

import csv
import re
from datetime import date
from io import StringIO
from typing import Literal, Mapping, Optional, Sequence

from fantasytoolbox.models import PlayerRecord


CsvLayout = Literal["full", "compact"]

_FORMULA_PREFIXES = ("=", "+", "-", "@")

_HEADERS: Mapping[str, tuple[str, ...]] = {
    "full": (
        "Rank",
        "Player Name",
        "Position",
        "Team",
        "Ownership %",
        "Fantasy Points",
        "Projected Points",
    ),
    "compact": ("Player Name", "Position", "Team", "Ownership %", "Projected Points"),
}


class WaiverExportError(RuntimeError):
    """Raised when a player list cannot be exported."""


def sanitize_csv_field(value: str) -> str:
    """Neutralize spreadsheet formulas by prefixing a single quote.

    Quote doubling and wrapping are left to the csv writer.
    """

    if value.startswith(_FORMULA_PREFIXES):
        return "'" + value
    return value


def _row(record: PlayerRecord, layout: CsvLayout) -> list[object]:
    name = sanitize_csv_field(record.full_name)
    position = sanitize_csv_field(record.position)
    team = sanitize_csv_field(record.pro_team)
    ownership = round(record.ownership_percentage, 1)
    projected = round(record.projected_points, 1)
    if layout == "compact":
        return [name, position, team, ownership, projected]
    if record.rank is None:
        raise WaiverExportError(f"Player {record.player_id} has no rank; rank the pool before exporting")
    return [record.rank, name, position, team, ownership, round(record.fantasy_points, 1), projected]


def export_players_to_csv(records: Sequence[PlayerRecord], *, layout: CsvLayout = "full") -> str:
    """Serialize players to CSV text.

    String columns are always double quoted; numeric columns are written bare.
    """

    if layout not in _HEADERS:
        raise WaiverExportError(f"Unknown CSV layout {layout!r}")

    buffer = StringIO()
    header_writer = csv.writer(buffer)
    header_writer.writerow(_HEADERS[layout])
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC)
    for record in records:
        writer.writerow(_row(record, layout))
    return buffer.getvalue()


def export_filename(league_id: str, *, today: date, position: Optional[str] = None) -> str:
    league_token = re.sub(r"[^A-Za-z0-9]", "", str(league_id)) or "league"
    parts = ["waiver_wire", league_token]
    if position:
        parts.append(re.sub(r"[^A-Za-z0-9]", "", position))
    parts.append(today.strftime("%Y%m%d"))
    return "_".join(parts) + ".csv"


__all__ = [
    "CsvLayout",
    "WaiverExportError",
    "export_filename",
    "export_players_to_csv",
    "sanitize_csv_field",
]
