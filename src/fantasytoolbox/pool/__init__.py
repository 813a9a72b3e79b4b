"""Free-agent pool utilities (ranking, export)."""

from .export import (
    CsvLayout,
    WaiverExportError,
    export_filename,
    export_players_to_csv,
    sanitize_csv_field,
)
from .ranking import RANK_MODES, RankMode, filter_by_position, parse_rank_mode, rank_players

__all__ = [
    "CsvLayout",
    "RANK_MODES",
    "RankMode",
    "WaiverExportError",
    "export_filename",
    "export_players_to_csv",
    "filter_by_position",
    "parse_rank_mode",
    "rank_players",
    "sanitize_csv_field",
]
