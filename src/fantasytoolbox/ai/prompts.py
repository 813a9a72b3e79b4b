"""Prompt templates for waiver-wire recommendations and player analysis."""

from __future__ import annotations

import json
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Literal, Mapping, Optional, Sequence

from fantasytoolbox.models import PlayerRecord, RosterPlayer


AnalysisType = Literal["general", "waiver_pickup", "start_sit", "trade_value"]

ANALYSIS_TYPES: tuple[str, ...] = ("general", "waiver_pickup", "start_sit", "trade_value")

MAX_NFL_WEEK = 18
DEFAULT_TOP_N = 10

_BYE_WEEK_GUIDANCE: Mapping[int, str] = {
    4: "  - Early bye weeks: Usually 2-4 teams (often includes Thursday teams from previous week)",
    5: "  - Peak bye season beginning: 4-6 teams typically on bye",
    6: "  - Peak bye season beginning: 4-6 teams typically on bye",
    7: "  - Heavy bye weeks: 6 teams commonly on bye (check your roster carefully)",
    8: "  - Heavy bye weeks: 6 teams commonly on bye (check your roster carefully)",
    9: "  - Heavy bye weeks: 6 teams commonly on bye (check your roster carefully)",
    10: "  - Mid-season byes: 4-6 teams on bye",
    11: "  - Mid-season byes: 4-6 teams on bye",
    12: "  - Late bye weeks: 2-4 teams typically on bye",
    13: "  - Late bye weeks: 2-4 teams typically on bye",
    14: "  - Final bye week: Usually 2 teams on bye",
}

_WEEKLY_GAME_CONTEXT = (
    "WEEKLY GAME CONTEXT:",
    "- Thursday Night Football: Teams play on short rest (4 days)",
    "- Monday Night Football: Teams get extra rest (8 days until next game)",
    "- Sunday games: Standard rest (7 days)",
    "- Consider travel schedules and divisional matchups",
)

_MATCHUP_FACTORS = (
    "MATCHUP ANALYSIS FACTORS:",
    "- Target players facing weak defenses in their position",
    "- Avoid players facing top-ranked defenses",
    "- Consider weather conditions for outdoor games",
    "- Look for players in potential high-scoring games",
    "- Factor in home field advantage",
)

_ANALYSIS_REQUEST = (
    "ANALYSIS REQUEST:",
    "Please provide the following analysis:",
    "1. TOP 3 RECOMMENDED PICKUPS with specific reasons why each player would improve this roster",
    "2. POSITION ANALYSIS highlighting any weak spots in the current roster",
    "3. STRATEGIC CONSIDERATIONS for upcoming weeks based on player schedules and trends",
    "",
    "Consider factors like:",
    "- Roster depth and bye week coverage",
    "- Player opportunity and recent performance trends",
    "- Injury situations affecting playing time",
    "- Schedule difficulty and upcoming matchups",
    "- Ownership percentages indicating hidden gems",
    "",
    "Format your response clearly with headers and bullet points for easy reading.",
)

_PLAYER_PROMPTS: Mapping[str, tuple[str, str]] = {
    "general": (
        "As a fantasy football expert, analyze this player's performance and provide insights:",
        """Please provide a concise analysis (3-4 sentences) covering:
1. Current performance trends and key stats
2. Upcoming matchup outlook
3. Fantasy relevance and roster decision guidance
4. Any injury concerns or red flags

Focus on actionable fantasy advice for the upcoming week.""",
    ),
    "waiver_pickup": (
        "As a fantasy football expert, evaluate this player as a potential waiver wire pickup:",
        """Provide a brief waiver priority assessment (2-3 sentences) covering:
1. Why this player is worth considering for pickup
2. Expected role and opportunity moving forward
3. Recommended FAAB percentage or waiver priority level
4. Best roster situations where this pickup makes sense

Be specific about their upside and realistic expectations.""",
    ),
    "start_sit": (
        "As a fantasy football expert, provide start/sit advice for this player:",
        """Give a clear recommendation (2-3 sentences) covering:
1. Start or Sit recommendation with confidence level
2. Key matchup factors influencing the decision
3. Floor vs ceiling expectations for this week
4. Alternative options to consider if available

Focus on this week's specific outlook and decision factors.""",
    ),
    "trade_value": (
        "As a fantasy football expert, assess this player's trade value:",
        """Provide a trade value analysis (3-4 sentences) covering:
1. Current trade market value and tier ranking
2. Buy-low or sell-high opportunity assessment
3. Realistic trade targets of similar value
4. ROS outlook impact on value trajectory

Focus on actionable trade guidance and market positioning.""",
    ),
}


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def infer_season(today: date | datetime) -> int:
    """NFL season year for a date: September onward belongs to the same year."""

    today = _as_date(today)
    return today.year if today.month >= 9 else today.year - 1


def season_start(season: int) -> date:
    """Thursday after the first Monday of September."""

    start = date(season, 9, 1)
    while start.weekday() != 0:
        start += timedelta(days=1)
    return start + timedelta(days=3)


def current_nfl_week(today: date | datetime, season: Optional[int] = None) -> int:
    """``floor(days_since_start / 7) + 1`` clamped to 1..18."""

    today = _as_date(today)
    season = infer_season(today) if season is None else season
    anchor = season_start(season)
    if today < anchor:
        return 1
    week = (today - anchor).days // 7 + 1
    return max(1, min(week, MAX_NFL_WEEK))


def schedule_context(week: int) -> str:
    lines = [
        f"- Current NFL Week: {week}",
        "- Regular Season: Weeks 1-17",
        "- Playoff Period: Weeks 18-22",
        "",
        "CURRENT WEEK CONSIDERATIONS:",
    ]
    if 4 <= week <= 14:
        lines.extend(
            [
                "- BYE WEEKS ACTIVE: Teams have bye weeks during weeks 4-14",
                f"- Week {week} bye week implications:",
                "  - Check if any roster players have bye weeks this week",
                "  - Look for waiver players from non-bye teams",
                "  - Consider upcoming bye weeks when selecting pickups",
            ]
        )
        guidance = _BYE_WEEK_GUIDANCE.get(week)
        if guidance:
            lines.append(guidance)
    if week >= 15:
        lines.extend(
            [
                f"- PLAYOFF PUSH (Week {week}): Focus on players with favorable playoff schedules",
                "- Prioritize players on teams still competing for playoffs",
                "- Consider rest situations for locked playoff teams",
            ]
        )
    lines.append("")
    lines.extend(_WEEKLY_GAME_CONTEXT)
    lines.append("")
    lines.extend(_MATCHUP_FACTORS)
    return "\n".join(lines)


def summarize_roster(roster: Iterable[RosterPlayer]) -> list[str]:
    """One ``POS: Name (TEAM), ...`` line per position, positions alphabetical."""

    groups: dict[str, list[RosterPlayer]] = defaultdict(list)
    for player in roster:
        groups[player.position].append(player)
    return [
        f"{position}: " + ", ".join(f"{p.full_name} ({p.pro_team})" for p in groups[position])
        for position in sorted(groups)
    ]


def summarize_candidates(candidates: Iterable[PlayerRecord], *, top_n: int = DEFAULT_TOP_N) -> list[str]:
    groups: dict[str, list[PlayerRecord]] = defaultdict(list)
    for player in candidates:
        groups[player.position].append(player)

    lines: list[str] = []
    for position in sorted(groups):
        lines.append("")
        lines.append(f"{position}:")
        best = sorted(groups[position], key=lambda p: p.fantasy_points, reverse=True)[: max(0, top_n)]
        for player in best:
            lines.append(
                f"  - {player.full_name} ({player.pro_team}) - {player.fantasy_points:.1f} pts, "
                f"{player.ownership_percentage:.1f}% owned, Proj: {player.projected_points:.1f}"
            )
    return lines


def build_waiver_prompt(
    roster: Sequence[RosterPlayer],
    candidates: Sequence[PlayerRecord],
    *,
    today: date | datetime,
    position_filter: Optional[str] = None,
    top_n: int = DEFAULT_TOP_N,
) -> str:
    season = infer_season(today)
    week = current_nfl_week(today, season)

    lines = [
        "You are an expert fantasy football analyst. Analyze the following data and "
        "recommend the best waiver wire pickups.",
        "",
        f"Current Date: {_as_date(today):%B %d, %Y}",
        f"NFL Season: {season}",
        f"Current Week: Week {week}",
        "",
        "CURRENT NFL SCHEDULE CONTEXT:",
        schedule_context(week),
        "",
        "CURRENT ROSTER:",
        *summarize_roster(roster),
        "",
        "AVAILABLE WAIVER WIRE PLAYERS:",
    ]
    if position_filter:
        lines.append(f"(Filtered to {position_filter} position)")
    lines.extend(summarize_candidates(candidates, top_n=top_n))
    lines.append("")
    lines.extend(_ANALYSIS_REQUEST)
    return "\n".join(lines) + "\n"


def build_player_analysis_prompt(player: Any, analysis_type: str = "general") -> str:
    """Single-player prompt; unknown analysis types fall back to ``general``."""

    intro, instructions = _PLAYER_PROMPTS.get(analysis_type, _PLAYER_PROMPTS["general"])
    player_json = json.dumps(player, indent=2, default=str)
    return f"{intro}\n\nPlayer Data:\n{player_json}\n\n{instructions}"
