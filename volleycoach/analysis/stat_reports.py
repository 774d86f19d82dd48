"""
Deterministic stat reports served by /api/stats/query.

A question is routed to one of four report modes:
- ROSTER: positions per player plus roster notes
- MONTHLY: month-by-month team totals for a stat key, the team passer
  rating per month, or the top N passers of each month
- LEADERS: top N per category with a weighted team serve-receive line
- KEYS: raw stat-key leaderboard (see stat_query)

"top N" in the question sets the list length for every mode.
"""
from __future__ import annotations

import logging
import re
from enum import Enum
from typing import List, Optional, Tuple

from volleycoach.analysis.aggregator import (
    SeasonTotals,
    aggregate_player_totals,
    ranked_passers,
    team_passer_rating,
    top_by_stat,
)
from volleycoach.analysis.monthly import (
    BLOCKS_TOTAL_KEY,
    player_passer_ratings_by_month,
    team_passer_rating_by_month,
    team_totals_by_month,
)
from volleycoach.analysis.stat_query import LEADERBOARD_SIZE, build_stat_facts
from volleycoach.config.settings import TeamScope
from volleycoach.core.records import PlayerGameStatRecord
from volleycoach.stats.categories import ACES, ASSISTS, BLOCKS, DIGS, KILLS, SERVE_ERRORS, SETTING_ERRORS, StatCategory
from volleycoach.stats.normalizer import format_number

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 5
MAX_TOP_N = 50
WEIGHTED_SR = "avg_weighted_sr"
SUM = "sum"

_TOP_N = re.compile(r"\btop\s+(\d+)\b")
_TOP = re.compile(r"\btop\b")
_PASSING = re.compile(r"\bpass(er|ers|ing)\b|\bserve[\s-]receive\b")
_ROSTER = re.compile(r"\broster\b")
_MONTHLY = re.compile(r"\bmonth[\s-]by[\s-]month\b|\bmonth[\s-]over[\s-]month\b|\beach month\b|\bper month\b|\bmonthly\b")
_LEADERS = re.compile(r"\bleaders\b|\bleaderboard\b|\btop\s+\d*\s*across\b|\btop\b.*\bcategor")
_SR_PHRASES = re.compile(r"\bpass(er|ing) rating\b|\bserve[\s-]receive\b(?!\s+attempts?)|\bsr rating\b")
_SNAKE_KEY = re.compile(r"\b([a-z]+(?:_[a-z]+)+)\b")

# Specific phrases come before the single words they contain ("dig errors" vs "digs")
STAT_KEY_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\bserve errors?\b"), "serve_errors"),
    (re.compile(r"\bsetting errors?\b"), "setting_errors"),
    (re.compile(r"\battack errors?\b"), "attack_errors"),
    (re.compile(r"\bdig errors?\b"), "dig_errors"),
    (re.compile(r"\bserve receive attempts?\b|\bsr attempts?\b"), "serve_receive_attempts"),
    (re.compile(r"\bserve attempts?\b"), "serve_attempts"),
    (re.compile(r"\bhitting percentage\b|\battack percentage\b"), "attack_percentage"),
    (re.compile(r"\bplus/minus\b|\bpoints\b.*\bplus\b"), "points_plus_minus"),
    (re.compile(r"\bkills?\b"), "attack_kills"),
    (re.compile(r"\bdigs?\b"), "digs_successful"),
    (re.compile(r"\baces?\b"), "serve_aces"),
    (re.compile(r"\bassists?\b"), "setting_assists"),
    (re.compile(r"\bblocks?\b"), BLOCKS_TOTAL_KEY),
]

LEADER_CATEGORIES: List[Tuple[str, StatCategory]] = [
    ("Kills", KILLS),
    ("Assists", ASSISTS),
    ("Aces", ACES),
    ("Digs", DIGS),
    ("Blocks", BLOCKS),
    ("Serve errors", SERVE_ERRORS),
    ("Setting errors", SETTING_ERRORS),
]


class ReportMode(str, Enum):
    ROSTER = "roster"
    MONTHLY = "monthly"
    LEADERS = "leaders"
    KEYS = "keys"


def parse_top_n(question: str, fallback: int = DEFAULT_TOP_N) -> int:
    """Read "top 3" style counts; out-of-range values keep the fallback, large ones cap at 50."""
    match = _TOP_N.search((question or "").lower())
    if not match:
        return fallback
    n = int(match.group(1))
    return min(n, MAX_TOP_N) if n > 0 else fallback


def infer_stat_key(question: str) -> Tuple[Optional[str], str]:
    """Map a question to a raw stat key and how it aggregates (sum or weighted SR).

    A literal snake_case key in the question is used as-is.
    """
    q = (question or "").lower()
    if _SR_PHRASES.search(q):
        return "serve_receive_passing_rating", WEIGHTED_SR
    for pattern, key in STAT_KEY_PATTERNS:
        if pattern.search(q):
            return key, SUM
    literal = _SNAKE_KEY.search(q)
    if literal:
        return literal.group(1), SUM
    return None, SUM


def detect_mode(question: str) -> ReportMode:
    q = (question or "").lower()
    if _ROSTER.search(q) or all(re.search(rf"\b{word}", q) for word in ("who", "plays", "position")):
        return ReportMode.ROSTER
    if _MONTHLY.search(q):
        return ReportMode.MONTHLY
    if _LEADERS.search(q):
        return ReportMode.LEADERS
    return ReportMode.KEYS


def _rank_line(rank: int, player: str, value: str) -> str:
    return f"{rank}) **{player}** — {value}"


def roster_report(totals: SeasonTotals, notes_text: str = "") -> str:
    lines = ["Roster & positions (best available)"]
    players = sorted(totals.positions, key=str.lower)
    if players:
        lines.extend(f"**{p}** — {totals.positions[p]}" for p in players)
    else:
        lines.append("No positions found in player_game_stats.position for this season.")
    if notes_text:
        lines += ["", "Notes", notes_text]
    return "\n".join(lines)


def monthly_report(rows: List[PlayerGameStatRecord], question: str, n: int) -> str:
    q = (question or "").lower()
    if _TOP.search(q) and _PASSING.search(q):
        months = [m for m in player_passer_ratings_by_month(rows, n) if m["players"]]
        if not months:
            return "Top passers each month\nInsufficient data in the current dataset (no serve-receive attempts found)."
        lines = [f"Top {n} passers each month (0–3 scale, weighted by attempts)"]
        for month in months:
            lines += ["", month["month"]]
            lines.extend(
                _rank_line(i, p["player"], f"{p['rating']:.2f} on {format_number(p['attempts'])} attempts")
                for i, p in enumerate(month["players"], start=1)
            )
        return "\n".join(lines)

    key, mode = infer_stat_key(question)
    if key is None:
        return (
            "Month-by-month\n"
            "Tell me which stat you want (examples: kills, aces, digs, setting errors, blocks, passer rating)."
        )

    if mode == WEIGHTED_SR:
        months = team_passer_rating_by_month(rows)
        if not months:
            return (
                "Month-by-month team passer rating\n"
                "Insufficient data in the current dataset (no serve-receive attempts found)."
            )
        lines = ["Month-by-month team passer rating (0–3 scale, weighted by attempts)"]
        lines.extend(f"{m['month']}: {m['rating']:.2f} on {format_number(m['attempts'])} attempts" for m in months)
        return "\n".join(lines)

    months = team_totals_by_month(rows, key)
    if not months:
        return f"Month-by-month {key}\nInsufficient data in the current dataset (no dated player_game_stats found)."
    lines = [f"Month-by-month team {key}"]
    lines.extend(f"{m['month']}: {format_number(m['value'])}" for m in months)
    return "\n".join(lines)


def leaders_report(totals: SeasonTotals, n: int, season: str) -> str:
    if totals.is_empty():
        return "Statistical leaders\nInsufficient data in the current dataset (no player_game_stats found)."

    lines = [f"Top {n} leaders by category ({season})"]
    for label, category in LEADER_CATEGORIES:
        lines += ["", label]
        ranked = top_by_stat(totals, category, n)
        if ranked:
            lines.extend(_rank_line(i, e.player, format_number(e.value)) for i, e in enumerate(ranked, start=1))
        else:
            lines.append("Insufficient data.")

    lines += ["", "Passer rating"]
    passers = ranked_passers(totals)[:n]
    if passers:
        lines.extend(
            _rank_line(i, p.player, f"{p.rating:.2f} on {format_number(p.attempts)}")
            for i, p in enumerate(passers, start=1)
        )
    else:
        lines.append("Insufficient data (no serve-receive attempts found).")

    team = team_passer_rating(totals)
    if team:
        lines += ["", f"Team SR (weighted): {team.rating:.2f} on {format_number(team.attempts)} attempts"]
    return "\n".join(lines)


def answer_stats_query(
    rows: List[PlayerGameStatRecord],
    question: str,
    scope: TeamScope,
    notes_text: str = "",
    mode: Optional[ReportMode] = None,
) -> Tuple[ReportMode, str]:
    mode = mode or detect_mode(question)
    logger.info("[STATS] mode=%s team=%s rows=%s", mode.value, scope.team_id, len(rows))
    if mode == ReportMode.ROSTER:
        return mode, roster_report(aggregate_player_totals(rows), notes_text)
    if mode == ReportMode.MONTHLY:
        return mode, monthly_report(rows, question, parse_top_n(question))
    if mode == ReportMode.LEADERS:
        return mode, leaders_report(aggregate_player_totals(rows), parse_top_n(question), scope.season)
    return mode, build_stat_facts(rows, question, scope, parse_top_n(question, LEADERBOARD_SIZE))
