"""
Tests for the stat report modes behind /api/stats/query.
"""

import pytest

from volleycoach.analysis.aggregator import aggregate_player_totals
from volleycoach.analysis.stat_reports import (
    ReportMode,
    answer_stats_query,
    detect_mode,
    infer_stat_key,
    leaders_report,
    monthly_report,
    parse_top_n,
    roster_report,
)
from volleycoach.core.records import PlayerGameStatRecord


def _rows(*raw):
    return [PlayerGameStatRecord.from_dict(r) for r in raw]


MONTHLY_ROWS = _rows(
    {"player_name": "Ava", "game_date": "2025-09-10", "position": "OH",
     "stats": {"attack_kills": 10, "serve_receive_attempts": 10, "serve_receive_passing_rating": 2.0}},
    {"player_name": "Lena", "game_date": "2025-09-10", "position": "L",
     "stats": {"serve_receive_attempts": 20, "serve_receive_passing_rating": 2.5, "blocks_solo": 1}},
    {"player_name": "Zoe", "game_date": "2025-10-01", "position": "MB",
     "stats": {"attack_kills": "6", "blocks_solo": 2, "blocks_assist": 3}},
    {"player_name": "Ava", "game_date": "2025-10-01",
     "stats": {"attack_kills": 4, "serve_receive_attempts": 5, "serve_receive_passing_rating": 3.0}},
    {"player_name": "Ava", "stats": {"attack_kills": 50}},
)


@pytest.mark.parametrize(
    "question, expected",
    [
        ("top 3 passers", 3),
        ("Top 10 in kills", 10),
        ("top 500 diggers", 50),
        ("top 0 servers", 5),
        ("who leads in kills", 5),
        ("stop 3 errors", 5),
    ],
)
def test_parse_top_n(question, expected):
    assert parse_top_n(question) == expected


@pytest.mark.parametrize(
    "question, key, mode",
    [
        ("month by month passer rating", "serve_receive_passing_rating", "avg_weighted_sr"),
        ("serve receive attempts each month", "serve_receive_attempts", "sum"),
        ("who has the most serve errors", "serve_errors", "sum"),
        ("dig errors by month", "dig_errors", "sum"),
        ("top 5 in digs", "digs_successful", "sum"),
        ("blocks per month", "blocks_total", "sum"),
        ("totals for setting_assists please", "setting_assists", "sum"),
        ("how are we doing", None, "sum"),
    ],
)
def test_infer_stat_key(question, key, mode):
    assert infer_stat_key(question) == (key, mode)


@pytest.mark.parametrize(
    "question, mode",
    [
        ("Show me the roster", ReportMode.ROSTER),
        ("Who plays which position?", ReportMode.ROSTER),
        ("month by month team kills", ReportMode.MONTHLY),
        ("top 5 passers each month", ReportMode.MONTHLY),
        ("stat leaders by category", ReportMode.LEADERS),
        ("top 3 across all categories", ReportMode.LEADERS),
        ("who has the most aces?", ReportMode.KEYS),
    ],
)
def test_detect_mode(question, mode):
    assert detect_mode(question) == mode


def test_monthly_team_totals_skip_undated_rows():
    text = monthly_report(MONTHLY_ROWS, "month by month team kills", 5)
    assert text.splitlines() == ["Month-by-month team attack_kills", "2025-09: 10", "2025-10: 10"]


def test_monthly_blocks_are_derived():
    text = monthly_report(MONTHLY_ROWS, "blocks month by month", 5)
    assert text.splitlines()[1:] == ["2025-09: 1", "2025-10: 5"]


def test_monthly_team_passer_rating():
    text = monthly_report(MONTHLY_ROWS, "month-by-month passer rating", 5)
    lines = text.splitlines()
    assert lines[1] == "2025-09: 2.33 on 30 attempts"
    assert lines[2] == "2025-10: 3.00 on 5 attempts"


def test_top_passers_each_month():
    text = monthly_report(MONTHLY_ROWS, "top 1 passers each month", 1)
    assert text.splitlines() == [
        "Top 1 passers each month (0–3 scale, weighted by attempts)",
        "",
        "2025-09",
        "1) **Lena** — 2.50 on 20 attempts",
        "",
        "2025-10",
        "1) **Ava** — 3.00 on 5 attempts",
    ]


def test_monthly_without_a_stat_asks_which_one():
    assert monthly_report(MONTHLY_ROWS, "how did we do each month", 5).startswith("Month-by-month\nTell me which stat")


def test_leaders_report_lists_categories_and_team_line():
    text = leaders_report(aggregate_player_totals(MONTHLY_ROWS), 2, "2025-26")
    lines = text.splitlines()
    assert lines[0] == "Top 2 leaders by category (2025-26)"
    kills = lines.index("Kills")
    assert lines[kills + 1:kills + 3] == ["1) **Ava** — 64", "2) **Zoe** — 6"]
    assert "Setting errors" in lines
    assert lines[lines.index("Passer rating") + 1:lines.index("Passer rating") + 3] == [
        "1) **Lena** — 2.50 on 20",
        "2) **Ava** — 2.33 on 15",
    ]
    assert lines[-1] == "Team SR (weighted): 2.43 on 35 attempts"


def test_leaders_report_without_stats():
    assert leaders_report(aggregate_player_totals([]), 5, "2025-26").startswith("Statistical leaders\nInsufficient data")


def test_roster_report_sorts_players_and_appends_notes():
    text = roster_report(aggregate_player_totals(MONTHLY_ROWS), "Roster: Lena is the libero")
    assert text.splitlines() == [
        "Roster & positions (best available)",
        "**Ava** — OH",
        "**Lena** — L",
        "**Zoe** — MB",
        "",
        "Notes",
        "Roster: Lena is the libero",
    ]


def test_roster_report_without_positions():
    text = roster_report(aggregate_player_totals(_rows({"player_name": "A", "stats": {}})))
    assert "No positions found" in text


def test_keys_mode_honours_top_n(scope):
    rows = _rows(*({"player_name": f"P{i}", "stats": {"serve_aces": i + 1}} for i in range(10)))
    mode, text = answer_stats_query(rows, "top 2 aces", scope)
    assert mode == ReportMode.KEYS
    assert text.splitlines()[-1] == "Top serve_aces: P9=10 | P8=9"
