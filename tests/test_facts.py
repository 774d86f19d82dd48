"""
Tests for facts compaction.
"""

import json

from volleycoach.analysis.retrieval import RetrievedData
from volleycoach.analysis.season_facts import build_season_facts
from volleycoach.config.bounds import SystemBounds
from volleycoach.core.records import KnowledgeChunk, MatchRecord, PlayerGameStatRecord
from volleycoach.narrative import compact_facts, render_notes


def _big_season(players=40, games=10):
    stats = []
    for g in range(games):
        for p in range(players):
            stats.append(PlayerGameStatRecord.from_dict({
                "player_name": f"P{p}",
                "position": "OH" if p % 2 else "MB",
                "game_date": f"2025-{(g % 12) + 1:02d}-05",
                "stats": {
                    "attack_kills": p + g,
                    "digs_successful": p,
                    "serve_aces": p % 4,
                    "serve_errors": p % 3,
                    "setting_assists": p % 5,
                    "blocks_solo": p % 2,
                    "serve_receive_attempts": 5,
                    "serve_receive_passing_rating": (p % 30) / 10,
                },
            }))
    matches = [
        MatchRecord.from_dict({"opponent": f"Team{i}", "result": "L" if i % 2 else "W", "set_diff": -1 if i % 2 else 2})
        for i in range(30)
    ]
    return build_season_facts(RetrievedData(matches=matches, stat_rows=stats))


def test_compact_facts_size_is_bounded(scope):
    bounds = SystemBounds()
    compact = compact_facts(_big_season(), scope, bounds)

    assert compact["record"] == {"wins": 15, "losses": 15, "matches": 30, "tally": "15-15"}
    for name, entries in compact["leaders"].items():
        assert len(entries) <= bounds.facts_leaders_top_k, name
    assert len(compact["tough_opponents"]) == bounds.facts_tough_top_k
    assert len(compact["positions"]) == bounds.facts_max_positions
    assert len(compact["passer_rating_by_month"]) <= bounds.facts_max_months
    assert len(compact["passer_ratings"]) <= bounds.facts_leaders_top_k
    assert len(compact["top_passers_by_month"]) == 10
    for month in compact["top_passers_by_month"]:
        assert len(month["players"]) == bounds.facts_monthly_passers_top_k
        assert month["players"][0] == {"player": "P29", "rating": 2.9, "attempts": 5.0}
    assert compact["leaders"]["kills"][0]["player"] == "P39"
    assert compact["scope"]["team_id"] == scope.team_id
    json.dumps(compact)


def test_compact_facts_on_empty_season():
    compact = compact_facts(build_season_facts(None))
    assert compact["record"] is None
    assert compact["best_passer"] is None
    assert compact["team_passer_rating"] is None
    assert compact["tough_opponents"] == []
    assert compact["top_passers_by_month"] == []
    assert compact["data_availability"] == {"matches": False, "player_stats": False, "notes": False}
    assert "scope" not in compact


def test_render_notes_dedupes_and_caps():
    chunks = [
        KnowledgeChunk("1", "Roster", "Ava plays outside"),
        KnowledgeChunk("2", "Roster", "Ava plays outside"),
        KnowledgeChunk("3", "Serving", "Float serves"),
    ]
    assert render_notes(chunks) == "Roster\n\nAva plays outside\n\nServing\n\nFloat serves"
    assert render_notes(chunks, SystemBounds(max_note_lines=1)) == "Roster"


def test_failed_sets_are_flagged_for_enrichment():
    facts = build_season_facts(RetrievedData(
        matches=[MatchRecord.from_dict({"opponent": "X", "result": "W"})],
        failed=["stats", "notes"],
    ))
    availability = compact_facts(facts)["data_availability"]
    assert availability["matches"] is True
    assert availability["unavailable"] == ["player_game_stats"]
