"""
Facts compaction for the enrichment call.

The output is a plain JSON-serializable dict whose size depends only on the
bounds, never on how many matches or stat rows the season holds.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from volleycoach.analysis.aggregator import best_passer, ranked_passers, team_passer_rating, top_by_stat
from volleycoach.analysis.match_summary import tough_opponents
from volleycoach.analysis.season_facts import SeasonFacts
from volleycoach.config.bounds import DEFAULT_BOUNDS, SystemBounds, enforce_bounds_on_list
from volleycoach.config.settings import TeamScope
from volleycoach.stats.categories import EXTENDED_CATEGORIES, TRACKED_CATEGORIES


def _round(value: float) -> float:
    return round(value, 2)


def _leaders(facts: SeasonFacts, bounds: SystemBounds) -> Dict[str, List[Dict[str, Any]]]:
    leaders: Dict[str, List[Dict[str, Any]]] = {}
    for category in TRACKED_CATEGORIES + EXTENDED_CATEGORIES:
        ranked = top_by_stat(facts.totals, category, bounds.facts_leaders_top_k)
        leaders[category.name] = [{"player": e.player, "value": _round(e.value)} for e in ranked]
    return leaders


def _passer(entry) -> Optional[Dict[str, Any]]:
    if entry is None:
        return None
    return {"player": entry.player, "rating": _round(entry.rating), "attempts": _round(entry.attempts)}


def compact_facts(
    facts: SeasonFacts,
    scope: Optional[TeamScope] = None,
    bounds: SystemBounds = DEFAULT_BOUNDS,
) -> Dict[str, Any]:
    record = None
    if facts.has_matches:
        r = facts.matches.record
        record = {"wins": r.wins, "losses": r.losses, "matches": r.matches, "tally": r.tally()}

    eligible = ranked_passers(facts.totals, bounds.min_passer_attempts)
    team = team_passer_rating(facts.totals)
    tough = tough_opponents(facts.matches, bounds.facts_tough_top_k)
    positions = enforce_bounds_on_list(sorted(facts.totals.positions.items()), "facts_max_positions", bounds)
    months = enforce_bounds_on_list(facts.passer_rating_by_month, "facts_max_months", bounds)
    passers_by_month = [
        {"month": m["month"], "players": enforce_bounds_on_list(m["players"], "facts_monthly_passers_top_k", bounds)}
        for m in enforce_bounds_on_list(facts.passers_by_month, "facts_max_months", bounds)
    ]

    compact: Dict[str, Any] = {
        "record": record,
        "leaders": _leaders(facts, bounds),
        "best_passer": _passer(best_passer(facts.totals, bounds.min_passer_attempts)),
        "passer_ratings": [_passer(p) for p in eligible[: bounds.facts_leaders_top_k]],
        "passer_min_attempts": bounds.min_passer_attempts,
        "team_passer_rating": _round(team.rating) if team else None,
        "tough_opponents": [
            {"opponent": o.opponent, "losses": o.losses, "matches": o.matches, "set_diff": o.set_diff}
            for o in tough
        ],
        "positions": [{"player": p, "position": pos} for p, pos in positions],
        "passer_rating_by_month": months,
        "top_passers_by_month": passers_by_month,
        "data_availability": {
            "matches": facts.has_matches,
            "player_stats": facts.has_stats,
            "notes": bool(facts.notes),
        },
    }
    if facts.unavailable:
        compact["data_availability"]["unavailable"] = facts.unavailable_tables()
    if scope is not None:
        compact["scope"] = {
            "team_id": scope.team_id,
            "season": scope.season,
            "window_start": scope.window_start,
            "window_end_exclusive": scope.window_end_exclusive,
        }
    return compact
