"""
Recognized stat categories.

Per-game stat mappings are open-ended (arbitrary keys per row). The engine
applies a closed set of category extractors against that mapping and ignores
every key it does not recognize.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from volleycoach.stats.normalizer import to_number

SR_ATTEMPTS_KEY = "serve_receive_attempts"
SR_RATING_KEY = "serve_receive_passing_rating"


def _field(key: str) -> Callable[[Dict[str, Any]], float]:
    def extract(stats: Dict[str, Any]) -> float:
        return to_number(stats.get(key))

    return extract


def _blocks_total(stats: Dict[str, Any]) -> float:
    solo = to_number(stats.get("blocks_solo"))
    assist = to_number(stats.get("blocks_assist"))
    if solo or assist:
        return solo + assist
    return to_number(stats.get("blocks_total"))


@dataclass(frozen=True)
class StatCategory:
    name: str  # Attribute name on PlayerSeasonTotals
    unit: str  # Noun used after a value ("kills", "aces")
    extract: Callable[[Dict[str, Any]], float]


KILLS = StatCategory("kills", "kills", _field("attack_kills"))
DIGS = StatCategory("digs", "digs", _field("digs_successful"))
ACES = StatCategory("aces", "aces", _field("serve_aces"))
SERVE_ERRORS = StatCategory("serve_errors", "serve errors", _field("serve_errors"))
ASSISTS = StatCategory("assists", "assists", _field("setting_assists"))
BLOCKS = StatCategory("blocks", "blocks", _blocks_total)
SETTING_ERRORS = StatCategory("setting_errors", "setting errors", _field("setting_errors"))
ATTACK_ERRORS = StatCategory("attack_errors", "attack errors", _field("attack_errors"))

TRACKED_CATEGORIES: List[StatCategory] = [KILLS, DIGS, ACES, SERVE_ERRORS, ASSISTS, BLOCKS]
EXTENDED_CATEGORIES: List[StatCategory] = [SETTING_ERRORS, ATTACK_ERRORS]
ALL_CATEGORIES: List[StatCategory] = TRACKED_CATEGORIES + EXTENDED_CATEGORIES


def serve_receive(stats: Dict[str, Any]) -> tuple[float, float]:
    """Return (attempts, rating) for one row; both clamped to >= 0."""
    attempts = max(to_number(stats.get(SR_ATTEMPTS_KEY)), 0.0)
    rating = max(to_number(stats.get(SR_RATING_KEY)), 0.0)
    return attempts, rating
