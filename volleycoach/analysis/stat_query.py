"""
Free-form stat leaderboard over raw stat keys.

Works on whatever keys the imported rows carry, so it can answer questions
about fields the recognized categories do not cover.
"""
from __future__ import annotations

import math
import re
from typing import Dict, Iterable, List, Optional, Tuple

from volleycoach.config.settings import TeamScope
from volleycoach.core.records import PlayerGameStatRecord

MAX_SELECTED_KEYS = 8
LEADERBOARD_SIZE = 8
MAX_LISTED_KEYS = 30

SYNONYMS: List[Tuple[re.Pattern, List[str]]] = [
    (re.compile(r"kill|kills|hitting", re.I), ["kills", "k"]),
    (re.compile(r"ace|aces|serv", re.I), ["aces", "ace"]),
    (re.compile(r"block|blocks", re.I), ["blocks", "block"]),
    (re.compile(r"error|errors", re.I), ["errors", "err"]),
    (re.compile(r"assist|assists", re.I), ["assists", "ast"]),
    (re.compile(r"dig|digs", re.I), ["digs", "dig"]),
    (re.compile(r"attempt|attempts", re.I), ["attempts", "att"]),
]


def numeric_value(value) -> Optional[float]:
    """Strict parse: None for blanks, booleans and non-numeric text."""
    if value is None or isinstance(value, bool):
        return None
    try:
        text = str(value).strip()
        if not text:
            return None
        number = float(text)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def collect_keys(rows: Iterable[PlayerGameStatRecord]) -> List[str]:
    keys = set()
    for row in rows:
        keys.update(row.stats.keys())
    return sorted(keys)


def pick_keys_from_question(all_keys: List[str], question: str) -> List[str]:
    q = question.lower()
    selected: List[str] = [k for k in all_keys if k.lower() in q]

    for pattern, candidates in SYNONYMS:
        if not pattern.search(question):
            continue
        for candidate in candidates:
            for key in all_keys:
                if candidate in key.lower() and key not in selected:
                    selected.append(key)
    return selected[:MAX_SELECTED_KEYS]


def numeric_keys(all_keys: List[str], rows: List[PlayerGameStatRecord]) -> List[str]:
    """Keys with at least 3 numeric values (sampling stops at 5 hits)."""
    picked: List[str] = []
    for key in all_keys:
        hits = 0
        for row in rows:
            if numeric_value(row.stats.get(key)) is not None:
                hits += 1
            if hits >= 5:
                break
        if hits >= 3:
            picked.append(key)
        if len(picked) >= MAX_SELECTED_KEYS:
            break
    return picked


def totals_by_player(rows: Iterable[PlayerGameStatRecord], keys: List[str]) -> Dict[str, Dict[str, float]]:
    totals: Dict[str, Dict[str, float]] = {}
    for row in rows:
        player = (row.player_name or "").strip()
        if not player:
            continue
        bucket = totals.setdefault(player, {})
        for key in keys:
            number = numeric_value(row.stats.get(key))
            if number is None:
                continue
            bucket[key] = bucket.get(key, 0.0) + number
    return totals


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def build_stat_facts(
    rows: List[PlayerGameStatRecord],
    question: str,
    scope: TeamScope,
    top_n: int = LEADERBOARD_SIZE,
) -> str:
    all_keys = collect_keys(rows)
    keys = pick_keys_from_question(all_keys, question) or numeric_keys(all_keys, rows)
    totals = totals_by_player(rows, keys)

    listed = ", ".join(all_keys[:MAX_LISTED_KEYS])
    if len(all_keys) > MAX_LISTED_KEYS:
        listed += ", ..."
    lines = [
        f"Team: {scope.team_id} | Season: {scope.season}",
        f"Available stat keys (sample): {listed}",
        f"Keys selected for this question: {', '.join(keys) or '(none)'}",
    ]
    for key in keys:
        board = sorted(
            ((player, values.get(key, 0.0)) for player, values in totals.items()),
            key=lambda item: -item[1],
        )[:top_n]
        lines.append(f"Top {key}: " + " | ".join(f"{player}={_fmt(value)}" for player, value in board))
    return "\n".join(lines)
