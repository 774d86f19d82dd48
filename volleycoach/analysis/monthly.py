from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from volleycoach.core.records import PlayerGameStatRecord
from volleycoach.stats.categories import BLOCKS, serve_receive
from volleycoach.stats.normalizer import to_number

BLOCKS_TOTAL_KEY = "blocks_total"


def month_key(iso_date: str) -> str:
    # "2025-11-09" -> "2025-11"
    if not iso_date or len(iso_date) < 7:
        return "unknown"
    return iso_date[:7]


def team_passer_rating_by_month(records: Iterable[PlayerGameStatRecord]) -> List[Dict[str, float]]:
    """Attempts-weighted team passer rating per calendar month, oldest first.

    Rows without a game date or without serve-receive attempts are ignored.
    """
    buckets: Dict[str, List[float]] = {}
    for record in records:
        if not (record.player_name or "").strip() or not record.game_date:
            continue
        attempts, rating = serve_receive(record.stats or {})
        if attempts <= 0:
            continue
        bucket = buckets.setdefault(month_key(record.game_date), [0.0, 0.0])
        bucket[0] += attempts
        bucket[1] += rating * attempts

    return [
        {"month": month, "rating": round(weighted / attempts, 2), "attempts": attempts}
        for month, (attempts, weighted) in sorted(buckets.items())
    ]


def stat_value(stats: Dict[str, object], key: str) -> float:
    """Raw stat lookup; ``blocks_total`` is derived from solo + assist when present."""
    if key == BLOCKS_TOTAL_KEY:
        return max(BLOCKS.extract(stats), 0.0)
    return max(to_number(stats.get(key)), 0.0)


def team_totals_by_month(records: Iterable[PlayerGameStatRecord], key: str) -> List[Dict[str, float]]:
    """Team sum of one raw stat key per month, for every month that has dated rows."""
    buckets: Dict[str, float] = {}
    for record in records:
        if not (record.player_name or "").strip() or not record.game_date:
            continue
        month = month_key(record.game_date)
        buckets[month] = buckets.get(month, 0.0) + stat_value(record.stats or {}, key)
    return [{"month": month, "value": value} for month, value in sorted(buckets.items())]


def player_passer_ratings_by_month(
    records: Iterable[PlayerGameStatRecord],
    top_n: Optional[int] = None,
) -> List[Dict[str, object]]:
    """Per-month passer ranking: attempts-weighted rating per player, best first.

    Equal ratings keep first-appearance order within the month.
    """
    buckets: Dict[str, Dict[str, List[float]]] = {}
    for record in records:
        player = (record.player_name or "").strip()
        if not player or not record.game_date:
            continue
        attempts, rating = serve_receive(record.stats or {})
        if attempts <= 0:
            continue
        month = buckets.setdefault(month_key(record.game_date), {})
        bucket = month.setdefault(player, [0.0, 0.0])
        bucket[0] += attempts
        bucket[1] += rating * attempts

    out: List[Dict[str, object]] = []
    for month, players in sorted(buckets.items()):
        ranked = sorted(
            (
                {"player": player, "rating": round(weighted / attempts, 2), "attempts": attempts}
                for player, (attempts, weighted) in players.items()
            ),
            key=lambda r: -r["rating"],
        )
        out.append({"month": month, "players": ranked if top_n is None else ranked[:top_n]})
    return out
