"""
Aggregator: folds per-game stat records into per-player season totals.

Serve-receive is accumulated as (attempts, rating x attempts) per row so the
season rating is an attempts-weighted average, computed once at read time.
Totals are rebuilt per request and never cached.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from volleycoach.core.records import PlayerGameStatRecord
from volleycoach.stats.categories import ALL_CATEGORIES, StatCategory, serve_receive


@dataclass
class PlayerSeasonTotals:
    player: str
    kills: float = 0.0
    digs: float = 0.0
    aces: float = 0.0
    serve_errors: float = 0.0
    assists: float = 0.0
    blocks: float = 0.0
    setting_errors: float = 0.0
    attack_errors: float = 0.0
    sr_attempts: float = 0.0
    sr_weighted_sum: float = 0.0
    raw_rating_sum: float = 0.0  # Ratings seen on rows without attempts
    raw_rating_rows: int = 0

    def value(self, category: StatCategory) -> float:
        return getattr(self, category.name)

    @property
    def passer_rating(self) -> Optional[float]:
        if self.sr_attempts > 0:
            return self.sr_weighted_sum / self.sr_attempts
        if self.raw_rating_rows:
            return self.raw_rating_sum / self.raw_rating_rows
        return None


@dataclass(frozen=True)
class LeaderEntry:
    player: str
    value: float


@dataclass(frozen=True)
class PasserEntry:
    player: str
    rating: float
    attempts: float


@dataclass
class SeasonTotals:
    """Mapping of player name -> totals, in first-appearance order."""
    players: Dict[str, PlayerSeasonTotals] = field(default_factory=dict)
    positions: Dict[str, str] = field(default_factory=dict)
    rows_used: int = 0
    rows_skipped: int = 0

    def is_empty(self) -> bool:
        return not self.players


def aggregate_player_totals(records: Iterable[PlayerGameStatRecord]) -> SeasonTotals:
    totals = SeasonTotals()
    position_dates: Dict[str, str] = {}
    for record in records:
        player = (record.player_name or "").strip()
        if not player:
            totals.rows_skipped += 1
            continue

        entry = totals.players.get(player)
        if entry is None:
            entry = PlayerSeasonTotals(player=player)
            totals.players[player] = entry

        # Latest dated position wins; undated rows only fill a gap
        if record.position:
            day = record.game_date or ""
            if player not in totals.positions or day >= position_dates[player]:
                totals.positions[player] = record.position
                position_dates[player] = day

        stats = record.stats or {}
        for category in ALL_CATEGORIES:
            amount = max(category.extract(stats), 0.0)
            if amount:
                setattr(entry, category.name, entry.value(category) + amount)

        attempts, rating = serve_receive(stats)
        if attempts > 0:
            entry.sr_attempts += attempts
            entry.sr_weighted_sum += rating * attempts
        elif rating > 0:
            entry.raw_rating_sum += rating
            entry.raw_rating_rows += 1

        totals.rows_used += 1
    return totals


def top_by_stat(totals: SeasonTotals, category: StatCategory, n: Optional[int] = None) -> List[LeaderEntry]:
    """Players ranked by a category total; zero totals never rank.

    Ties keep first-appearance order (sorted() is stable).
    """
    rows = [
        LeaderEntry(player=p.player, value=p.value(category))
        for p in totals.players.values()
        if p.value(category) > 0
    ]
    rows = sorted(rows, key=lambda r: -r.value)
    return rows if n is None else rows[:n]


def leader(totals: SeasonTotals, category: StatCategory) -> Optional[LeaderEntry]:
    ranked = top_by_stat(totals, category, 1)
    return ranked[0] if ranked else None


def ranked_passers(totals: SeasonTotals, min_attempts: float = 0) -> List[PasserEntry]:
    rows = [
        PasserEntry(player=p.player, rating=p.passer_rating, attempts=p.sr_attempts)
        for p in totals.players.values()
        if p.sr_attempts > 0 and p.sr_attempts >= min_attempts
    ]
    return sorted(rows, key=lambda r: -r.rating)


def best_passer(totals: SeasonTotals, min_attempts: float) -> Optional[PasserEntry]:
    """Highest weighted rating among eligible players.

    On equal ratings the player who appeared first in the input wins; this is
    an accepted tie-break, not a total order.
    """
    best: Optional[PasserEntry] = None
    for p in totals.players.values():
        if p.sr_attempts <= 0 or p.sr_attempts < min_attempts:
            continue
        rating = p.passer_rating
        if best is None or rating > best.rating:
            best = PasserEntry(player=p.player, rating=rating, attempts=p.sr_attempts)
    return best


def team_passer_rating(totals: SeasonTotals) -> Optional[PasserEntry]:
    attempts = sum(p.sr_attempts for p in totals.players.values())
    if attempts <= 0:
        return None
    weighted = sum(p.sr_weighted_sum for p in totals.players.values())
    return PasserEntry(player="TEAM", rating=weighted / attempts, attempts=attempts)
