"""
Projected lineup selection from season totals.

Slots are filled by fixed priority (setter, passer, two top hitters, top
server, top blocker), skipping anyone already chosen, then backfilled from
ranked leaderboards until the lineup is full or candidates run out.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from volleycoach.analysis.aggregator import (
    LeaderEntry,
    PasserEntry,
    SeasonTotals,
    best_passer,
    top_by_stat,
)
from volleycoach.config.bounds import DEFAULT_BOUNDS, SystemBounds
from volleycoach.stats.categories import ACES, ASSISTS, BLOCKS, DIGS, KILLS, SERVE_ERRORS, StatCategory

BACKFILL_ORDER: List[StatCategory] = [DIGS, KILLS, ACES, BLOCKS, ASSISTS]


@dataclass
class LineupProjection:
    starters: List[str] = field(default_factory=list)
    setter: Optional[LeaderEntry] = None
    passer: Optional[PasserEntry] = None
    hitters: List[LeaderEntry] = field(default_factory=list)
    server: Optional[LeaderEntry] = None
    blocker: Optional[LeaderEntry] = None
    next_hitter: Optional[LeaderEntry] = None
    alternate_defender: Optional[LeaderEntry] = None
    backup_setter: Optional[LeaderEntry] = None


def _first_outside(ranked: List[LeaderEntry], excluded: set) -> Optional[LeaderEntry]:
    for entry in ranked:
        if entry.player not in excluded:
            return entry
    return None


def _sr_attempts_ranked(totals: SeasonTotals) -> List[LeaderEntry]:
    rows = [LeaderEntry(p.player, p.sr_attempts) for p in totals.players.values() if p.sr_attempts > 0]
    return sorted(rows, key=lambda r: -r.value)


def project_lineup(totals: SeasonTotals, bounds: SystemBounds = DEFAULT_BOUNDS) -> LineupProjection:
    size = bounds.lineup_size
    projection = LineupProjection()
    chosen: List[str] = []

    def take(player: Optional[str]) -> None:
        if player and player not in chosen and len(chosen) < size:
            chosen.append(player)

    setters = top_by_stat(totals, ASSISTS)
    hitters = top_by_stat(totals, KILLS)
    servers = top_by_stat(totals, ACES)
    blockers = top_by_stat(totals, BLOCKS)
    diggers = top_by_stat(totals, DIGS)

    projection.setter = setters[0] if setters else None
    projection.passer = best_passer(totals, bounds.min_passer_attempts)
    projection.hitters = hitters[:2]
    projection.server = servers[0] if servers else None
    projection.blocker = blockers[0] if blockers else None

    take(projection.setter.player if projection.setter else None)
    take(projection.passer.player if projection.passer else None)
    for hitter in projection.hitters:
        take(hitter.player)
    take(projection.server.player if projection.server else None)
    take(projection.blocker.player if projection.blocker else None)

    backfill: List[List[LeaderEntry]] = [top_by_stat(totals, c) for c in BACKFILL_ORDER]
    backfill.append(_sr_attempts_ranked(totals))
    backfill.append(top_by_stat(totals, SERVE_ERRORS))
    for ranked in backfill:
        for entry in ranked:
            if len(chosen) >= size:
                break
            take(entry.player)

    projection.starters = chosen

    lineup = set(chosen)
    projection.next_hitter = _first_outside(hitters, lineup)
    passer_name = projection.passer.player if projection.passer else None
    projection.alternate_defender = _first_outside(diggers, lineup | {passer_name})
    setter_name = projection.setter.player if projection.setter else None
    projection.backup_setter = _first_outside(setters, lineup | {setter_name})
    return projection
