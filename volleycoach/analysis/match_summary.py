"""
Query-time match aggregation: season record and per-opponent breakdown.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from volleycoach.core.records import MatchRecord, MatchResult


@dataclass
class OpponentSummary:
    opponent: str
    matches: int = 0
    wins: int = 0
    losses: int = 0
    set_diff: int = 0


@dataclass
class SeasonRecord:
    wins: int = 0
    losses: int = 0
    matches: int = 0  # Includes matches whose result could not be labeled

    def tally(self) -> str:
        return f"{self.wins}-{self.losses}"


@dataclass
class MatchSummary:
    record: SeasonRecord
    opponents: Dict[str, OpponentSummary]

    def has_matches(self) -> bool:
        return self.record.matches > 0


def summarize_matches(matches: Iterable[MatchRecord]) -> MatchSummary:
    record = SeasonRecord()
    opponents: Dict[str, OpponentSummary] = {}
    for match in matches:
        opp = match.opponent_label
        summary = opponents.setdefault(opp, OpponentSummary(opponent=opp))
        summary.matches += 1
        summary.set_diff += match.set_diff
        record.matches += 1
        if match.result == MatchResult.WIN:
            record.wins += 1
            summary.wins += 1
        elif match.result == MatchResult.LOSS:
            record.losses += 1
            summary.losses += 1
    return MatchSummary(record=record, opponents=opponents)


def tough_opponents(summary: MatchSummary, limit: Optional[int] = None) -> List[OpponentSummary]:
    """Opponents with at least one loss, most losses first.

    Equal loss counts rank by cumulative set differential ascending, so the
    opponent the team lost to more decisively comes first.
    """
    ranked = sorted(
        (o for o in summary.opponents.values() if o.losses > 0),
        key=lambda o: (-o.losses, o.set_diff),
    )
    return ranked if limit is None else ranked[:limit]
