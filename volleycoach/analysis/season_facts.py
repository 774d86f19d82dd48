from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from volleycoach.analysis.aggregator import SeasonTotals, aggregate_player_totals
from volleycoach.analysis.match_summary import MatchSummary, summarize_matches
from volleycoach.analysis.monthly import player_passer_ratings_by_month, team_passer_rating_by_month
from volleycoach.analysis.retrieval import RetrievedData
from volleycoach.core.records import KnowledgeChunk

logger = logging.getLogger(__name__)

STORE_TABLES = [("matches", "match_results"), ("stats", "player_game_stats")]


@dataclass
class SeasonFacts:
    """Everything the narrative layer may read for one request."""
    matches: MatchSummary
    totals: SeasonTotals
    notes: List[KnowledgeChunk] = field(default_factory=list)
    passer_rating_by_month: List[Dict[str, float]] = field(default_factory=list)
    passers_by_month: List[Dict[str, object]] = field(default_factory=list)
    unavailable: List[str] = field(default_factory=list)  # Record sets whose fetch failed

    @property
    def has_matches(self) -> bool:
        return self.matches.has_matches()

    @property
    def has_stats(self) -> bool:
        return not self.totals.is_empty()

    def is_empty(self) -> bool:
        return not self.has_matches and not self.has_stats

    def unavailable_tables(self) -> List[str]:
        """Store tables that could not be read, as opposed to tables that are empty."""
        return [table for part, table in STORE_TABLES if part in self.unavailable]


def build_season_facts(data: Optional[RetrievedData]) -> SeasonFacts:
    data = data or RetrievedData()
    totals = aggregate_player_totals(data.stat_rows)
    logger.debug("[AGGREGATE] matches=%s rows_used=%s rows_skipped=%s players=%s",
                 len(data.matches), totals.rows_used, totals.rows_skipped, len(totals.players))
    return SeasonFacts(
        matches=summarize_matches(data.matches),
        totals=totals,
        notes=list(data.notes),
        passer_rating_by_month=team_passer_rating_by_month(data.stat_rows),
        passers_by_month=player_passer_ratings_by_month(data.stat_rows),
        unavailable=list(data.failed),
    )
