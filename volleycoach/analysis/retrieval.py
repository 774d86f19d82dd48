"""
Retrieval Selector: fetch exactly the record sets an intent needs.

Narrow intents pay for one record set and a failed fetch is fatal
(DataUnavailableError). Broad intents fetch matches, stats and notes
concurrently; a failed broad fetch degrades to an empty set.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from volleycoach.analysis.intent import Intent
from volleycoach.config.bounds import DEFAULT_BOUNDS, SystemBounds
from volleycoach.config.settings import TeamScope
from volleycoach.core.errors import DataUnavailableError, StoreError
from volleycoach.core.records import KnowledgeChunk, MatchRecord, PlayerGameStatRecord
from volleycoach.store.base import SeasonStore, clean_search_text

logger = logging.getLogger(__name__)

ROSTER_TAG = "roster"


@dataclass(frozen=True)
class RetrievalPlan:
    matches: bool = False
    stats: bool = False
    notes: bool = False

    def required(self) -> List[str]:
        return [name for name in ("matches", "stats", "notes") if getattr(self, name)]


INTENT_RETRIEVAL_MAP: Dict[Intent, RetrievalPlan] = {
    Intent.WIN_LOSS_RECORD: RetrievalPlan(matches=True),
    Intent.TOUGH_OPPONENTS: RetrievalPlan(matches=True),
    Intent.PASSER_RATING: RetrievalPlan(stats=True),
    Intent.KILLS_LEADER: RetrievalPlan(stats=True),
    Intent.PROJECTED_LINEUP: RetrievalPlan(matches=True, stats=True, notes=True),
    Intent.STRENGTHS_WEAKNESSES: RetrievalPlan(matches=True, stats=True, notes=True),
    Intent.GENERIC_BROAD: RetrievalPlan(matches=True, stats=True, notes=True),
}


def plan_for_intent(intent: Intent) -> RetrievalPlan:
    return INTENT_RETRIEVAL_MAP[intent]


@dataclass
class RetrievedData:
    matches: List[MatchRecord] = field(default_factory=list)
    stat_rows: List[PlayerGameStatRecord] = field(default_factory=list)
    notes: List[KnowledgeChunk] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def fetch_notes(store: SeasonStore, scope: TeamScope, question: str, bounds: SystemBounds = DEFAULT_BOUNDS) -> List[KnowledgeChunk]:
    """Tag-filtered and text-searched notes, deduplicated by identifier.

    A failing search does not discard the tag results.
    """
    chunks = list(store.fetch_notes_by_tag(scope, ROSTER_TAG, bounds.max_roster_notes))
    cleaned = clean_search_text(question)
    if cleaned:
        try:
            chunks.extend(store.search_notes(scope, cleaned, bounds.max_search_notes))
        except StoreError as exc:
            logger.warning("note_search_failed", exc_info=exc)

    seen = set()
    unique: List[KnowledgeChunk] = []
    for chunk in chunks:
        if chunk.chunk_id in seen:
            continue
        seen.add(chunk.chunk_id)
        unique.append(chunk)
    return unique


def _fetch_narrow(store: SeasonStore, scope: TeamScope, plan: RetrievalPlan, bounds: SystemBounds) -> RetrievedData:
    data = RetrievedData()
    try:
        if plan.matches:
            data.matches = store.fetch_matches(scope, bounds.max_matches_fetched)
        if plan.stats:
            data.stat_rows = store.fetch_stat_rows(scope, bounds.max_stat_rows_fetched)
    except StoreError as exc:
        logger.warning("narrow_fetch_failed store=%s", store.name, exc_info=exc)
        raise DataUnavailableError("Season data is temporarily unavailable. Please try again.") from exc
    return data


def _fetch_broad(
    store: SeasonStore,
    scope: TeamScope,
    question: str,
    plan: RetrievalPlan,
    bounds: SystemBounds,
) -> RetrievedData:
    tasks: Dict[str, Callable[[], list]] = {}
    if plan.matches:
        tasks["matches"] = lambda: store.fetch_matches(scope, bounds.max_matches_fetched)
    if plan.stats:
        tasks["stats"] = lambda: store.fetch_stat_rows(scope, bounds.max_stat_rows_fetched)
    if plan.notes:
        tasks["notes"] = lambda: fetch_notes(store, scope, question, bounds)

    data = RetrievedData()
    results: Dict[str, list] = {}
    with ThreadPoolExecutor(max_workers=max(len(tasks), 1)) as pool:
        futures = {name: pool.submit(fn) for name, fn in tasks.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except StoreError as exc:
                logger.warning("broad_fetch_failed part=%s store=%s", name, store.name, exc_info=exc)
                data.failed.append(name)
                results[name] = []

    data.matches = results.get("matches", [])
    data.stat_rows = results.get("stats", [])
    data.notes = results.get("notes", [])
    return data


def retrieve(
    store: SeasonStore,
    scope: TeamScope,
    question: str,
    intent: Intent,
    narrow: bool,
    bounds: SystemBounds = DEFAULT_BOUNDS,
) -> RetrievedData:
    plan = plan_for_intent(intent)
    logger.info("[RETRIEVE] intent=%s narrow=%s sets=%s", intent.value, narrow, plan.required())
    if narrow:
        return _fetch_narrow(store, scope, plan, bounds)
    return _fetch_broad(store, scope, question, plan, bounds)
