"""
Question answering pipeline.

question -> classify -> retrieve -> aggregate -> deterministic narrative
(narrow intents stop here) -> optional enrichment for broad intents.
"""
from __future__ import annotations

import logging
from typing import Optional

from volleycoach.analysis.intent import classify_question
from volleycoach.analysis.retrieval import retrieve
from volleycoach.analysis.season_facts import build_season_facts
from volleycoach.analysis.synthesizer_router import AnswerSynthesizer
from volleycoach.config.bounds import DEFAULT_BOUNDS, SystemBounds
from volleycoach.config.settings import Settings, TeamScope
from volleycoach.core.errors import ValidationError
from volleycoach.llm.enrichment import EnrichmentClient, enrich_answer
from volleycoach.narrative import NarrativeResult, compact_facts, render_notes
from volleycoach.store.base import SeasonStore

logger = logging.getLogger(__name__)


def answer_question(
    question: Optional[str],
    store: SeasonStore,
    scope: TeamScope,
    settings: Settings,
    bounds: SystemBounds = DEFAULT_BOUNDS,
    enrichment_client: Optional[EnrichmentClient] = None,
) -> NarrativeResult:
    """Answer one question for one team/season.

    Raises:
        ValidationError: the question is empty.
        DataUnavailableError: a narrow question's data fetch failed.
    """
    text = (question or "").strip()
    if not text:
        raise ValidationError("question is required")

    classification = classify_question(text)
    intent = classification.intent
    logger.info(
        "[QUERY] team=%s season=%s intent=%s narrow=%s matched=%s",
        scope.team_id,
        scope.season,
        intent.value,
        classification.narrow,
        list(classification.matched),
    )

    data = retrieve(store, scope, text, intent, classification.narrow, bounds)
    facts = build_season_facts(data)
    deterministic = AnswerSynthesizer().synthesize(text, intent, facts, bounds=bounds)

    if classification.narrow:
        result = NarrativeResult.deterministic(deterministic, intent)
    elif not settings.enrichment_enabled and enrichment_client is None:
        result = NarrativeResult.deterministic(deterministic, intent)
    elif facts.is_empty():
        logger.info("[ENRICH] skipped reason=no_facts")
        result = NarrativeResult.deterministic(deterministic, intent)
    else:
        result = enrich_answer(
            question=text,
            facts=compact_facts(facts, scope, bounds),
            notes=render_notes(facts.notes, bounds),
            fallback_text=deterministic,
            intent=intent,
            settings=settings,
            bounds=bounds,
            client=enrichment_client,
        )

    logger.info("[ANSWER] intent=%s source=%s chars=%s", intent.value, result.source.value, len(result.text))
    return result
