"""
Enrichment Orchestrator: one call to a generative-text service, with the
deterministic narrative as the answer whenever that call does not produce text.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from volleycoach.analysis.intent import Intent
from volleycoach.config.bounds import DEFAULT_BOUNDS, SystemBounds, clip_text
from volleycoach.config.settings import Settings
from volleycoach.core.errors import EnrichmentFailure
from volleycoach.narrative.narrative_types import NarrativeResult

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a volleyball coaching assistant for one team and one season. "
    "Answer the coach's question using ONLY the JSON facts and notes provided. "
    "If a fact needed for the answer is missing, say \"insufficient data\" and name the missing field. "
    "Bold every player name with **double asterisks**. "
    "Do not include citations, source markers or reference brackets. "
    "Prefer short sections and numbered lists over long paragraphs."
)


def extract_output_text(payload: Any) -> str:
    """Concatenate output_text segments of a responses-API body.

    Falls back to a flat ``output_text`` field when no segment is present.
    """
    if not isinstance(payload, dict):
        return ""
    parts = []
    for item in payload.get("output") or []:
        if not isinstance(item, dict):
            continue
        for content in item.get("content") or []:
            if isinstance(content, dict) and content.get("type") == "output_text":
                text = content.get("text")
                if isinstance(text, str):
                    parts.append(text)
    joined = "".join(parts).strip()
    if joined:
        return joined
    flat = payload.get("output_text")
    return flat.strip() if isinstance(flat, str) else ""


class EnrichmentClient:
    def __init__(self, settings: Settings, bounds: SystemBounds = DEFAULT_BOUNDS, session=None):
        self.settings = settings
        self.bounds = bounds
        self.session = session or requests

    def build_request(self, question: str, facts: Dict[str, Any], notes: str) -> Dict[str, Any]:
        user_payload = {"question": question, "facts": facts, "notes": notes}
        return {
            "model": self.settings.openai_model,
            "max_output_tokens": self.bounds.max_output_tokens,
            "input": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": json.dumps(user_payload, ensure_ascii=False)},
            ],
        }

    def complete(self, question: str, facts: Dict[str, Any], notes: str = "") -> str:
        """Single attempt, no retry. Any failure raises EnrichmentFailure."""
        api_key = self.settings.openai_api_key
        if not api_key:
            raise EnrichmentFailure("no_api_key")
        try:
            resp = self.session.post(
                self.settings.openai_responses_url,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                },
                json=self.build_request(question, facts, notes),
                timeout=self.settings.enrichment_timeout,
            )
            logger.debug("[ENRICH] status=%s", resp.status_code)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise EnrichmentFailure(f"request_failed: {exc.__class__.__name__}") from exc
        except ValueError as exc:
            raise EnrichmentFailure("invalid_json") from exc

        text = extract_output_text(data)
        if not text:
            raise EnrichmentFailure("empty_output")
        return text


def enrich_answer(
    question: str,
    facts: Dict[str, Any],
    notes: str,
    fallback_text: str,
    intent: Intent,
    settings: Settings,
    bounds: SystemBounds = DEFAULT_BOUNDS,
    client: Optional[EnrichmentClient] = None,
) -> NarrativeResult:
    """Prefer enriched text; any EnrichmentFailure resolves to ``fallback_text``."""
    client = client or EnrichmentClient(settings, bounds)
    try:
        text = client.complete(question, facts, notes)
    except EnrichmentFailure as exc:
        logger.warning("[ENRICH] fallback to deterministic narrative reason=%s", exc)
        return NarrativeResult.deterministic(fallback_text, intent)
    return NarrativeResult.enriched(clip_text(text, bounds), intent)
