from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from volleycoach.analysis.intent import Intent


class AnswerSource(str, Enum):
    ENRICHED = "enriched"
    DETERMINISTIC = "deterministic"


@dataclass(frozen=True)
class NarrativeResult:
    """Internal answer type; both sources resolve to the same {answer} payload."""
    text: str
    source: AnswerSource
    intent: Intent

    @staticmethod
    def deterministic(text: str, intent: Intent) -> "NarrativeResult":
        return NarrativeResult(text=text, source=AnswerSource.DETERMINISTIC, intent=intent)

    @staticmethod
    def enriched(text: str, intent: Intent) -> "NarrativeResult":
        return NarrativeResult(text=text, source=AnswerSource.ENRICHED, intent=intent)
