from .narrative_types import AnswerSource, NarrativeResult
from .facts import compact_facts
from .notes import render_notes

__all__ = ["AnswerSource", "NarrativeResult", "compact_facts", "render_notes"]
