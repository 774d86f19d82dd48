"""
Answer Synthesizer Router.

Routes intents to their respective deterministic handlers.
"""

from typing import List, Optional

from volleycoach.analysis.intent import Intent
from volleycoach.analysis.intent_handlers import (
    IntentHandler,
    HandlerContext,
    PasserRatingHandler,
    KillsLeaderHandler,
    WinLossRecordHandler,
    ToughOpponentsHandler,
    StrengthsWeaknessesHandler,
    ProjectedLineupHandler,
    GenericBroadHandler,
    INSUFFICIENT_SEASON_MESSAGE,
)
from volleycoach.analysis.season_facts import SeasonFacts
from volleycoach.config.bounds import SystemBounds, DEFAULT_BOUNDS, clip_text


class AnswerSynthesizer:
    """
    Deterministic narrative generator.

    - Divide: Route intent to the matching handler
    - Conquer: Handler composes text from aggregated facts
    - Combine: Clip to the narrative bound, never return empty text
    """

    def __init__(self, handlers: Optional[List[IntentHandler]] = None):
        self.handlers = handlers or self._default_handlers()

    def _default_handlers(self) -> List[IntentHandler]:
        """
        Handlers are tried in order; first match wins.
        Fallback handler must be last.
        """
        return [
            PasserRatingHandler(),
            KillsLeaderHandler(),
            WinLossRecordHandler(),
            ToughOpponentsHandler(),
            StrengthsWeaknessesHandler(),
            ProjectedLineupHandler(),
            # Fallback handler (must be last)
            GenericBroadHandler(),
        ]

    def synthesize(
        self,
        question: str,
        intent: Intent,
        facts: SeasonFacts,
        bounds: SystemBounds = DEFAULT_BOUNDS,
    ) -> str:
        ctx = HandlerContext(question=question, intent=intent, facts=facts, bounds=bounds)

        for handler in self.handlers:
            if handler.can_handle(intent):
                text = handler.process(ctx)
                return clip_text(text, bounds) or INSUFFICIENT_SEASON_MESSAGE

        # Should never reach here (fallback handler handles everything)
        raise RuntimeError(f"No handler found for intent: {intent}")


def generate_narrative(
    question: str,
    intent: Intent,
    facts: SeasonFacts,
    bounds: SystemBounds = DEFAULT_BOUNDS,
) -> str:
    return AnswerSynthesizer().synthesize(question, intent, facts, bounds=bounds)
