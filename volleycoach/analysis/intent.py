"""
Intent Classifier: keyword/phrase matching from question text to an Intent.

Narrow intents are checked before broad ones, so a question that mentions
both "lineup" and "record" is answered as a record question and only the
match data is fetched.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List


class Intent(str, Enum):
    PASSER_RATING = "PASSER_RATING"
    KILLS_LEADER = "KILLS_LEADER"
    WIN_LOSS_RECORD = "WIN_LOSS_RECORD"
    TOUGH_OPPONENTS = "TOUGH_OPPONENTS"
    PROJECTED_LINEUP = "PROJECTED_LINEUP"
    STRENGTHS_WEAKNESSES = "STRENGTHS_WEAKNESSES"
    GENERIC_BROAD = "GENERIC_BROAD"


NARROW_INTENTS = frozenset(
    {
        Intent.PASSER_RATING,
        Intent.KILLS_LEADER,
        Intent.WIN_LOSS_RECORD,
        Intent.TOUGH_OPPONENTS,
    }
)

PASSER_KEYWORDS = [
    "passer rating",
    "passing rating",
    "pass rating",
    "serve receive",
    "serve-receive",
    "sr rating",
    "best passer",
]
KILL_KEYWORDS = ["kill"]
LEADER_KEYWORDS = ["lead", "leader", "most", "top"]
RECORD_KEYWORDS = ["record"]
TOUGH_KEYWORDS = ["tough", "trouble", "hardest"]
LINEUP_KEYWORDS = ["lineup", "line-up", "line up", "rotation", "starting six", "starting 6", "6-2", "5-1"]
STRENGTH_KEYWORDS = ["strength", "weakness"]
BROAD_SIGNAL_KEYWORDS = [
    "summarize",
    "summary",
    "recap",
    "season",
    "improve",
    "improvement",
    "strategy",
    "plan",
    "key moments",
    "overall",
]


@dataclass(frozen=True)
class IntentClassification:
    intent: Intent
    narrow: bool
    matched: List[str] = field(default_factory=list)

    @property
    def broad(self) -> bool:
        return not self.narrow


def _hits(text: str, keywords: List[str]) -> List[str]:
    # Keywords must start a word: "kill" matches "kills" but not "skill"
    return [k for k in keywords if re.search(r"\b" + re.escape(k), text)]


def classify_question(question: str) -> IntentClassification:
    """Total, pure mapping; every string (including "") gets exactly one intent."""
    q = (question or "").lower()

    def result(intent: Intent, matched: List[str]) -> IntentClassification:
        return IntentClassification(intent=intent, narrow=intent in NARROW_INTENTS, matched=matched)

    passer = _hits(q, PASSER_KEYWORDS)
    if passer:
        return result(Intent.PASSER_RATING, passer)

    kills = _hits(q, KILL_KEYWORDS)
    leaders = _hits(q, LEADER_KEYWORDS)
    if kills and leaders:
        return result(Intent.KILLS_LEADER, kills + leaders)

    record = _hits(q, RECORD_KEYWORDS)
    if record:
        return result(Intent.WIN_LOSS_RECORD, record)
    if _hits(q, ["win"]) and _hits(q, ["loss"]):
        return result(Intent.WIN_LOSS_RECORD, ["win", "loss"])

    tough = _hits(q, TOUGH_KEYWORDS)
    if tough:
        return result(Intent.TOUGH_OPPONENTS, tough)

    lineup = _hits(q, LINEUP_KEYWORDS)
    if lineup:
        return result(Intent.PROJECTED_LINEUP, lineup)

    strengths = _hits(q, STRENGTH_KEYWORDS)
    if strengths:
        return result(Intent.STRENGTHS_WEAKNESSES, strengths)

    return result(Intent.GENERIC_BROAD, _hits(q, BROAD_SIGNAL_KEYWORDS))
