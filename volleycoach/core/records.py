from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from volleycoach.stats.normalizer import parse_stats, to_number

UNKNOWN_OPPONENT = "Unknown Opponent"


class MatchResult(str, Enum):
    WIN = "W"
    LOSS = "L"
    UNKNOWN = "UNKNOWN"


def normalize_result(raw: Optional[str]) -> MatchResult:
    """Map textual encodings ("W", "Won", "Win", "L", "Lost", "Loss") to a MatchResult."""
    if not raw:
        return MatchResult.UNKNOWN
    text = str(raw).strip().lower()
    if text == "w" or "won" in text or "win" in text:
        return MatchResult.WIN
    if text == "l" or "lost" in text or "loss" in text:
        return MatchResult.LOSS
    return MatchResult.UNKNOWN


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class MatchRecord:
    match_date: Optional[str]
    opponent: Optional[str]
    result: MatchResult
    set_diff: int = 0
    tournament: Optional[str] = None
    score: Optional[str] = None

    @property
    def opponent_label(self) -> str:
        return self.opponent or UNKNOWN_OPPONENT

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "MatchRecord":
        raw_diff = data.get("set_diff")
        if raw_diff is None and (data.get("sets_won") is not None or data.get("sets_lost") is not None):
            set_diff = to_number(data.get("sets_won")) - to_number(data.get("sets_lost"))
        else:
            set_diff = to_number(raw_diff)
        return MatchRecord(
            match_date=_clean_text(data.get("match_date")),
            opponent=_clean_text(data.get("opponent")),
            result=normalize_result(data.get("result")),
            set_diff=int(set_diff),
            tournament=_clean_text(data.get("tournament")),
            score=_clean_text(data.get("score")),
        )


@dataclass(frozen=True)
class PlayerGameStatRecord:
    player_name: str
    stats: Dict[str, Any] = field(default_factory=dict)
    position: Optional[str] = None
    game_date: Optional[str] = None
    opponent: Optional[str] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PlayerGameStatRecord":
        return PlayerGameStatRecord(
            player_name=str(data.get("player_name") or "").strip(),
            stats=parse_stats(data.get("stats")),
            position=_clean_text(data.get("position")),
            game_date=_clean_text(data.get("game_date")),
            opponent=_clean_text(data.get("opponent")),
        )


@dataclass(frozen=True)
class KnowledgeChunk:
    chunk_id: str
    title: str
    content: str
    tags: FrozenSet[str] = frozenset()

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "KnowledgeChunk":
        title = str(data.get("title") or "").strip()
        content = str(data.get("content") or "").strip()
        chunk_id = data.get("id")
        return KnowledgeChunk(
            chunk_id=str(chunk_id) if chunk_id is not None else f"{title}::{content}",
            title=title,
            content=content,
            tags=frozenset(str(t) for t in (data.get("tags") or [])),
        )
