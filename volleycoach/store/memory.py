from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from volleycoach.config.settings import TeamScope
from volleycoach.core.errors import StoreError
from volleycoach.core.records import KnowledgeChunk, MatchRecord, PlayerGameStatRecord
from volleycoach.store.base import SeasonStore

logger = logging.getLogger(__name__)

_MIN_SEARCH_TOKEN = 3


def _team_matches(row: Dict[str, Any], scope: TeamScope) -> bool:
    team = row.get("team_id")
    return team is None or str(team) == scope.team_id


class InMemoryStore(SeasonStore):
    """Store backed by plain row dicts, e.g. a JSON fixture file.

    Rows keep the persistent-store column names (match_date, player_name,
    stats, tags...) and are filtered in-process the way the hosted store
    filters server-side.
    """

    name = "fixture"

    def __init__(
        self,
        matches: Optional[List[Dict[str, Any]]] = None,
        stat_rows: Optional[List[Dict[str, Any]]] = None,
        notes: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        self.matches = list(matches or [])
        self.stat_rows = list(stat_rows or [])
        self.notes = list(notes or [])

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InMemoryStore":
        path = Path(path)
        if not path.exists():
            raise StoreError(f"Fixture not found at {path}")
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise StoreError(f"Fixture unreadable: {path}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Fixture must be a JSON object: {path}")
        logger.info(
            "[STORE] fixture loaded path=%s matches=%s stat_rows=%s notes=%s",
            path,
            len(data.get("match_results") or []),
            len(data.get("player_game_stats") or []),
            len(data.get("knowledge_chunks") or []),
        )
        return cls(
            matches=data.get("match_results") or [],
            stat_rows=data.get("player_game_stats") or [],
            notes=data.get("knowledge_chunks") or [],
        )

    def fetch_matches(self, scope: TeamScope, limit: int) -> List[MatchRecord]:
        rows = [
            r for r in self.matches
            if _team_matches(r, scope) and scope.contains(r.get("match_date"))
        ]
        rows.sort(key=lambda r: r.get("match_date") or "")
        return [MatchRecord.from_dict(r) for r in rows[:limit]]

    def fetch_stat_rows(self, scope: TeamScope, limit: int) -> List[PlayerGameStatRecord]:
        rows = [
            r for r in self.stat_rows
            if _team_matches(r, scope) and scope.contains(r.get("game_date"))
        ]
        rows.sort(key=lambda r: r.get("game_date") or "", reverse=True)
        return [PlayerGameStatRecord.from_dict(r) for r in rows[:limit]]

    def fetch_notes_by_tag(self, scope: TeamScope, tag: str, limit: int) -> List[KnowledgeChunk]:
        rows = [r for r in self.notes if _team_matches(r, scope) and tag in (r.get("tags") or [])]
        return [KnowledgeChunk.from_dict(r) for r in rows[:limit]]

    def search_notes(self, scope: TeamScope, text: str, limit: int) -> List[KnowledgeChunk]:
        tokens = [t.lower() for t in (text or "").split() if len(t) >= _MIN_SEARCH_TOKEN]
        if not tokens:
            return []
        out: List[KnowledgeChunk] = []
        for row in self.notes:
            if not _team_matches(row, scope):
                continue
            haystack = f"{row.get('title') or ''} {row.get('content') or ''}".lower()
            if any(t in haystack for t in tokens):
                out.append(KnowledgeChunk.from_dict(row))
            if len(out) >= limit:
                break
        return out
