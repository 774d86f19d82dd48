import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from volleycoach.config.settings import TeamScope
from volleycoach.core.errors import StoreError
from volleycoach.core.records import KnowledgeChunk, MatchRecord, PlayerGameStatRecord
from volleycoach.store.base import SeasonStore

logger = logging.getLogger(__name__)

MATCH_COLUMNS = "match_date,tournament,opponent,result,score,round,sets_won,sets_lost,set_diff"
STAT_COLUMNS = "player_name,position,game_date,opponent,stats"
NOTE_COLUMNS = "id,title,content,tags"

Params = List[Tuple[str, str]]


class SupabaseStore(SeasonStore):
    """Reads the hosted Postgres tables through the PostgREST HTTP interface.

    Pure IO: one GET per call, no retry, no caching. Every failure surfaces as
    StoreError so the pipeline can decide whether it is fatal.
    """

    name = "supabase"

    def __init__(self, base_url: str, api_key: str, timeout: float = 30.0, session: Optional[requests.Session] = None):
        if not base_url or not api_key:
            raise StoreError("Supabase store requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, table: str, params: Params) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/rest/v1/{table}"
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        try:
            resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
            logger.debug(
                "Supabase request",
                extra={"table": table, "status_code": resp.status_code, "body_preview": resp.text[:200]},
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.RequestException as exc:
            raise StoreError(f"{table}: request failed") from exc
        except ValueError as exc:
            raise StoreError(f"{table}: response was not JSON") from exc
        if not isinstance(data, list):
            raise StoreError(f"{table}: unexpected response shape")
        return data

    @staticmethod
    def _window(column: str, scope: TeamScope) -> Params:
        params: Params = []
        if scope.window_start:
            params.append((column, f"gte.{scope.window_start}"))
        if scope.window_end_exclusive:
            params.append((column, f"lt.{scope.window_end_exclusive}"))
        return params

    def fetch_matches(self, scope: TeamScope, limit: int) -> List[MatchRecord]:
        params: Params = [
            ("select", MATCH_COLUMNS),
            ("team_id", f"eq.{scope.team_id}"),
            *self._window("match_date", scope),
            ("order", "match_date.asc"),
            ("limit", str(limit)),
        ]
        return [MatchRecord.from_dict(r) for r in self._get("match_results", params)]

    def fetch_stat_rows(self, scope: TeamScope, limit: int) -> List[PlayerGameStatRecord]:
        params: Params = [
            ("select", STAT_COLUMNS),
            ("team_id", f"eq.{scope.team_id}"),
            *self._window("game_date", scope),
            ("order", "game_date.desc"),
            ("limit", str(limit)),
        ]
        return [PlayerGameStatRecord.from_dict(r) for r in self._get("player_game_stats", params)]

    def fetch_notes_by_tag(self, scope: TeamScope, tag: str, limit: int) -> List[KnowledgeChunk]:
        params: Params = [
            ("select", NOTE_COLUMNS),
            ("team_id", f"eq.{scope.team_id}"),
            ("tags", f"cs.{{{tag}}}"),
            ("limit", str(limit)),
        ]
        return [KnowledgeChunk.from_dict(r) for r in self._get("knowledge_chunks", params)]

    def search_notes(self, scope: TeamScope, text: str, limit: int) -> List[KnowledgeChunk]:
        if not text.strip():
            return []
        params: Params = [
            ("select", NOTE_COLUMNS),
            ("team_id", f"eq.{scope.team_id}"),
            ("tsv", f"wfts.{text}"),
            ("limit", str(limit)),
        ]
        return [KnowledgeChunk.from_dict(r) for r in self._get("knowledge_chunks", params)]
