"""
Environment-driven settings and the request-scoped team/season scope.

Team and season are never process-wide constants: the API builds a
TeamScope per request and passes it to every store and engine call.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_FIXTURE_PATH = Path(__file__).resolve().parent.parent / "fixtures" / "demo_season.json"
DEFAULT_RESPONSES_URL = "https://api.openai.com/v1/responses"


@dataclass(frozen=True)
class TeamScope:
    team_id: str
    season: str
    window_start: Optional[str] = None  # ISO date, inclusive
    window_end_exclusive: Optional[str] = None  # ISO date, exclusive

    def contains(self, iso_date: Optional[str]) -> bool:
        """Window check used by stores that filter in-process."""
        if not iso_date:
            return True
        day = iso_date[:10]
        if self.window_start and day < self.window_start:
            return False
        if self.window_end_exclusive and day >= self.window_end_exclusive:
            return False
        return True


@dataclass(frozen=True)
class Settings:
    data_source: str = "fixture"
    fixture_path: str = str(DEFAULT_FIXTURE_PATH)
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    team_id: str = "demo-team"
    season: str = "2025-26"
    season_start: Optional[str] = "2025-07-01"
    season_end: Optional[str] = "2026-07-01"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_responses_url: str = DEFAULT_RESPONSES_URL
    enrichment_timeout: float = 20.0
    store_timeout: float = 30.0

    @property
    def enrichment_enabled(self) -> bool:
        return bool(self.openai_api_key)

    def scope(self, team_id: Optional[str] = None, season: Optional[str] = None) -> TeamScope:
        return TeamScope(
            team_id=(team_id or self.team_id).strip(),
            season=(season or self.season).strip(),
            window_start=self.season_start or None,
            window_end_exclusive=self.season_end or None,
        )


def load_settings() -> Settings:
    return Settings(
        data_source=(os.getenv("DATA_SOURCE") or "fixture").lower(),
        fixture_path=os.getenv("FIXTURE_PATH") or str(DEFAULT_FIXTURE_PATH),
        supabase_url=os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
        team_id=os.getenv("TEAM_ID", "demo-team"),
        season=os.getenv("SEASON", "2025-26"),
        season_start=os.getenv("SEASON_START", "2025-07-01"),
        season_end=os.getenv("SEASON_END", "2026-07-01"),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        openai_responses_url=os.getenv("OPENAI_RESPONSES_URL", DEFAULT_RESPONSES_URL),
        enrichment_timeout=float(os.getenv("ENRICHMENT_TIMEOUT", "20")),
        store_timeout=float(os.getenv("STORE_HTTP_TIMEOUT", "30")),
    )
