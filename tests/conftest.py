from __future__ import annotations

import pytest

from volleycoach.config.settings import DEFAULT_FIXTURE_PATH, Settings, TeamScope
from volleycoach.store import InMemoryStore


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """Keep enrichment and store settings independent of the developer's shell.

    Tests that need enrichment set OPENAI_API_KEY explicitly.
    """
    for name in (
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "OPENAI_RESPONSES_URL",
        "DATA_SOURCE",
        "FIXTURE_PATH",
        "TEAM_ID",
        "SEASON",
        "SEASON_START",
        "SEASON_END",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def scope(settings) -> TeamScope:
    return settings.scope()


@pytest.fixture
def scenario_match_rows():
    return [
        {"match_date": "2025-09-01", "opponent": "OpponentB", "result": "W", "set_diff": 2},
        {"match_date": "2025-09-08", "opponent": "OpponentA", "result": "L", "set_diff": -1},
        {"match_date": "2025-09-15", "opponent": "OpponentA", "result": "L", "set_diff": -3},
    ]


@pytest.fixture
def passer_rows():
    return [
        {
            "game_date": "2025-10-01",
            "player_name": "PlayerA",
            "stats": {"serve_receive_attempts": 30, "serve_receive_passing_rating": 2.1},
        },
        {
            "game_date": "2025-10-01",
            "player_name": "PlayerB",
            "stats": {"serve_receive_attempts": 10, "serve_receive_passing_rating": 2.8},
        },
    ]


@pytest.fixture
def demo_store() -> InMemoryStore:
    return InMemoryStore.from_json_file(DEFAULT_FIXTURE_PATH)


class FailingStore(InMemoryStore):
    """Store whose selected parts raise StoreError."""

    name = "failing"

    def __init__(self, fail=("matches", "stats", "notes"), **kwargs):
        super().__init__(**kwargs)
        self.fail = set(fail)
        self.calls = []

    def _maybe_fail(self, part):
        from volleycoach.core.errors import StoreError

        self.calls.append(part)
        if part in self.fail:
            raise StoreError(f"{part} down")

    def fetch_matches(self, scope, limit):
        self._maybe_fail("matches")
        return super().fetch_matches(scope, limit)

    def fetch_stat_rows(self, scope, limit):
        self._maybe_fail("stats")
        return super().fetch_stat_rows(scope, limit)

    def fetch_notes_by_tag(self, scope, tag, limit):
        self._maybe_fail("notes")
        return super().fetch_notes_by_tag(scope, tag, limit)


@pytest.fixture
def failing_store_cls():
    return FailingStore
