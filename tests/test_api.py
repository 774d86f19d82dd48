"""
HTTP contract tests for the FastAPI app.
"""

import pytest
from fastapi.testclient import TestClient

from volleycoach import api
from volleycoach.config.settings import DEFAULT_FIXTURE_PATH
from volleycoach.core.errors import StoreError


@pytest.fixture
def client(demo_store, settings):
    api.app.dependency_overrides[api.get_settings] = lambda: settings
    api.app.dependency_overrides[api.get_store] = lambda: demo_store
    yield TestClient(api.app)
    api.app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["data_source"] == "fixture"
    assert body["enrichment_enabled"] is False
    assert body["bounds"]["min_passer_attempts"] == 25


@pytest.mark.parametrize("payload", [{}, {"question": ""}, {"question": "   "}])
def test_chat_requires_question(client, payload):
    resp = client.post("/api/chat", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": "question is required"}


@pytest.mark.parametrize("path", ["/api/chat", "/api/stats/query"])
@pytest.mark.parametrize("question", [123, ["record"], {"q": "record"}])
def test_non_string_question_gets_error_shape(client, path, question):
    resp = client.post(path, json={"question": question})
    assert resp.status_code == 400
    assert resp.json() == {"error": "question must be a non-empty string"}


def test_chat_record(client):
    resp = client.post("/api/chat", json={"question": "What's our record?"})
    assert resp.status_code == 200
    assert resp.json() == {"answer": "5-3"}


def test_chat_passer_rating(client):
    resp = client.post("/api/chat", json={"question": "Who is our best passer?"})
    assert resp.status_code == 200
    assert "**Lena Ortiz**" in resp.json()["answer"]


def test_chat_broad_question_without_key_is_deterministic(client):
    resp = client.post("/api/chat", json={"question": "Summarize our season"})
    assert resp.status_code == 200
    answer = resp.json()["answer"]
    assert "Strengths" in answer
    assert "Coastal Elite — losses 2/2" in answer


def test_chat_team_override_scopes_data(client):
    resp = client.post("/api/chat", json={"question": "What's our record?", "team_id": "other-team"})
    assert resp.json() == {"answer": "0-1"}


def test_chat_narrow_store_failure_is_500(settings, failing_store_cls):
    api.app.dependency_overrides[api.get_settings] = lambda: settings
    api.app.dependency_overrides[api.get_store] = lambda: failing_store_cls(fail=("matches",))
    try:
        resp = TestClient(api.app).post("/api/chat", json={"question": "what's our record"})
    finally:
        api.app.dependency_overrides.clear()
    assert resp.status_code == 500
    assert "error" in resp.json()
    assert "Traceback" not in resp.text


def test_chat_broad_store_failure_still_answers(settings, failing_store_cls):
    api.app.dependency_overrides[api.get_settings] = lambda: settings
    api.app.dependency_overrides[api.get_store] = lambda: failing_store_cls(fail=("matches", "stats", "notes"))
    try:
        resp = TestClient(api.app).post("/api/chat", json={"question": "what are our strengths"})
    finally:
        api.app.dependency_overrides.clear()
    assert resp.status_code == 200
    answer = resp.json()["answer"]
    assert "temporarily unavailable" in answer
    assert "Insufficient data" not in answer


def test_unreadable_store_is_500(settings):
    def broken_store():
        raise StoreError("fixture missing")

    api.app.dependency_overrides[api.get_settings] = lambda: settings
    api.app.dependency_overrides[api.get_store] = broken_store
    try:
        resp = TestClient(api.app).post("/api/chat", json={"question": "record?"})
    finally:
        api.app.dependency_overrides.clear()
    assert resp.status_code == 500
    assert resp.json() == {"error": "Season data is temporarily unavailable. Please try again."}


def test_stats_query(client):
    resp = client.post("/api/stats/query", json={"question": "who has the most aces?"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert "Keys selected for this question: serve_aces" in body["facts"]
    top_line = [line for line in body["facts"].splitlines() if line.startswith("Top serve_aces:")][0]
    assert top_line.startswith("Top serve_aces: Nora Diaz=5 | Maya Chen=5")


def test_stats_query_monthly_team_kills(client):
    resp = client.post("/api/stats/query", json={"question": "Month by month team kills"})
    body = resp.json()
    assert body["mode"] == "monthly"
    assert body["facts"].splitlines() == [
        "Month-by-month team attack_kills",
        "2025-09: 29",
        "2025-10: 19",
        "2025-11: 25",
        "2025-12: 7",
    ]


def test_stats_query_leaders_by_category(client):
    resp = client.post("/api/stats/query", json={"question": "top 2 stat leaders by category"})
    body = resp.json()
    assert body["mode"] == "leaders"
    lines = body["facts"].splitlines()
    kills = lines.index("Kills")
    assert lines[kills + 1:kills + 3] == ["1) **Ava Brooks** — 36", "2) **Riley Kim** — 20"]
    assert lines[lines.index("Passer rating") + 1] == "1) **Lena Ortiz** — 2.39 on 53"
    assert lines[-1] == "Team SR (weighted): 2.20 on 117 attempts"


def test_stats_query_roster(client):
    resp = client.post("/api/stats/query", json={"question": "Who is on the roster?"})
    body = resp.json()
    assert body["mode"] == "roster"
    facts = body["facts"]
    assert "**Lena Ortiz** — L" in facts
    assert "**Riley Kim** — OPP" in facts
    assert "Maya Chen is the primary setter" in facts
    assert "Practice focus" not in facts


def test_stats_query_roster_survives_note_failure(settings, failing_store_cls):
    store = failing_store_cls.from_json_file(DEFAULT_FIXTURE_PATH)
    store.fail = {"notes"}
    api.app.dependency_overrides[api.get_settings] = lambda: settings
    api.app.dependency_overrides[api.get_store] = lambda: store
    try:
        resp = TestClient(api.app).post("/api/stats/query", json={"question": "roster"})
    finally:
        api.app.dependency_overrides.clear()
    assert resp.status_code == 200
    assert "**Zoe Patel** — MB" in resp.json()["facts"]
    assert "Notes" not in resp.json()["facts"]


def test_stats_query_requires_question(client):
    resp = client.post("/api/stats/query", json={})
    assert resp.status_code == 400
