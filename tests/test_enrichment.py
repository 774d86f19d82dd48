"""
Tests for the enrichment orchestrator and its fallback to the deterministic narrative.
"""

import json

import pytest
import requests

from volleycoach.analysis.intent import Intent, classify_question
from volleycoach.analysis.retrieval import retrieve
from volleycoach.analysis.season_facts import build_season_facts
from volleycoach.analysis.synthesizer_router import generate_narrative
from volleycoach.core.errors import EnrichmentFailure
from volleycoach.llm.enrichment import SYSTEM_INSTRUCTION, EnrichmentClient, enrich_answer, extract_output_text
from volleycoach.narrative import AnswerSource
from volleycoach.service import answer_question


class FakeResponse:
    def __init__(self, payload=None, status_code=200, raw=None):
        self.payload = payload
        self.status_code = status_code
        self.raw = raw

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.raw is not None:
            return json.loads(self.raw)
        return self.payload


def _responses_body(text):
    return {"output": [{"type": "message", "content": [{"type": "output_text", "text": text}]}]}


@pytest.fixture
def enabled_settings(settings):
    from dataclasses import replace

    return replace(settings, openai_api_key="sk-test")


def test_extract_output_text():
    body = {
        "output": [
            {"type": "reasoning", "content": []},
            {"content": [{"type": "output_text", "text": "Hello "}, {"type": "refusal", "text": "x"}]},
            {"content": [{"type": "output_text", "text": "coach"}]},
        ]
    }
    assert extract_output_text(body) == "Hello coach"
    assert extract_output_text({"output_text": " flat "}) == "flat"
    assert extract_output_text({"output": []}) == ""
    assert extract_output_text(None) == ""


def test_request_carries_instruction_and_payload(enabled_settings, monkeypatch):
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured.update(url=url, headers=headers, body=json, timeout=timeout)
        return FakeResponse(_responses_body("Enriched"))

    monkeypatch.setattr(requests, "post", fake_post)
    text = EnrichmentClient(enabled_settings).complete("q?", {"record": None}, "notes")

    assert text == "Enriched"
    assert captured["url"] == enabled_settings.openai_responses_url
    assert captured["headers"]["Authorization"] == "Bearer sk-test"
    assert captured["timeout"] == enabled_settings.enrichment_timeout
    assert captured["body"]["max_output_tokens"] == 900
    system, user = captured["body"]["input"]
    assert system["content"] == SYSTEM_INSTRUCTION
    assert json.loads(user["content"]) == {"question": "q?", "facts": {"record": None}, "notes": "notes"}


def test_missing_key_is_enrichment_failure(settings):
    with pytest.raises(EnrichmentFailure):
        EnrichmentClient(settings).complete("q", {}, "")


@pytest.mark.parametrize(
    "behaviour",
    ["network", "status", "empty", "whitespace", "bad_json"],
)
def test_failures_resolve_to_fallback_text(enabled_settings, monkeypatch, behaviour):
    def fake_post(*args, **kwargs):
        if behaviour == "network":
            raise requests.ConnectionError("unreachable")
        if behaviour == "status":
            return FakeResponse({}, status_code=503)
        if behaviour == "empty":
            return FakeResponse({"output": []})
        if behaviour == "whitespace":
            return FakeResponse(_responses_body("   \n "))
        return FakeResponse(raw="<html>")

    monkeypatch.setattr(requests, "post", fake_post)
    result = enrich_answer("q", {}, "", "deterministic text", Intent.GENERIC_BROAD, enabled_settings)
    assert result.text == "deterministic text"
    assert result.source == AnswerSource.DETERMINISTIC


def test_service_failure_matches_standalone_narrative(demo_store, scope, enabled_settings, monkeypatch):
    """A failed enrichment returns exactly what the deterministic generator produces."""
    question = "What are our strengths and weaknesses?"

    def fake_post(*args, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(requests, "post", fake_post)
    result = answer_question(question, demo_store, scope, enabled_settings)

    classification = classify_question(question)
    data = retrieve(demo_store, scope, question, classification.intent, classification.narrow)
    expected = generate_narrative(question, classification.intent, build_season_facts(data))
    assert result.text == expected
    assert result.source == AnswerSource.DETERMINISTIC


def test_service_prefers_enriched_text(demo_store, scope, enabled_settings, monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse(_responses_body("**Maya Chen** runs the offense.")))
    result = answer_question("Summarize the season", demo_store, scope, enabled_settings)
    assert result.source == AnswerSource.ENRICHED
    assert result.text == "**Maya Chen** runs the offense."


def test_narrow_questions_never_call_enrichment(demo_store, scope, enabled_settings, monkeypatch):
    def fail_post(*args, **kwargs):
        raise AssertionError("enrichment must not be called")

    monkeypatch.setattr(requests, "post", fail_post)
    result = answer_question("What's our record?", demo_store, scope, enabled_settings)
    assert result.text == "5-3"
    assert result.source == AnswerSource.DETERMINISTIC
