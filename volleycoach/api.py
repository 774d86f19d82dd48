"""
FastAPI delivery shell for the season question-answering engine.
- POST /api/chat          {question, team_id?, season?} -> {answer}
- POST /api/stats/query   {question, team_id?, season?} -> {ok, mode, facts}
- GET  /api/health
Supports a JSON fixture or a Supabase REST store via DATA_SOURCE (fixture | supabase).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import logging

logging.basicConfig(level=logging.INFO)

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from volleycoach.analysis.retrieval import ROSTER_TAG
from volleycoach.analysis.stat_reports import ReportMode, answer_stats_query, detect_mode
from volleycoach.config.bounds import DEFAULT_BOUNDS, bounds_snapshot
from volleycoach.config.settings import Settings, load_settings
from volleycoach.core.errors import DataUnavailableError, StoreError, ValidationError
from volleycoach.narrative import render_notes
from volleycoach.service import answer_question
from volleycoach.store import SeasonStore, build_store

logger = logging.getLogger(__name__)

app = FastAPI()


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.warning("store_unavailable", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Season data is temporarily unavailable. Please try again."})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("[QUERY] rejected path=%s errors=%s", request.url.path, len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "question must be a non-empty string"})


# CORS: allow the chat frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ChatRequest(BaseModel):
    question: Optional[str] = None
    team_id: Optional[str] = None
    season: Optional[str] = None


class StatsQueryRequest(BaseModel):
    question: Optional[str] = None
    team_id: Optional[str] = None
    season: Optional[str] = None


def get_settings() -> Settings:
    return load_settings()


def get_store(settings: Settings = Depends(get_settings)) -> SeasonStore:
    return build_store(settings)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.post("/api/chat")
def chat(
    req: ChatRequest,
    settings: Settings = Depends(get_settings),
    store: SeasonStore = Depends(get_store),
):
    scope = settings.scope(req.team_id, req.season)
    try:
        result = answer_question(req.question, store, scope, settings, DEFAULT_BOUNDS)
    except ValidationError as exc:
        return _error(400, str(exc))
    except DataUnavailableError as exc:
        return _error(500, str(exc))
    return {"answer": result.text}


@app.post("/api/stats/query")
def stats_query(
    req: StatsQueryRequest,
    settings: Settings = Depends(get_settings),
    store: SeasonStore = Depends(get_store),
):
    question = (req.question or "").strip()
    if not question:
        return _error(400, "question is required")
    scope = settings.scope(req.team_id, req.season)
    mode = detect_mode(question)
    rows = store.fetch_stat_rows(scope, DEFAULT_BOUNDS.max_stat_rows_fetched)

    notes_text = ""
    if mode == ReportMode.ROSTER:
        try:
            notes = store.fetch_notes_by_tag(scope, ROSTER_TAG, DEFAULT_BOUNDS.max_roster_notes)
            notes_text = render_notes(notes, DEFAULT_BOUNDS)
        except StoreError as exc:
            logger.warning("[STATS] roster notes unavailable", exc_info=exc)

    mode, facts = answer_stats_query(rows, question, scope, notes_text, mode)
    return {"ok": True, "mode": mode.value, "facts": facts}


@app.get("/api/health")
def health(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    return {
        "status": "ok",
        "data_source": settings.data_source,
        "enrichment_enabled": settings.enrichment_enabled,
        "bounds": bounds_snapshot(DEFAULT_BOUNDS),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("volleycoach.api:app", host="0.0.0.0", port=8000, reload=True)
