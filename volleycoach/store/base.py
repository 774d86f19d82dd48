"""
Persistent-store read contract consumed by the engine.

Implementations raise StoreError on any transport or decoding failure and
never return partial garbage: a result is either the full list or an error.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import List

from volleycoach.config.settings import TeamScope
from volleycoach.core.records import KnowledgeChunk, MatchRecord, PlayerGameStatRecord

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9 ]")


def clean_search_text(question: str) -> str:
    """Alphanumeric-only version of the question used for full-text search."""
    return " ".join(_NON_ALNUM.sub(" ", question or "").split())


class SeasonStore(ABC):
    name: str = "store"

    @abstractmethod
    def fetch_matches(self, scope: TeamScope, limit: int) -> List[MatchRecord]:
        """Match records for the team inside the scope window, oldest first."""

    @abstractmethod
    def fetch_stat_rows(self, scope: TeamScope, limit: int) -> List[PlayerGameStatRecord]:
        """Per-game stat records for the team inside the scope window, newest first."""

    @abstractmethod
    def fetch_notes_by_tag(self, scope: TeamScope, tag: str, limit: int) -> List[KnowledgeChunk]:
        """Knowledge notes whose tag set contains `tag`."""

    @abstractmethod
    def search_notes(self, scope: TeamScope, text: str, limit: int) -> List[KnowledgeChunk]:
        """Knowledge notes matching a full-text search of already-cleaned text."""
