from __future__ import annotations

from typing import Iterable, List

from volleycoach.config.bounds import DEFAULT_BOUNDS, SystemBounds
from volleycoach.core.records import KnowledgeChunk


def render_notes(chunks: Iterable[KnowledgeChunk], bounds: SystemBounds = DEFAULT_BOUNDS) -> str:
    """Title and body lines of each distinct note, capped at max_note_lines."""
    seen = set()
    lines: List[str] = []
    for chunk in chunks:
        key = f"{chunk.title}::{chunk.content}"
        if key == "::" or key in seen:
            continue
        seen.add(key)
        if chunk.title:
            lines.append(chunk.title)
        if chunk.content:
            lines.append(chunk.content)
    return "\n\n".join(lines[: bounds.max_note_lines])
