"""
Hard bounds for the VolleyCoach answer engine.

These are enforced constraints that keep every answer and every enrichment
payload bounded regardless of how long the season is.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class SystemBounds:
    """
    Hard bounds for engine behavior.

    These are NOT soft recommendations - they are enforced constraints.
    """
    # Passing eligibility
    min_passer_attempts: int = 25  # Serve-receive attempts required to be named best passer

    # Narrative bounds
    max_tough_opponents: int = 5  # Entries in the tough-opponents answer
    max_weakness_opponents: int = 3  # Entries in the strengths/weaknesses weakness list
    lineup_size: int = 6  # Players in a projected lineup
    max_narrative_length: int = 8000  # Maximum characters in narrative output

    # Facts compaction bounds
    facts_leaders_top_k: int = 6  # Leaders per category handed to enrichment
    facts_tough_top_k: int = 6  # Tough opponents handed to enrichment
    facts_max_positions: int = 20  # Player positions handed to enrichment
    facts_max_months: int = 12  # Monthly passer-rating buckets handed to enrichment
    facts_monthly_passers_top_k: int = 3  # Passers per month handed to enrichment

    # Retrieval bounds
    max_matches_fetched: int = 2000
    max_stat_rows_fetched: int = 8000
    max_roster_notes: int = 8  # Tag-filtered note query limit
    max_search_notes: int = 6  # Full-text note query limit
    max_note_lines: int = 10  # Lines of rendered note text

    # Enrichment bounds
    max_output_tokens: int = 900


# Global instance
DEFAULT_BOUNDS = SystemBounds()


def enforce_bounds_on_list(
    items: List,
    bound_name: str,
    bounds: SystemBounds = DEFAULT_BOUNDS,
) -> List:
    """
    Truncate a list to the named bound.

    Args:
        items: Any list
        bound_name: Name of the bound to apply (e.g., "facts_leaders_top_k")
        bounds: System bounds to enforce

    Returns:
        Truncated list respecting the bound
    """
    if not items:
        return []
    limit = getattr(bounds, bound_name, None)
    if limit is None:
        return list(items)
    return list(items[:limit])


def clip_text(text: Optional[str], bounds: SystemBounds = DEFAULT_BOUNDS) -> str:
    if text is None:
        return ""
    limit = bounds.max_narrative_length
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def bounds_snapshot(bounds: SystemBounds = DEFAULT_BOUNDS) -> Dict[str, int]:
    return {
        "min_passer_attempts": bounds.min_passer_attempts,
        "facts_leaders_top_k": bounds.facts_leaders_top_k,
        "facts_tough_top_k": bounds.facts_tough_top_k,
    }
