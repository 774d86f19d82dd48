"""
Stat Normalizer: the single entry point for untrusted numeric input.

Every raw value coming out of the store (numbers, numeric-like strings,
nulls, garbage) is turned into a finite float here. Nothing in this module
raises.
"""
from __future__ import annotations

import json
import math
from typing import Any, Dict


def to_number(value: Any) -> float:
    """Return a finite float for any input; unusable input becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
        return number if math.isfinite(number) else 0.0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except (ValueError, OverflowError):
            return 0.0
        return number if math.isfinite(number) else 0.0
    return 0.0


def parse_stats(raw: Any) -> Dict[str, Any]:
    """Stat mappings arrive either as objects or as JSON-encoded strings."""
    if not raw:
        return {}
    if isinstance(raw, dict):
        return dict(raw)
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return {}
        return decoded if isinstance(decoded, dict) else {}
    return {}


def format_number(value: float) -> str:
    """Render totals without a trailing .0 for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")
