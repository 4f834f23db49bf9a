"""Confidence scoring for extracted values and whole fill results."""

from __future__ import annotations

import re
from typing import Iterable, Optional

BASE_PATTERN_CONFIDENCE = 0.5


def clamp_confidence(value: float) -> float:
    """Clamp a score into [0.0, 1.0]."""
    return max(0.0, min(1.0, float(value)))


def pattern_confidence(pattern: re.Pattern, match: re.Match) -> float:
    """Estimate how much to trust a strict pattern match.

    Patterns that demand digits, quantified runs or uppercase classes are
    considered more specific; case-insensitive patterns slightly less so.
    Longer captured values earn a small bonus.

    Args:
        pattern: The compiled pattern that matched
        match: The match object it produced

    Returns:
        Confidence between 0.0 and 1.0
    """
    source = pattern.pattern
    confidence = BASE_PATTERN_CONFIDENCE

    if "\\d" in source:
        confidence += 0.2
    if "+" in source:
        confidence += 0.1
    if "[A-Z]" in source:
        confidence += 0.1
    if pattern.flags & re.IGNORECASE:
        confidence -= 0.05

    captured: Optional[str] = match.group(1) if pattern.groups else None
    if captured and len(captured) > 3:
        confidence += 0.1
    if captured and len(captured) > 10:
        confidence += 0.1

    return clamp_confidence(confidence)


def overall_confidence(assignments: Iterable) -> float:
    """Mean confidence across assignments; 0.0 when there are none."""
    scores = [a.confidence for a in assignments]
    if not scores:
        return 0.0
    return clamp_confidence(sum(scores) / len(scores))
