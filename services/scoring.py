"""Scoring aggregation helpers."""
from __future__ import annotations

import math
from numbers import Real
from typing import Any, Iterable, List, Optional


def _is_valid_score(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(float(value)) and 0 <= float(value) <= 100


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def valid_scores(scores: Iterable[Any]) -> List[float]:
    """Return the per-question scores that are numbers within 0-100."""

    return [float(score) for score in scores if _is_valid_score(score)]


def mean_score(scores: Iterable[Any]) -> int:
    """Rounded mean of the valid scores, 0 when there are none."""

    usable = valid_scores(scores)
    if not usable:
        return 0
    return _round_half_up(sum(usable) / len(usable))


def usable_total(value: Any) -> Optional[int]:
    """Return ``value`` as an int when it is a positive score, else ``None``."""

    if not _is_valid_score(value):
        return None
    total = _round_half_up(float(value))
    return total if total > 0 else None


def compute_total_score(scores: Iterable[Any], ai_total: Any = None) -> int:
    """Final score: the AI aggregate when positive, otherwise the rounded mean."""

    total = usable_total(ai_total)
    if total is not None:
        return total
    return mean_score(scores)


def heal_total_score(stored_total: Any, scores: Iterable[Any]) -> Optional[int]:
    """Return a corrected total when ``stored_total`` is zero or invalid.

    ``None`` means the stored value is fine or nothing better can be derived.
    """

    if usable_total(stored_total) is not None:
        return None
    usable = valid_scores(scores)
    if not usable:
        return None
    recomputed = _round_half_up(sum(usable) / len(usable))
    if recomputed == stored_total:
        return None
    return recomputed


__all__ = [
    "valid_scores",
    "mean_score",
    "usable_total",
    "compute_total_score",
    "heal_total_score",
]
