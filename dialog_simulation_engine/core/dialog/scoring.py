"""Scoring policies for finished (or in-progress) dialog sessions.

A policy is a pure function of the metric totals, so identical option
sequences always produce identical scores.
"""

from __future__ import annotations

from typing import Callable, Dict, Mapping

from dialog_simulation_engine.core.dialog.constants import LOWEST_RATING, RATING_BANDS

ScoringPolicy = Callable[[Mapping[str, int]], float]


def mean_score(totals: Mapping[str, int]) -> float:
    """Average of all metric totals."""
    if not totals:
        return 0.0
    return round(sum(totals.values()) / len(totals), 2)


def minimum_score(totals: Mapping[str, int]) -> float:
    """Lowest metric total; penalises one-sided performance."""
    if not totals:
        return 0.0
    return round(float(min(totals.values())), 2)


def sum_score(totals: Mapping[str, int]) -> float:
    """Plain sum of all metric totals."""
    return round(float(sum(totals.values())), 2)


SCORING_POLICIES: Dict[str, ScoringPolicy] = {
    "mean": mean_score,
    "minimum": minimum_score,
    "sum": sum_score,
}


def get_policy(name: str) -> ScoringPolicy:
    """Look up a scoring policy by name."""
    try:
        return SCORING_POLICIES[name]
    except KeyError as e:
        raise ValueError(
            f"Unknown scoring policy '{name}'. Available: {sorted(SCORING_POLICIES)}"
        ) from e


def score(totals: Mapping[str, int], policy: str = "mean") -> float:
    """Score metric totals with the named policy."""
    return get_policy(policy)(totals)


def rate(value: float) -> str:
    """Map an overall score to a rating band."""
    for threshold, band in RATING_BANDS:
        if value >= threshold:
            return band
    return LOWEST_RATING
