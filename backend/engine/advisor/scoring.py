"""Configuration scoring shared by every recommendation type.

A configuration's score is a base term (panel efficiency, manufacturer tier,
inverter efficiency) plus one weighted term per caller priority.  All weights
live in ``ScoringWeights`` so callers can re-balance without touching the
formula.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from engine.catalog.models import Inverter, Panel

T = TypeVar("T")

TIER_BONUS = {1: 15.0, 2: 10.0, 3: 5.0}
APPEARANCE_BONUS = {"standard": 0.0, "premium": 5.0, "stealth": 8.0}
# Temperature coefficient treated as neutral for the performance priority
REFERENCE_TEMP_COEFFICIENT = -0.40


@dataclass(frozen=True)
class ScoringWeights:
    # Base terms
    panel_efficiency: float = 2.0            # per % module efficiency
    inverter_efficiency: float = 0.5         # per % CEC efficiency
    tier_bonus: dict[int, float] = field(default_factory=lambda: dict(TIER_BONUS))

    # Priority terms
    cost: float = 10.0                       # penalty per $/W
    efficiency: float = 1.5                  # per % module efficiency
    reliability: float = 1.0                 # per performance-warranty year
    performance: float = 2.0                 # per CEC point above 95 %
    temperature: float = 25.0                # per %/°C better than the reference
    aesthetics: float = 1.0                  # multiplier on APPEARANCE_BONUS
    matching_appearance: float = 5.0         # panel matches the requested look

    # Each later priority counts rank_decay times the one before it
    rank_decay: float = 1.0


DEFAULT_WEIGHTS = ScoringWeights()


def base_score(panel: Panel, inverter: Inverter, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    return (
        panel.efficiency * weights.panel_efficiency
        + weights.tier_bonus.get(panel.tier, 0.0)
        + inverter.efficiency.cec * weights.inverter_efficiency
    )


def priority_bonus(
    priority: str,
    panel: Panel,
    inverter: Inverter,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    aesthetics: str | None = None,
) -> float:
    """Signed contribution of a single priority."""
    if priority == "cost":
        return -panel.price_per_watt * weights.cost
    if priority == "efficiency":
        return panel.efficiency * weights.efficiency
    if priority == "reliability":
        return panel.warranty.performance_years * weights.reliability
    if priority == "performance":
        temp_gain = max(0.0, panel.temperature_coefficient - REFERENCE_TEMP_COEFFICIENT)
        return (inverter.efficiency.cec - 95.0) * weights.performance + temp_gain * weights.temperature
    if priority == "aesthetics":
        bonus = APPEARANCE_BONUS.get(panel.appearance, 0.0) * weights.aesthetics
        if aesthetics and aesthetics != "standard" and panel.appearance == aesthetics:
            bonus += weights.matching_appearance
        return bonus
    raise ValueError(f"Unknown priority: {priority}")


def score_configuration(
    panel: Panel,
    inverter: Inverter,
    priorities: Sequence[str],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    aesthetics: str | None = None,
) -> float:
    """Composite score for a panel/inverter pairing.

    Parameters
    ----------
    panel, inverter : Panel, Inverter
        The pairing being scored.
    priorities : sequence of str
        Caller priorities in order of importance; duplicates count once.
    weights : ScoringWeights
        Formula weights.
    aesthetics : str or None
        Requested panel appearance, rewarded under the aesthetics priority.

    Returns
    -------
    float
        Unbounded score, rounded to 2 decimals; higher is better.
    """
    score = base_score(panel, inverter, weights)
    multiplier = 1.0
    for priority in dict.fromkeys(priorities):
        score += multiplier * priority_bonus(priority, panel, inverter, weights, aesthetics)
        multiplier *= weights.rank_decay
    return round(score, 2)


def rank(
    items: Iterable[T],
    score_of: Callable[[T], float],
    key_of: Callable[[T], str],
) -> list[T]:
    """Sort by score descending, ties broken by key ascending."""
    return sorted(items, key=lambda item: (-score_of(item), key_of(item)))
