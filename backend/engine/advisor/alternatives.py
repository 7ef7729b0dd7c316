"""Like-for-like replacements for the components of an existing system."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from engine.advisor.parameters import DEFAULT_PARAMETERS, RecommendationParameters
from engine.advisor.requirements import ExistingSystem
from engine.catalog.catalog import EquipmentCatalog
from engine.catalog.models import Battery, EquipmentItem, Inverter, Panel
from engine.compatibility.matching import check_inverter_battery, check_panel_inverter


@dataclass
class AlternativeOption:
    item: EquipmentItem
    deltas: dict[str, float]
    benefits: list[str] = field(default_factory=list)
    drawbacks: list[str] = field(default_factory=list)
    compatibility_score: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.item.id,
            "manufacturer": self.item.manufacturer,
            "model": self.item.model,
            "specs": self.item.to_dict(),
            "comparison": dict(self.deltas),
            "benefits": list(self.benefits),
            "drawbacks": list(self.drawbacks),
            "compatibility_score": self.compatibility_score,
        }


@dataclass
class AlternativesResult:
    current: ExistingSystem
    panels: list[AlternativeOption] = field(default_factory=list)
    inverters: list[AlternativeOption] = field(default_factory=list)
    batteries: list[AlternativeOption] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        cur = self.current
        return {
            "current_system": {
                "panel": cur.panel.id if cur.panel else None,
                "panel_count": cur.panel_count,
                "inverter": cur.inverter.id if cur.inverter else None,
                "inverter_count": cur.inverter_count,
                "battery": cur.battery.id if cur.battery else None,
            },
            "alternatives": {
                "panels": [o.to_dict() for o in self.panels],
                "inverters": [o.to_dict() for o in self.inverters],
                "batteries": [o.to_dict() for o in self.batteries],
            },
        }


# (delta key, benefit when positive, drawback when negative); cost is inverted
_DELTA_LABELS = (
    ("efficiency", "Higher efficiency", "Lower efficiency"),
    ("power", "More power", "Less power"),
    ("warranty", "Extended warranty", "Shorter warranty"),
)


def compare(current: EquipmentItem, candidate: EquipmentItem) -> AlternativeOption:
    """Signed differences candidate - current, labelled as benefits or drawbacks."""
    deltas = {
        "efficiency": round((candidate.efficiency_pct or 0) - (current.efficiency_pct or 0), 2),
        "power": round((candidate.power_w or 0) - (current.power_w or 0), 1),
        "cost": round(candidate.unit_price - current.unit_price, 2),
        "warranty": candidate.warranty.years - current.warranty.years,
    }
    if isinstance(current, Battery):
        deltas["capacity"] = round(candidate.capacity - current.capacity, 2)

    option = AlternativeOption(item=candidate, deltas=deltas)
    for key, better, worse in _DELTA_LABELS:
        if deltas[key] > 0:
            option.benefits.append(better)
        elif deltas[key] < 0:
            option.drawbacks.append(worse)
    if deltas["cost"] < 0:
        option.benefits.append("Lower cost")
    elif deltas["cost"] > 0:
        option.drawbacks.append("Higher cost")
    return option


def _score_against(existing: ExistingSystem, candidate: EquipmentItem, band: tuple[float, float]):
    """Compatibility of a candidate with the parts of the system it would join."""
    if isinstance(candidate, Panel) and existing.inverter is not None:
        return check_panel_inverter(
            candidate, existing.panel_count or 1, existing.inverter, existing.inverter_count, band
        )
    if isinstance(candidate, Inverter) and existing.panel is not None:
        count = existing.panel_count if candidate.type == "micro" else existing.inverter_count
        return check_panel_inverter(existing.panel, existing.panel_count or 1, candidate, count, band)
    if isinstance(candidate, Battery) and existing.inverter is not None:
        return check_inverter_battery(existing.inverter, candidate)
    return None


def _options_for(
    current: EquipmentItem | None,
    existing: ExistingSystem,
    catalog: EquipmentCatalog,
    params: RecommendationParameters,
) -> list[AlternativeOption]:
    if current is None:
        return []
    options = []
    for candidate in catalog.find_alternatives(
        current,
        tolerance=params.alternative_tolerance,
        efficiency_floor=params.alternative_efficiency_floor,
        limit=None,
    ):
        result = _score_against(existing, candidate, params.sizing_band)
        if result is not None and not result.compatible:
            continue
        option = compare(current, candidate)
        option.compatibility_score = result.score if result is not None else None
        options.append(option)
        if len(options) == params.max_alternatives:
            break
    return options


def generate_component_alternatives(
    existing: ExistingSystem,
    catalog: EquipmentCatalog,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
) -> AlternativesResult:
    """In-stock alternatives per installed component.

    Candidates share the component's category, sit within the power/capacity
    tolerance, keep at least the efficiency floor and never include the
    installed item itself.  Explicitly incompatible candidates are dropped.
    """
    return AlternativesResult(
        current=existing,
        panels=_options_for(existing.panel, existing, catalog, params),
        inverters=_options_for(existing.inverter, existing, catalog, params),
        batteries=_options_for(existing.battery, existing, catalog, params),
    )
