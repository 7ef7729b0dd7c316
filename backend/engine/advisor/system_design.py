"""
System design recommendations.

Builds every panel/inverter(/battery) configuration the catalog can offer for
the requested array size, prices and scores each one, then splits the
eligible ones into recommended and alternative tiers.  Pure arithmetic over
the in-memory catalog, no I/O.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from engine.advisor.parameters import DEFAULT_PARAMETERS, RecommendationParameters
from engine.advisor.requirements import Constraints, Installation, SystemRequirements
from engine.advisor.scoring import DEFAULT_WEIGHTS, ScoringWeights, rank, score_configuration
from engine.catalog.catalog import CatalogCriteria, EquipmentCatalog
from engine.catalog.models import Battery, EquipmentItem, Inverter, Panel, RackingSystem
from engine.compatibility.matching import (
    CompatibilityResult,
    SiteConditions,
    analyze_system,
    check_inverter_battery,
    check_racking_roof,
    sizing_ratio,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------
@dataclass
class ComponentChoice:
    item: EquipmentItem
    quantity: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.item.id,
            "category": self.item.category,
            "manufacturer": self.item.manufacturer,
            "model": self.item.model,
            "quantity": self.quantity,
            "specs": self.item.to_dict(),
        }


@dataclass
class Layout:
    panel_count: int
    panel_area_m2: float
    total_area_m2: float
    roof_area_m2: float
    roof_utilization_pct: float
    spacing_factor: float
    feasible: bool


@dataclass
class Performance:
    capacity_kw: float
    annual_production_kwh: float
    system_efficiency_pct: float
    performance_ratio: float
    degradation_rate_pct: float


@dataclass
class CostBreakdown:
    panels: float
    inverter: float
    installation: float
    battery: float
    total: float
    price_per_watt: float


@dataclass
class SystemConfiguration:
    id: str
    panel: ComponentChoice
    inverter: ComponentChoice
    layout: Layout
    performance: Performance
    cost: CostBreakdown
    compatibility: CompatibilityResult
    score: float
    battery: ComponentChoice | None = None
    racking: ComponentChoice | None = None
    payback_years: float | None = None
    constraint_violations: list[str] = field(default_factory=list)
    in_band: bool = True

    @property
    def eligible(self) -> bool:
        """Buildable, inside the sizing band and within the caller's constraints."""
        return (
            self.layout.feasible
            and self.compatibility.feasible
            and self.in_band
            and not self.constraint_violations
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "panel": self.panel.to_dict(),
            "inverter": self.inverter.to_dict(),
            "battery": self.battery.to_dict() if self.battery else None,
            "racking": self.racking.to_dict() if self.racking else None,
            "layout": vars(self.layout).copy(),
            "performance": vars(self.performance).copy(),
            "cost": vars(self.cost).copy(),
            "compatibility": self.compatibility.to_dict(),
            "score": self.score,
            "payback_years": self.payback_years,
            "constraint_violations": list(self.constraint_violations),
            "eligible": self.eligible,
        }


@dataclass
class Summary:
    price_range: dict[str, float] | None
    efficiency_range: dict[str, float] | None
    production_range: dict[str, float] | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "price_range": self.price_range,
            "efficiency_range": self.efficiency_range,
            "production_range": self.production_range,
        }


@dataclass
class SystemDesignResult:
    configurations: list[SystemConfiguration]
    recommended: list[SystemConfiguration]
    alternatives: list[SystemConfiguration]
    summary: Summary

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_configurations": len(self.configurations),
            "recommended_configurations": [c.to_dict() for c in self.recommended],
            "alternative_configurations": [c.to_dict() for c in self.alternatives],
            "summary": self.summary.to_dict(),
        }


# ---------------------------------------------------------------------------
# Candidate selection
# ---------------------------------------------------------------------------

def panel_criteria(
    requirements: SystemRequirements,
    constraints: Constraints | None = None,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
) -> CatalogCriteria:
    """Catalog criteria for panels matching preferences, budget and warranty."""
    prefs = requirements.preferences
    max_price = None
    if requirements.budget:
        max_price = requirements.budget * params.panel_budget_share / (requirements.system_size * 1000)
    min_efficiency = None
    if prefs.brand_preference == "value_focused":
        max_price = min(max_price, params.value_panel_max_price) if max_price else params.value_panel_max_price
    elif prefs.brand_preference == "premium_only":
        min_efficiency = params.premium_panel_min_efficiency
    return CatalogCriteria(
        type=prefs.panel_type,
        tier=1 if prefs.brand_preference == "tier1_only" else None,
        min_efficiency=min_efficiency,
        max_price=max_price,
        min_warranty=constraints.required_warranty if constraints else None,
        availability="in-stock",
    )


def panel_count_for(system_size_kw: float, panel: Panel) -> int:
    return math.ceil(system_size_kw * 1000 / panel.wattage)


def inverter_quantity(inverter: Inverter, panel_count: int, array_dc_w: float) -> int:
    """One per panel for micro inverters, otherwise the nearest whole count."""
    if inverter.type == "micro":
        return panel_count
    return max(1, math.floor(array_dc_w / inverter.capacity_w + 0.5))


def candidate_inverters(
    catalog: EquipmentCatalog,
    panel_count: int,
    array_dc_w: float,
    inverter_type: str | None = None,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
) -> list[tuple[Inverter, int]]:
    """In-stock inverters whose sizing ratio lands in the band, best CEC first."""
    low, high = params.sizing_band
    result = []
    for inverter in catalog.get_inverters(CatalogCriteria(type=inverter_type, availability="in-stock")):
        qty = inverter_quantity(inverter, panel_count, array_dc_w)
        ratio = sizing_ratio(array_dc_w, inverter.capacity_w * qty)
        if low <= ratio <= high:
            result.append((inverter, qty))
    return result[:params.max_inverter_candidates]


def target_battery_capacity(
    requirements: SystemRequirements,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
) -> float:
    requested = requirements.preferences.battery_capacity
    return requested if requested else requirements.system_size * params.battery_sizing_factor


def select_battery(
    catalog: EquipmentCatalog,
    inverter: Inverter,
    capacity_kwh: float,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
    technology: str | None = None,
) -> tuple[Battery, int] | None:
    """First in-stock battery in the capacity window that the inverter accepts."""
    low, high = params.battery_capacity_window
    criteria = CatalogCriteria(
        min_capacity=capacity_kwh * low,
        max_capacity=capacity_kwh * high,
        technology=technology,
        availability="in-stock",
    )
    for battery in catalog.get_batteries(criteria):
        if check_inverter_battery(inverter, battery).compatible:
            return battery, math.ceil(capacity_kwh / battery.capacity_kwh)
    return None


def select_racking(catalog: EquipmentCatalog, installation: Installation) -> RackingSystem | None:
    for racking in catalog.get_racking(CatalogCriteria(roof_type=installation.roof_type, availability="in-stock")):
        if check_racking_roof(racking, installation.roof_type, installation.roof_pitch).feasible:
            return racking
    return None


# ---------------------------------------------------------------------------
# Per-configuration calculations
# ---------------------------------------------------------------------------

def calculate_layout(
    panel: Panel,
    panel_count: int,
    roof_area: float,
    spacing_factor: float = DEFAULT_PARAMETERS.spacing_factor,
) -> Layout:
    """Roof footprint of the array; feasible when the spaced area fits the roof."""
    total_area = panel.area_m2 * panel_count
    return Layout(
        panel_count=panel_count,
        panel_area_m2=round(panel.area_m2, 3),
        total_area_m2=round(total_area, 2),
        roof_area_m2=roof_area,
        roof_utilization_pct=round(total_area / roof_area * 100, 1),
        spacing_factor=spacing_factor,
        feasible=total_area * spacing_factor <= roof_area,
    )


def calculate_performance(
    panel: Panel,
    panel_count: int,
    inverter: Inverter,
    climate: str | None = None,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
) -> Performance:
    capacity_kw = panel.wattage * panel_count / 1000
    production = capacity_kw * params.annual_yield_kwh_per_kw * params.yield_factor(climate)
    degradation = abs(panel.temperature_coefficient) or params.default_degradation_pct
    return Performance(
        capacity_kw=round(capacity_kw, 3),
        annual_production_kwh=round(production, 0),
        system_efficiency_pct=round(panel.efficiency * inverter.efficiency.cec / 100, 2),
        performance_ratio=params.performance_ratio,
        degradation_rate_pct=degradation,
    )


def calculate_cost(
    panel: Panel,
    panel_count: int,
    inverter: Inverter,
    inverter_count: int,
    battery: Battery | None = None,
    battery_count: int = 0,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
) -> CostBreakdown:
    """Cost breakdown; total is the sum of the rounded components."""
    dc_w = panel.wattage * panel_count
    panels = round(dc_w * panel.price_per_watt, 2)
    inverters = round(inverter.capacity_w * inverter_count * inverter.price_per_watt, 2)
    installation = round((panels + inverters) * params.installation_markup, 2)
    storage = round(battery.capacity_kwh * battery_count * battery.price_per_kwh, 2) if battery else 0.0
    total = round(panels + inverters + installation + storage, 2)
    return CostBreakdown(
        panels=panels,
        inverter=inverters,
        installation=installation,
        battery=storage,
        total=total,
        price_per_watt=round(total / dc_w, 3),
    )


def simple_payback(total_cost: float, annual_production_kwh: float, electricity_rate: float) -> float | None:
    savings = annual_production_kwh * electricity_rate
    if savings <= 0:
        return None
    return round(total_cost / savings, 1)


def constraint_violations(
    config: SystemConfiguration,
    constraints: Constraints | None,
) -> list[str]:
    if constraints is None:
        return []
    violations = []
    if constraints.max_budget is not None and config.cost.total > constraints.max_budget:
        violations.append(
            f"Total cost ${config.cost.total:,.0f} exceeds maximum budget ${constraints.max_budget:,.0f}"
        )
    if constraints.max_payback_period is not None and (
        config.payback_years is None or config.payback_years > constraints.max_payback_period
    ):
        violations.append(f"Payback exceeds {constraints.max_payback_period:g} years")
    if constraints.installation_timeline is not None:
        parts = [config.panel, config.inverter, config.battery]
        lead = max((c.item.lead_time_days or 0) for c in parts if c is not None)
        if lead > constraints.installation_timeline:
            violations.append(f"Equipment lead time {lead} days exceeds installation timeline")
    return violations


def _site(requirements: SystemRequirements) -> SiteConditions:
    inst = requirements.installation
    return SiteConditions(
        roof_type=inst.roof_type,
        roof_pitch=inst.roof_pitch,
        azimuth=inst.azimuth,
        shading=inst.shading,
        climate=requirements.location.climate,
        latitude=requirements.location.latitude,
    )


def build_configuration(
    panel: Panel,
    panel_count: int,
    inverter: Inverter,
    inverter_count: int,
    requirements: SystemRequirements,
    *,
    battery: tuple[Battery, int] | None = None,
    racking: RackingSystem | None = None,
    constraints: Constraints | None = None,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> SystemConfiguration:
    """Price, check and score one concrete configuration."""
    battery_item, battery_count = battery if battery else (None, 0)
    compat = analyze_system(
        panel, panel_count, inverter, inverter_count,
        battery=battery_item,
        racking=racking,
        site=_site(requirements),
        band=params.sizing_band,
    )
    performance = calculate_performance(panel, panel_count, inverter, requirements.location.climate, params)
    cost = calculate_cost(panel, panel_count, inverter, inverter_count, battery_item, battery_count, params)
    low, high = params.sizing_band

    config_id = f"{panel.id}+{inverter.id}"
    if battery_item is not None:
        config_id += f"+{battery_item.id}"
    config = SystemConfiguration(
        id=config_id,
        panel=ComponentChoice(panel, panel_count),
        inverter=ComponentChoice(inverter, inverter_count),
        battery=ComponentChoice(battery_item, battery_count) if battery_item else None,
        racking=ComponentChoice(racking, panel_count) if racking else None,
        layout=calculate_layout(panel, panel_count, requirements.installation.roof_area, params.spacing_factor),
        performance=performance,
        cost=cost,
        compatibility=compat,
        score=score_configuration(
            panel, inverter, requirements.priorities, weights, requirements.preferences.aesthetics
        ),
        payback_years=simple_payback(cost.total, performance.annual_production_kwh, params.electricity_rate),
        in_band=compat.sizing_ratio is not None and low <= compat.sizing_ratio <= high,
    )
    config.constraint_violations = constraint_violations(config, constraints)
    return config


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def _value_range(values: list[float]) -> dict[str, float] | None:
    if not values:
        return None
    arr = np.asarray(values, dtype=float)
    return {"min": round(float(arr.min()), 2), "max": round(float(arr.max()), 2)}


def summarize_configurations(configs: list[SystemConfiguration]) -> Summary:
    return Summary(
        price_range=_value_range([c.cost.total for c in configs]),
        efficiency_range=_value_range([c.performance.system_efficiency_pct for c in configs]),
        production_range=_value_range([c.performance.annual_production_kwh for c in configs]),
    )


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def generate_system_design(
    requirements: SystemRequirements,
    catalog: EquipmentCatalog,
    constraints: Constraints | None = None,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> SystemDesignResult:
    """Generate, score and rank system configurations.

    Parameters
    ----------
    requirements : SystemRequirements
        Validated request.
    catalog : EquipmentCatalog
        Catalog snapshot.
    constraints : Constraints or None
        Hard limits; configurations violating them are never recommended.
    params, weights
        Engine constants and scoring weights.

    Returns
    -------
    SystemDesignResult
        All generated configurations, the top ``recommended_count`` eligible
        ones and the next ``alternative_count``.  The summary covers every
        generated configuration and is empty when none could be built.
    """
    prefs = requirements.preferences
    panels = catalog.get_panels(panel_criteria(requirements, constraints, params))[:params.max_panel_candidates]
    racking = select_racking(catalog, requirements.installation)
    battery_target = target_battery_capacity(requirements, params) if prefs.battery_storage else None

    configs: list[SystemConfiguration] = []
    for panel in panels:
        count = panel_count_for(requirements.system_size, panel)
        dc_w = count * panel.wattage
        for inverter, inv_qty in candidate_inverters(catalog, count, dc_w, prefs.inverter_type, params):
            battery = None
            if battery_target is not None:
                battery = select_battery(catalog, inverter, battery_target, params)
            configs.append(build_configuration(
                panel, count, inverter, inv_qty, requirements,
                battery=battery,
                racking=racking,
                constraints=constraints,
                params=params,
                weights=weights,
            ))

    eligible = rank(
        (c for c in configs if c.eligible),
        score_of=lambda c: c.score,
        key_of=lambda c: c.id,
    )
    recommended = eligible[:params.recommended_count]
    alternatives = eligible[params.recommended_count:params.recommended_count + params.alternative_count]
    logger.debug(
        "system design: %d panels, %d configurations, %d eligible",
        len(panels), len(configs), len(eligible),
    )
    return SystemDesignResult(
        configurations=configs,
        recommended=recommended,
        alternatives=alternatives,
        summary=summarize_configurations(configs),
    )
