"""Ways to bring a system's cost down: cheaper panels, right-sizing, financing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from engine.advisor.parameters import DEFAULT_PARAMETERS, RecommendationParameters
from engine.advisor.requirements import Constraints, SystemRequirements
from engine.advisor.system_design import calculate_layout, panel_count_for, panel_criteria
from engine.catalog.catalog import CatalogCriteria, EquipmentCatalog
from engine.catalog.models import Panel
from engine.economics.financing import FinancingOption, power_purchase_agreement, solar_loan


@dataclass
class PanelSubstitution:
    panel: Panel
    panel_count: int
    savings: float
    tradeoffs: list[str]
    suitability: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.panel.id,
            "manufacturer": self.panel.manufacturer,
            "model": self.panel.model,
            "price_per_watt": self.panel.price_per_watt,
            "efficiency": self.panel.efficiency,
            "panel_count": self.panel_count,
            "savings": self.savings,
            "tradeoffs": list(self.tradeoffs),
            "suitability": self.suitability,
        }


@dataclass
class CostOptimizationResult:
    baseline: Panel | None
    panel_substitutions: list[PanelSubstitution] = field(default_factory=list)
    sizing: dict[str, Any] | None = None
    financing: list[FinancingOption] = field(default_factory=list)

    @property
    def total_potential_savings(self) -> float:
        best_panel = max((s.savings for s in self.panel_substitutions), default=0.0)
        sizing = self.sizing["savings"] if self.sizing else 0.0
        return round(best_panel + sizing, 2)

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseline_panel": self.baseline.to_dict() if self.baseline else None,
            "panel_alternatives": [s.to_dict() for s in self.panel_substitutions],
            "sizing_optimization": self.sizing,
            "financing_options": [f.to_dict() for f in self.financing],
            "total_potential_savings": self.total_potential_savings,
        }


def _tradeoffs(baseline: Panel, value: Panel) -> list[str]:
    notes = []
    if value.efficiency < baseline.efficiency:
        notes.append(f"Lower efficiency ({value.efficiency:g}% vs {baseline.efficiency:g}%)")
    if value.tier > baseline.tier:
        notes.append(f"Tier {value.tier} manufacturer")
    if value.warranty.performance_years < baseline.warranty.performance_years:
        notes.append(f"Shorter performance warranty ({value.warranty.performance_years} years)")
    if not notes:
        notes.append("No significant tradeoffs")
    return notes


def value_panel_substitutions(
    baseline: Panel,
    requirements: SystemRequirements,
    catalog: EquipmentCatalog,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
    limit: int = 3,
) -> list[PanelSubstitution]:
    """Cheaper in-stock panels that still clear the value efficiency floor."""
    criteria = CatalogCriteria(
        type=requirements.preferences.panel_type,
        max_price=params.value_panel_max_price,
        min_efficiency=params.value_panel_min_efficiency,
        availability="in-stock",
    )
    candidates = [p for p in catalog.get_panels(criteria) if p.price_per_watt < baseline.price_per_watt]
    candidates.sort(key=lambda p: (p.price_per_watt, p.id))

    baseline_cost = panel_count_for(requirements.system_size, baseline) * baseline.unit_price
    roof_area = requirements.installation.roof_area
    result = []
    for panel in candidates[:limit]:
        count = panel_count_for(requirements.system_size, panel)
        layout = calculate_layout(panel, count, roof_area, params.spacing_factor)
        result.append(PanelSubstitution(
            panel=panel,
            panel_count=count,
            savings=round(baseline_cost - count * panel.unit_price, 2),
            tradeoffs=_tradeoffs(baseline, panel),
            suitability=(
                "Fits the available roof area"
                if layout.feasible
                else "Needs more roof area than is available"
            ),
        ))
    return result


def right_sizing(
    baseline: Panel,
    requirements: SystemRequirements,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
) -> dict[str, Any]:
    """Savings from installing ``right_sizing_factor`` of the requested size."""
    size = requirements.system_size
    optimized = round(size * params.right_sizing_factor, 2)
    removed_w = (size - optimized) * 1000
    savings = removed_w * baseline.price_per_watt * (1 + params.installation_markup)
    lost = (size - optimized) * params.annual_yield_kwh_per_kw * params.yield_factor(requirements.location.climate)
    return {
        "current_size_kw": size,
        "optimized_size_kw": optimized,
        "savings": round(savings, 2),
        "production_change_kwh": -round(lost, 0),
        "rationale": "Size the array to actual consumption rather than roof capacity",
    }


def financing_options(
    requirements: SystemRequirements,
    constraints: Constraints | None,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
) -> list[FinancingOption]:
    """Loan and PPA offers when the budget exceeds what the buyer can pay now."""
    if constraints is None or constraints.max_budget is None or requirements.budget is None:
        return []
    if requirements.budget <= constraints.max_budget:
        return []
    return [
        solar_loan(
            requirements.budget,
            constraints.max_budget * params.loan_down_payment,
            params.loan_interest_rate,
            params.loan_term_years,
        ),
        power_purchase_agreement(requirements.system_size, params.ppa_rate_per_kw_year),
    ]


def generate_cost_optimization(
    requirements: SystemRequirements,
    catalog: EquipmentCatalog,
    constraints: Constraints | None = None,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
) -> CostOptimizationResult:
    """Cost reduction options measured against the preferred panel.

    The baseline is the best-ranked panel matching the caller's preferences,
    or the best in-stock panel when nothing matches them.  Without any
    in-stock panel only financing can be offered.
    """
    preferred = catalog.get_panels(panel_criteria(requirements, constraints, params))
    baseline = preferred[0] if preferred else next(
        iter(catalog.get_panels(CatalogCriteria(availability="in-stock"))), None
    )
    result = CostOptimizationResult(
        baseline=baseline,
        financing=financing_options(requirements, constraints, params),
    )
    if baseline is not None:
        result.panel_substitutions = value_panel_substitutions(baseline, requirements, catalog, params)
        result.sizing = right_sizing(baseline, requirements, params)
    return result
