"""
Tunable constants for the recommendation engine.

The defaults are nominal industry conventions (e.g. 1,350 kWh/kW/yr yield,
30% installation markup, 80-120% inverter sizing band).  They are not
regional engineering values; deployments override them through settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RecommendationParameters:
    # Performance
    annual_yield_kwh_per_kw: float = 1_350.0
    climate_yield_factors: dict[str, float] = field(default_factory=dict)  # climate -> multiplier
    performance_ratio: float = 0.85
    default_degradation_pct: float = 0.5

    # Cost
    installation_markup: float = 0.30          # fraction of panel + inverter cost
    electricity_rate: float = 0.15             # $/kWh, for simple payback

    # System design
    sizing_band: tuple[float, float] = (0.8, 1.2)
    spacing_factor: float = 1.4
    panel_budget_share: float = 0.4            # share of budget available for panels
    battery_sizing_factor: float = 1.5         # kWh per kW when capacity not given
    battery_capacity_window: tuple[float, float] = (0.8, 1.5)
    max_panel_candidates: int = 5
    max_inverter_candidates: int = 3
    recommended_count: int = 3
    alternative_count: int = 3

    # Component alternatives
    alternative_tolerance: float = 0.10
    alternative_efficiency_floor: float = 0.95
    max_alternatives: int = 5

    # Upgrade path
    upgrade_efficiency_threshold: float = 20.0   # % below which panels are replaced
    upgrade_panel_min_efficiency: float = 21.0
    upgrade_battery_factor: float = 1.2          # kWh per kW of existing array
    monitoring_upgrade_cost: float = 500.0       # used when no catalog device fits

    # Cost optimization
    value_panel_max_price: float = 0.55          # $/W
    value_panel_min_efficiency: float = 19.0
    premium_panel_min_efficiency: float = 21.0
    right_sizing_factor: float = 0.9
    loan_down_payment: float = 0.20
    loan_interest_rate: float = 0.0699
    loan_term_years: int = 10
    ppa_rate_per_kw_year: float = 120.0

    # Response metadata
    validity_days: int = 7
    base_confidence: float = 85.0

    def __post_init__(self) -> None:
        low, high = self.sizing_band
        if not 0 < low <= 1 <= high:
            raise ValueError(f"sizing_band must straddle 1.0, got {self.sizing_band}")
        if self.spacing_factor < 1:
            raise ValueError("spacing_factor must be >= 1")
        if not 0 <= self.installation_markup < 5:
            raise ValueError("installation_markup must be a fraction, e.g. 0.30")

    def yield_factor(self, climate: str | None) -> float:
        if climate is None:
            return 1.0
        return self.climate_yield_factors.get(climate.lower(), 1.0)


DEFAULT_PARAMETERS = RecommendationParameters()
