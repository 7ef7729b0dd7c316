"""
Upgrade planning for an installed system.

Inspects the existing components against the owner's current preferences and
proposes prioritised upgrades (panels, storage, monitoring), each with an
investment estimate, then lays them out on a three-phase timeline.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from engine.advisor.parameters import DEFAULT_PARAMETERS, RecommendationParameters
from engine.advisor.requirements import Constraints, ExistingSystem, SystemRequirements
from engine.advisor.scoring import DEFAULT_WEIGHTS, ScoringWeights
from engine.advisor.system_design import SystemDesignResult, generate_system_design
from engine.catalog.catalog import CatalogCriteria, EquipmentCatalog
from engine.catalog.models import MONITORING_TIERS, EquipmentItem
from engine.compatibility.matching import check_inverter_battery


PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

# (phase, timeframe, priority scheduled in it)
TIMELINE_PHASES = (
    ("Phase 1", "0-6 months", "high"),
    ("Phase 2", "6-18 months", "medium"),
    ("Phase 3", "18+ months", "low"),
)

NO_EXISTING_SYSTEM = "No existing system provided"


@dataclass
class Upgrade:
    component: str               # "panels" | "battery" | "monitoring"
    priority: str                # "high" | "medium" | "low"
    reason: str
    investment: float
    payback: str
    item: EquipmentItem | None = None
    quantity: int = 1
    benefits: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "component": self.component,
            "priority": self.priority,
            "reason": self.reason,
            "recommendation": self.item.to_dict() if self.item else None,
            "quantity": self.quantity,
            "investment": self.investment,
            "payback": self.payback,
            "benefits": list(self.benefits),
        }


@dataclass
class UpgradePlan:
    upgrades: list[Upgrade] = field(default_factory=list)
    timeline: list[dict[str, Any]] = field(default_factory=list)
    total_investment: float = 0.0
    message: str | None = None
    new_system: SystemDesignResult | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.new_system is not None:
            return {
                "message": self.message,
                "new_system_recommendation": self.new_system.to_dict(),
            }
        return {
            "upgrades": [u.to_dict() for u in self.upgrades],
            "timeline": self.timeline,
            "total_investment": self.total_investment,
        }


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------

def _panel_upgrade(
    existing: ExistingSystem,
    requirements: SystemRequirements,
    catalog: EquipmentCatalog,
    params: RecommendationParameters,
) -> Upgrade | None:
    panel = existing.panel
    if panel is None or panel.efficiency >= params.upgrade_efficiency_threshold:
        return None
    candidates = catalog.get_panels(CatalogCriteria(
        tier=1,
        min_efficiency=params.upgrade_panel_min_efficiency,
        availability="in-stock",
    ))
    if not candidates:
        return None
    new = candidates[0]
    array_kw = existing.array_kw or requirements.system_size
    qty = math.ceil(array_kw * 1000 / new.wattage)
    gain = (new.efficiency - panel.efficiency) / panel.efficiency * 100
    return Upgrade(
        component="panels",
        priority="high",
        reason=f"Installed panels are {panel.efficiency:g}% efficient, below {params.upgrade_efficiency_threshold:g}%",
        investment=round(qty * new.unit_price, 2),
        payback="6-8 years",
        item=new,
        quantity=qty,
        benefits=[
            f"About {gain:.0f}% more output from the same roof area",
            "Improved performance warranty",
        ],
    )


def _battery_upgrade(
    existing: ExistingSystem,
    requirements: SystemRequirements,
    catalog: EquipmentCatalog,
    params: RecommendationParameters,
) -> Upgrade | None:
    if existing.battery is not None or not requirements.preferences.battery_storage:
        return None
    min_capacity = requirements.system_size * params.upgrade_battery_factor
    candidates = catalog.get_batteries(CatalogCriteria(
        technology="lithium-ion",
        min_capacity=min_capacity,
        availability="in-stock",
    ))
    if existing.inverter is not None:
        candidates = [b for b in candidates if check_inverter_battery(existing.inverter, b).compatible]
    if not candidates:
        return None
    battery = candidates[0]
    return Upgrade(
        component="battery",
        priority="medium",
        reason="No energy storage installed",
        investment=round(battery.unit_price, 2),
        payback="8-12 years",
        item=battery,
        benefits=["Backup power during outages", "Store midday surplus for evening use"],
    )


def _monitoring_upgrade(
    existing: ExistingSystem,
    requirements: SystemRequirements,
    catalog: EquipmentCatalog,
    params: RecommendationParameters,
) -> Upgrade | None:
    wanted = requirements.preferences.monitoring
    if MONITORING_TIERS.index(wanted) <= MONITORING_TIERS.index(existing.monitoring):
        return None
    devices = [
        d for d in catalog.get_monitoring(CatalogCriteria(availability="in-stock"))
        if d.service_tier == wanted and (existing.inverter is None or d.supports(existing.inverter))
    ]
    device = devices[0] if devices else None
    return Upgrade(
        component="monitoring",
        priority="low",
        reason=f"Monitoring is {existing.monitoring}; {wanted} monitoring requested",
        investment=round(device.hardware_price, 2) if device else params.monitoring_upgrade_cost,
        payback="N/A - Maintenance benefit",
        item=device,
        benefits=["Panel-level fault detection", "Production tracking"],
    )


def build_timeline(upgrades: list[Upgrade]) -> list[dict[str, Any]]:
    timeline = []
    for phase, timeframe, priority in TIMELINE_PHASES:
        scheduled = [u for u in upgrades if u.priority == priority]
        timeline.append({
            "phase": phase,
            "timeframe": timeframe,
            "upgrades": [u.component for u in scheduled],
            "investment": round(sum(u.investment for u in scheduled), 2),
        })
    return timeline


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def generate_upgrade_path(
    existing: ExistingSystem | None,
    requirements: SystemRequirements,
    catalog: EquipmentCatalog,
    constraints: Constraints | None = None,
    params: RecommendationParameters = DEFAULT_PARAMETERS,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> UpgradePlan:
    """Prioritised upgrades for ``existing``.

    Without an installed system there is nothing to upgrade; the plan then
    carries a message and a fresh system design instead.
    """
    if existing is None:
        return UpgradePlan(
            message=NO_EXISTING_SYSTEM,
            new_system=generate_system_design(requirements, catalog, constraints, params, weights),
        )

    checks = (_panel_upgrade, _battery_upgrade, _monitoring_upgrade)
    upgrades = [u for u in (check(existing, requirements, catalog, params) for check in checks) if u]
    upgrades.sort(key=lambda u: PRIORITY_ORDER[u.priority])
    return UpgradePlan(
        upgrades=upgrades,
        timeline=build_timeline(upgrades),
        total_investment=round(sum(u.investment for u in upgrades), 2),
    )
