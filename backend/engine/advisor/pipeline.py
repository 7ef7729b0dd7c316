"""
Recommendation pipeline.

validate -> gather candidates -> generate configurations -> score & rank ->
summarize.  One entry point, ``recommend``, dispatches on the request type
and wraps the type-specific payload with analysis notes and metadata.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from engine.advisor.alternatives import AlternativesResult, generate_component_alternatives
from engine.advisor.cost_optimization import CostOptimizationResult, generate_cost_optimization
from engine.advisor.parameters import DEFAULT_PARAMETERS, RecommendationParameters
from engine.advisor.requirements import Constraints, ExistingSystem, SystemRequirements, validate_request
from engine.advisor.scoring import DEFAULT_WEIGHTS, ScoringWeights
from engine.advisor.system_design import SystemDesignResult, generate_system_design
from engine.advisor.upgrade_path import UpgradePlan, generate_upgrade_path
from engine.catalog.catalog import EquipmentCatalog

logger = logging.getLogger(__name__)

DECISION_FACTORS = [
    "Equipment compatibility",
    "Performance optimization",
    "Cost effectiveness",
    "Reliability and warranty",
    "Installation requirements",
]

LIMITATIONS = [
    "Pricing subject to change",
    "Local permits and interconnection rules not evaluated",
    "Site conditions require professional assessment",
]

SYSTEM_LIFETIME_YEARS = 25

Payload = SystemDesignResult | AlternativesResult | UpgradePlan | CostOptimizationResult


@dataclass
class RecommendationResult:
    type: str
    payload: Payload
    analysis: dict[str, list[str]]
    metadata: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "recommendations": self.payload.to_dict(),
            "analysis": self.analysis,
            "metadata": self.metadata,
        }


def build_analysis(requirements: SystemRequirements, params: RecommendationParameters) -> dict[str, list[str]]:
    key_factors = [
        f"System size: {requirements.system_size:g} kW",
        f"Climate: {requirements.location.climate}",
        f"Roof type: {requirements.installation.roof_type}",
        f"Primary priority: {requirements.priorities[0]}",
    ]
    yield_kwh = params.annual_yield_kwh_per_kw * params.yield_factor(requirements.location.climate)
    assumptions = [
        f"Annual production of {yield_kwh:,.0f} kWh per installed kW",
        "Standard installation conditions",
        "Current equipment pricing and electricity rates",
        f"{SYSTEM_LIFETIME_YEARS}-year system lifetime",
    ]
    return {
        "key_factors": key_factors,
        "assumptions": assumptions,
        "limitations": list(LIMITATIONS),
    }


def confidence(payload: Payload, params: RecommendationParameters) -> float:
    """Base confidence, reduced when the catalog offered little to choose from."""
    base = params.base_confidence
    if isinstance(payload, UpgradePlan) and payload.new_system is not None:
        payload = payload.new_system

    if isinstance(payload, SystemDesignResult):
        if not payload.recommended:
            return round(base * 0.5, 1)
        if len(payload.recommended) < params.recommended_count:
            return base - 10
    elif isinstance(payload, AlternativesResult):
        if not (payload.panels or payload.inverters or payload.batteries):
            return round(base * 0.5, 1)
    elif isinstance(payload, CostOptimizationResult):
        if payload.baseline is None:
            return round(base * 0.5, 1)
    return base


def build_metadata(payload: Payload, params: RecommendationParameters, now: datetime) -> dict[str, Any]:
    return {
        "generated_at": now.isoformat(),
        "valid_for": f"{params.validity_days} days",
        "valid_until": (now + timedelta(days=params.validity_days)).isoformat(),
        "confidence": confidence(payload, params),
        "factors": list(DECISION_FACTORS),
    }


def recommend(
    request_type: str,
    requirements: SystemRequirements,
    catalog: EquipmentCatalog,
    constraints: Constraints | None = None,
    existing_system: ExistingSystem | None = None,
    params: RecommendationParameters | None = None,
    weights: ScoringWeights | None = None,
    now: datetime | None = None,
) -> RecommendationResult:
    """Produce a recommendation of the requested type.

    Parameters
    ----------
    request_type : str
        ``system_design``, ``component_alternative``, ``upgrade_path`` or
        ``cost_optimization``.
    requirements : SystemRequirements
        Target system and site.
    catalog : EquipmentCatalog
        Catalog snapshot; never modified.
    constraints : Constraints or None
        Budget, payback, warranty and timeline limits.
    existing_system : ExistingSystem or None
        Installed equipment; required for component alternatives.
    params, weights
        Engine constants and scoring weights; defaults when None.
    now : datetime or None
        Timestamp for the metadata; current UTC time when None.

    Returns
    -------
    RecommendationResult

    Raises
    ------
    RecommendationValidationError
        When any request field is invalid.  Raised before the catalog is
        consulted.
    """
    params = params or DEFAULT_PARAMETERS
    weights = weights or DEFAULT_WEIGHTS
    validate_request(request_type, requirements, constraints, has_existing_system=existing_system is not None)

    payload: Payload
    if request_type == "system_design":
        payload = generate_system_design(requirements, catalog, constraints, params, weights)
    elif request_type == "component_alternative":
        payload = generate_component_alternatives(existing_system, catalog, params)
    elif request_type == "upgrade_path":
        payload = generate_upgrade_path(existing_system, requirements, catalog, constraints, params, weights)
    else:
        payload = generate_cost_optimization(requirements, catalog, constraints, params)

    now = now or datetime.now(timezone.utc)
    result = RecommendationResult(
        type=request_type,
        payload=payload,
        analysis=build_analysis(requirements, params),
        metadata=build_metadata(payload, params, now),
    )
    logger.info(
        "Generated %s recommendation (confidence %.0f)",
        request_type, result.metadata["confidence"],
        extra={"request_type": request_type},
    )
    return result
