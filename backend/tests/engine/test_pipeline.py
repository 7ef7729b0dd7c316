"""Tests for the recommendation pipeline entry point."""

from datetime import datetime, timedelta, timezone

import pytest

from engine.advisor.pipeline import DECISION_FACTORS, recommend
from engine.advisor.requirements import Constraints, ExistingSystem, Installation
from engine.errors import RecommendationValidationError

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class ExplodingCatalog:
    """Fails the test if anything touches the catalog."""

    def __getattr__(self, name):
        raise AssertionError(f"catalog accessed: {name}")


@pytest.fixture
def existing(catalog):
    return ExistingSystem(
        panel=catalog.get_by_id("acme-400"),
        panel_count=23,
        inverter=catalog.get_by_id("stringer-5000"),
        inverter_count=2,
    )


class TestRecommend:
    def test_system_design(self, catalog, requirements):
        result = recommend("system_design", requirements, catalog, now=NOW)
        data = result.to_dict()
        assert data["type"] == "system_design"
        assert set(data) == {"type", "recommendations", "analysis", "metadata"}
        assert len(data["recommendations"]["recommended_configurations"]) == 3

    def test_component_alternative(self, catalog, requirements, existing):
        result = recommend("component_alternative", requirements, catalog, existing_system=existing, now=NOW)
        data = result.to_dict()["recommendations"]
        assert data["current_system"]
        assert set(data["alternatives"]) == {"panels", "inverters", "batteries"}

    def test_upgrade_path(self, catalog, requirements, existing):
        result = recommend("upgrade_path", requirements, catalog, existing_system=existing, now=NOW)
        assert "upgrades" in result.to_dict()["recommendations"]

    def test_upgrade_path_without_system(self, catalog, requirements):
        data = recommend("upgrade_path", requirements, catalog, now=NOW).to_dict()["recommendations"]
        assert "new_system_recommendation" in data

    def test_cost_optimization(self, catalog, requirements):
        data = recommend("cost_optimization", requirements, catalog, now=NOW).to_dict()["recommendations"]
        assert data["baseline_panel"]["id"] == "acme-400"
        assert "total_potential_savings" in data

    def test_validation_before_catalog_access(self, make_requirements):
        with pytest.raises(RecommendationValidationError):
            recommend("system_design", make_requirements(system_size=-1), ExplodingCatalog())

    def test_component_alternative_needs_existing(self, requirements):
        with pytest.raises(RecommendationValidationError) as exc_info:
            recommend("component_alternative", requirements, ExplodingCatalog())
        assert exc_info.value.errors[0].field == "existing_system"

    def test_bad_constraints_rejected(self, requirements):
        with pytest.raises(RecommendationValidationError):
            recommend("system_design", requirements, ExplodingCatalog(), Constraints(max_payback_period=0))

    def test_deterministic(self, catalog, requirements):
        first = recommend("system_design", requirements, catalog, now=NOW).to_dict()
        second = recommend("system_design", requirements, catalog, now=NOW).to_dict()
        assert first == second


class TestMetadata:
    def test_validity_window(self, catalog, requirements):
        meta = recommend("system_design", requirements, catalog, now=NOW).metadata
        assert meta["generated_at"] == NOW.isoformat()
        assert meta["valid_for"] == "7 days"
        assert meta["valid_until"] == (NOW + timedelta(days=7)).isoformat()
        assert meta["factors"] == DECISION_FACTORS

    def test_full_confidence(self, catalog, requirements):
        assert recommend("system_design", requirements, catalog, now=NOW).metadata["confidence"] == 85

    def test_confidence_halved_without_recommendations(self, catalog, make_requirements):
        req = make_requirements(installation=Installation(roof_area=30))
        assert recommend("system_design", req, catalog, now=NOW).metadata["confidence"] == 42.5

    def test_analysis(self, catalog, requirements):
        analysis = recommend("system_design", requirements, catalog, now=NOW).analysis
        assert set(analysis) == {"key_factors", "assumptions", "limitations"}
        assert analysis["key_factors"][0] == "System size: 9.2 kW"
        assert analysis["key_factors"][3] == "Primary priority: efficiency"
        assert "Annual production of 1,350 kWh per installed kW" in analysis["assumptions"]
