"""Tests for cost optimization."""

import pytest

from engine.advisor.cost_optimization import financing_options, generate_cost_optimization
from engine.advisor.requirements import Constraints, Preferences


class TestCostOptimization:
    def test_baseline_is_preferred_panel(self, catalog, requirements):
        result = generate_cost_optimization(requirements, catalog)
        assert result.baseline.id == "acme-400"

    def test_value_panels_cheaper_than_baseline(self, catalog, requirements):
        result = generate_cost_optimization(requirements, catalog)
        ids = [s.panel.id for s in result.panel_substitutions]
        # ValueSun is below the 19% floor
        assert ids == ["brightco-380"]
        sub = result.panel_substitutions[0]
        assert sub.panel_count == 25
        assert sub.savings == pytest.approx(23 * 172 - 25 * 380 * 0.38)
        assert sub.tradeoffs

    def test_right_sizing(self, catalog, requirements):
        sizing = generate_cost_optimization(requirements, catalog).sizing
        assert sizing["optimized_size_kw"] == pytest.approx(8.28)
        assert sizing["savings"] == pytest.approx(920 * 0.43 * 1.3, abs=0.01)
        assert sizing["production_change_kwh"] < 0

    def test_no_financing_within_budget(self, make_requirements):
        req = make_requirements(budget=20_000)
        assert financing_options(req, Constraints(max_budget=25_000)) == []
        assert financing_options(req, None) == []

    def test_financing_when_over_budget(self, catalog, make_requirements):
        req = make_requirements(budget=30_000)
        result = generate_cost_optimization(req, catalog, Constraints(max_budget=20_000))
        loan, ppa = result.financing
        assert loan.type == "solar_loan"
        assert loan.down_payment == pytest.approx(4_000)
        assert loan.monthly_payment > 0
        assert loan.total_cost > 30_000
        assert ppa.type == "ppa"
        assert ppa.down_payment == 0
        assert ppa.monthly_payment == pytest.approx(9.2 * 120 / 12)

    def test_no_panels_in_stock(self, catalog, make_requirements):
        req = make_requirements(preferences=Preferences(panel_type="thin-film"))
        result = generate_cost_optimization(req, catalog)
        # falls back to the best in-stock panel
        assert result.baseline.id == "acme-400"
        assert result.to_dict()["total_potential_savings"] >= 0
