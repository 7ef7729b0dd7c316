"""Tests for upgrade planning."""

from engine.advisor.requirements import ExistingSystem, Preferences
from engine.advisor.upgrade_path import NO_EXISTING_SYSTEM, generate_upgrade_path


def _old_system(catalog, **kwargs):
    return ExistingSystem(
        panel=catalog.get_by_id("valuesun-300"),
        panel_count=20,
        inverter=catalog.get_by_id("stringer-5000"),
        inverter_count=1,
        **kwargs,
    )


class TestUpgradePath:
    def test_no_existing_system(self, catalog, requirements):
        plan = generate_upgrade_path(None, requirements, catalog)
        data = plan.to_dict()
        assert data["message"] == NO_EXISTING_SYSTEM
        assert "new_system_recommendation" in data
        assert plan.new_system.recommended

    def test_low_efficiency_panels_replaced(self, catalog, requirements):
        plan = generate_upgrade_path(_old_system(catalog), requirements, catalog)
        panels = next(u for u in plan.upgrades if u.component == "panels")
        assert panels.priority == "high"
        assert panels.item.tier == 1
        assert panels.item.efficiency >= 21
        # keeps the 6 kW array size
        assert panels.quantity == 15
        assert panels.investment == round(15 * panels.item.unit_price, 2)

    def test_battery_added_when_wanted(self, catalog, make_requirements):
        req = make_requirements(system_size=6.0, preferences=Preferences(battery_storage=True))
        plan = generate_upgrade_path(_old_system(catalog), req, catalog)
        battery = next(u for u in plan.upgrades if u.component == "battery")
        assert battery.priority == "medium"
        assert battery.item.technology == "lithium-ion"
        assert battery.item.capacity_kwh >= 6.0 * 1.2

    def test_monitoring_upgrade(self, catalog, make_requirements):
        req = make_requirements(preferences=Preferences(monitoring="advanced"))
        plan = generate_upgrade_path(_old_system(catalog), req, catalog)
        monitoring = next(u for u in plan.upgrades if u.component == "monitoring")
        assert monitoring.priority == "low"
        assert monitoring.item.id == "monitor-advanced"
        assert monitoring.investment == 400

    def test_sorted_and_totalled(self, catalog, make_requirements):
        req = make_requirements(
            system_size=6.0,
            preferences=Preferences(battery_storage=True, monitoring="advanced"),
        )
        plan = generate_upgrade_path(_old_system(catalog), req, catalog)
        assert [u.priority for u in plan.upgrades] == ["high", "medium", "low"]
        assert plan.total_investment == round(sum(u.investment for u in plan.upgrades), 2)
        assert [p["timeframe"] for p in plan.timeline] == ["0-6 months", "6-18 months", "18+ months"]
        assert plan.timeline[0]["upgrades"] == ["panels"]

    def test_efficient_system_needs_nothing(self, catalog, requirements):
        existing = ExistingSystem(
            panel=catalog.get_by_id("acme-400"),
            panel_count=23,
            inverter=catalog.get_by_id("stringer-5000"),
            inverter_count=2,
        )
        plan = generate_upgrade_path(existing, requirements, catalog)
        assert plan.upgrades == []
        assert plan.total_investment == 0
