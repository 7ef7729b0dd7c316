"""Shared test fixtures for SolarMatch engine and API tests."""

from __future__ import annotations

import copy

import pytest

from engine.advisor.requirements import (
    Constraints,
    Installation,
    Location,
    Preferences,
    SystemRequirements,
)
from engine.catalog.catalog import EquipmentCatalog
from engine.catalog.loader import catalog_from_records

PANEL_CERTS = ["IEC 61215", "IEC 61730", "UL 1703"]
INVERTER_CERTS = ["UL 1741", "IEEE 1547"]


# ======================================================================
# Catalog fixtures
# ======================================================================

CATALOG_RECORDS = {
    "panels": [
        {
            "id": "acme-400",
            "manufacturer": "Acme Solar",
            "model": "SolarMax Pro Panel 400",
            "type": "monocrystalline",
            "wattage": 400,
            "efficiency": 22.1,
            "dimensions": {"length": 1722, "width": 1134, "thickness": 30},
            "weight": 21.5,
            "temperatureCoefficient": -0.30,
            "warranty": {"product": 25, "performance": 25},
            "certifications": PANEL_CERTS,
            "pricePerWatt": 0.43,
            "tier": 1,
            "leadTimeDays": 5,
        },
        {
            "id": "brightco-380",
            "manufacturer": "BrightCo",
            "model": "BC-380 Mono",
            "type": "monocrystalline",
            "wattage": 380,
            "efficiency": 20.5,
            "dimensions": {"length": 1755, "width": 1038, "thickness": 35},
            "weight": 20.0,
            "temperature_coefficient": -0.36,
            "warranty": {"product": 12, "performance": 25},
            "certifications": PANEL_CERTS,
            "price_per_watt": 0.38,
            "tier": 2,
        },
        {
            "id": "valuesun-300",
            "manufacturer": "ValueSun",
            "model": "VS-300 Poly",
            "type": "polycrystalline",
            "wattage": 300,
            "efficiency": 18.0,
            "dimensions": {"length": 1650, "width": 992, "thickness": 35},
            "weight": 18.5,
            "temperature_coefficient": -0.40,
            "warranty": {"product": 10, "performance": 25},
            "certifications": PANEL_CERTS,
            "price_per_watt": 0.30,
            "tier": 3,
        },
        {
            "id": "premia-410",
            "manufacturer": "Premia",
            "model": "Stealth 410",
            "type": "monocrystalline",
            "wattage": 410,
            "efficiency": 21.8,
            "dimensions": {"length": 1722, "width": 1134, "thickness": 30},
            "weight": 21.0,
            "temperature_coefficient": -0.26,
            "warranty": {"product": 25, "performance": 30},
            "certifications": PANEL_CERTS,
            "price_per_watt": 0.70,
            "tier": 1,
            "appearance": "stealth",
        },
        {
            "id": "oldsun-405",
            "manufacturer": "OldSun",
            "model": "OS-405",
            "type": "monocrystalline",
            "wattage": 405,
            "efficiency": 21.0,
            "dimensions": {"length": 1722, "width": 1134, "thickness": 30},
            "weight": 22.0,
            "temperature_coefficient": -0.35,
            "warranty": {"product": 12, "performance": 25},
            "certifications": PANEL_CERTS,
            "price_per_watt": 0.40,
            "tier": 1,
            "availability": "discontinued",
        },
    ],
    "inverters": [
        {
            "id": "stringer-5000",
            "manufacturer": "Stringer Power",
            "model": "SP-5000",
            "type": "string",
            "capacity": 5000,
            "efficiency": {"peak": 97.5, "cec": 97.0, "euro": 97.2},
            "input_voltage": {"min": 100, "max": 600, "nominal": 380},
            "warranty": 12,
            "certifications": INVERTER_CERTS,
            "price_per_watt": 0.25,
        },
        {
            "id": "hybrid-7600",
            "manufacturer": "Hybrid Co",
            "model": "HX-7600",
            "type": "string",
            "capacity": 7600,
            "efficiency": {"peak": 97.0, "cec": 96.5, "euro": 96.8},
            "input_voltage": {"min": 150, "max": 600, "nominal": 400},
            "warranty": 10,
            "certifications": INVERTER_CERTS,
            "price_per_watt": 0.30,
            "battery_ready": True,
        },
        {
            "id": "micro-350",
            "manufacturer": "MicroCo",
            "model": "M350",
            "type": "micro",
            "capacity": 350,
            "efficiency": {"peak": 97.3, "cec": 96.8, "euro": 96.9},
            "input_voltage": {"min": 20, "max": 60, "nominal": 40},
            "warranty": 25,
            "certifications": INVERTER_CERTS,
            "price_per_watt": 0.50,
        },
    ],
    "batteries": [
        {
            "id": "ac-battery-13",
            "manufacturer": "StoreWell",
            "model": "Home 13.5",
            "technology": "lithium-ion",
            "capacity": 13.5,
            "power": 5.0,
            "round_trip_efficiency": 90.0,
            "cycle_life": 5000,
            "warranty": 10,
            "price_per_kwh": 700,
            "coupling": "ac",
        },
        {
            "id": "dc-battery-10",
            "manufacturer": "Hybrid Co",
            "model": "HB-10",
            "technology": "lithium-iron-phosphate",
            "capacity": 10.0,
            "power": 5.0,
            "round_trip_efficiency": 95.0,
            "cycle_life": 6000,
            "warranty": 10,
            "price_per_kwh": 650,
            "coupling": "dc",
        },
        {
            "id": "lead-6",
            "manufacturer": "OldStore",
            "model": "LA-6",
            "technology": "lead-acid",
            "capacity": 6.0,
            "power": 2.0,
            "round_trip_efficiency": 80.0,
            "cycle_life": 1200,
            "warranty": 3,
            "price_per_kwh": 200,
            "availability": "discontinued",
        },
    ],
    "racking": [
        {
            "id": "rail-penetrating",
            "manufacturer": "RailCo",
            "model": "XR Rail",
            "system_type": "penetrating",
            "roof_types": ["asphalt_shingle", "tile", "metal_seam"],
            "roof_pitch": {"min": 10, "max": 60},
            "panel_length": {"min": 1500, "max": 2300},
            "panel_width": {"min": 900, "max": 1200},
            "panel_weight": {"min": 15, "max": 30},
            "price_per_panel": 45,
            "warranty": 20,
        },
        {
            "id": "ballast-flat",
            "manufacturer": "FlatCo",
            "model": "Ballast 10",
            "system_type": "ballasted",
            "roof_types": ["flat"],
            "roof_pitch": {"min": 0, "max": 7},
            "panel_length": {"min": 1500, "max": 2300},
            "panel_width": {"min": 900, "max": 1200},
            "panel_weight": {"min": 15, "max": 30},
            "price_per_panel": 60,
            "warranty": 20,
        },
    ],
    "mounting": [
        {
            "id": "clamp-30-40",
            "manufacturer": "RailCo",
            "model": "Universal Clamp",
            "hardware_type": "mid_clamp",
            "roof_types": ["asphalt_shingle", "tile", "metal_seam"],
            "panel_thickness": {"min": 30, "max": 40},
            "price": 3.5,
            "warranty": 20,
        },
    ],
    "electrical": [
        {
            "id": "rsd-1",
            "manufacturer": "SafeCo",
            "model": "RSD-1",
            "component_type": "rapid_shutdown",
            "max_voltage": 600,
            "max_current": 15,
            "price": 45,
            "rapid_shutdown": True,
            "warranty": 25,
        },
    ],
    "monitoring": [
        {
            "id": "monitor-basic",
            "manufacturer": "WatchCo",
            "model": "Basic Meter",
            "device_type": "energy_meter",
            "service_tier": "basic",
            "compatible_inverters": ["Stringer Power", "Hybrid Co"],
            "hardware_price": 150,
            "warranty": 2,
        },
        {
            "id": "monitor-advanced",
            "manufacturer": "WatchCo",
            "model": "Panel Insight",
            "device_type": "gateway",
            "service_tier": "advanced",
            "compatible_inverters": ["Stringer Power"],
            "hardware_price": 400,
            "subscription_monthly": 5,
            "warranty": 5,
        },
    ],
}


@pytest.fixture
def catalog_records() -> dict:
    return copy.deepcopy(CATALOG_RECORDS)


@pytest.fixture
def catalog(catalog_records) -> EquipmentCatalog:
    return catalog_from_records(catalog_records)


# ======================================================================
# Request fixtures
# ======================================================================

@pytest.fixture
def make_requirements():
    """Factory for SystemRequirements with sensible residential defaults."""

    def _make(
        system_size: float = 9.2,
        priorities: list[str] | None = None,
        budget: float | None = None,
        **overrides,
    ) -> SystemRequirements:
        return SystemRequirements(
            system_size=system_size,
            priorities=priorities if priorities is not None else ["efficiency"],
            budget=budget,
            location=overrides.get("location", Location(latitude=37.7, longitude=-122.4)),
            installation=overrides.get("installation", Installation(roof_area=120.0)),
            preferences=overrides.get("preferences", Preferences()),
        )

    return _make


@pytest.fixture
def requirements(make_requirements) -> SystemRequirements:
    return make_requirements()


@pytest.fixture
def no_constraints() -> Constraints:
    return Constraints()
