"""
Recommendation inputs and their validation.

Validation runs before any catalog access and reports every failing field at
once so a form can highlight all of them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from engine.catalog.catalog import EquipmentCatalog
from engine.catalog.loader import item_from_record, normalize_keys
from engine.catalog.models import (
    INVERTER_TYPES,
    MONITORING_TIERS,
    PANEL_APPEARANCES,
    PANEL_TYPES,
    Battery,
    Inverter,
    Panel,
)
from engine.errors import CatalogRecordError, FieldError, RecommendationValidationError


REQUEST_TYPES = ("system_design", "component_alternative", "upgrade_path", "cost_optimization")
PRIORITIES = ("cost", "efficiency", "reliability", "aesthetics", "performance")
SHADING_LEVELS = ("none", "minimal", "moderate", "significant")
BRAND_PREFERENCES = ("tier1_only", "value_focused", "premium_only", "no_preference")
MAINTENANCE_PREFERENCES = ("minimal", "standard", "proactive")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------
@dataclass
class Location:
    latitude: float = 0.0
    longitude: float = 0.0
    climate: str = "temperate"
    utility: str | None = None


@dataclass
class Installation:
    roof_type: str = "asphalt_shingle"
    roof_area: float = 100.0        # m²
    roof_pitch: float = 20.0        # degrees
    azimuth: float = 180.0          # degrees
    shading: str = "none"
    structural_limitations: list[str] = field(default_factory=list)


@dataclass
class Preferences:
    panel_type: str | None = None
    inverter_type: str | None = None
    battery_storage: bool = False
    battery_capacity: float | None = None   # kWh
    monitoring: str = "basic"
    aesthetics: str = "standard"
    brand_preference: str = "no_preference"


@dataclass
class SystemRequirements:
    system_size: float                       # kW DC
    priorities: list[str]
    location: Location = field(default_factory=Location)
    installation: Installation = field(default_factory=Installation)
    preferences: Preferences = field(default_factory=Preferences)
    budget: float | None = None


@dataclass
class Constraints:
    max_budget: float | None = None
    max_payback_period: float | None = None   # years
    required_warranty: float | None = None    # years
    installation_timeline: float | None = None  # days
    maintenance_preference: str | None = None


@dataclass
class ExistingSystem:
    panel: Panel | None = None
    panel_count: int = 0
    inverter: Inverter | None = None
    inverter_count: int = 1
    battery: Battery | None = None
    battery_count: int = 1
    monitoring: str = "basic"

    @property
    def array_kw(self) -> float:
        if self.panel is None:
            return 0.0
        return self.panel.wattage * self.panel_count / 1000


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class _Collector:
    def __init__(self) -> None:
        self.errors: list[FieldError] = []

    def add(self, field_name: str, message: str, category: str) -> None:
        self.errors.append(FieldError(field_name, message, category))

    def positive(self, field_name: str, value: Any, category: str, required: bool = True) -> None:
        if value is None:
            if required:
                self.add(field_name, "is required", category)
            return
        if not _is_number(value) or value <= 0:
            self.add(field_name, "must be greater than 0", category)

    def between(self, field_name: str, value: Any, low: float, high: float, category: str) -> None:
        if value is None:
            return
        if not _is_number(value) or not low <= value <= high:
            self.add(field_name, f"must be between {low:g} and {high:g}", category)

    def choice(self, field_name: str, value: Any, choices: tuple[str, ...], category: str) -> None:
        if value is None:
            return
        if value not in choices:
            self.add(field_name, f"must be one of: {', '.join(choices)}", category)


def validate_request(
    request_type: str,
    requirements: SystemRequirements,
    constraints: Constraints | None = None,
    has_existing_system: bool = False,
) -> None:
    """Raise RecommendationValidationError listing every invalid field."""
    errors = request_errors(request_type, requirements, constraints, has_existing_system)
    if errors:
        raise RecommendationValidationError(errors)


def request_errors(
    request_type: str,
    requirements: SystemRequirements,
    constraints: Constraints | None = None,
    has_existing_system: bool = False,
) -> list[FieldError]:
    c = _Collector()

    c.choice("type", request_type, REQUEST_TYPES, "request")
    if request_type is None:
        c.add("type", "is required", "request")

    c.positive("requirements.system_size", requirements.system_size, "requirements")
    c.positive("requirements.budget", requirements.budget, "requirements", required=False)
    if not requirements.priorities:
        c.add("requirements.priorities", "must contain at least one priority", "requirements")
    else:
        for i, p in enumerate(requirements.priorities):
            c.choice(f"requirements.priorities[{i}]", p, PRIORITIES, "requirements")

    loc = requirements.location
    c.between("requirements.location.latitude", loc.latitude, -90, 90, "location")
    c.between("requirements.location.longitude", loc.longitude, -180, 180, "location")

    inst = requirements.installation
    if not inst.roof_type:
        c.add("requirements.installation.roof_type", "is required", "installation")
    c.positive("requirements.installation.roof_area", inst.roof_area, "installation")
    c.between("requirements.installation.roof_pitch", inst.roof_pitch, 0, 90, "installation")
    c.between("requirements.installation.azimuth", inst.azimuth, 0, 360, "installation")
    c.choice("requirements.installation.shading", inst.shading, SHADING_LEVELS, "installation")

    prefs = requirements.preferences
    c.choice("requirements.preferences.panel_type", prefs.panel_type, PANEL_TYPES, "preferences")
    c.choice("requirements.preferences.inverter_type", prefs.inverter_type, INVERTER_TYPES, "preferences")
    c.positive("requirements.preferences.battery_capacity", prefs.battery_capacity, "preferences", required=False)
    c.choice("requirements.preferences.monitoring", prefs.monitoring, MONITORING_TIERS, "preferences")
    c.choice("requirements.preferences.aesthetics", prefs.aesthetics, PANEL_APPEARANCES, "preferences")
    c.choice("requirements.preferences.brand_preference", prefs.brand_preference, BRAND_PREFERENCES, "preferences")

    if constraints is not None:
        c.positive("constraints.max_budget", constraints.max_budget, "constraints", required=False)
        c.positive("constraints.max_payback_period", constraints.max_payback_period, "constraints", required=False)
        c.between("constraints.required_warranty", constraints.required_warranty, 0, 50, "constraints")
        c.positive("constraints.installation_timeline", constraints.installation_timeline, "constraints", required=False)
        c.choice(
            "constraints.maintenance_preference",
            constraints.maintenance_preference,
            MAINTENANCE_PREFERENCES,
            "constraints",
        )

    if request_type == "component_alternative" and not has_existing_system:
        c.add("existing_system", "is required for component_alternative requests", "existing_system")

    return c.errors


# ---------------------------------------------------------------------------
# Existing system snapshot
# ---------------------------------------------------------------------------

# Placeholder values for snapshot fields the installer rarely knows
_SNAPSHOT_DEFAULTS: dict[str, dict[str, Any]] = {
    "panel": {
        "id": "existing-panel",
        "manufacturer": "Existing",
        "model": "Installed panel",
        "type": "monocrystalline",
        "dimensions": {"length": 1700, "width": 1000, "thickness": 35},
        "weight": 20.0,
        "price_per_watt": 0.50,
        "warranty": {"product": 10, "performance": 25},
        "certifications": ["IEC 61215", "IEC 61730"],
    },
    "inverter": {
        "id": "existing-inverter",
        "manufacturer": "Existing",
        "model": "Installed inverter",
        "type": "string",
        "efficiency": {"peak": 97.0, "cec": 96.0, "euro": 96.5},
        "price_per_watt": 0.30,
        "warranty": {"product": 10},
        "certifications": ["UL 1741", "IEEE 1547"],
    },
    "battery": {
        "id": "existing-battery",
        "manufacturer": "Existing",
        "model": "Installed battery",
        "technology": "lithium-ion",
        "power": 5.0,
        "round_trip_efficiency": 90.0,
        "price_per_kwh": 600.0,
        "warranty": {"years": 10},
    },
}


# Snapshot key -> (equipment category, field path)
_SNAPSHOT_COMPONENTS = (
    ("panels", "panel", "existing_system.panels[0]"),
    ("inverter", "inverter", "existing_system.inverter"),
    ("battery", "battery", "existing_system.battery"),
)


def _first_record(snap: dict[str, Any], key: str) -> Any:
    value = snap.get(key)
    if key == "panels" and isinstance(value, list):
        return value[0] if value else None
    return value


def snapshot_errors(snapshot: Any) -> list[FieldError]:
    """Shape, quantity and raw-spec errors of a snapshot.

    Needs no catalog: components referencing a catalog id are resolved
    later by ``existing_system_from_snapshot``.
    """
    if not snapshot:
        return []
    if not isinstance(snapshot, dict):
        return [FieldError("existing_system", "must be an object", "existing_system")]

    c = _Collector()
    snap = normalize_keys(snapshot)
    c.choice("existing_system.monitoring", snap.get("monitoring") or None, MONITORING_TIERS, "existing_system")

    for key, category, path in _SNAPSHOT_COMPONENTS:
        record = _first_record(snap, key)
        if not record:
            continue
        if not isinstance(record, dict):
            c.add(path, "must be an object", "existing_system")
            continue
        quantity = record.get("quantity")
        if quantity is not None and not (
            isinstance(quantity, int) and not isinstance(quantity, bool) and quantity > 0
        ):
            c.add(f"{path}.quantity", "must be a positive integer", "existing_system")
        if record.get("id") is None:
            try:
                item_from_record(category, {**_SNAPSHOT_DEFAULTS[category], **record})
            except CatalogRecordError as exc:
                c.add(path, str(exc), "existing_system")
    return c.errors


def _snapshot_item(category: str, rec: dict[str, Any], catalog: EquipmentCatalog | None):
    item_id = rec.get("id")
    if catalog is not None and item_id is not None:
        known = catalog.get_by_id(str(item_id))
        if known is not None and known.category == category:
            return known
    return item_from_record(category, {**_SNAPSHOT_DEFAULTS[category], **rec})


def existing_system_from_snapshot(
    snapshot: dict[str, Any] | None,
    system_size: float,
    catalog: EquipmentCatalog | None = None,
) -> ExistingSystem | None:
    """Turn a loosely-typed snapshot into typed components.

    Components may reference catalog ids or carry their own specs; missing
    specs fall back to generic residential values.  The array size defaults
    to the requested system size when no quantity is given.

    The snapshot is checked with ``snapshot_errors`` before the catalog is
    consulted.
    """
    if not snapshot:
        return None
    errors = snapshot_errors(snapshot)
    if errors:
        raise RecommendationValidationError(errors)

    snap = normalize_keys(snapshot)
    existing = ExistingSystem(monitoring=snap.get("monitoring") or "basic")
    try:
        panels = snap.get("panels")
        rec = _first_record(snap, "panels")
        if rec:
            existing.panel = _snapshot_item("panel", rec, catalog)
            if rec.get("quantity"):
                existing.panel_count = rec["quantity"]
            elif isinstance(panels, list) and len(panels) > 1:
                existing.panel_count = len(panels)
            elif _is_number(system_size) and system_size > 0:
                existing.panel_count = math.ceil(system_size * 1000 / existing.panel.wattage)
            else:
                raise RecommendationValidationError([FieldError(
                    "existing_system.panels[0].quantity",
                    "is required when the system size is not valid",
                    "existing_system",
                )])

        rec = _first_record(snap, "inverter")
        if rec:
            existing.inverter = _snapshot_item("inverter", rec, catalog)
            existing.inverter_count = rec.get("quantity") or 1

        rec = _first_record(snap, "battery")
        if rec:
            existing.battery = _snapshot_item("battery", rec, catalog)
            existing.battery_count = rec.get("quantity") or 1
    except CatalogRecordError as exc:
        # id given but not in the catalog, and the defaults do not fit
        raise RecommendationValidationError(
            [FieldError("existing_system", str(exc), "existing_system")]
        ) from exc

    return existing
