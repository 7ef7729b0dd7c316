"""Build catalog items from plain JSON-style records."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from engine.catalog.catalog import EquipmentCatalog
from engine.catalog.models import (
    VARIANTS,
    Battery,
    Dimensions,
    ElectricalComponent,
    EquipmentItem,
    Inverter,
    InverterEfficiency,
    MonitoringDevice,
    MountingHardware,
    Panel,
    RackingSystem,
    VoltageWindow,
    Warranty,
)
from engine.errors import CatalogRecordError

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent.parent / "data" / "equipment_catalog.json"


def _camel_to_snake(key: str) -> str:
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def normalize_keys(record: dict[str, Any]) -> dict[str, Any]:
    """Recursively convert camelCase keys to snake_case."""
    result: dict[str, Any] = {}
    for key, value in record.items():
        if isinstance(value, dict):
            value = normalize_keys(value)
        result[_camel_to_snake(key)] = value
    return result


def _range(value: Any) -> tuple[float, float]:
    if isinstance(value, dict):
        return float(value["min"]), float(value["max"])
    low, high = value
    return float(low), float(high)


def _warranty(value: Any) -> Warranty:
    if isinstance(value, (int, float)):
        return Warranty(product_years=int(value))
    return Warranty(
        product_years=int(value.get("product_years", value.get("product", value.get("years", 0)))),
        performance_years=int(value.get("performance_years", value.get("performance", 0))),
    )


def _common(rec: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(rec["id"]),
        "manufacturer": rec["manufacturer"],
        "model": rec["model"],
        "warranty": _warranty(rec.get("warranty", 0)),
        "availability": rec.get("availability", "in-stock"),
        "description": rec.get("description", ""),
        "certifications": tuple(rec.get("certifications", ())),
        "lead_time_days": rec.get("lead_time_days"),
    }


def _panel(rec: dict[str, Any]) -> Panel:
    dims = rec["dimensions"]
    return Panel(
        **_common(rec),
        type=rec["type"],
        wattage=float(rec["wattage"]),
        efficiency=float(rec["efficiency"]),
        dimensions=Dimensions(
            length_mm=float(dims["length"]),
            width_mm=float(dims["width"]),
            thickness_mm=float(dims.get("thickness", 35)),
        ),
        weight_kg=float(rec["weight"]),
        temperature_coefficient=float(rec.get("temperature_coefficient", -0.35)),
        price_per_watt=float(rec["price_per_watt"]),
        tier=int(rec.get("tier", 3)),
        appearance=rec.get("appearance", "standard"),
    )


def _inverter(rec: dict[str, Any]) -> Inverter:
    eff = rec["efficiency"]
    if isinstance(eff, (int, float)):
        eff = {"peak": eff, "cec": eff, "euro": eff}
    volts = rec.get("input_voltage", {"min": 0, "max": 1000, "nominal": 400})
    return Inverter(
        **_common(rec),
        type=rec["type"],
        capacity_w=float(rec["capacity"]),
        efficiency=InverterEfficiency(
            peak=float(eff.get("peak", eff["cec"])),
            cec=float(eff["cec"]),
            euro=float(eff.get("euro", eff["cec"])),
        ),
        input_voltage=VoltageWindow(
            min_v=float(volts["min"]),
            max_v=float(volts["max"]),
            nominal_v=float(volts.get("nominal", (volts["min"] + volts["max"]) / 2)),
        ),
        price_per_watt=float(rec["price_per_watt"]),
        mppt_channels=int(rec.get("mppt_channels", 1)),
        battery_ready=bool(rec.get("battery_ready", False)),
        tier=rec.get("tier"),
    )


def _battery(rec: dict[str, Any]) -> Battery:
    return Battery(
        **_common(rec),
        technology=rec["technology"],
        capacity_kwh=float(rec["capacity"]),
        power_kw=float(rec["power"]),
        round_trip_efficiency=float(rec["round_trip_efficiency"]),
        cycle_life=int(rec.get("cycle_life", 0)),
        price_per_kwh=float(rec["price_per_kwh"]),
        coupling=rec.get("coupling", "ac"),
    )


def _racking(rec: dict[str, Any]) -> RackingSystem:
    return RackingSystem(
        **_common(rec),
        system_type=rec["system_type"],
        roof_types=tuple(rec["roof_types"]),
        roof_pitch_range=_range(rec.get("roof_pitch", (0, 90))),
        panel_length_range=_range(rec.get("panel_length", (0, 3000))),
        panel_width_range=_range(rec.get("panel_width", (0, 1500))),
        panel_weight_range=_range(rec.get("panel_weight", (0, 50))),
        price_per_panel=float(rec["price_per_panel"]),
    )


def _mounting(rec: dict[str, Any]) -> MountingHardware:
    return MountingHardware(
        **_common(rec),
        hardware_type=rec["hardware_type"],
        roof_types=tuple(rec.get("roof_types", ())),
        panel_thickness_range=_range(rec.get("panel_thickness", (0, 50))),
        price=float(rec["price"]),
    )


def _electrical(rec: dict[str, Any]) -> ElectricalComponent:
    return ElectricalComponent(
        **_common(rec),
        component_type=rec["component_type"],
        max_voltage=float(rec["max_voltage"]),
        max_current=float(rec["max_current"]),
        price=float(rec["price"]),
        rapid_shutdown=bool(rec.get("rapid_shutdown", False)),
    )


def _monitoring(rec: dict[str, Any]) -> MonitoringDevice:
    return MonitoringDevice(
        **_common(rec),
        device_type=rec["device_type"],
        service_tier=rec.get("service_tier", "basic"),
        compatible_inverters=tuple(rec.get("compatible_inverters", ())),
        hardware_price=float(rec["hardware_price"]),
        subscription_monthly=float(rec.get("subscription_monthly", 0.0)),
    )


_BUILDERS = {
    "panel": _panel,
    "inverter": _inverter,
    "battery": _battery,
    "racking": _racking,
    "mounting": _mounting,
    "electrical": _electrical,
    "monitoring": _monitoring,
}


def item_from_record(category: str, record: dict[str, Any]) -> EquipmentItem:
    """Validate one record and build its typed item.

    Raises CatalogRecordError naming the category and record id on any
    missing field, bad type or violated invariant.
    """
    if category not in VARIANTS:
        raise CatalogRecordError(category, record.get("id"), "unknown equipment category")
    rec = normalize_keys(record)
    try:
        return _BUILDERS[category](rec)
    except KeyError as exc:
        raise CatalogRecordError(category, rec.get("id"), f"missing field {exc.args[0]!r}") from exc
    except (TypeError, ValueError) as exc:
        raise CatalogRecordError(category, rec.get("id"), str(exc)) from exc


# Plural keys used in the bundled JSON file
_SECTION_KEYS = {
    "panels": "panel",
    "inverters": "inverter",
    "batteries": "battery",
    "racking": "racking",
    "mounting": "mounting",
    "electrical": "electrical",
    "monitoring": "monitoring",
}


def catalog_from_records(data: dict[str, list[dict[str, Any]]]) -> EquipmentCatalog:
    """Build a catalog from ``{section: [record, ...]}``."""
    items: list[EquipmentItem] = []
    for section, records in data.items():
        category = _SECTION_KEYS.get(section, section)
        for record in records:
            items.append(item_from_record(category, record))
    try:
        catalog = EquipmentCatalog(items)
    except ValueError as exc:
        raise CatalogRecordError("catalog", None, str(exc)) from exc
    logger.info("Loaded equipment catalog with %d items", len(catalog))
    return catalog


def load_catalog(path: str | Path | None = None) -> EquipmentCatalog:
    """Read and validate a catalog JSON file (bundled reference data by default)."""
    catalog_path = Path(path) if path is not None else DEFAULT_CATALOG_PATH
    with open(catalog_path) as f:
        data = json.load(f)
    return catalog_from_records(data)
