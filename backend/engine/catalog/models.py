"""Typed equipment records.

Every item in the catalog is one of seven closed variants sharing a common
base (identity, warranty, availability, certifications).  Variants expose a
small set of uniform accessors (``power_w``, ``capacity``, ``efficiency_pct``,
``price_metric`` ...) so criteria queries and search can treat them alike
without ``isinstance`` ladders.

Records validate their own invariants in ``__post_init__``; anything that
reaches scoring code is well formed.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, ClassVar


AVAILABILITY_STATES = ("in-stock", "backorder", "discontinued")

PANEL_TYPES = ("monocrystalline", "polycrystalline", "thin-film", "bifacial")
INVERTER_TYPES = ("string", "power-optimizer", "micro", "central")
BATTERY_TECHNOLOGIES = ("lithium-ion", "lithium-iron-phosphate", "lead-acid", "saltwater")
BATTERY_COUPLINGS = ("ac", "dc")
RACKING_TYPES = ("penetrating", "ballasted", "ground_mount", "tracking", "carport")
MONITORING_TIERS = ("basic", "advanced", "professional")
PANEL_APPEARANCES = ("standard", "premium", "stealth")


def _require_positive(name: str, value: float) -> None:
    if value is None or value <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")


def _require_percentage(name: str, value: float) -> None:
    _require_positive(name, value)
    if value > 100:
        raise ValueError(f"{name} must be <= 100, got {value!r}")


def _require_choice(name: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}, got {value!r}")


def _require_range(name: str, bounds: tuple[float, float]) -> None:
    low, high = bounds
    if low > high:
        raise ValueError(f"{name} lower bound {low} exceeds upper bound {high}")


# ---------------------------------------------------------------------------
# Shared value types
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Warranty:
    product_years: int
    performance_years: int = 0

    @property
    def years(self) -> int:
        """Longest coverage the manufacturer offers."""
        return max(self.product_years, self.performance_years)


@dataclass(frozen=True)
class Dimensions:
    length_mm: float
    width_mm: float
    thickness_mm: float

    @property
    def area_m2(self) -> float:
        return self.length_mm * self.width_mm / 1e6


@dataclass(frozen=True)
class InverterEfficiency:
    peak: float
    cec: float      # California Energy Commission weighted
    euro: float


@dataclass(frozen=True)
class VoltageWindow:
    min_v: float
    max_v: float
    nominal_v: float


# ---------------------------------------------------------------------------
# Base record
# ---------------------------------------------------------------------------
@dataclass(frozen=True, kw_only=True)
class EquipmentItem:
    category: ClassVar[str] = ""

    id: str
    manufacturer: str
    model: str
    warranty: Warranty
    availability: str = "in-stock"
    description: str = ""
    certifications: tuple[str, ...] = ()
    lead_time_days: int | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id must not be empty")
        if not self.manufacturer or not self.model:
            raise ValueError("manufacturer and model are required")
        _require_choice("availability", self.availability, AVAILABILITY_STATES)

    # Uniform accessors.  None means "this variant has no such attribute".
    @property
    def type_tag(self) -> str | None:
        return None

    @property
    def power_w(self) -> float | None:
        return None

    @property
    def capacity(self) -> float | None:
        return None

    @property
    def efficiency_pct(self) -> float | None:
        return None

    @property
    def tier_rank(self) -> int | None:
        return None

    @property
    def price_metric(self) -> float | None:
        """Headline price: $/W, $/kWh or $/unit depending on the variant."""
        return None

    @property
    def unit_price(self) -> float:
        return 0.0

    @property
    def price_unit(self) -> str:
        return "unit"

    @property
    def supported_roof_types(self) -> tuple[str, ...] | None:
        return None

    @property
    def in_stock(self) -> bool:
        return self.availability == "in-stock"

    def searchable_text(self) -> str:
        parts = [
            self.manufacturer,
            self.model,
            self.description,
            self.category,
            self.type_tag or "",
            " ".join(self.certifications),
        ]
        return " ".join(p for p in parts if p).lower()

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["category"] = self.category
        return data


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------
@dataclass(frozen=True, kw_only=True)
class Panel(EquipmentItem):
    category: ClassVar[str] = "panel"

    type: str
    wattage: float
    efficiency: float
    dimensions: Dimensions
    weight_kg: float
    temperature_coefficient: float   # %/°C, negative
    price_per_watt: float
    tier: int = 3
    appearance: str = "standard"

    def __post_init__(self) -> None:
        super().__post_init__()
        _require_choice("type", self.type, PANEL_TYPES)
        _require_positive("wattage", self.wattage)
        _require_percentage("efficiency", self.efficiency)
        _require_positive("weight_kg", self.weight_kg)
        _require_positive("price_per_watt", self.price_per_watt)
        _require_choice("appearance", self.appearance, PANEL_APPEARANCES)
        if self.tier not in (1, 2, 3):
            raise ValueError(f"tier must be 1, 2 or 3, got {self.tier!r}")

    @property
    def type_tag(self) -> str:
        return self.type

    @property
    def power_w(self) -> float:
        return self.wattage

    @property
    def efficiency_pct(self) -> float:
        return self.efficiency

    @property
    def tier_rank(self) -> int:
        return self.tier

    @property
    def price_metric(self) -> float:
        return self.price_per_watt

    @property
    def price_unit(self) -> str:
        return "W"

    @property
    def unit_price(self) -> float:
        return self.wattage * self.price_per_watt

    @property
    def area_m2(self) -> float:
        return self.dimensions.area_m2


@dataclass(frozen=True, kw_only=True)
class Inverter(EquipmentItem):
    category: ClassVar[str] = "inverter"

    type: str
    capacity_w: float
    efficiency: InverterEfficiency
    input_voltage: VoltageWindow
    price_per_watt: float
    mppt_channels: int = 1
    battery_ready: bool = False
    tier: int | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        _require_choice("type", self.type, INVERTER_TYPES)
        _require_positive("capacity_w", self.capacity_w)
        _require_percentage("efficiency.cec", self.efficiency.cec)
        _require_percentage("efficiency.peak", self.efficiency.peak)
        _require_positive("price_per_watt", self.price_per_watt)
        _require_range("input_voltage", (self.input_voltage.min_v, self.input_voltage.max_v))

    @property
    def type_tag(self) -> str:
        return self.type

    @property
    def power_w(self) -> float:
        return self.capacity_w

    @property
    def capacity(self) -> float:
        return self.capacity_w

    @property
    def efficiency_pct(self) -> float:
        return self.efficiency.cec

    @property
    def tier_rank(self) -> int | None:
        return self.tier

    @property
    def price_metric(self) -> float:
        return self.price_per_watt

    @property
    def price_unit(self) -> str:
        return "W"

    @property
    def unit_price(self) -> float:
        return self.capacity_w * self.price_per_watt


@dataclass(frozen=True, kw_only=True)
class Battery(EquipmentItem):
    category: ClassVar[str] = "battery"

    technology: str
    capacity_kwh: float
    power_kw: float
    round_trip_efficiency: float
    cycle_life: int
    price_per_kwh: float
    coupling: str = "ac"

    def __post_init__(self) -> None:
        super().__post_init__()
        _require_choice("technology", self.technology, BATTERY_TECHNOLOGIES)
        _require_positive("capacity_kwh", self.capacity_kwh)
        _require_positive("power_kw", self.power_kw)
        _require_percentage("round_trip_efficiency", self.round_trip_efficiency)
        _require_positive("price_per_kwh", self.price_per_kwh)
        _require_choice("coupling", self.coupling, BATTERY_COUPLINGS)

    @property
    def type_tag(self) -> str:
        return self.technology

    @property
    def power_w(self) -> float:
        return self.power_kw * 1000

    @property
    def capacity(self) -> float:
        return self.capacity_kwh

    @property
    def efficiency_pct(self) -> float:
        return self.round_trip_efficiency

    @property
    def price_metric(self) -> float:
        return self.price_per_kwh

    @property
    def price_unit(self) -> str:
        return "kWh"

    @property
    def unit_price(self) -> float:
        return self.capacity_kwh * self.price_per_kwh


@dataclass(frozen=True, kw_only=True)
class RackingSystem(EquipmentItem):
    category: ClassVar[str] = "racking"

    system_type: str
    roof_types: tuple[str, ...]
    roof_pitch_range: tuple[float, float]        # degrees
    panel_length_range: tuple[float, float]      # mm
    panel_width_range: tuple[float, float]       # mm
    panel_weight_range: tuple[float, float]      # kg
    price_per_panel: float

    def __post_init__(self) -> None:
        super().__post_init__()
        _require_choice("system_type", self.system_type, RACKING_TYPES)
        if not self.roof_types:
            raise ValueError("roof_types must list at least one roof type")
        for name in ("roof_pitch_range", "panel_length_range", "panel_width_range", "panel_weight_range"):
            _require_range(name, getattr(self, name))
        _require_positive("price_per_panel", self.price_per_panel)

    @property
    def type_tag(self) -> str:
        return self.system_type

    @property
    def price_metric(self) -> float:
        return self.price_per_panel

    @property
    def price_unit(self) -> str:
        return "panel"

    @property
    def unit_price(self) -> float:
        return self.price_per_panel

    @property
    def supported_roof_types(self) -> tuple[str, ...]:
        return self.roof_types


@dataclass(frozen=True, kw_only=True)
class MountingHardware(EquipmentItem):
    category: ClassVar[str] = "mounting"

    hardware_type: str
    roof_types: tuple[str, ...]
    panel_thickness_range: tuple[float, float]   # mm
    price: float

    def __post_init__(self) -> None:
        super().__post_init__()
        _require_range("panel_thickness_range", self.panel_thickness_range)
        _require_positive("price", self.price)

    @property
    def type_tag(self) -> str:
        return self.hardware_type

    @property
    def price_metric(self) -> float:
        return self.price

    @property
    def unit_price(self) -> float:
        return self.price

    @property
    def supported_roof_types(self) -> tuple[str, ...]:
        return self.roof_types


@dataclass(frozen=True, kw_only=True)
class ElectricalComponent(EquipmentItem):
    category: ClassVar[str] = "electrical"

    component_type: str
    max_voltage: float
    max_current: float
    price: float
    rapid_shutdown: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()
        _require_positive("max_voltage", self.max_voltage)
        _require_positive("max_current", self.max_current)
        _require_positive("price", self.price)

    @property
    def type_tag(self) -> str:
        return self.component_type

    @property
    def price_metric(self) -> float:
        return self.price

    @property
    def unit_price(self) -> float:
        return self.price


@dataclass(frozen=True, kw_only=True)
class MonitoringDevice(EquipmentItem):
    category: ClassVar[str] = "monitoring"

    device_type: str
    service_tier: str
    compatible_inverters: tuple[str, ...]   # inverter manufacturers
    hardware_price: float
    subscription_monthly: float = 0.0

    def __post_init__(self) -> None:
        super().__post_init__()
        _require_choice("service_tier", self.service_tier, MONITORING_TIERS)
        _require_positive("hardware_price", self.hardware_price)

    @property
    def type_tag(self) -> str:
        return self.device_type

    @property
    def price_metric(self) -> float:
        return self.hardware_price

    @property
    def unit_price(self) -> float:
        return self.hardware_price

    def supports(self, inverter: Inverter) -> bool:
        wanted = inverter.manufacturer.lower()
        return any(m.lower() == wanted for m in self.compatible_inverters)


VARIANTS: dict[str, type[EquipmentItem]] = {
    cls.category: cls
    for cls in (Panel, Inverter, Battery, RackingSystem, MountingHardware, ElectricalComponent, MonitoringDevice)
}

CATEGORIES: tuple[str, ...] = tuple(VARIANTS)
