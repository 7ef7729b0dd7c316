"""
Compatibility matching between equipment items.

Pairwise checks (panel/inverter sizing, inverter/battery coupling, racking/roof
and panel/racking fit) plus a whole-system analysis that adds site checks
(azimuth, shading, climate, certifications, rapid shutdown).

Every check produces a list of issues; the score is 100 minus the issue
penalties, floored at 1.  A score of exactly 0 is reserved for explicit
incompatibilities (e.g. a ballasted rack on a pitched roof).

Pure functions: no state, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from engine.catalog.catalog import EquipmentCatalog
from engine.catalog.models import (
    Battery,
    ElectricalComponent,
    EquipmentItem,
    Inverter,
    MonitoringDevice,
    MountingHardware,
    Panel,
    RackingSystem,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_SIZING_BAND = (0.8, 1.2)     # inverter AC / array DC

SEVERITY_PENALTIES = {"critical": 25.0, "high": 15.0, "medium": 8.0, "low": 3.0}
MIN_COMPATIBLE_SCORE = 1.0
COMPATIBLE_LISTING_THRESHOLD = 70.0  # compatible_components cut-off

HOT_CLIMATES = {"hot", "desert", "arid", "tropical"}
HOT_CLIMATE_TEMP_COEFFICIENT = -0.35  # %/°C

REQUIRED_PANEL_CERTIFICATIONS = ("IEC 61215", "IEC 61730")
REQUIRED_INVERTER_CERTIFICATIONS = ("UL 1741", "IEEE 1547")


@dataclass
class CompatibilityIssue:
    severity: str      # "critical" | "high" | "medium" | "low"
    category: str      # "electrical" | "physical" | "environmental" | "regulatory" | "performance"
    description: str
    resolution: str = ""
    penalty: float = 0.0
    blocking: bool = False   # configuration cannot be built as specified
    explicit: bool = False   # hard incompatibility, forces score 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "category": self.category,
            "description": self.description,
            "resolution": self.resolution,
            "penalty": round(self.penalty, 1),
            "blocking": self.blocking,
            "explicit": self.explicit,
        }


@dataclass
class CompatibilityResult:
    score: float
    compatible: bool
    feasible: bool
    issues: list[CompatibilityIssue] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    sizing_ratio: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "compatible": self.compatible,
            "feasible": self.feasible,
            "sizing_ratio": round(self.sizing_ratio, 3) if self.sizing_ratio is not None else None,
            "issues": [i.to_dict() for i in self.issues],
            "recommendations": list(self.recommendations),
        }


@dataclass
class SiteConditions:
    roof_type: str | None = None
    roof_pitch: float | None = None     # degrees
    azimuth: float | None = None        # degrees, 180 = south
    shading: str = "none"               # none | minimal | moderate | significant
    climate: str | None = None
    latitude: float | None = None


def _issue(severity: str, category: str, description: str, resolution: str = "", **kw) -> CompatibilityIssue:
    kw.setdefault("penalty", SEVERITY_PENALTIES[severity])
    return CompatibilityIssue(severity, category, description, resolution, **kw)


def _explicit(category: str, description: str, resolution: str = "") -> CompatibilityIssue:
    return CompatibilityIssue(
        "critical", category, description, resolution,
        penalty=100.0, blocking=True, explicit=True,
    )


def summarize(
    issues: list[CompatibilityIssue],
    recommendations: list[str] | None = None,
    sizing_ratio: float | None = None,
) -> CompatibilityResult:
    """Fold issues into a scored result."""
    explicit = any(i.explicit for i in issues)
    if explicit:
        score = 0.0
    else:
        total = sum(i.penalty for i in issues)
        score = round(min(100.0, max(MIN_COMPATIBLE_SCORE, 100.0 - total)), 1)
    recs: list[str] = []
    for r in (recommendations or []) + [i.resolution for i in issues if i.resolution]:
        if r and r not in recs:
            recs.append(r)
    return CompatibilityResult(
        score=score,
        compatible=not explicit,
        feasible=not explicit and not any(i.blocking for i in issues),
        issues=list(issues),
        recommendations=recs,
        sizing_ratio=sizing_ratio,
    )


def _normalize_cert(cert: str) -> str:
    return "".join(ch for ch in cert.upper() if ch.isalnum())


def _has_certification(item: EquipmentItem, cert: str) -> bool:
    wanted = _normalize_cert(cert)
    return any(_normalize_cert(c).startswith(wanted) for c in item.certifications)


# ---------------------------------------------------------------------------
# Pairwise checks
# ---------------------------------------------------------------------------

def sizing_ratio(array_dc_w: float, inverter_ac_w: float) -> float:
    """Inverter AC capacity relative to array DC power."""
    if array_dc_w <= 0:
        raise ValueError("array_dc_w must be positive")
    return inverter_ac_w / array_dc_w


def _panel_inverter_issues(
    panel: Panel,
    panel_count: int,
    inverter: Inverter,
    inverter_count: int,
    band: tuple[float, float],
) -> tuple[list[CompatibilityIssue], float]:
    ratio = sizing_ratio(panel.wattage * panel_count, inverter.capacity_w * inverter_count)
    low, high = band
    issues: list[CompatibilityIssue] = []
    if ratio < low:
        deviation = (low - ratio) / low
        issues.append(_issue(
            "critical", "electrical",
            f"Inverter capacity is {ratio:.0%} of array power; output would clip heavily",
            f"Use inverter capacity of at least {low:.0%} of the array DC rating",
            penalty=deviation * 100, blocking=True,
        ))
    elif ratio > high:
        deviation = (ratio - high) / high
        issues.append(_issue(
            "medium", "performance",
            f"Inverter capacity is {ratio:.0%} of array power; the inverter is oversized",
            "Choose a smaller inverter or add panels",
            penalty=deviation * 100,
        ))
    if inverter.type == "micro" and panel.wattage > inverter.capacity_w * high:
        issues.append(_issue(
            "medium", "electrical",
            f"{panel.wattage:.0f}W panel exceeds what a {inverter.capacity_w:.0f}W microinverter can convert",
            "Pair high-wattage panels with a larger microinverter",
        ))
    return issues, ratio


def check_panel_inverter(
    panel: Panel,
    panel_count: int,
    inverter: Inverter,
    inverter_count: int = 1,
    band: tuple[float, float] = DEFAULT_SIZING_BAND,
) -> CompatibilityResult:
    """Score the inverter sizing against the array.

    Inside the band the pairing scores 100; outside it loses points in
    proportion to the deviation from the nearest band edge.  Undersized
    inverters are infeasible, oversized ones only wasteful.
    """
    issues, ratio = _panel_inverter_issues(panel, panel_count, inverter, inverter_count, band)
    return summarize(issues, sizing_ratio=ratio)


def _inverter_battery_issues(inverter: Inverter, battery: Battery) -> list[CompatibilityIssue]:
    if battery.coupling != "dc":
        return []
    if not inverter.battery_ready:
        return [_explicit(
            "electrical",
            f"DC-coupled {battery.model} needs a hybrid inverter; {inverter.model} has no battery input",
            "Choose a battery-ready hybrid inverter or an AC-coupled battery",
        )]
    issues = []
    if battery.power_kw * 1000 > inverter.capacity_w:
        issues.append(_issue(
            "high", "electrical",
            "Battery discharge power exceeds inverter capacity",
            "Limit battery discharge or size up the inverter",
        ))
    if battery.manufacturer.lower() != inverter.manufacturer.lower():
        issues.append(_issue(
            "low", "electrical",
            f"Confirm {inverter.manufacturer} firmware supports {battery.manufacturer} battery communication",
        ))
    return issues


def check_inverter_battery(inverter: Inverter, battery: Battery) -> CompatibilityResult:
    return summarize(_inverter_battery_issues(inverter, battery))


def _racking_roof_issues(
    racking: RackingSystem, roof_type: str, roof_pitch: float | None
) -> list[CompatibilityIssue]:
    if roof_type not in racking.roof_types:
        if racking.system_type == "ballasted":
            reason = f"Ballasted racking requires a flat roof; a {roof_type} roof cannot hold ballast"
            fix = "Use a penetrating or rail-less racking system"
        elif racking.system_type == "ground_mount":
            reason = f"{racking.model} is a ground mount and cannot be installed on a {roof_type} roof"
            fix = "Use roof-mounted racking"
        else:
            reason = f"{racking.model} is not rated for {roof_type} roofs"
            fix = f"Choose racking listed for {roof_type} roofs"
        return [_explicit("physical", reason, fix)]

    issues = []
    if roof_pitch is not None:
        low, high = racking.roof_pitch_range
        if not low <= roof_pitch <= high:
            issues.append(_issue(
                "medium", "physical",
                f"Roof pitch {roof_pitch:g}° is outside the {low:g}-{high:g}° range of {racking.model}",
                "Confirm attachment method with the racking manufacturer",
            ))
    return issues


def check_racking_roof(
    racking: RackingSystem, roof_type: str, roof_pitch: float | None = None
) -> CompatibilityResult:
    return summarize(_racking_roof_issues(racking, roof_type, roof_pitch))


def _panel_racking_issues(panel: Panel, racking: RackingSystem) -> list[CompatibilityIssue]:
    issues = []
    dims = panel.dimensions
    len_lo, len_hi = racking.panel_length_range
    wid_lo, wid_hi = racking.panel_width_range
    if not (len_lo <= dims.length_mm <= len_hi and wid_lo <= dims.width_mm <= wid_hi):
        issues.append(_issue(
            "high", "physical",
            f"{panel.model} ({dims.length_mm:g}x{dims.width_mm:g} mm) is outside the module size range of {racking.model}",
            "Select racking rated for the module dimensions",
        ))
    wt_lo, wt_hi = racking.panel_weight_range
    if not wt_lo <= panel.weight_kg <= wt_hi:
        issues.append(_issue(
            "medium", "physical",
            f"Module weight {panel.weight_kg:g} kg is outside the {wt_lo:g}-{wt_hi:g} kg rating of {racking.model}",
            "Verify structural rating with the racking manufacturer",
        ))
    return issues


def check_panel_racking(panel: Panel, racking: RackingSystem) -> CompatibilityResult:
    return summarize(_panel_racking_issues(panel, racking))


def check_panel_mounting(panel: Panel, mounting: MountingHardware) -> CompatibilityResult:
    low, high = mounting.panel_thickness_range
    issues = []
    if not low <= panel.dimensions.thickness_mm <= high:
        issues.append(_issue(
            "high", "physical",
            f"{mounting.model} clamps {low:g}-{high:g} mm frames; {panel.model} is {panel.dimensions.thickness_mm:g} mm",
            "Use clamps sized for the module frame",
        ))
    return summarize(issues)


def check_monitoring_inverter(device: MonitoringDevice, inverter: Inverter) -> CompatibilityResult:
    if device.supports(inverter):
        return summarize([])
    return summarize([_explicit(
        "electrical",
        f"{device.model} cannot read data from {inverter.manufacturer} inverters",
        "Choose a monitoring device that lists the inverter manufacturer",
    )])


# ---------------------------------------------------------------------------
# Site checks
# ---------------------------------------------------------------------------

def _site_issues(panel: Panel, inverter: Inverter, site: SiteConditions) -> tuple[list[CompatibilityIssue], list[str]]:
    issues: list[CompatibilityIssue] = []
    recs: list[str] = []

    if site.azimuth is not None:
        optimal = 0.0 if (site.latitude is not None and site.latitude < 0) else 180.0
        deviation = abs(site.azimuth - optimal) % 360
        deviation = min(deviation, 360 - deviation)
        if deviation > 90:
            issues.append(_issue(
                "medium", "performance",
                f"Array faces {deviation:.0f}° away from the equator; expect a large yield loss",
                "Consider an alternative roof plane or a ground mount",
            ))
        elif deviation > 45:
            issues.append(_issue(
                "low", "performance",
                f"Array azimuth deviates {deviation:.0f}° from optimal",
            ))

    if site.shading in ("moderate", "significant"):
        severity = "high" if site.shading == "significant" else "medium"
        issues.append(_issue(
            severity, "performance",
            f"{site.shading.capitalize()} shading will reduce production",
            "Trim obstructions or relocate affected panels",
        ))
    if site.shading != "none" and inverter.type in ("string", "central"):
        recs.append("Use microinverters or power optimizers to limit shading losses")

    if site.climate in HOT_CLIMATES and panel.temperature_coefficient < HOT_CLIMATE_TEMP_COEFFICIENT:
        issues.append(_issue(
            "medium", "environmental",
            f"Temperature coefficient {panel.temperature_coefficient}%/°C loses output in {site.climate} climates",
            "Prefer panels with a temperature coefficient above -0.35%/°C",
        ))
    return issues, recs


def _certification_issues(panel: Panel, inverter: Inverter) -> list[CompatibilityIssue]:
    issues = []
    missing = [c for c in REQUIRED_PANEL_CERTIFICATIONS if not _has_certification(panel, c)]
    if missing:
        issues.append(_issue(
            "high", "regulatory",
            f"{panel.model} lacks {', '.join(missing)} certification",
            "Use certified modules to pass permitting",
        ))
    missing = [c for c in REQUIRED_INVERTER_CERTIFICATIONS if not _has_certification(inverter, c)]
    if missing:
        issues.append(_issue(
            "high", "regulatory",
            f"{inverter.model} lacks {', '.join(missing)} certification",
            "Use a grid-interconnection certified inverter",
        ))
    return issues


def analyze_system(
    panel: Panel,
    panel_count: int,
    inverter: Inverter,
    inverter_count: int = 1,
    *,
    battery: Battery | None = None,
    racking: RackingSystem | None = None,
    electrical: list[ElectricalComponent] | None = None,
    site: SiteConditions | None = None,
    band: tuple[float, float] = DEFAULT_SIZING_BAND,
) -> CompatibilityResult:
    """Whole-system compatibility analysis.

    Parameters
    ----------
    panel, panel_count : Panel, int
        Array definition.
    inverter, inverter_count : Inverter, int
        Conversion stage.
    battery : Battery or None
        Optional storage; checked against the inverter.
    racking : RackingSystem or None
        Optional racking; checked against the roof and the panel.
    electrical : list[ElectricalComponent] or None
        Balance-of-system parts.  When given, string inverters must be paired
        with a rapid-shutdown device.
    site : SiteConditions or None
        Roof and environment context.
    band : tuple[float, float]
        Acceptable inverter sizing ratio.

    Returns
    -------
    CompatibilityResult
        Score 0-100 with issues and recommendations; ``sizing_ratio`` is the
        inverter AC to array DC ratio.
    """
    site = site or SiteConditions()
    issues, ratio = _panel_inverter_issues(panel, panel_count, inverter, inverter_count, band)

    if battery is not None:
        issues += _inverter_battery_issues(inverter, battery)

    if racking is not None:
        if site.roof_type:
            issues += _racking_roof_issues(racking, site.roof_type, site.roof_pitch)
        issues += _panel_racking_issues(panel, racking)

    if electrical is not None and inverter.type == "string":
        if not any(e.rapid_shutdown for e in electrical):
            issues.append(_issue(
                "high", "regulatory",
                "String inverter systems need module-level rapid shutdown (NEC 690.12)",
                "Add rapid shutdown devices",
            ))

    issues += _certification_issues(panel, inverter)
    site_issues, recs = _site_issues(panel, inverter, site)
    issues += site_issues
    return summarize(issues, recs, sizing_ratio=ratio)


# ---------------------------------------------------------------------------
# Catalog lookups
# ---------------------------------------------------------------------------

def _pairings(item: EquipmentItem, catalog: EquipmentCatalog):
    """Yield (candidate, result) for the categories that pair with ``item``."""
    if isinstance(item, Panel):
        for rack in catalog.get_racking():
            yield rack, check_panel_racking(item, rack)
        for mount in catalog.get_mounting():
            yield mount, check_panel_mounting(item, mount)
        for inv in catalog.get_inverters():
            if inv.type == "micro":
                yield inv, check_panel_inverter(item, 1, inv, 1)
    elif isinstance(item, Inverter):
        for battery in catalog.get_batteries():
            yield battery, check_inverter_battery(item, battery)
        for device in catalog.get_monitoring():
            yield device, check_monitoring_inverter(device, item)
        if item.type == "micro":
            for panel in catalog.get_panels():
                yield panel, check_panel_inverter(panel, 1, item, 1)
    elif isinstance(item, Battery):
        for inv in catalog.get_inverters():
            yield inv, check_inverter_battery(inv, item)
    elif isinstance(item, RackingSystem):
        for panel in catalog.get_panels():
            yield panel, check_panel_racking(panel, item)
    elif isinstance(item, MountingHardware):
        for panel in catalog.get_panels():
            yield panel, check_panel_mounting(panel, item)
    elif isinstance(item, MonitoringDevice):
        for inv in catalog.get_inverters():
            yield inv, check_monitoring_inverter(item, inv)


def compatible_components(
    item: EquipmentItem,
    catalog: EquipmentCatalog,
    threshold: float = COMPATIBLE_LISTING_THRESHOLD,
    limit: int | None = 10,
) -> list[tuple[EquipmentItem, CompatibilityResult]]:
    """Catalog items that work with ``item``, best score first (ties by id)."""
    matches = [
        (candidate, result)
        for candidate, result in _pairings(item, catalog)
        if candidate.id != item.id and result.feasible and result.score >= threshold
    ]
    matches.sort(key=lambda pair: (-pair[1].score, pair[0].id))
    return matches[:limit] if limit is not None else matches
