"""Equipment compatibility scoring."""

from .matching import (
    CompatibilityIssue,
    CompatibilityResult,
    SiteConditions,
    analyze_system,
    check_inverter_battery,
    check_panel_inverter,
    check_panel_racking,
    check_racking_roof,
    compatible_components,
)

__all__ = [
    "CompatibilityIssue",
    "CompatibilityResult",
    "SiteConditions",
    "analyze_system",
    "check_inverter_battery",
    "check_panel_inverter",
    "check_panel_racking",
    "check_racking_roof",
    "compatible_components",
]
