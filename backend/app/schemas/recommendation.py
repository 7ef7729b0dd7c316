from typing import Any

from pydantic import Field

from app.schemas.common import CamelModel
from engine.advisor.requirements import (
    Constraints,
    Installation,
    Location,
    Preferences,
    SystemRequirements,
)


class LocationInput(CamelModel):
    latitude: float = 0.0
    longitude: float = 0.0
    climate: str = "temperate"
    utility: str | None = None


class InstallationInput(CamelModel):
    roof_type: str = "asphalt_shingle"
    roof_area: float = 100.0
    roof_pitch: float = 20.0
    azimuth: float = 180.0
    shading: str = "none"
    structural_limitations: list[str] = Field(default_factory=list)


class PreferencesInput(CamelModel):
    panel_type: str | None = None
    inverter_type: str | None = None
    battery_storage: bool = False
    battery_capacity: float | None = None
    monitoring: str = "basic"
    aesthetics: str = "standard"
    brand_preference: str = "no_preference"


class RequirementsInput(CamelModel):
    system_size: float | None = None
    budget: float | None = None
    priorities: list[str] = Field(default_factory=list)
    location: LocationInput = Field(default_factory=LocationInput)
    installation: InstallationInput = Field(default_factory=InstallationInput)
    preferences: PreferencesInput = Field(default_factory=PreferencesInput)


class ConstraintsInput(CamelModel):
    max_budget: float | None = None
    max_payback_period: float | None = None
    required_warranty: float | None = None
    installation_timeline: float | None = None
    maintenance_preference: str | None = None


class RecommendationRequest(CamelModel):
    """Ranges and enumerations are checked by the engine, which reports
    every failing field with its category in one response."""

    type: str | None = None
    requirements: RequirementsInput = Field(default_factory=RequirementsInput)
    constraints: ConstraintsInput | None = None
    existing_system: dict[str, Any] | None = None

    def to_requirements(self) -> SystemRequirements:
        req = self.requirements
        return SystemRequirements(
            system_size=req.system_size,
            budget=req.budget,
            priorities=list(req.priorities),
            location=Location(**req.location.model_dump()),
            installation=Installation(**req.installation.model_dump()),
            preferences=Preferences(**req.preferences.model_dump()),
        )

    def to_constraints(self) -> Constraints | None:
        if self.constraints is None:
            return None
        return Constraints(**self.constraints.model_dump())
