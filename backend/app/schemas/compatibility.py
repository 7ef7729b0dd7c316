from pydantic import Field

from app.schemas.common import CamelModel


class SiteInput(CamelModel):
    roof_type: str | None = None
    roof_pitch: float | None = Field(default=None, ge=0, le=90)
    azimuth: float | None = Field(default=None, ge=0, le=360)
    shading: str = "none"
    climate: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)


class CompatibilityRequest(CamelModel):
    """Catalog ids of the components to check together."""

    panel_id: str
    panel_count: int = Field(gt=0)
    inverter_id: str
    inverter_count: int = Field(default=1, gt=0)
    battery_id: str | None = None
    racking_id: str | None = None
    electrical_ids: list[str] | None = None
    site: SiteInput = Field(default_factory=SiteInput)
