"""System compatibility check API."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.schemas.compatibility import CompatibilityRequest
from app.services.catalog_service import get_catalog

from engine.catalog.catalog import EquipmentCatalog
from engine.catalog.models import EquipmentItem
from engine.compatibility.matching import SiteConditions, analyze_system

router = APIRouter()


class _LookupFailed(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _lookup(catalog: EquipmentCatalog, item_id: str, category: str) -> EquipmentItem:
    item = catalog.get_by_id(item_id)
    if item is None:
        raise _LookupFailed(status.HTTP_404_NOT_FOUND, f"Equipment {item_id} not found")
    if item.category != category:
        raise _LookupFailed(
            status.HTTP_400_BAD_REQUEST,
            f"Equipment {item_id} is a {item.category}, expected a {category}",
        )
    return item


@router.post(
    "/compatibility",
    summary="Check component compatibility",
    description=(
        "Score a panel/inverter system with optional battery, racking and "
        "electrical components against the installation site. A score of 0 "
        "means at least one explicit incompatibility."
    ),
)
async def check_compatibility(body: CompatibilityRequest):
    catalog = get_catalog()
    try:
        panel = _lookup(catalog, body.panel_id, "panel")
        inverter = _lookup(catalog, body.inverter_id, "inverter")
        battery = _lookup(catalog, body.battery_id, "battery") if body.battery_id else None
        racking = _lookup(catalog, body.racking_id, "racking") if body.racking_id else None
        electrical = None
        if body.electrical_ids is not None:
            electrical = [_lookup(catalog, eid, "electrical") for eid in body.electrical_ids]
    except _LookupFailed as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message},
        )

    params = settings.recommendation_parameters()
    result = analyze_system(
        panel, body.panel_count, inverter, body.inverter_count,
        battery=battery,
        racking=racking,
        electrical=electrical,
        site=SiteConditions(**body.site.model_dump()),
        band=params.sizing_band,
    )
    return {"success": True, "data": result.to_dict()}
