"""Equipment catalog browsing API."""

from __future__ import annotations

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from app.schemas.search import normalize_category
from app.services.catalog_service import get_catalog

from engine.catalog.catalog import CatalogCriteria, matches

router = APIRouter()


@router.get(
    "",
    summary="List catalog equipment",
    description="Catalog records, optionally limited to one category and narrowed by criteria.",
)
async def list_equipment(
    category: str | None = Query(None, description="panel, inverter, battery, racking, mounting, electrical, monitoring"),
    type: str | None = Query(None),
    tier: int | None = Query(None, ge=1, le=3),
    min_wattage: float | None = Query(None, gt=0),
    max_wattage: float | None = Query(None, gt=0),
    min_efficiency: float | None = Query(None, ge=0, le=100),
    max_efficiency: float | None = Query(None, ge=0, le=100),
    max_price: float | None = Query(None, gt=0),
    min_capacity: float | None = Query(None, gt=0),
    max_capacity: float | None = Query(None, gt=0),
    availability: str | None = Query(None),
    technology: str | None = Query(None),
    roof_type: str | None = Query(None),
    min_warranty: float | None = Query(None, ge=0),
):
    catalog = get_catalog()
    categories = None
    if category:
        try:
            categories = [normalize_category(category)]
        except ValueError as exc:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"success": False, "error": str(exc)},
            )

    criteria = CatalogCriteria(
        type=type,
        tier=tier,
        min_wattage=min_wattage,
        max_wattage=max_wattage,
        min_efficiency=min_efficiency,
        max_efficiency=max_efficiency,
        max_price=max_price,
        min_capacity=min_capacity,
        max_capacity=max_capacity,
        availability=availability,
        technology=technology,
        roof_type=roof_type,
        min_warranty=min_warranty,
    )
    items = [i.to_dict() for i in catalog.items(categories) if matches(i, criteria)]
    return {"success": True, "data": {"items": items, "total": len(items)}}


@router.get("/{item_id}", summary="Get one catalog record")
async def get_equipment(item_id: str):
    item = get_catalog().get_by_id(item_id)
    if item is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"success": False, "error": "Equipment not found"},
        )
    return {"success": True, "data": item.to_dict()}
