"""Optional annotations attached to search hits."""

from __future__ import annotations

from typing import Any

from engine.catalog.catalog import EquipmentCatalog
from engine.catalog.models import EquipmentItem
from engine.compatibility.matching import compatible_components

ALTERNATIVE_TOLERANCE = 0.10
ALTERNATIVE_EFFICIENCY_FLOOR = 0.95
MAX_ANNOTATIONS = 5


def _brief(item: EquipmentItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "category": item.category,
        "manufacturer": item.manufacturer,
        "model": item.model,
    }


def alternatives_for(item: EquipmentItem, catalog: EquipmentCatalog) -> list[dict[str, Any]]:
    """Comparable items of the same category (empty for categories without a size rating)."""
    return [
        _brief(alt)
        for alt in catalog.find_alternatives(
            item,
            tolerance=ALTERNATIVE_TOLERANCE,
            efficiency_floor=ALTERNATIVE_EFFICIENCY_FLOOR,
            limit=MAX_ANNOTATIONS,
        )
    ]


def compatible_for(item: EquipmentItem, catalog: EquipmentCatalog) -> list[dict[str, Any]]:
    return [
        {**_brief(other), "score": result.score}
        for other, result in compatible_components(item, catalog, limit=MAX_ANNOTATIONS)
    ]


def pricing_for(item: EquipmentItem) -> dict[str, Any]:
    return {
        "unit_price": round(item.unit_price, 2),
        "price": item.price_metric,
        "price_unit": item.price_unit,
        "currency": "USD",
    }


def availability_for(item: EquipmentItem) -> dict[str, Any]:
    return {
        "status": item.availability,
        "in_stock": item.in_stock,
        "lead_time_days": item.lead_time_days,
    }
