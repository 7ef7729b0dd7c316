"""In-memory equipment catalog with criteria queries.

The catalog is an immutable snapshot: it is built once from validated
records and only answers read queries.  Each per-category getter returns a
fresh list ordered deterministically (panels by efficiency, inverters by CEC
efficiency, batteries by round-trip efficiency, everything else in catalog
order, ties by id).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, fields

from engine.catalog.models import (
    CATEGORIES,
    Battery,
    ElectricalComponent,
    EquipmentItem,
    Inverter,
    MonitoringDevice,
    MountingHardware,
    Panel,
    RackingSystem,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogCriteria:
    """Independently-optional query constraints.

    A criterion only passes items that expose the attribute it constrains;
    e.g. ``min_wattage`` excludes racking, which has no wattage.
    """
    type: str | None = None
    tier: int | None = None
    min_wattage: float | None = None
    max_wattage: float | None = None
    min_efficiency: float | None = None
    max_efficiency: float | None = None
    max_price: float | None = None
    min_capacity: float | None = None
    max_capacity: float | None = None
    availability: str | None = None
    technology: str | None = None
    roof_type: str | None = None
    min_warranty: float | None = None

    def active(self) -> list[str]:
        """Names of the criteria that are set."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]


def _at_least(value: float | None, bound: float) -> bool:
    return value is not None and value >= bound


def _at_most(value: float | None, bound: float) -> bool:
    return value is not None and value <= bound


# criterion name -> predicate(item, criterion value)
_PREDICATES = {
    "type": lambda item, v: item.type_tag is not None and item.type_tag == v,
    "tier": lambda item, v: item.tier_rank is not None and item.tier_rank == v,
    "min_wattage": lambda item, v: isinstance(item, Panel) and item.wattage >= v,
    "max_wattage": lambda item, v: isinstance(item, Panel) and item.wattage <= v,
    "min_efficiency": lambda item, v: _at_least(item.efficiency_pct, v),
    "max_efficiency": lambda item, v: _at_most(item.efficiency_pct, v),
    "max_price": lambda item, v: _at_most(item.price_metric, v),
    "min_capacity": lambda item, v: _at_least(item.capacity, v),
    "max_capacity": lambda item, v: _at_most(item.capacity, v),
    "availability": lambda item, v: item.availability == v,
    "technology": lambda item, v: isinstance(item, Battery) and item.technology == v,
    "roof_type": lambda item, v: item.supported_roof_types is not None and v in item.supported_roof_types,
    "min_warranty": lambda item, v: item.warranty.years >= v,
}


def matching_criteria(item: EquipmentItem, criteria: CatalogCriteria) -> list[str]:
    """Return the active criteria the item satisfies."""
    return [name for name in criteria.active() if _PREDICATES[name](item, getattr(criteria, name))]


def matches(item: EquipmentItem, criteria: CatalogCriteria | None) -> bool:
    if criteria is None:
        return True
    return all(_PREDICATES[name](item, getattr(criteria, name)) for name in criteria.active())


class EquipmentCatalog:
    """Read-only collection of equipment items grouped by category."""

    def __init__(self, items: Iterable[EquipmentItem] = ()):
        self._by_category: dict[str, list[EquipmentItem]] = {c: [] for c in CATEGORIES}
        self._by_id: dict[str, EquipmentItem] = {}
        for item in items:
            if item.id in self._by_id:
                raise ValueError(f"Duplicate equipment id: {item.id}")
            self._by_category[item.category].append(item)
            self._by_id[item.id] = item
        self._order = {item_id: i for i, item_id in enumerate(self._by_id)}
        logger.debug(
            "Catalog built: %s",
            ", ".join(f"{c}={len(v)}" for c, v in self._by_category.items()),
        )

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    def counts(self) -> dict[str, int]:
        return {c: len(v) for c, v in self._by_category.items()}

    def position(self, item: EquipmentItem) -> int:
        """Insertion index, used as the stable catalog order."""
        return self._order[item.id]

    def get_by_id(self, item_id: str) -> EquipmentItem | None:
        return self._by_id.get(item_id)

    def items(self, categories: Sequence[str] | None = None) -> list[EquipmentItem]:
        """All items in catalog order, optionally limited to categories."""
        wanted = set(categories) if categories else None
        return [i for i in self._by_id.values() if wanted is None or i.category in wanted]

    def _query(self, category: str, criteria: CatalogCriteria | None, sort_key=None) -> list:
        result = [i for i in self._by_category[category] if matches(i, criteria)]
        if sort_key is not None:
            result.sort(key=lambda i: (-sort_key(i), i.id))
        return result

    # ------------------------------------------------------------------
    # Per-category getters
    # ------------------------------------------------------------------
    def get_panels(self, criteria: CatalogCriteria | None = None) -> list[Panel]:
        return self._query("panel", criteria, lambda p: p.efficiency)

    def get_inverters(self, criteria: CatalogCriteria | None = None) -> list[Inverter]:
        return self._query("inverter", criteria, lambda i: i.efficiency.cec)

    def get_batteries(self, criteria: CatalogCriteria | None = None) -> list[Battery]:
        return self._query("battery", criteria, lambda b: b.round_trip_efficiency)

    def get_racking(self, criteria: CatalogCriteria | None = None) -> list[RackingSystem]:
        return self._query("racking", criteria)

    def get_mounting(self, criteria: CatalogCriteria | None = None) -> list[MountingHardware]:
        return self._query("mounting", criteria)

    def get_electrical(self, criteria: CatalogCriteria | None = None) -> list[ElectricalComponent]:
        return self._query("electrical", criteria)

    def get_monitoring(self, criteria: CatalogCriteria | None = None) -> list[MonitoringDevice]:
        return self._query("monitoring", criteria)

    # ------------------------------------------------------------------
    # Similar items
    # ------------------------------------------------------------------
    def find_alternatives(
        self,
        item: EquipmentItem,
        tolerance: float = 0.10,
        efficiency_floor: float = 0.95,
        availability: str | None = "in-stock",
        limit: int | None = 5,
    ) -> list[EquipmentItem]:
        """Items of the same category with comparable rating.

        Parameters
        ----------
        item : EquipmentItem
            Reference item; it need not be part of this catalog.
        tolerance : float
            Allowed relative deviation of wattage (panels) or capacity
            (inverters, batteries).
        efficiency_floor : float
            Minimum efficiency as a fraction of the reference efficiency.
        availability : str or None
            Required availability state, None for any.
        limit : int or None
            Maximum number of results.

        Returns
        -------
        list[EquipmentItem]
            Matches in the category's default order, excluding the reference.
        """
        rating = _rating(item)
        if rating is None:
            return []
        low, high = rating * (1 - tolerance), rating * (1 + tolerance)
        min_eff = item.efficiency_pct * efficiency_floor if item.efficiency_pct is not None else None

        getter = {
            "panel": self.get_panels,
            "inverter": self.get_inverters,
            "battery": self.get_batteries,
        }[item.category]
        result = []
        for candidate in getter(CatalogCriteria(availability=availability)):
            if candidate.id == item.id:
                continue
            value = _rating(candidate)
            if value is None or not (low <= value <= high):
                continue
            if min_eff is not None and (candidate.efficiency_pct or 0) < min_eff:
                continue
            result.append(candidate)
        return result[:limit] if limit is not None else result


def _rating(item: EquipmentItem) -> float | None:
    """Size metric compared by alternatives: W for panels and inverters, kWh for batteries."""
    if isinstance(item, Panel):
        return item.wattage
    if isinstance(item, Inverter):
        return item.capacity_w
    if isinstance(item, Battery):
        return item.capacity_kwh
    return None
