"""Equipment catalog: typed records, criteria queries and record loading."""

from .catalog import CatalogCriteria, EquipmentCatalog
from .loader import catalog_from_records, item_from_record, load_catalog
from .models import (
    Battery,
    ElectricalComponent,
    EquipmentItem,
    Inverter,
    MonitoringDevice,
    MountingHardware,
    Panel,
    RackingSystem,
)

__all__ = [
    "Battery",
    "CatalogCriteria",
    "ElectricalComponent",
    "EquipmentCatalog",
    "EquipmentItem",
    "Inverter",
    "MonitoringDevice",
    "MountingHardware",
    "Panel",
    "RackingSystem",
    "catalog_from_records",
    "item_from_record",
    "load_catalog",
]
