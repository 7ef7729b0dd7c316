"""Process-wide equipment catalog.

The catalog is loaded on first use and then shared read-only by every
request.  ``reload_catalog`` swaps in a fresh snapshot; requests already
running keep the snapshot they started with.
"""

import logging

from app.config import settings
from engine.catalog.catalog import EquipmentCatalog
from engine.catalog.loader import load_catalog

logger = logging.getLogger(__name__)

_catalog: EquipmentCatalog | None = None


def get_catalog() -> EquipmentCatalog:
    global _catalog
    if _catalog is None:
        _catalog = load_catalog(settings.catalog_path or None)
    return _catalog


def reload_catalog() -> EquipmentCatalog:
    """Drop the cached snapshot and load the catalog again."""
    global _catalog
    _catalog = load_catalog(settings.catalog_path or None)
    logger.info("Equipment catalog reloaded (%d items)", len(_catalog))
    return _catalog


def set_catalog(catalog: EquipmentCatalog | None) -> None:
    """Install a specific snapshot, or clear the cache with None."""
    global _catalog
    _catalog = catalog
