from pydantic import Field

from app.schemas.common import CamelModel
from engine.catalog.catalog import CatalogCriteria
from engine.catalog.models import CATEGORIES
from engine.search.query import SearchOptions, SearchQuery, SortSpec

# Plural and UI spellings of category names
CATEGORY_ALIASES = {
    "panels": "panel",
    "solar_panels": "panel",
    "inverters": "inverter",
    "batteries": "battery",
    "mounting_hardware": "mounting",
    "monitoring_devices": "monitoring",
    "electrical_components": "electrical",
}


def normalize_category(name: str) -> str:
    key = name.strip().lower().replace("-", "_")
    category = CATEGORY_ALIASES.get(key, key)
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category {name!r}; expected one of {', '.join(CATEGORIES)}")
    return category


def _as_list(value: str | list[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class SearchFilters(CamelModel):
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
    certifications: list[str] = Field(default_factory=list)

    def to_criteria(self) -> CatalogCriteria:
        return CatalogCriteria(**self.model_dump(exclude={"certifications"}))


class SortInput(CamelModel):
    field: str = "relevance"
    order: str = "desc"


class PaginationInput(CamelModel):
    page: int = 1
    limit: int | None = None


class SearchOptionsInput(CamelModel):
    sort: SortInput | None = None
    page: int | None = None
    page_size: int | None = None
    include_alternatives: bool = False
    include_compatible: bool = False
    include_pricing: bool = False
    include_availability: bool = False


class SearchRequest(CamelModel):
    """Search body.

    Options may be nested under ``options`` or given at the top level
    (``sort``, ``pagination``, ``include*`` flags); top-level values win.
    """

    query: str | None = None
    category: str | list[str] | None = None
    manufacturer: str | list[str] | None = None
    filters: SearchFilters = Field(default_factory=SearchFilters)
    options: SearchOptionsInput = Field(default_factory=SearchOptionsInput)

    sort: SortInput | None = None
    pagination: PaginationInput | None = None
    include_alternatives: bool | None = None
    include_compatible: bool | None = None
    include_pricing: bool | None = None
    include_availability: bool | None = None

    def to_query(self, default_page_size: int, max_page_size: int) -> SearchQuery:
        """Build the engine query; raises ValueError on invalid options."""
        opts = self.options
        sort = self.sort or opts.sort or SortInput()
        page = opts.page or 1
        page_size = opts.page_size or default_page_size
        if self.pagination is not None:
            page = self.pagination.page
            page_size = self.pagination.limit or page_size
        if page_size > max_page_size:
            raise ValueError(f"page_size must be between 1 and {max_page_size}")

        def flag(name: str) -> bool:
            top = getattr(self, name)
            return top if top is not None else getattr(opts, name)

        return SearchQuery(
            query=self.query,
            categories=tuple(dict.fromkeys(normalize_category(c) for c in _as_list(self.category))),
            manufacturers=tuple(_as_list(self.manufacturer)),
            filters=self.filters.to_criteria(),
            certifications=tuple(self.filters.certifications),
            options=SearchOptions(
                sort=SortSpec(sort.field, sort.order),
                page=page,
                page_size=page_size,
                include_alternatives=flag("include_alternatives"),
                include_compatible=flag("include_compatible"),
                include_pricing=flag("include_pricing"),
                include_availability=flag("include_availability"),
            ),
        )
