"""Search request and result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from engine.catalog.catalog import CatalogCriteria
from engine.catalog.models import EquipmentItem

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

SORT_FIELDS = (
    "relevance",
    "price",
    "efficiency",
    "power",
    "capacity",
    "warranty",
    "rating",
    "tier",
    "manufacturer",
    "model",
)
SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class SortSpec:
    field: str = "relevance"
    order: str = "desc"

    def __post_init__(self) -> None:
        if self.field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field {self.field!r}")
        if self.order not in SORT_ORDERS:
            raise ValueError(f"Sort order must be 'asc' or 'desc', got {self.order!r}")


@dataclass(frozen=True)
class SearchOptions:
    sort: SortSpec = field(default_factory=SortSpec)
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    include_alternatives: bool = False
    include_compatible: bool = False
    include_pricing: bool = False
    include_availability: bool = False

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page is 1-indexed and must be >= 1")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")


@dataclass(frozen=True)
class SearchQuery:
    query: str | None = None
    categories: tuple[str, ...] = ()          # empty = all categories
    manufacturers: tuple[str, ...] = ()
    filters: CatalogCriteria = field(default_factory=CatalogCriteria)
    certifications: tuple[str, ...] = ()      # every listed certification required
    options: SearchOptions = field(default_factory=SearchOptions)


@dataclass
class SearchHit:
    item: EquipmentItem
    relevance_score: float
    matched_filters: list[str]
    performance_rating: float
    reliability_rating: float
    alternatives: list[dict[str, Any]] | None = None
    compatible: list[dict[str, Any]] | None = None
    pricing: dict[str, Any] | None = None
    availability: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "item": self.item.to_dict(),
            "category": self.item.category,
            "relevance_score": self.relevance_score,
            "matched_filters": list(self.matched_filters),
            "metadata": {
                "performance_rating": self.performance_rating,
                "reliability_rating": self.reliability_rating,
            },
        }
        for key in ("alternatives", "compatible", "pricing", "availability"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class SearchResult:
    docs: list[SearchHit]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool
    facets: dict[str, dict[str, int]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "docs": [d.to_dict() for d in self.docs],
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "has_more": self.has_more,
            "facets": self.facets,
        }
