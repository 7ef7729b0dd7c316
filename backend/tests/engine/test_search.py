"""Tests for the equipment search engine."""

import pytest

from engine.catalog.catalog import CatalogCriteria
from engine.search import search_engine
from engine.search.query import SearchOptions, SearchQuery, SortSpec
from engine.search.search_engine import performance_rating, search, text_relevance


def _query(**kwargs) -> SearchQuery:
    options = kwargs.pop("options", SearchOptions())
    return SearchQuery(options=options, **kwargs)


class TestTextMatching:
    def test_every_term_must_match(self, catalog):
        item = catalog.get_by_id("acme-400")
        assert text_relevance(item, ["solar", "panel"]) is not None
        assert text_relevance(item, ["solar", "battery"]) is None

    def test_plural_terms(self, catalog):
        item = catalog.get_by_id("acme-400")
        assert text_relevance(item, ["panels"]) is not None

    def test_manufacturer_and_model_bonus(self, catalog):
        item = catalog.get_by_id("acme-400")
        assert text_relevance(item, ["acme"]) == 25      # term + manufacturer
        assert text_relevance(item, ["solarmax"]) == 30  # term + model

    def test_query_solar_panel_finds_solarmax(self, catalog):
        result = search(catalog, _query(query="solar panel", categories=("panel",)))
        assert "acme-400" in [h.item.id for h in result.docs]

    def test_empty_query_matches_all(self, catalog):
        result = search(catalog, _query(categories=("panel",)))
        assert result.total == 5
        assert all(h.relevance_score == 0 for h in result.docs)


class TestFiltering:
    def test_category_and_manufacturer(self, catalog):
        result = search(catalog, _query(categories=("panel", "battery"), manufacturers=("hybrid co",)))
        assert [h.item.id for h in result.docs] == ["dc-battery-10"]
        assert "manufacturer" in result.docs[0].matched_filters

    def test_min_efficiency_above_catalog_is_empty(self, catalog):
        result = search(catalog, _query(categories=("panel",), filters=CatalogCriteria(min_efficiency=25)))
        assert result.docs == []
        assert result.total == 0
        assert result.has_more is False

    def test_filter_monotonicity(self, catalog):
        loose = search(catalog, _query(filters=CatalogCriteria(availability="in-stock")))
        tight = search(catalog, _query(filters=CatalogCriteria(availability="in-stock", max_price=0.45)))
        assert {h.item.id for h in tight.docs} <= {h.item.id for h in loose.docs}

    def test_certifications_required(self, catalog):
        result = search(catalog, _query(certifications=("UL 1741",)))
        assert {h.item.category for h in result.docs} == {"inverter"}

    def test_matched_filters_listed(self, catalog):
        result = search(catalog, _query(categories=("panel",), filters=CatalogCriteria(tier=1)))
        assert all(h.matched_filters == ["tier"] for h in result.docs)


class TestSorting:
    def test_default_relevance_then_catalog_order(self, catalog):
        result = search(catalog, _query(query="mono"))
        ids = [h.item.id for h in result.docs]
        # BrightCo has "Mono" in its model name; the rest only match on type
        assert ids == ["brightco-380", "acme-400", "premia-410", "oldsun-405"]

    def test_sort_by_price_ascending(self, catalog):
        opts = SearchOptions(sort=SortSpec("price", "asc"))
        result = search(catalog, _query(categories=("panel",), options=opts))
        prices = [h.item.price_per_watt for h in result.docs]
        assert prices == sorted(prices)

    def test_missing_values_sort_last(self, catalog):
        opts = SearchOptions(sort=SortSpec("efficiency", "desc"), page_size=100)
        result = search(catalog, _query(options=opts))
        values = [h.item.efficiency_pct for h in result.docs]
        first_missing = values.index(None)
        assert all(v is None for v in values[first_missing:])
        present = values[:first_missing]
        assert present == sorted(present, reverse=True)

    def test_unknown_sort_field(self):
        with pytest.raises(ValueError):
            SortSpec("color")

    def test_deterministic(self, catalog):
        q = _query(query="solar", options=SearchOptions(sort=SortSpec("rating")))
        first = search(catalog, q).to_dict()
        second = search(catalog, q).to_dict()
        assert first == second


class TestPagination:
    def test_pages_partition_results(self, catalog):
        full = search(catalog, _query(options=SearchOptions(page_size=100)))
        seen = []
        page = 1
        while True:
            result = search(catalog, _query(options=SearchOptions(page=page, page_size=4)))
            seen.extend(h.item.id for h in result.docs)
            if not result.has_more:
                break
            page += 1
        assert seen == [h.item.id for h in full.docs]
        assert len(set(seen)) == full.total

    def test_page_past_end(self, catalog):
        result = search(catalog, _query(options=SearchOptions(page=50, page_size=10)))
        assert result.docs == []
        assert result.has_more is False
        assert result.total == len(catalog)

    def test_total_pages(self, catalog):
        result = search(catalog, _query(options=SearchOptions(page_size=4)))
        assert result.total_pages == -(-len(catalog) // 4)

    def test_invalid_page(self):
        with pytest.raises(ValueError):
            SearchOptions(page=0)
        with pytest.raises(ValueError):
            SearchOptions(page_size=101)


class TestEnrichment:
    def test_disabled_flags_never_compute(self, catalog, monkeypatch):
        def _boom(*args, **kwargs):
            raise AssertionError("enrichment should not run")

        for name in ("alternatives_for", "compatible_for", "pricing_for", "availability_for"):
            monkeypatch.setattr(search_engine, name, _boom)
        result = search(catalog, _query(categories=("panel",)))
        assert result.total == 5
        assert "pricing" not in result.docs[0].to_dict()

    def test_only_page_hits_enriched(self, catalog, monkeypatch):
        calls = []
        monkeypatch.setattr(search_engine, "compatible_for", lambda item, cat: calls.append(item.id) or [])
        opts = SearchOptions(page_size=2, include_compatible=True)
        search(catalog, _query(categories=("panel",), options=opts))
        assert len(calls) == 2

    def test_pricing_and_availability(self, catalog):
        opts = SearchOptions(include_pricing=True, include_availability=True)
        result = search(catalog, _query(query="acme", options=opts))
        hit = result.docs[0].to_dict()
        assert hit["pricing"]["unit_price"] == pytest.approx(172.0)
        assert hit["pricing"]["price_unit"] == "W"
        assert hit["availability"]["in_stock"] is True

    def test_alternatives(self, catalog):
        opts = SearchOptions(include_alternatives=True)
        result = search(catalog, _query(query="acme", options=opts))
        assert [a["id"] for a in result.docs[0].alternatives] == ["premia-410"]


class TestFacetsAndRatings:
    def test_facets_cover_full_result(self, catalog):
        result = search(catalog, _query(options=SearchOptions(page_size=2)))
        assert sum(result.facets["category"].values()) == result.total
        assert result.facets["category"]["panel"] == 5

    def test_performance_rating_bounds(self, catalog):
        for item in catalog.items():
            assert 0 <= performance_rating(item) <= 100
