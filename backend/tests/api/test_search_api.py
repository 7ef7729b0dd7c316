"""Tests for the equipment search API endpoint."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

URL = "/api/v1/equipment/search"


class TestSearch:
    async def test_envelope(self, client: AsyncClient):
        resp = await client.post(URL, json={"query": "SolarMax"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["version"] == "1.0"
        assert body["timestamp"]
        assert body["data"]["docs"][0]["item"]["id"] == "acme-400"

    async def test_no_matches(self, client: AsyncClient):
        resp = await client.post(URL, json={"category": "panels", "filters": {"minEfficiency": 25}})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["docs"] == []
        assert data["total"] == 0
        assert data["total_pages"] == 0
        assert data["has_more"] is False

    async def test_sort_by_price(self, client: AsyncClient):
        resp = await client.post(URL, json={
            "category": "panel",
            "options": {"sort": {"field": "price", "order": "asc"}},
        })
        ids = [d["item"]["id"] for d in resp.json()["data"]["docs"]]
        assert ids == ["valuesun-300", "brightco-380", "oldsun-405", "acme-400", "premia-410"]

    async def test_top_level_pagination(self, client: AsyncClient):
        resp = await client.post(URL, json={"category": ["panels"], "pagination": {"page": 3, "limit": 2}})
        data = resp.json()["data"]
        assert data["total"] == 5
        assert data["total_pages"] == 3
        assert len(data["docs"]) == 1
        assert data["has_more"] is False

    async def test_page_past_end(self, client: AsyncClient):
        resp = await client.post(URL, json={"category": "panels", "options": {"page": 10, "pageSize": 2}})
        data = resp.json()["data"]
        assert data["docs"] == []
        assert data["has_more"] is False

    async def test_facets_and_manufacturer(self, client: AsyncClient):
        resp = await client.post(URL, json={"manufacturer": "Hybrid Co"})
        data = resp.json()["data"]
        assert {d["item"]["id"] for d in data["docs"]} == {"hybrid-7600", "dc-battery-10"}
        assert data["facets"]["category"] == {"inverter": 1, "battery": 1}

    async def test_enrichment_only_when_requested(self, client: AsyncClient):
        plain = (await client.post(URL, json={"query": "SolarMax"})).json()["data"]["docs"][0]
        assert "pricing" not in plain
        enriched = (await client.post(URL, json={
            "query": "SolarMax",
            "includePricing": True,
            "includeAvailability": True,
        })).json()["data"]["docs"][0]
        assert "pricing" in enriched
        assert "availability" in enriched
        assert "alternatives" not in enriched


class TestSearchErrors:
    async def test_bad_sort_field(self, client: AsyncClient):
        resp = await client.post(URL, json={"sort": {"field": "colour"}})
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["details"][0]["category"] == "search"

    async def test_unknown_category(self, client: AsyncClient):
        resp = await client.post(URL, json={"category": "spaceships"})
        assert resp.status_code == 400

    async def test_page_size_too_large(self, client: AsyncClient):
        resp = await client.post(URL, json={"options": {"pageSize": 500}})
        assert resp.status_code == 400

    async def test_internal_error(self, client: AsyncClient, monkeypatch):
        from app.api.v1 import search as search_api

        def _boom(*args, **kwargs):
            raise RuntimeError("index corrupted")

        monkeypatch.setattr(search_api, "search", _boom)
        resp = await client.post(URL, json={"query": "panel"})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "Internal server error"}
