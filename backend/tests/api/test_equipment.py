"""Tests for catalog browsing, compatibility and health endpoints."""

from __future__ import annotations

import json

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


# ======================================================================
# Catalog browsing
# ======================================================================


class TestEquipmentCatalog:
    async def test_list_all(self, client: AsyncClient):
        resp = await client.get("/api/v1/equipment")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["total"] == 17
        assert len(data["items"]) == 17

    async def test_list_with_criteria(self, client: AsyncClient):
        resp = await client.get(
            "/api/v1/equipment",
            params={"category": "panels", "min_efficiency": 21, "availability": "in-stock"},
        )
        ids = [i["id"] for i in resp.json()["data"]["items"]]
        assert sorted(ids) == ["acme-400", "premia-410"]

    async def test_unknown_category(self, client: AsyncClient):
        resp = await client.get("/api/v1/equipment", params={"category": "spaceships"})
        assert resp.status_code == 400
        payload = resp.json()
        assert payload["success"] is False
        assert "spaceships" in payload["error"]

    async def test_get_item(self, client: AsyncClient):
        resp = await client.get("/api/v1/equipment/hybrid-7600")
        assert resp.status_code == 200
        item = resp.json()["data"]
        assert item["category"] == "inverter"
        assert item["battery_ready"] is True

    async def test_get_item_not_found(self, client: AsyncClient):
        resp = await client.get("/api/v1/equipment/does-not-exist")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Equipment not found"}


# ======================================================================
# Compatibility
# ======================================================================


class TestCompatibilityEndpoint:
    async def test_matched_system(self, client: AsyncClient):
        resp = await client.post("/api/v1/equipment/compatibility", json={
            "panelId": "acme-400",
            "panelCount": 23,
            "inverterId": "stringer-5000",
            "inverterCount": 2,
            "rackingId": "rail-penetrating",
            "site": {"roofType": "asphalt_shingle", "roofPitch": 25},
        })
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["compatible"] is True
        assert data["feasible"] is True
        assert data["score"] > 0
        assert data["sizing_ratio"] == pytest.approx(1.087, abs=0.001)

    async def test_unsupported_roof_scores_zero(self, client: AsyncClient):
        resp = await client.post("/api/v1/equipment/compatibility", json={
            "panelId": "acme-400",
            "panelCount": 23,
            "inverterId": "stringer-5000",
            "inverterCount": 2,
            "rackingId": "ballast-flat",
            "site": {"roofType": "asphalt_shingle", "roofPitch": 25},
        })
        data = resp.json()["data"]
        assert data["score"] == 0
        assert data["compatible"] is False

    async def test_unknown_component(self, client: AsyncClient):
        resp = await client.post("/api/v1/equipment/compatibility", json={
            "panelId": "ghost-panel", "panelCount": 10, "inverterId": "stringer-5000",
        })
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Equipment ghost-panel not found"}

    async def test_wrong_category(self, client: AsyncClient):
        resp = await client.post("/api/v1/equipment/compatibility", json={
            "panelId": "stringer-5000", "panelCount": 10, "inverterId": "stringer-5000",
        })
        assert resp.status_code == 400
        assert resp.json() == {
            "success": False,
            "error": "Equipment stringer-5000 is a inverter, expected a panel",
        }

    async def test_invalid_panel_count(self, client: AsyncClient):
        resp = await client.post("/api/v1/equipment/compatibility", json={
            "panelId": "acme-400", "panelCount": 0, "inverterId": "stringer-5000",
        })
        assert resp.status_code == 400
        assert resp.json()["success"] is False


# ======================================================================
# Catalog cache
# ======================================================================


class TestCatalogService:
    async def test_reload_swaps_snapshot(self, app, catalog, catalog_records, tmp_path, monkeypatch):
        from app.config import settings
        from app.services.catalog_service import get_catalog, reload_catalog

        assert get_catalog() is catalog
        catalog_records["panels"] = catalog_records["panels"][:2]
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(catalog_records))
        monkeypatch.setattr(settings, "catalog_path", str(path))

        fresh = reload_catalog()
        assert fresh is not catalog
        assert get_catalog() is fresh
        assert len(fresh.get_panels()) == 2
        # the old snapshot is untouched
        assert len(catalog.get_panels()) == 5


# ======================================================================
# Health
# ======================================================================


class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["services"]["catalog"] == "ok"
        assert body["catalog"]["total"] == 17
        assert body["catalog"]["categories"]["panel"] == 5
