"""Integration tests for the FastAPI layer."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from landbase.api.app import create_app
from landbase.api.runtime import ApiState
from landbase.config import Settings
from landbase.domain import models as dm
from landbase.repository import JsonCampaignRepository


def _make_app(tmp_path):
    settings = Settings(data_dir=tmp_path / "campaigns", archive_dir=tmp_path / "archives")

    def factory() -> ApiState:
        return ApiState(settings=settings)

    app = create_app(state_factory=factory, settings=settings)
    transport = ASGITransport(app=app)
    return app, transport


async def _create_campaign(client: AsyncClient) -> int:
    response = await client.post("/campaigns", json={"name": "Dev Campaign"})
    assert response.status_code == 201
    payload = response.json()
    assert payload["turn"] == 0
    return payload["id"]


@pytest.mark.asyncio
async def test_airbase_lifecycle_via_api(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

        campaign_id = await _create_campaign(client)

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities",
            json={"kind": "airbase", "name": "Kestrel Field"},
        )
        assert response.status_code == 201
        facility_id = response.json()["id"]

        for unit_id, unit_type in (("f1", "air"), ("t1", "land_direct_fire")):
            response = await client.post(
                f"/campaigns/{campaign_id}/units",
                json={"id": unit_id, "name": unit_id.upper(), "unit_type": unit_type},
            )
            assert response.status_code == 201

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities/{facility_id}/attach",
            json={"unit_id": "f1"},
        )
        assert response.status_code == 200
        attached = response.json()
        assert attached["success"] is True
        assert attached["facility"]["attached_unit_ids"] == ["f1"]

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities/{facility_id}/attach",
            json={"unit_id": "f1"},
        )
        assert response.json()["rejection"] == "already_attached"

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities/{facility_id}/attach",
            json={"unit_id": "t1"},
        )
        assert response.status_code == 409

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities/{facility_id}/damage",
            json={"amount": 65},
        )
        assert response.status_code == 200
        damaged = response.json()
        assert damaged["capacity"] == "heavily_degraded"
        assert damaged["can_launch_operations"] is False

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities/{facility_id}/repair",
            json={"amount": -1},
        )
        assert response.status_code == 400

        response = await client.put(
            f"/campaigns/{campaign_id}/facilities/{facility_id}/damage",
            json={"damage": 120},
        )
        assert response.status_code == 400

    repo = JsonCampaignRepository(tmp_path / "campaigns")
    stored = repo.load(dm.CampaignID(campaign_id))
    assert stored.facilities[dm.FacilityID(facility_id)].base.damage == 65
    assert stored.units[dm.UnitID("f1")].host_facility_id == facility_id


@pytest.mark.asyncio
async def test_depot_endpoints_via_api(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        campaign_id = await _create_campaign(client)

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities",
            json={"kind": "supply_depot", "depot_size": "medium"},
        )
        assert response.status_code == 201
        created = response.json()
        assert created["stockpile"] == 50.0
        assert created["has_air_supply"] is False
        depot_id = created["id"]

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities/{depot_id}/supply",
            json={"channel": "overland", "distance": 2},
        )
        assert response.status_code == 200
        supplied = response.json()
        assert supplied["delivered"] == pytest.approx(5.6)
        assert supplied["facility"]["stockpile"] == pytest.approx(43.0)

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities/{depot_id}/supply",
            json={"channel": "air", "distance": 2},
        )
        assert response.json()["delivered"] == 0.0

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities/{depot_id}/supply",
            json={"distance": -1},
        )
        assert response.status_code == 400

        response = await client.post(
            f"/campaigns/{campaign_id}/facilities/{depot_id}/upgrade",
            json={"track": "projection"},
        )
        assert response.json()["upgraded"] is True
        assert response.json()["facility"]["projection_radius"] == 6

        response = await client.post(
            f"/campaigns/{campaign_id}/turn/advance",
            json={"turns": 3},
        )
        assert response.status_code == 200
        advanced = response.json()
        assert advanced["campaign"]["turn"] == 3
        assert advanced["reports"][0]["supplies_generated"] == pytest.approx(2.0)

        response = await client.get(f"/campaigns/{campaign_id}/facilities/{depot_id}")
        assert response.json()["stockpile"] == pytest.approx(49.0)

        response = await client.get(f"/campaigns/{campaign_id}/facilities/missing")
        assert response.status_code == 404

        response = await client.get("/campaigns/999")
        assert response.status_code == 404

        response = await client.get("/campaigns")
        assert [c["id"] for c in response.json()] == [campaign_id]


@pytest.mark.asyncio
async def test_export_and_import_via_api(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        campaign_id = await _create_campaign(client)
        await client.post(
            f"/campaigns/{campaign_id}/facilities",
            json={"kind": "supply_depot", "main_depot": True},
        )

        response = await client.post(f"/campaigns/{campaign_id}/export", json={"author": "Ops"})
        assert response.status_code == 200
        filename = response.json()["filename"]
        assert filename == f"campaign_{campaign_id}_save.landbase"
        assert (tmp_path / "archives" / filename).is_file()

        response = await client.post("/campaigns/import", json={"filename": filename})
        assert response.status_code == 201
        imported = response.json()
        assert imported["campaign"]["id"] == campaign_id + 1
        assert imported["campaign"]["facility_count"] == 1
        assert imported["dropped_references"] == 0

        response = await client.post("/campaigns/import", json={"filename": "absent.landbase"})
        assert response.status_code == 404

        (tmp_path / "archives" / "broken.landbase").write_text("not a zip")
        response = await client.post("/campaigns/import", json={"filename": "broken.landbase"})
        assert response.status_code == 400

        response = await client.post("/campaigns/999/export", json={})
        assert response.status_code == 404
