"""End-to-end save/load cycles through archives and the repository."""

from __future__ import annotations

import pytest

from landbase import savegame
from landbase.domain import airbase, depot, dispatch, turn
from landbase.domain import models as dm
from landbase.domain.enums import DepotSize, FacilityKind, Side, SupplyChannel, UnitType
from landbase.repository import JsonCampaignRepository


def _theatre() -> dm.Campaign:
    campaign = dm.Campaign(id=dm.CampaignID(7), name="Northern Theatre")
    bases = [airbase.create_airbase(f"Field {index}") for index in range(2)]
    for base in bases:
        turn.register_facility(campaign, base)
    for index in range(6):
        unit = dm.CombatUnit(
            id=dm.UnitID(f"wing-{index}"),
            name=f"Wing {index}",
            unit_type=UnitType.AIR,
            side=Side.AI if index % 2 else Side.PLAYER,
        )
        turn.register_unit(campaign, unit)
        airbase.attach(bases[index % 2], unit)
    turn.register_facility(
        campaign, depot.create_depot("Main Depot", depot_size=DepotSize.HUGE, main=True)
    )
    turn.register_facility(campaign, dispatch.create_facility(FacilityKind.HEADQUARTERS))
    return campaign


def test_archive_cycle_preserves_attachments(tmp_path):
    campaign = _theatre()
    archive = savegame.save_manifest(savegame.export_campaign(campaign), tmp_path / "t.landbase")

    restored = savegame.restore_campaign(savegame.load_manifest(archive))

    assert restored.mismatch_count == 0
    for facility_id, original in campaign.facilities.items():
        rebuilt = restored.campaign.facilities[facility_id]
        assert type(rebuilt) is type(original)
        if isinstance(original, dm.Airbase):
            assert airbase.attached_unit_ids(rebuilt) == airbase.attached_unit_ids(original)
            for unit in airbase.attached_units(rebuilt):
                assert unit is restored.campaign.units[unit.id]
                assert unit.host_facility_id == facility_id


def test_repeated_cycles_are_stable(tmp_path):
    repo = JsonCampaignRepository(tmp_path)
    repo.save(_theatre())
    first = (tmp_path / "campaign_7.json").read_text(encoding="utf-8")

    for _ in range(3):
        repo.save(repo.load(dm.CampaignID(7)))

    reloaded = savegame.SaveManifest.model_validate_json(
        (tmp_path / "campaign_7.json").read_text(encoding="utf-8")
    )
    original = savegame.SaveManifest.model_validate_json(first)
    assert reloaded.facilities == original.facilities
    assert reloaded.units == original.units


def test_turns_and_deliveries_survive_reload(tmp_path):
    repo = JsonCampaignRepository(tmp_path)
    campaign = _theatre()
    store = next(f for f in campaign.facilities.values() if isinstance(f, dm.SupplyDepot))
    for _ in range(4):
        depot.deliver(store, SupplyChannel.NAVAL, 0)
    assert store.stockpile == pytest.approx(82.0)
    repo.save(campaign)

    loaded = repo.load(campaign.id)
    turn.run_turn(loaded)
    repo.save(loaded)

    final = repo.load(campaign.id)
    stored = final.facilities[store.base.id]
    assert final.turn == 1
    assert stored.stockpile == pytest.approx(86.0)


def test_dangling_references_are_dropped_on_next_save(tmp_path):
    manifest = savegame.export_campaign(_theatre())
    manifest.units = [u for u in manifest.units if u.id != "wing-0"]

    restored = savegame.restore_campaign(manifest)
    assert restored.mismatch_count == 1

    again = savegame.export_campaign(restored.campaign)
    all_ids = [
        value
        for fields in again.facilities
        for key, value in fields.items()
        if key.startswith("attachedUnitId_")
    ]
    assert "wing-0" not in all_ids
    assert len(all_ids) == 5
