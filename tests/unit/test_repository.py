"""Tests for the JSON campaign repository."""

from __future__ import annotations

import pytest

from landbase.domain import airbase, depot, turn
from landbase.domain import models as dm
from landbase.domain.enums import UnitType
from landbase.repository import JsonCampaignRepository


def _campaign(campaign_id: int = 1) -> dm.Campaign:
    campaign = dm.Campaign(id=dm.CampaignID(campaign_id), name="Test", turn=5)
    unit = dm.CombatUnit(id=dm.UnitID("f1"), name="Falcon", unit_type=UnitType.AIR)
    turn.register_unit(campaign, unit)
    field = airbase.create_airbase("Field", initial_damage=15)
    airbase.attach(field, unit)
    turn.register_facility(campaign, field)
    turn.register_facility(campaign, depot.create_depot("Store"))
    return campaign


def test_save_and_load_campaign(tmp_path):
    repo = JsonCampaignRepository(tmp_path)
    campaign = _campaign()

    path = repo.save(campaign)
    assert path.exists()

    loaded = repo.load(dm.CampaignID(1))
    assert loaded.name == campaign.name
    assert loaded.turn == 5
    assert list(loaded.facilities) == list(campaign.facilities)
    field = next(f for f in loaded.facilities.values() if isinstance(f, dm.Airbase))
    assert field.base.damage == 15
    assert airbase.attached_units(field) == (loaded.units[dm.UnitID("f1")],)


def test_restore_exposes_resolution_results(tmp_path):
    repo = JsonCampaignRepository(tmp_path)
    repo.save(_campaign())
    restored = repo.restore(dm.CampaignID(1))
    assert restored.mismatch_count == 0
    assert len(restored.resolutions) == 1


def test_load_missing_campaign_raises(tmp_path):
    repo = JsonCampaignRepository(tmp_path)
    with pytest.raises(FileNotFoundError):
        repo.load(dm.CampaignID(99))


def test_list_and_delete(tmp_path):
    repo = JsonCampaignRepository(tmp_path)
    repo.save(_campaign(1))
    repo.save(_campaign(2))

    ids = repo.list_campaigns()
    assert ids == [dm.CampaignID(1), dm.CampaignID(2)]

    repo.delete(dm.CampaignID(1))
    assert repo.list_campaigns() == [dm.CampaignID(2)]


def test_archive_export_then_import_assigns_new_identifier(tmp_path):
    repo = JsonCampaignRepository(tmp_path / "campaigns")
    repo.save(_campaign(3))

    archive = repo.export_archive(dm.CampaignID(3), tmp_path / "out" / "field", author="Ops")
    assert archive.name == "field.landbase"

    restored = repo.import_archive(archive)
    assert restored.campaign.id == dm.CampaignID(4)
    assert restored.campaign.turn == 5
    assert repo.list_campaigns() == [dm.CampaignID(3), dm.CampaignID(4)]

    reloaded = repo.load(dm.CampaignID(4))
    field = next(f for f in reloaded.facilities.values() if isinstance(f, dm.Airbase))
    assert airbase.attached_unit_ids(field) == ["f1"]


def test_export_missing_campaign_raises(tmp_path):
    repo = JsonCampaignRepository(tmp_path)
    with pytest.raises(FileNotFoundError):
        repo.export_archive(dm.CampaignID(7), tmp_path / "x.landbase")


def test_list_ignores_unrelated_files(tmp_path):
    repo = JsonCampaignRepository(tmp_path)
    repo.save(_campaign(2))
    (tmp_path / "campaign_notes.json").write_text("{}")
    (tmp_path / "campaign_9.json.tmp").write_text("{}")
    assert repo.list_campaigns() == [dm.CampaignID(2)]
    assert repo.next_identifier() == dm.CampaignID(3)
