"""Runtime primitives backing the land-base HTTP API."""

from __future__ import annotations

import logging
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from landbase import savegame
from landbase.config import Settings, get_settings
from landbase.domain import airbase as airbase_rules
from landbase.domain import depot as depot_rules
from landbase.domain import dispatch
from landbase.domain import models as dm
from landbase.domain import turn
from landbase.domain.enums import (
    DepotSize,
    EfficiencyLevel,
    FacilityKind,
    Side,
    SupplyChannel,
    UnitType,
    UpgradeTrack,
)
from landbase.domain.errors import InvalidOperationError, NotFoundError
from landbase.domain.rules_config import DEFAULT_RULES, RulesConfig
from landbase.repository import JsonCampaignRepository

logger = logging.getLogger(__name__)

_F = TypeVar("_F", dm.Airbase, dm.SupplyDepot)


@dataclass(slots=True)
class UnitDraft:
    """API-facing initializer for a hosted unit."""

    id: str
    name: str
    unit_type: UnitType
    side: Side = Side.PLAYER
    efficiency_level: EfficiencyLevel = EfficiencyLevel.OPERATIONAL


@dataclass(slots=True)
class FacilityDraft:
    """API-facing initializer for a new facility."""

    kind: FacilityKind
    name: str | None = None
    side: Side = Side.PLAYER
    initial_damage: int = 0
    depot_size: DepotSize = DepotSize.SMALL
    main_depot: bool = False


class CampaignService:
    """Load a campaign, apply one facility operation, and persist it again."""

    def __init__(
        self,
        repository: JsonCampaignRepository,
        archive_dir: Path,
        *,
        rules: RulesConfig = DEFAULT_RULES,
    ) -> None:
        self._repository = repository
        self._archive_dir = archive_dir
        self._rules = rules

    # -- campaigns -------------------------------------------------------------

    def list_campaigns(self) -> list[dm.Campaign]:
        """Return every persisted campaign ordered by identifier."""

        campaigns: list[dm.Campaign] = []
        for campaign_id in self._repository.list_campaigns():
            with suppress(FileNotFoundError):
                campaigns.append(self._repository.load(campaign_id))
        return campaigns

    def get_campaign(self, campaign_id: dm.CampaignID) -> dm.Campaign:
        """Load a single campaign or raise ``FileNotFoundError``."""

        return self._repository.load(campaign_id)

    def save_campaign(self, campaign: dm.Campaign) -> dm.Campaign:
        self._repository.save(campaign)
        return campaign

    def create_campaign(self, name: str) -> dm.Campaign:
        campaign = dm.Campaign(id=self._repository.next_identifier(), name=name)
        self._repository.save(campaign)
        return campaign

    def export_campaign(
        self, campaign_id: dm.CampaignID, *, template: bool = False, author: str | None = None
    ) -> Path:
        """Write a stored campaign to the archive directory."""

        kind = savegame.SaveKind.TEMPLATE if template else savegame.SaveKind.SAVE
        target = self._archive_dir / f"campaign_{int(campaign_id)}_{kind}"
        path = self._repository.export_archive(campaign_id, target, kind=kind, author=author)
        logger.info("campaign %d exported to %s", int(campaign_id), path)
        return path

    def import_campaign(self, filename: str) -> savegame.RestoredCampaign:
        """Import an archive from the archive directory as a new campaign."""

        source = self._archive_dir / Path(filename).name
        if not source.is_file():
            raise NotFoundError(f"archive {source.name} not found")
        return self._repository.import_archive(source)

    def advance_turns(self, campaign_id: dm.CampaignID, turns: int = 1) -> list[dispatch.TurnReport]:
        campaign = self.get_campaign(campaign_id)
        reports: list[dispatch.TurnReport] = []
        for _ in range(turns):
            reports = turn.run_turn(campaign, rules=self._rules)
        self.save_campaign(campaign)
        logger.info("campaign %s advanced to turn %d", int(campaign_id), campaign.turn)
        return reports

    # -- units and facilities --------------------------------------------------

    def register_unit(self, campaign_id: dm.CampaignID, draft: UnitDraft) -> dm.CombatUnit:
        campaign = self.get_campaign(campaign_id)
        unit = dm.CombatUnit(
            id=dm.UnitID(draft.id),
            name=draft.name,
            unit_type=draft.unit_type,
            side=draft.side,
            efficiency_level=draft.efficiency_level,
        )
        if unit.id in campaign.units:
            raise InvalidOperationError(f"unit id {unit.id} is already registered")
        turn.register_unit(campaign, unit)
        self.save_campaign(campaign)
        return unit

    def create_facility(self, campaign_id: dm.CampaignID, draft: FacilityDraft) -> dm.Facility:
        campaign = self.get_campaign(campaign_id)
        options: dict[str, object] = {}
        if draft.kind == FacilityKind.SUPPLY_DEPOT:
            options = {"depot_size": draft.depot_size, "main": draft.main_depot}
        facility = dispatch.create_facility(
            draft.kind,
            draft.name,
            draft.side,
            initial_damage=draft.initial_damage,
            rules=self._rules,
            **options,
        )
        turn.register_facility(campaign, facility)
        self.save_campaign(campaign)
        return facility

    def damage_facility(
        self,
        campaign_id: dm.CampaignID,
        facility_id: dm.FacilityID,
        *,
        add: int | None = None,
        repair: int | None = None,
        set_to: int | None = None,
    ) -> dm.Facility:
        campaign = self.get_campaign(campaign_id)
        facility = self.find_facility(campaign, facility_id)
        if set_to is not None:
            dispatch.set_damage(facility, set_to, rules=self._rules)
        if add is not None:
            dispatch.add_damage(facility, add, rules=self._rules)
        if repair is not None:
            dispatch.repair_damage(facility, repair, rules=self._rules)
        self.save_campaign(campaign)
        return facility

    def attach_unit(
        self, campaign_id: dm.CampaignID, facility_id: dm.FacilityID, unit_id: dm.UnitID
    ) -> airbase_rules.AttachOutcome:
        campaign = self.get_campaign(campaign_id)
        airbase = self._expect(self.find_facility(campaign, facility_id), dm.Airbase)
        outcome = airbase_rules.attach(airbase, self.find_unit(campaign, unit_id), rules=self._rules)
        if outcome.success:
            self.save_campaign(campaign)
        return outcome

    def detach_unit(
        self, campaign_id: dm.CampaignID, facility_id: dm.FacilityID, unit_id: dm.UnitID
    ) -> bool:
        campaign = self.get_campaign(campaign_id)
        airbase = self._expect(self.find_facility(campaign, facility_id), dm.Airbase)
        removed = airbase_rules.detach_by_id(airbase, unit_id)
        if removed:
            self.save_campaign(campaign)
        return removed

    def request_supply(
        self,
        campaign_id: dm.CampaignID,
        facility_id: dm.FacilityID,
        channel: SupplyChannel,
        distance: int,
        zocs_crossed: int = 0,
    ) -> tuple[float, dm.SupplyDepot]:
        campaign = self.get_campaign(campaign_id)
        depot = self._expect(self.find_facility(campaign, facility_id), dm.SupplyDepot)
        delivered = depot_rules.deliver(
            depot, channel, distance, zocs_crossed, rules=self._rules
        )
        if delivered > 0:
            self.save_campaign(campaign)
        return delivered, depot

    def upgrade_depot(
        self, campaign_id: dm.CampaignID, facility_id: dm.FacilityID, track: UpgradeTrack
    ) -> tuple[bool, dm.SupplyDepot]:
        campaign = self.get_campaign(campaign_id)
        depot = self._expect(self.find_facility(campaign, facility_id), dm.SupplyDepot)
        upgraded = depot_rules.upgrade(depot, track, rules=self._rules)
        if upgraded:
            self.save_campaign(campaign)
        return upgraded, depot

    @staticmethod
    def find_facility(campaign: dm.Campaign, facility_id: dm.FacilityID) -> dm.Facility:
        facility = campaign.facilities.get(facility_id)
        if facility is None:
            raise NotFoundError(f"facility {facility_id} not found")
        return facility

    @staticmethod
    def find_unit(campaign: dm.Campaign, unit_id: dm.UnitID) -> dm.CombatUnit:
        unit = campaign.units.get(unit_id)
        if unit is None:
            raise NotFoundError(f"unit {unit_id} not found")
        return unit

    @staticmethod
    def _expect(facility: dm.Facility, kind: type[_F]) -> _F:
        if not isinstance(facility, kind):
            raise InvalidOperationError(
                f"facility {facility.base.id} is a {facility.kind}, not a {kind.kind}"
            )
        return facility

    # -- serialization helpers -------------------------------------------------

    @staticmethod
    def to_summary_dict(campaign: dm.Campaign) -> dict[str, object]:
        """Return a JSON-friendly overview of a campaign."""

        return {
            "id": int(campaign.id),
            "name": campaign.name,
            "turn": campaign.turn,
            "unit_count": len(campaign.units),
            "facility_count": len(campaign.facilities),
        }

    def to_detail_dict(self, campaign: dm.Campaign) -> dict[str, object]:
        """Return the summary plus every facility and unit of a campaign."""

        payload = self.to_summary_dict(campaign)
        payload["facilities"] = {
            str(facility_id): self.to_facility_dict(facility)
            for facility_id, facility in campaign.facilities.items()
        }
        payload["units"] = {
            str(unit_id): self.to_unit_dict(unit) for unit_id, unit in campaign.units.items()
        }
        return payload

    def to_facility_dict(self, facility: dm.Facility) -> dict[str, object]:
        base = facility.base
        payload: dict[str, object] = {
            "id": base.id,
            "kind": str(facility.kind),
            "name": base.name,
            "side": str(base.side),
            "damage": base.damage,
            "capacity": str(base.capacity),
            "operational": dispatch.is_operational(facility),
            "efficiency": dispatch.efficiency_multiplier(facility, rules=self._rules),
        }
        match facility:
            case dm.Airbase():
                payload["attached_unit_ids"] = [
                    str(unit_id) for unit_id in airbase_rules.attached_unit_ids(facility)
                ]
                payload["can_launch_operations"] = airbase_rules.can_launch_operations(
                    facility, rules=self._rules
                )
            case dm.SupplyDepot():
                payload.update(
                    {
                        "depot_size": str(facility.depot_size),
                        "category": str(facility.category),
                        "stockpile": facility.stockpile,
                        "max_stockpile": depot_rules.max_stockpile(facility, rules=self._rules),
                        "generation_rate": str(facility.generation_rate),
                        "projection": str(facility.projection),
                        "projection_radius": depot_rules.projection_radius(
                            facility, rules=self._rules
                        ),
                        "penetration": facility.penetration,
                        "has_air_supply": depot_rules.has_air_supply(facility),
                        "has_naval_supply": depot_rules.has_naval_supply(facility),
                        "intelligence_radius": depot_rules.intelligence_radius(
                            facility, rules=self._rules
                        ),
                    }
                )
            case dm.Headquarters():
                pass
        return payload

    @staticmethod
    def to_unit_dict(unit: dm.CombatUnit) -> dict[str, object]:
        return {
            "id": str(unit.id),
            "name": unit.name,
            "unit_type": str(unit.unit_type),
            "side": str(unit.side),
            "efficiency_level": str(unit.efficiency_level),
            "host_facility_id": str(unit.host_facility_id) if unit.host_facility_id else None,
        }


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self, *, settings: Settings | None = None, rules: RulesConfig = DEFAULT_RULES
    ) -> None:
        self.settings = settings or get_settings()
        self.settings.ensure_directories()
        self.rules = rules
        self.repository = JsonCampaignRepository(self.settings.data_dir, rules=rules)
        self.campaigns = CampaignService(
            self.repository, self.settings.archive_dir, rules=rules
        )

    async def shutdown(self) -> None:
        logger.debug("api state shut down")


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
