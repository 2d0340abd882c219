"""Import and export helpers for land-base save files.

Each facility is persisted as a flat set of key/value fields.  Airbases store
only the ids of the units they host (``attachedUnitCount`` followed by
``attachedUnitId_0`` ... ``attachedUnitId_{n-1}``); the units themselves are
saved separately and reconnected after load by
:func:`landbase.domain.turn.resolve_all`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4
from zipfile import ZIP_DEFLATED, BadZipFile, ZipFile

from pydantic import BaseModel, ConfigDict, Field, model_validator

from landbase.domain import airbase as airbase_rules
from landbase.domain import models as dm
from landbase.domain import turn
from landbase.domain.capacity import base_profile
from landbase.domain.enums import (
    DepotCategory,
    DepotSize,
    EfficiencyLevel,
    FacilityKind,
    OperationalCapacity,
    Side,
    SupplyGenerationRate,
    SupplyProjection,
    UnitType,
)
from landbase.domain.rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)

ATTACHED_COUNT_KEY = "attachedUnitCount"
ATTACHED_ID_KEY = "attachedUnitId_{index}"


class SaveKind(StrEnum):
    """Distinguish between templates and full running saves."""

    TEMPLATE = "template"
    SAVE = "save"


# ---------------------------------------------------------------------------
# Field layout


class UnitRecord(BaseModel):
    """Identity of a hosted unit as stored alongside the facilities."""

    id: str = Field(min_length=1)
    name: str
    unit_type: UnitType
    side: Side = Side.PLAYER
    efficiency_level: EfficiencyLevel = EfficiencyLevel.OPERATIONAL
    host_facility_id: str | None = None

    @classmethod
    def from_unit(cls, unit: dm.CombatUnit) -> UnitRecord:
        return cls(
            id=unit.id,
            name=unit.name,
            unit_type=unit.unit_type,
            side=unit.side,
            efficiency_level=unit.efficiency_level,
            host_facility_id=unit.host_facility_id,
        )

    def to_unit(self) -> dm.CombatUnit:
        return dm.CombatUnit(
            id=dm.UnitID(self.id),
            name=self.name,
            unit_type=self.unit_type,
            side=self.side,
            efficiency_level=self.efficiency_level,
            host_facility_id=dm.FacilityID(self.host_facility_id)
            if self.host_facility_id
            else None,
        )


class FacilityRecord(BaseModel):
    """Fields shared by every facility kind."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: FacilityKind
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    side: Side
    damage: int = Field(ge=0, le=100)
    capacity_tier: OperationalCapacity = Field(alias="capacityTier")

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class HeadquartersRecord(FacilityRecord):
    pass


class AirbaseRecord(FacilityRecord):
    """Airbase fields; ``attached_unit_ids`` is flattened on output."""

    attached_unit_ids: list[str] = Field(default_factory=list, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _collect_unit_ids(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "attached_unit_ids" in values:
            return values
        count = int(values.get(ATTACHED_COUNT_KEY, 0))
        if count < 0:
            raise ValueError(f"{ATTACHED_COUNT_KEY} cannot be negative")
        ids: list[str] = []
        for index in range(count):
            key = ATTACHED_ID_KEY.format(index=index)
            if key not in values:
                raise ValueError(f"missing {key} for {ATTACHED_COUNT_KEY}={count}")
            ids.append(str(values[key]))
        return {**values, "attached_unit_ids": ids}

    def to_fields(self) -> dict[str, Any]:
        fields = super().to_fields()
        fields[ATTACHED_COUNT_KEY] = len(self.attached_unit_ids)
        for index, unit_id in enumerate(self.attached_unit_ids):
            fields[ATTACHED_ID_KEY.format(index=index)] = unit_id
        return fields


class SupplyDepotRecord(FacilityRecord):
    """Depot fields; the ability flags are the raw, unmasked values."""

    depot_size: DepotSize = Field(alias="depotSize")
    stockpile: float = Field(ge=0.0)
    generation_rate: SupplyGenerationRate = Field(alias="generationRate")
    projection: SupplyProjection
    penetration: bool
    category: DepotCategory
    has_air_supply: bool = Field(alias="hasAirSupply")
    has_naval_supply: bool = Field(alias="hasNavalSupply")
    has_intelligence: bool = Field(default=False, alias="hasIntelligenceCapability")


RECORD_TYPES: dict[FacilityKind, type[FacilityRecord]] = {
    FacilityKind.HEADQUARTERS: HeadquartersRecord,
    FacilityKind.AIRBASE: AirbaseRecord,
    FacilityKind.SUPPLY_DEPOT: SupplyDepotRecord,
}


def dump_facility(facility: dm.Facility) -> dict[str, Any]:
    """Return the flat field set persisted for ``facility``."""

    base = facility.base
    common = {
        "kind": facility.kind,
        "id": base.id,
        "name": base.name,
        "side": base.side,
        "damage": base.damage,
        "capacity_tier": base.capacity,
    }
    match facility:
        case dm.Airbase():
            if airbase_rules.has_unresolved_references(facility):
                unit_ids = airbase_rules.pending_unit_ids(facility)
            else:
                unit_ids = airbase_rules.attached_unit_ids(facility)
            record: FacilityRecord = AirbaseRecord(**common, attached_unit_ids=list(unit_ids))
        case dm.SupplyDepot():
            record = SupplyDepotRecord(
                **common,
                depot_size=facility.depot_size,
                stockpile=facility.stockpile,
                generation_rate=facility.generation_rate,
                projection=facility.projection,
                penetration=facility.penetration,
                category=facility.category,
                has_air_supply=facility.air_supply_flag,
                has_naval_supply=facility.naval_supply_flag,
                has_intelligence=facility.intelligence_flag,
            )
        case dm.Headquarters():
            record = HeadquartersRecord(**common)
    return record.to_fields()


def load_facility(
    fields: dict[str, Any], *, rules: RulesConfig = DEFAULT_RULES
) -> dm.Facility:
    """Rebuild a facility from its field set.

    The capacity tier is always recomputed from ``damage``.  Airbases come
    back in the pending state holding the persisted unit ids.
    """

    kind = FacilityKind(fields["kind"])
    record = RECORD_TYPES[kind].model_validate(fields)
    base = _load_base(record, rules)

    match record:
        case AirbaseRecord():
            airbase = dm.Airbase(base=base)
            if record.attached_unit_ids:
                airbase_rules.mark_pending(
                    airbase, [dm.UnitID(uid) for uid in record.attached_unit_ids]
                )
            return airbase
        case SupplyDepotRecord():
            capacity = rules.depot.stockpile_by_size[record.depot_size]
            return dm.SupplyDepot(
                base=base,
                depot_size=record.depot_size,
                stockpile=min(record.stockpile, capacity),
                generation_rate=record.generation_rate,
                projection=record.projection,
                penetration=record.penetration,
                category=record.category,
                air_supply_flag=record.has_air_supply,
                naval_supply_flag=record.has_naval_supply,
                intelligence_flag=record.has_intelligence,
            )
        case _:
            return dm.Headquarters(base=base)


def _load_base(record: FacilityRecord, rules: RulesConfig) -> dm.BaseFacility:
    derived = base_profile(rules).tier_for(record.damage)
    if derived != record.capacity_tier:
        logger.warning(
            "facility %s: stored capacity %s disagrees with damage %d, using %s",
            record.id,
            record.capacity_tier,
            record.damage,
            derived,
        )
    return dm.BaseFacility(
        id=dm.FacilityID(record.id),
        name=record.name,
        side=record.side,
        damage=record.damage,
        capacity=derived,
    )


# ---------------------------------------------------------------------------
# Manifest


class SaveMetadata(BaseModel):
    """High-level information about the packaged save."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    description: str | None = None
    author: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    rules_version: str = "1.0"
    game_version: str = "0.1.0"


class SaveManifest(BaseModel):
    """Top-level manifest stored in a `.landbase` archive."""

    format_version: int = Field(default=1, ge=1)
    kind: SaveKind = SaveKind.SAVE
    metadata: SaveMetadata
    campaign_id: int
    turn: int = Field(default=0, ge=0)
    units: list[UnitRecord] = Field(default_factory=list)
    facilities: list[dict[str, Any]] = Field(default_factory=list)


@dataclass(slots=True)
class RestoredCampaign:
    """A campaign rebuilt from a manifest plus the resolution results."""

    campaign: dm.Campaign
    resolutions: dict[dm.FacilityID, airbase_rules.ResolutionOutcome] = field(
        default_factory=dict
    )

    @property
    def mismatch_count(self) -> int:
        return sum(len(outcome.mismatches) for outcome in self.resolutions.values())


MANIFEST_PATH = "landbase/manifest.json"
ARCHIVE_SUFFIX = ".landbase"
FORMAT_VERSION = 1


def export_campaign(
    campaign: dm.Campaign,
    *,
    kind: SaveKind = SaveKind.SAVE,
    metadata: SaveMetadata | None = None,
) -> SaveManifest:
    """Produce a manifest from an in-memory campaign."""

    return SaveManifest(
        kind=kind,
        metadata=metadata or SaveMetadata(name=campaign.name),
        campaign_id=int(campaign.id),
        turn=campaign.turn,
        units=[UnitRecord.from_unit(unit) for unit in campaign.units.values()],
        facilities=[dump_facility(facility) for facility in campaign.facilities.values()],
    )


def restore_campaign(
    manifest: SaveManifest, *, rules: RulesConfig = DEFAULT_RULES
) -> RestoredCampaign:
    """Rebuild every unit, then every facility, then reconnect airbases."""

    campaign = dm.Campaign(
        id=dm.CampaignID(manifest.campaign_id),
        name=manifest.metadata.name,
        turn=manifest.turn,
    )
    for record in manifest.units:
        turn.register_unit(campaign, record.to_unit())
    for fields in manifest.facilities:
        turn.register_facility(campaign, load_facility(fields, rules=rules))
    resolutions = turn.resolve_all(campaign, rules=rules)
    return RestoredCampaign(campaign=campaign, resolutions=resolutions)


def load_manifest(path: Path | str) -> SaveManifest:
    """Read the manifest out of a ``.landbase`` archive.

    Raises ``ValueError`` for a file that is not an archive, lacks a manifest,
    or was written in a newer save format than this version reads.
    """

    source = Path(path)
    try:
        with ZipFile(source, "r") as archive:
            payload = archive.read(MANIFEST_PATH)
    except BadZipFile as exc:
        raise ValueError(f"{source.name} is not a {ARCHIVE_SUFFIX} archive") from exc
    except KeyError as exc:
        raise ValueError(f"{source.name} has no {MANIFEST_PATH}") from exc
    manifest = SaveManifest.model_validate_json(payload)
    if manifest.format_version > FORMAT_VERSION:
        raise ValueError(
            f"{source.name} uses save format {manifest.format_version}, "
            f"newest readable is {FORMAT_VERSION}"
        )
    return manifest


def save_manifest(manifest: SaveManifest, path: Path | str) -> Path:
    """Write ``manifest`` into a ``.landbase`` archive and return its path."""

    target = Path(path)
    if target.suffix != ARCHIVE_SUFFIX:
        target = target.with_suffix(ARCHIVE_SUFFIX)
    target.parent.mkdir(parents=True, exist_ok=True)
    with ZipFile(target, "w", ZIP_DEFLATED) as archive:
        archive.writestr(MANIFEST_PATH, manifest.model_dump_json(indent=2))
    return target
