"""Dataclasses describing land-base facilities and the units they host.

Facilities are modelled by composition: every kind carries a
:class:`BaseFacility` as its ``base`` field and adds its own payload.  The
:data:`Facility` union is the tagged variant the dispatcher matches on.

Combat units are external to this package.  Only their identity, their
classification, and the non-owning ``host_facility_id`` back relation are
represented here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, NewType
from uuid import uuid4

from .enums import (
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

# --- Strongly typed identifiers -------------------------------------------------

CampaignID = NewType("CampaignID", int)
FacilityID = NewType("FacilityID", str)
UnitID = NewType("UnitID", str)


def new_facility_id() -> FacilityID:
    return FacilityID(str(uuid4()))


# --- External collaborator ------------------------------------------------------


@dataclass(slots=True, eq=False)
class CombatUnit:
    """Identity and classification of a unit a facility may host.

    Equality is identity: two distinct objects with the same id are not the
    same unit as far as attachment is concerned.
    """

    id: UnitID
    name: str
    unit_type: UnitType
    side: Side = Side.PLAYER
    efficiency_level: EfficiencyLevel = EfficiencyLevel.OPERATIONAL
    host_facility_id: FacilityID | None = None

    @property
    def is_air_unit(self) -> bool:
        return self.unit_type == UnitType.AIR


# --- Facility state -------------------------------------------------------------


@dataclass(slots=True)
class BaseFacility:
    """Identity and damage state common to every facility kind.

    ``capacity`` is derived from ``damage``; mutate both only through
    :mod:`landbase.domain.facility`.
    """

    id: FacilityID
    name: str
    side: Side
    damage: int = 0
    capacity: OperationalCapacity = OperationalCapacity.FULL


@dataclass(slots=True)
class ResolvedUnits:
    """Live attachments, in attachment order."""

    units: list[CombatUnit] = field(default_factory=list)


@dataclass(slots=True)
class PendingUnitIds:
    """Unit ids read from a save, waiting for the loader to supply the units."""

    unit_ids: list[UnitID] = field(default_factory=list)


AttachedUnits = ResolvedUnits | PendingUnitIds


@dataclass(slots=True)
class Headquarters:
    """Facility with damage and capacity only."""

    kind: ClassVar[FacilityKind] = FacilityKind.HEADQUARTERS

    base: BaseFacility


@dataclass(slots=True)
class Airbase:
    """Facility hosting a bounded number of air units."""

    kind: ClassVar[FacilityKind] = FacilityKind.AIRBASE

    base: BaseFacility
    attachments: AttachedUnits = field(default_factory=ResolvedUnits)


@dataclass(slots=True)
class SupplyDepot:
    """Facility holding, generating, and delivering supply.

    ``air_supply_flag``, ``naval_supply_flag`` and ``intelligence_flag`` are the
    raw stored values; read them through the ``has_*`` queries in
    :mod:`landbase.domain.depot`, which mask them by category.
    """

    kind: ClassVar[FacilityKind] = FacilityKind.SUPPLY_DEPOT

    base: BaseFacility
    depot_size: DepotSize = DepotSize.SMALL
    stockpile: float = 0.0
    generation_rate: SupplyGenerationRate = SupplyGenerationRate.MINIMAL
    projection: SupplyProjection = SupplyProjection.LOCAL
    penetration: bool = False
    category: DepotCategory = DepotCategory.SECONDARY
    air_supply_flag: bool = False
    naval_supply_flag: bool = False
    intelligence_flag: bool = False


Facility = Headquarters | Airbase | SupplyDepot


# --- Aggregate ------------------------------------------------------------------


@dataclass(slots=True)
class Campaign:
    """Units and facilities advanced together by the turn driver."""

    id: CampaignID
    name: str
    turn: int = 0
    units: dict[UnitID, CombatUnit] = field(default_factory=dict)
    facilities: dict[FacilityID, Facility] = field(default_factory=dict)
