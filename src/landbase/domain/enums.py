"""Enumerations shared by the land-base facility rules."""

from __future__ import annotations

from enum import StrEnum
from typing import TypeVar


E = TypeVar("E", bound=StrEnum)


class Side(StrEnum):
    """Faction owning a facility or unit."""

    PLAYER = "player"
    AI = "ai"


class OperationalCapacity(StrEnum):
    """Capacity tier derived from facility damage, best to worst."""

    FULL = "full"
    SLIGHTLY_DEGRADED = "slightly_degraded"
    MODERATELY_DEGRADED = "moderately_degraded"
    HEAVILY_DEGRADED = "heavily_degraded"
    OUT_OF_OPERATION = "out_of_operation"


CAPACITY_ORDER: tuple[OperationalCapacity, ...] = tuple(OperationalCapacity)


class UnitType(StrEnum):
    """Classification of a combat unit as seen by a facility."""

    LAND_DIRECT_FIRE = "land_direct_fire"
    LAND_INDIRECT_FIRE = "land_indirect_fire"
    AIR = "air"
    NAVAL_DIRECT_FIRE = "naval_direct_fire"
    NAVAL_INDIRECT_FIRE = "naval_indirect_fire"


class EfficiencyLevel(StrEnum):
    """Readiness of a combat unit."""

    STATIC_OPERATIONS = "static_operations"
    DEGRADED_OPERATIONS = "degraded_operations"
    OPERATIONAL = "operational"
    FULLY_OPERATIONAL = "fully_operational"
    PEAK_OPERATIONAL = "peak_operational"


class FacilityKind(StrEnum):
    """Concrete facility kinds a land base can host."""

    HEADQUARTERS = "headquarters"
    AIRBASE = "airbase"
    SUPPLY_DEPOT = "supply_depot"


class DepotSize(StrEnum):
    """Depot size tier; determines stockpile capacity."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"


class SupplyGenerationRate(StrEnum):
    """Per-turn generation tier of a depot."""

    MINIMAL = "minimal"
    BASIC = "basic"
    STANDARD = "standard"
    ENHANCED = "enhanced"
    INDUSTRIAL = "industrial"


class SupplyProjection(StrEnum):
    """How far a depot projects supply."""

    LOCAL = "local"
    EXTENDED = "extended"
    REGIONAL = "regional"
    STRATEGIC = "strategic"
    THEATER = "theater"


class DepotCategory(StrEnum):
    """Main depots may carry air and naval supply; secondary depots may not."""

    MAIN = "main"
    SECONDARY = "secondary"


class SupplyChannel(StrEnum):
    """Delivery route used for a supply request."""

    OVERLAND = "overland"
    AIR = "air"
    NAVAL = "naval"


class UpgradeTrack(StrEnum):
    """Depot attributes that can be advanced one tier at a time."""

    DEPOT_SIZE = "depot_size"
    GENERATION_RATE = "generation_rate"
    PROJECTION = "projection"
    PENETRATION = "penetration"


class AttachRejection(StrEnum):
    """Expected, non-exceptional reasons an attach request is refused."""

    AT_CAPACITY = "at_capacity"
    ALREADY_ATTACHED = "already_attached"


class MismatchReason(StrEnum):
    """Why a persisted unit id could not be reconnected on load."""

    NOT_FOUND = "not_found"
    WRONG_CLASSIFICATION = "wrong_classification"
    HOSTED_ELSEWHERE = "hosted_elsewhere"


def next_tier(current: E) -> E | None:
    """Return the member following ``current`` in declaration order."""

    members = list(type(current))
    index = members.index(current)
    if index + 1 >= len(members):
        return None
    return members[index + 1]
