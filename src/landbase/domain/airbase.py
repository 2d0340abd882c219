"""Air-unit attachment rules and deferred reference resolution.

An airbase is either *live* (``ResolvedUnits``) or *pending*
(``PendingUnitIds``).  A freshly loaded airbase only knows the ids of the
units it hosted; the loader rebuilds every unit first and then calls
:func:`resolve_references` once per airbase to reconnect them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from . import facility
from .capacity import airbase_profile, severity
from .enums import AttachRejection, EfficiencyLevel, MismatchReason, Side
from .errors import InvalidArgumentError, InvalidOperationError
from .models import (
    Airbase,
    CombatUnit,
    PendingUnitIds,
    ResolvedUnits,
    UnitID,
)
from .rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Outcomes


@dataclass(slots=True)
class AttachOutcome:
    """Result of an attach request that did not raise."""

    success: bool
    rejection: AttachRejection | None = None


@dataclass(slots=True)
class ReferenceMismatch:
    """A persisted unit id that could not be reconnected."""

    unit_id: UnitID
    reason: MismatchReason


@dataclass(slots=True)
class ResolutionOutcome:
    """Summary of one :func:`resolve_references` pass."""

    resolved: list[UnitID] = field(default_factory=list)
    mismatches: list[ReferenceMismatch] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Construction


def create_airbase(
    name: str | None = None,
    side: Side = Side.PLAYER,
    initial_damage: int = 0,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> Airbase:
    base = facility.create_base(
        name or rules.airbase.default_name, side, initial_damage, rules=rules
    )
    return Airbase(base=base)


def clone_airbase(airbase: Airbase) -> Airbase:
    """Copy scalar state; the clone hosts no units."""

    return Airbase(base=facility.clone_base(airbase.base))


# ---------------------------------------------------------------------------
# Attachment


def attach(
    airbase: Airbase, unit: CombatUnit, *, rules: RulesConfig = DEFAULT_RULES
) -> AttachOutcome:
    """Attach ``unit`` to the airbase.

    Raises :class:`InvalidOperationError` for a non-air unit or a unit hosted
    by another facility.  A full airbase or a unit already present is an
    ordinary refusal reported through the outcome.
    """

    if unit is None:
        raise InvalidArgumentError("air unit cannot be None")
    units = _live_units(airbase)
    if not unit.is_air_unit:
        raise InvalidOperationError(
            f"only air units can be attached to an airbase, got {unit.unit_type}"
        )
    if unit.host_facility_id is not None and unit.host_facility_id != airbase.base.id:
        raise InvalidOperationError(
            f"unit {unit.id} is already hosted by facility {unit.host_facility_id}"
        )
    if any(existing is unit for existing in units):
        logger.info("unit %s is already attached to %s", unit.name, airbase.base.name)
        return AttachOutcome(False, AttachRejection.ALREADY_ATTACHED)
    if len(units) >= rules.airbase.max_air_units:
        logger.info("%s is already full", airbase.base.name)
        return AttachOutcome(False, AttachRejection.AT_CAPACITY)

    units.append(unit)
    unit.host_facility_id = airbase.base.id
    return AttachOutcome(True)


def detach(airbase: Airbase, unit: CombatUnit) -> bool:
    """Remove ``unit`` by identity; ``False`` when it was not attached."""

    if unit is None:
        raise InvalidArgumentError("air unit cannot be None")
    units = _live_units(airbase)
    for index, existing in enumerate(units):
        if existing is unit:
            del units[index]
            _release(airbase, unit)
            return True
    return False


def detach_by_id(airbase: Airbase, unit_id: UnitID) -> bool:
    """Remove the first attached unit whose id is ``unit_id``."""

    if not unit_id:
        raise InvalidArgumentError("unit id cannot be empty")
    unit = get_unit_by_id(airbase, unit_id)
    if unit is None:
        return False
    return detach(airbase, unit)


def clear_units(airbase: Airbase) -> None:
    for unit in list(_live_units(airbase)):
        detach(airbase, unit)


def _release(airbase: Airbase, unit: CombatUnit) -> None:
    if unit.host_facility_id == airbase.base.id:
        unit.host_facility_id = None
    logger.info("unit %s has been removed from %s", unit.name, airbase.base.name)


# ---------------------------------------------------------------------------
# Queries


def attached_units(airbase: Airbase) -> tuple[CombatUnit, ...]:
    return tuple(_live_units(airbase))


def attached_count(airbase: Airbase) -> int:
    return len(_live_units(airbase))


def remaining_capacity(airbase: Airbase, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    return rules.airbase.max_air_units - attached_count(airbase)


def has_capacity(airbase: Airbase, *, rules: RulesConfig = DEFAULT_RULES) -> bool:
    return remaining_capacity(airbase, rules=rules) > 0


def has_unit(airbase: Airbase, unit: CombatUnit | None) -> bool:
    return unit is not None and any(existing is unit for existing in _live_units(airbase))


def has_unit_by_id(airbase: Airbase, unit_id: UnitID | None) -> bool:
    return bool(unit_id) and get_unit_by_id(airbase, unit_id) is not None


def get_unit_by_id(airbase: Airbase, unit_id: UnitID | None) -> CombatUnit | None:
    if not unit_id:
        return None
    return next((unit for unit in _live_units(airbase) if unit.id == unit_id), None)


class OperationalUnits:
    """Restartable view over attached units that are not in static operations."""

    __slots__ = ("_airbase",)

    def __init__(self, airbase: Airbase) -> None:
        self._airbase = airbase

    def __iter__(self) -> Iterator[CombatUnit]:
        return (
            unit
            for unit in _live_units(self._airbase)
            if unit.efficiency_level != EfficiencyLevel.STATIC_OPERATIONS
        )

    def __len__(self) -> int:
        return sum(1 for _ in self)


def operational_units(airbase: Airbase) -> OperationalUnits:
    return OperationalUnits(airbase)


def operational_unit_count(airbase: Airbase) -> int:
    return len(operational_units(airbase))


# ---------------------------------------------------------------------------
# Capacity-gated capabilities


def efficiency_multiplier(airbase: Airbase, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Airbase curve: steeper than the baseline facility curve."""

    return airbase_profile(rules).efficiency(airbase.base.capacity)


def can_launch_operations(airbase: Airbase, *, rules: RulesConfig = DEFAULT_RULES) -> bool:
    """Air operations need the base at ModeratelyDegraded or better."""

    return severity(airbase.base.capacity) <= severity(rules.airbase.worst_tier_for_operations)


def can_refuel_and_rearm(airbase: Airbase, *, rules: RulesConfig = DEFAULT_RULES) -> bool:
    return can_launch_operations(airbase, rules=rules)


def can_repair_aircraft(airbase: Airbase, *, rules: RulesConfig = DEFAULT_RULES) -> bool:
    return can_launch_operations(airbase, rules=rules)


def can_receive_aircraft(airbase: Airbase, *, rules: RulesConfig = DEFAULT_RULES) -> bool:
    if isinstance(airbase.attachments, PendingUnitIds):
        return False
    return can_launch_operations(airbase, rules=rules) and has_capacity(airbase, rules=rules)


# ---------------------------------------------------------------------------
# Persistence support


def attached_unit_ids(airbase: Airbase) -> list[UnitID]:
    """Ids to persist, in attachment order."""

    return [unit.id for unit in _live_units(airbase)]


def pending_unit_ids(airbase: Airbase) -> list[UnitID]:
    match airbase.attachments:
        case PendingUnitIds(unit_ids=unit_ids):
            return list(unit_ids)
        case _:
            return []


def has_unresolved_references(airbase: Airbase) -> bool:
    return isinstance(airbase.attachments, PendingUnitIds)


def mark_pending(airbase: Airbase, unit_ids: list[UnitID]) -> None:
    """Put a freshly loaded airbase into the pending state."""

    airbase.attachments = PendingUnitIds(list(unit_ids))


def resolve_references(
    airbase: Airbase,
    units: Mapping[UnitID, CombatUnit],
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> ResolutionOutcome:
    """Reconnect pending unit ids to live units.

    Ids that are missing from ``units``, refer to a non-air unit, or refer to a
    unit hosted by another facility are logged and dropped.  The airbase is
    live afterwards whatever the outcome; a second call is a no-op.
    """

    outcome = ResolutionOutcome()
    match airbase.attachments:
        case ResolvedUnits():
            return outcome
        case PendingUnitIds(unit_ids=unit_ids):
            pending = list(unit_ids)

    resolved: list[CombatUnit] = []
    for unit_id in pending:
        unit = units.get(unit_id)
        reason: MismatchReason | None = None
        if unit is None:
            reason = MismatchReason.NOT_FOUND
        elif not unit.is_air_unit:
            reason = MismatchReason.WRONG_CLASSIFICATION
        elif unit.host_facility_id not in (None, airbase.base.id):
            reason = MismatchReason.HOSTED_ELSEWHERE
        elif any(existing is unit for existing in resolved):
            continue
        elif len(resolved) >= rules.airbase.max_air_units:
            logger.warning(
                "airbase %s: dropping unit %s beyond capacity", airbase.base.name, unit_id
            )
            if unit.host_facility_id == airbase.base.id:
                unit.host_facility_id = None
            continue

        if reason is not None:
            logger.warning(
                "airbase %s: cannot reconnect unit %s (%s)", airbase.base.name, unit_id, reason
            )
            outcome.mismatches.append(ReferenceMismatch(unit_id, reason))
            continue

        unit.host_facility_id = airbase.base.id
        resolved.append(unit)
        outcome.resolved.append(unit_id)

    airbase.attachments = ResolvedUnits(resolved)
    return outcome


def _live_units(airbase: Airbase) -> list[CombatUnit]:
    match airbase.attachments:
        case ResolvedUnits(units=units):
            return units
        case PendingUnitIds():
            raise InvalidOperationError(
                f"airbase {airbase.base.name} has unresolved unit references"
            )
