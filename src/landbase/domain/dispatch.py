"""Route generic facility calls to the rules for each facility kind."""

from __future__ import annotations

from dataclasses import dataclass

from . import airbase as airbase_rules
from . import depot as depot_rules
from . import facility
from .enums import FacilityKind, OperationalCapacity, Side
from .models import Airbase, Facility, FacilityID, Headquarters, SupplyDepot
from .rules_config import DEFAULT_RULES, RulesConfig


@dataclass(slots=True)
class TurnReport:
    """What a facility did during one end-of-turn step."""

    facility_id: FacilityID
    kind: FacilityKind
    capacity: OperationalCapacity
    supplies_generated: float = 0.0
    unresolved_references: bool = False


def create_facility(
    kind: FacilityKind,
    name: str | None = None,
    side: Side = Side.PLAYER,
    *,
    initial_damage: int = 0,
    rules: RulesConfig = DEFAULT_RULES,
    **options: object,
) -> Facility:
    """Create a facility of ``kind``; ``options`` are forwarded to depot creation."""

    match kind:
        case FacilityKind.HEADQUARTERS:
            base = facility.create_base(
                name or rules.facility.headquarters_name, side, initial_damage, rules=rules
            )
            return Headquarters(base=base)
        case FacilityKind.AIRBASE:
            return airbase_rules.create_airbase(name, side, initial_damage, rules=rules)
        case FacilityKind.SUPPLY_DEPOT:
            return depot_rules.create_depot(
                name, side, initial_damage=initial_damage, rules=rules, **options
            )


def add_damage(
    target: Facility, amount: int, *, rules: RulesConfig = DEFAULT_RULES
) -> OperationalCapacity:
    return facility.add_damage(target.base, amount, rules=rules)


def repair_damage(
    target: Facility, amount: int, *, rules: RulesConfig = DEFAULT_RULES
) -> OperationalCapacity:
    return facility.repair_damage(target.base, amount, rules=rules)


def set_damage(
    target: Facility, damage: int, *, rules: RulesConfig = DEFAULT_RULES
) -> OperationalCapacity:
    return facility.set_damage(target.base, damage, rules=rules)


def is_operational(target: Facility) -> bool:
    return facility.is_operational(target.base)


def efficiency_multiplier(target: Facility, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    match target:
        case Airbase():
            return airbase_rules.efficiency_multiplier(target, rules=rules)
        case SupplyDepot():
            return depot_rules.efficiency_multiplier(target, rules=rules)
        case Headquarters():
            return facility.efficiency_multiplier(target.base, rules=rules)


def end_turn(target: Facility, *, rules: RulesConfig = DEFAULT_RULES) -> TurnReport:
    """Run the per-turn step of ``target`` and report what happened."""

    report = TurnReport(
        facility_id=target.base.id,
        kind=target.kind,
        capacity=target.base.capacity,
    )
    match target:
        case SupplyDepot():
            report.supplies_generated = depot_rules.on_new_turn(target, rules=rules)
        case Airbase():
            report.unresolved_references = airbase_rules.has_unresolved_references(target)
        case Headquarters():
            pass
    return report


def clone(target: Facility, *, rules: RulesConfig = DEFAULT_RULES) -> Facility:
    match target:
        case Airbase():
            return airbase_rules.clone_airbase(target)
        case SupplyDepot():
            return depot_rules.clone_depot(target, rules=rules)
        case Headquarters():
            return Headquarters(base=facility.clone_base(target.base))
