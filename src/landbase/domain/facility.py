"""Damage and capacity rules shared by every facility kind."""

from __future__ import annotations

from .capacity import CapacityProfile, base_profile
from .enums import OperationalCapacity, Side
from .errors import InvalidArgumentError, OutOfRangeError
from .models import BaseFacility, new_facility_id
from .rules_config import DEFAULT_RULES, RulesConfig


def create_base(
    name: str | None = None,
    side: Side = Side.PLAYER,
    initial_damage: int = 0,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> BaseFacility:
    """Build a fresh facility state with a new id.

    An empty ``name`` falls back to the generic land-base name.  A positive
    ``initial_damage`` is applied through :func:`add_damage`, so it is clamped
    like any other hit; zero or negative values leave the base undamaged.
    """

    base = BaseFacility(
        id=new_facility_id(),
        name=name or rules.facility.default_name,
        side=side,
    )
    if initial_damage > 0:
        add_damage(base, initial_damage, rules=rules)
    return base


def add_damage(
    base: BaseFacility, amount: int, *, rules: RulesConfig = DEFAULT_RULES
) -> OperationalCapacity:
    """Add ``amount`` damage, clamp the total, and return the new tier."""

    if amount < 0:
        raise InvalidArgumentError("incoming damage cannot be negative")
    return _apply(base, base.damage + amount, base_profile(rules))


def repair_damage(
    base: BaseFacility, amount: int, *, rules: RulesConfig = DEFAULT_RULES
) -> OperationalCapacity:
    """Remove ``amount`` damage, clamp the total, and return the new tier."""

    if amount < 0:
        raise InvalidArgumentError("repair amount cannot be negative")
    return _apply(base, base.damage - amount, base_profile(rules))


def set_damage(
    base: BaseFacility, damage: int, *, rules: RulesConfig = DEFAULT_RULES
) -> OperationalCapacity:
    """Set damage directly; values outside the damage bounds are rejected."""

    bounds = rules.facility
    if damage < bounds.min_damage or damage > bounds.max_damage:
        raise OutOfRangeError(
            f"damage must be between {bounds.min_damage} and {bounds.max_damage}, got {damage}"
        )
    return _apply(base, damage, base_profile(rules))


def efficiency_multiplier(base: BaseFacility, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Baseline curve: 1.0, 0.75, 0.5, 0.25, 0.0 from Full down."""

    return base_profile(rules).efficiency(base.capacity)


def is_operational(base: BaseFacility) -> bool:
    return base.capacity != OperationalCapacity.OUT_OF_OPERATION


def is_fully_operational(base: BaseFacility) -> bool:
    return base.capacity == OperationalCapacity.FULL


def set_name(base: BaseFacility, name: str) -> None:
    if not name:
        raise InvalidArgumentError("facility name cannot be empty")
    base.name = name


def set_side(base: BaseFacility, side: Side) -> None:
    base.side = side


def clone_base(base: BaseFacility) -> BaseFacility:
    """Copy name, side, and damage under a newly generated id."""

    return BaseFacility(
        id=new_facility_id(),
        name=base.name,
        side=base.side,
        damage=base.damage,
        capacity=base.capacity,
    )


def _apply(base: BaseFacility, damage: int, profile: CapacityProfile) -> OperationalCapacity:
    base.damage = profile.clamp(damage)
    base.capacity = profile.tier_for(base.damage)
    return base.capacity
