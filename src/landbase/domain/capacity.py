"""Damage to operational-capacity mapping.

A :class:`CapacityProfile` is a pure lookup: it turns a bounded damage value
into one of the five :class:`OperationalCapacity` tiers and a tier into an
efficiency multiplier.  Facility kinds differ only in the multiplier curve
they use, so each kind builds its own profile from the rule tables.
"""

from __future__ import annotations

from dataclasses import dataclass

from .enums import CAPACITY_ORDER, OperationalCapacity
from .rules_config import DEFAULT_RULES, RulesConfig


@dataclass(frozen=True, slots=True)
class CapacityProfile:
    """Threshold table plus a per-tier efficiency curve."""

    tier_upper_bounds: tuple[int, ...]
    multipliers: tuple[float, ...]
    min_damage: int = 0
    max_damage: int = 100

    def __post_init__(self) -> None:
        if len(self.tier_upper_bounds) != len(CAPACITY_ORDER) - 1:
            raise ValueError("tier_upper_bounds needs one entry per tier except the last")
        if len(self.multipliers) != len(CAPACITY_ORDER):
            raise ValueError("multipliers needs exactly one entry per tier")
        if list(self.tier_upper_bounds) != sorted(self.tier_upper_bounds):
            raise ValueError("tier_upper_bounds must be ascending")

    def clamp(self, damage: int) -> int:
        return max(self.min_damage, min(self.max_damage, damage))

    def tier_for(self, damage: int) -> OperationalCapacity:
        """Return the unique tier implied by ``damage`` (clamped to bounds)."""

        damage = self.clamp(damage)
        for tier, upper in zip(CAPACITY_ORDER, self.tier_upper_bounds, strict=False):
            if damage <= upper:
                return tier
        return OperationalCapacity.OUT_OF_OPERATION

    def efficiency(self, tier: OperationalCapacity) -> float:
        return self.multipliers[CAPACITY_ORDER.index(tier)]


def severity(tier: OperationalCapacity) -> int:
    """Rank of a tier, 0 for Full up to 4 for OutOfOperation."""

    return CAPACITY_ORDER.index(tier)


def base_profile(rules: RulesConfig = DEFAULT_RULES) -> CapacityProfile:
    """Profile shared by headquarters and supply depots."""

    facility = rules.facility
    return CapacityProfile(
        tier_upper_bounds=facility.tier_upper_bounds,
        multipliers=facility.efficiency_by_tier,
        min_damage=facility.min_damage,
        max_damage=facility.max_damage,
    )


def airbase_profile(rules: RulesConfig = DEFAULT_RULES) -> CapacityProfile:
    """Same thresholds as :func:`base_profile`, steeper multiplier curve."""

    facility = rules.facility
    return CapacityProfile(
        tier_upper_bounds=facility.tier_upper_bounds,
        multipliers=rules.airbase.efficiency_by_tier,
        min_damage=facility.min_damage,
        max_damage=facility.max_damage,
    )
