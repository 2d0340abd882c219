"""Supply depot economy: stockpile, generation, delivery, and upgrades.

Stockpile is measured in days of supply for one unit.  Every delivery costs
the depot a fixed ``transfer_amount`` and hands the receiving unit that amount
scaled by the combined distance, zone-of-control, and operational efficiency.
"""

from __future__ import annotations

from typing import TypeVar

from . import facility
from .capacity import base_profile
from .enums import (
    DepotCategory,
    DepotSize,
    Side,
    SupplyChannel,
    SupplyGenerationRate,
    SupplyProjection,
    UpgradeTrack,
    next_tier,
)
from .errors import InvalidArgumentError, InvalidOperationError
from .models import SupplyDepot
from .rules_config import DEFAULT_RULES, RulesConfig

_Tier = TypeVar("_Tier", SupplyGenerationRate, SupplyProjection)

# ---------------------------------------------------------------------------
# Construction


def create_depot(
    name: str | None = None,
    side: Side = Side.PLAYER,
    depot_size: DepotSize = DepotSize.SMALL,
    *,
    main: bool = False,
    initial_damage: int = 0,
    rules: RulesConfig = DEFAULT_RULES,
) -> SupplyDepot:
    """Create a depot with a full stockpile for its size.

    Main depots start with air and naval supply enabled.
    """

    base = facility.create_base(
        name or rules.depot.default_name, side, initial_damage, rules=rules
    )
    generation, projection = rules.depot.size_baseline[depot_size]
    depot = SupplyDepot(
        base=base,
        depot_size=depot_size,
        stockpile=capacity_for_size(depot_size, rules=rules),
        generation_rate=generation,
        projection=projection,
        category=DepotCategory.MAIN if main else DepotCategory.SECONDARY,
    )
    if main:
        enable_air_supply(depot)
        enable_naval_supply(depot)
    return depot


def clone_depot(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> SupplyDepot:
    """Copy scalar state; the clone starts with a full stockpile for its size."""

    return SupplyDepot(
        base=facility.clone_base(depot.base),
        depot_size=depot.depot_size,
        stockpile=capacity_for_size(depot.depot_size, rules=rules),
        generation_rate=depot.generation_rate,
        projection=depot.projection,
        penetration=depot.penetration,
        category=depot.category,
        air_supply_flag=depot.air_supply_flag,
        naval_supply_flag=depot.naval_supply_flag,
        intelligence_flag=depot.intelligence_flag,
    )


# ---------------------------------------------------------------------------
# Derived values


def capacity_for_size(depot_size: DepotSize, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    return rules.depot.stockpile_by_size[depot_size]


def max_stockpile(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    return capacity_for_size(depot.depot_size, rules=rules)


def projection_radius(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    return rules.depot.projection_radius[depot.projection]


def base_generation_rate(
    rate: SupplyGenerationRate, *, rules: RulesConfig = DEFAULT_RULES
) -> float:
    return rules.depot.generation_by_rate[rate]


def efficiency_multiplier(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    return base_profile(rules).efficiency(depot.base.capacity)


def current_generation_rate(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Per-turn generation after damage scaling."""

    return base_generation_rate(depot.generation_rate, rules=rules) * efficiency_multiplier(
        depot, rules=rules
    )


def stockpile_percentage(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Fill ratio in [0, 1]."""

    capacity = max_stockpile(depot, rules=rules)
    return depot.stockpile / capacity if capacity > 0 else 0.0


def is_stockpile_full(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> bool:
    return abs(depot.stockpile - max_stockpile(depot, rules=rules)) < rules.depot.stockpile_epsilon


def is_stockpile_empty(depot: SupplyDepot) -> bool:
    return depot.stockpile <= 0.0


def remaining_capacity(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    return max_stockpile(depot, rules=rules) - depot.stockpile


# ---------------------------------------------------------------------------
# Category-gated channels


def is_main(depot: SupplyDepot) -> bool:
    return depot.category == DepotCategory.MAIN


def has_air_supply(depot: SupplyDepot) -> bool:
    return depot.air_supply_flag and is_main(depot)


def has_naval_supply(depot: SupplyDepot) -> bool:
    return depot.naval_supply_flag and is_main(depot)


def set_air_supply(depot: SupplyDepot, enabled: bool) -> None:
    """Strict setter: enabling on a secondary depot raises."""

    if is_main(depot):
        depot.air_supply_flag = enabled
    elif enabled:
        raise InvalidOperationError("only main depots can have air supply capability")


def set_naval_supply(depot: SupplyDepot, enabled: bool) -> None:
    """Strict setter: enabling on a secondary depot raises."""

    if is_main(depot):
        depot.naval_supply_flag = enabled
    elif enabled:
        raise InvalidOperationError("only main depots can have naval supply capability")


def enable_air_supply(depot: SupplyDepot) -> bool:
    if not is_main(depot):
        return False
    set_air_supply(depot, True)
    return True


def enable_naval_supply(depot: SupplyDepot) -> bool:
    if not is_main(depot):
        return False
    set_naval_supply(depot, True)
    return True


def has_intelligence_capability(depot: SupplyDepot) -> bool:
    return depot.intelligence_flag and is_main(depot)


def set_intelligence_capability(depot: SupplyDepot, enabled: bool) -> None:
    """Strict setter: enabling on a secondary depot raises."""

    if is_main(depot):
        depot.intelligence_flag = enabled
    elif enabled:
        raise InvalidOperationError("only main depots can run an intelligence network")


def enable_intelligence_capability(depot: SupplyDepot) -> bool:
    if not is_main(depot):
        return False
    set_intelligence_capability(depot, True)
    return True


def intelligence_radius(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Detection radius in hexes, 0 without the capability."""

    return rules.depot.intelligence_radius if has_intelligence_capability(depot) else 0


def set_category(depot: SupplyDepot, category: DepotCategory) -> None:
    """Change the category; downgrading to secondary clears the special abilities."""

    if is_main(depot) and category == DepotCategory.SECONDARY:
        depot.air_supply_flag = False
        depot.naval_supply_flag = False
        depot.intelligence_flag = False
    depot.category = category


# ---------------------------------------------------------------------------
# Stockpile


def add_supplies(
    depot: SupplyDepot, amount: float, *, rules: RulesConfig = DEFAULT_RULES
) -> float:
    """Add supplies up to capacity; returns the stockpile afterwards."""

    if amount <= 0:
        raise InvalidArgumentError("supply amount must be positive")
    depot.stockpile = min(depot.stockpile + amount, max_stockpile(depot, rules=rules))
    return depot.stockpile


def remove_supplies(depot: SupplyDepot, amount: float) -> float:
    """Remove up to ``amount``; returns what was actually removed."""

    if amount <= 0:
        raise InvalidArgumentError("supply amount must be positive")
    removed = min(amount, depot.stockpile)
    depot.stockpile -= removed
    return removed


def generate(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Add one turn of generation, clamped to capacity; returns the amount added."""

    if not facility.is_operational(depot.base):
        return 0.0
    produced = current_generation_rate(depot, rules=rules)
    added = max(0.0, min(produced, remaining_capacity(depot, rules=rules)))
    depot.stockpile += added
    return added


def on_new_turn(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    return generate(depot, rules=rules)


# ---------------------------------------------------------------------------
# Delivery


def distance_efficiency(distance: int, max_range: int, slope: float) -> float:
    """Linear decay from 1.0 at distance 0 to ``1 - slope`` at ``max_range``."""

    if max_range <= 0:
        return 0.0
    return 1.0 - (distance / max_range) * slope


def zoc_efficiency(zocs_crossed: int, slope: float) -> float:
    return 1.0 - zocs_crossed * slope


def can_supply(
    depot: SupplyDepot,
    distance: int,
    zocs_crossed: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> bool:
    """Whether overland supply can reach a unit ``distance`` hexes away."""

    _check_distance(distance)
    if zocs_crossed < 0:
        raise InvalidArgumentError("zone-of-control crossings cannot be negative")
    if not facility.is_operational(depot.base):
        return False
    if distance > projection_radius(depot, rules=rules):
        return False
    if zocs_crossed > 0:
        if not depot.penetration:
            return False
        if zocs_crossed > rules.depot.max_zoc_crossings:
            return False
    return True


def supply_unit(
    depot: SupplyDepot,
    distance: int,
    zocs_crossed: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> float:
    """Deliver overland supply; returns days delivered, 0.0 when refused."""

    if not can_supply(depot, distance, zocs_crossed, rules=rules):
        return 0.0
    if not _has_transferable_stock(depot, rules):
        return 0.0
    settings = rules.depot
    efficiency = (
        distance_efficiency(
            distance, projection_radius(depot, rules=rules), settings.distance_efficiency_slope
        )
        * zoc_efficiency(zocs_crossed, settings.zoc_efficiency_slope)
        * efficiency_multiplier(depot, rules=rules)
    )
    return _deliver(depot, efficiency, rules)


def perform_air_supply(
    depot: SupplyDepot, distance: int, *, rules: RulesConfig = DEFAULT_RULES
) -> float:
    """Airlift from a main depot; ignores zones of control."""

    _check_distance(distance)
    settings = rules.depot
    if not facility.is_operational(depot.base) or not has_air_supply(depot):
        return 0.0
    if distance > settings.air_supply_max_range:
        return 0.0
    if not _has_transferable_stock(depot, rules):
        return 0.0
    efficiency = distance_efficiency(
        distance, settings.air_supply_max_range, settings.air_distance_slope
    ) * efficiency_multiplier(depot, rules=rules)
    return _deliver(depot, efficiency, rules)


def perform_naval_supply(
    depot: SupplyDepot, distance: int, *, rules: RulesConfig = DEFAULT_RULES
) -> float:
    """Sealift from a main depot; ignores zones of control."""

    _check_distance(distance)
    settings = rules.depot
    if not facility.is_operational(depot.base) or not has_naval_supply(depot):
        return 0.0
    if distance > settings.naval_supply_max_range:
        return 0.0
    if not _has_transferable_stock(depot, rules):
        return 0.0
    efficiency = distance_efficiency(
        distance, settings.naval_supply_max_range, settings.naval_distance_slope
    ) * efficiency_multiplier(depot, rules=rules)
    return _deliver(depot, efficiency, rules)


def deliver(
    depot: SupplyDepot,
    channel: SupplyChannel,
    distance: int,
    zocs_crossed: int = 0,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> float:
    """Route a supply request to the delivery function for ``channel``."""

    match channel:
        case SupplyChannel.OVERLAND:
            return supply_unit(depot, distance, zocs_crossed, rules=rules)
        case SupplyChannel.AIR:
            return perform_air_supply(depot, distance, rules=rules)
        case SupplyChannel.NAVAL:
            return perform_naval_supply(depot, distance, rules=rules)


def _check_distance(distance: int) -> None:
    if distance < 0:
        raise InvalidArgumentError("distance cannot be negative")


def _has_transferable_stock(depot: SupplyDepot, rules: RulesConfig) -> bool:
    return depot.stockpile > rules.depot.min_transfer_stockpile


def _deliver(depot: SupplyDepot, efficiency: float, rules: RulesConfig) -> float:
    settings = rules.depot
    efficiency = max(efficiency, settings.min_delivery_efficiency)
    depot.stockpile = max(0.0, depot.stockpile - settings.transfer_amount)
    return settings.transfer_amount * efficiency


# ---------------------------------------------------------------------------
# Upgrades


def can_upgrade_depot_size(depot: SupplyDepot) -> bool:
    return next_tier(depot.depot_size) is not None


def can_upgrade_generation_rate(depot: SupplyDepot) -> bool:
    return next_tier(depot.generation_rate) is not None


def can_upgrade_supply_projection(depot: SupplyDepot) -> bool:
    return next_tier(depot.projection) is not None


def can_upgrade_supply_penetration(depot: SupplyDepot) -> bool:
    return not depot.penetration


def upgrade_depot_size(depot: SupplyDepot, *, rules: RulesConfig = DEFAULT_RULES) -> bool:
    """Advance one size tier; the current stockpile is kept as it is.

    The new size also lifts generation and projection to at least its
    baseline tiers.
    """

    new_size = next_tier(depot.depot_size)
    if new_size is None:
        return False
    depot.depot_size = new_size
    generation, projection = rules.depot.size_baseline[new_size]
    depot.generation_rate = _at_least(depot.generation_rate, generation)
    depot.projection = _at_least(depot.projection, projection)
    depot.stockpile = min(depot.stockpile, max_stockpile(depot, rules=rules))
    return True


def upgrade_generation_rate(depot: SupplyDepot) -> bool:
    new_rate = next_tier(depot.generation_rate)
    if new_rate is None:
        return False
    depot.generation_rate = new_rate
    return True


def upgrade_supply_projection(depot: SupplyDepot) -> bool:
    new_projection = next_tier(depot.projection)
    if new_projection is None:
        return False
    depot.projection = new_projection
    return True


def upgrade_supply_penetration(depot: SupplyDepot) -> bool:
    if depot.penetration:
        return False
    depot.penetration = True
    return True


def set_supply_penetration(depot: SupplyDepot, enabled: bool) -> None:
    """Leader-driven toggle; unlike the upgrade it can also switch it off."""

    depot.penetration = enabled


def upgrade(
    depot: SupplyDepot, track: UpgradeTrack, *, rules: RulesConfig = DEFAULT_RULES
) -> bool:
    match track:
        case UpgradeTrack.DEPOT_SIZE:
            return upgrade_depot_size(depot, rules=rules)
        case UpgradeTrack.GENERATION_RATE:
            return upgrade_generation_rate(depot)
        case UpgradeTrack.PROJECTION:
            return upgrade_supply_projection(depot)
        case UpgradeTrack.PENETRATION:
            return upgrade_supply_penetration(depot)


def _at_least(current: _Tier, floor: _Tier) -> _Tier:
    members = list(type(current))
    return floor if members.index(floor) > members.index(current) else current
