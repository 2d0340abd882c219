"""Declarative rule configuration for land-base facilities."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import (
    DepotSize,
    OperationalCapacity,
    SupplyGenerationRate,
    SupplyProjection,
)


@dataclass(frozen=True, slots=True)
class FacilityRules:
    """Damage bounds, tier thresholds, and the baseline efficiency curve."""

    min_damage: int = 0
    max_damage: int = 100
    # inclusive upper damage bound of every tier except the last
    tier_upper_bounds: tuple[int, ...] = (20, 40, 60, 80)
    efficiency_by_tier: tuple[float, ...] = (1.0, 0.75, 0.5, 0.25, 0.0)
    default_name: str = "Land Base"
    headquarters_name: str = "Headquarters"


@dataclass(frozen=True, slots=True)
class AirbaseRules:
    """Airbase capacity and its steeper efficiency curve."""

    max_air_units: int = 4
    efficiency_by_tier: tuple[float, ...] = (1.0, 0.7, 0.4, 0.2, 0.0)
    worst_tier_for_operations: OperationalCapacity = OperationalCapacity.MODERATELY_DEGRADED
    default_name: str = "Airbase"


@dataclass(frozen=True, slots=True)
class SupplyDepotRules:
    """Stockpile, generation, and delivery constants."""

    stockpile_by_size: dict[DepotSize, float] = field(
        default_factory=lambda: {
            DepotSize.SMALL: 30.0,
            DepotSize.MEDIUM: 50.0,
            DepotSize.LARGE: 80.0,
            DepotSize.HUGE: 110.0,
        }
    )
    generation_by_rate: dict[SupplyGenerationRate, float] = field(
        default_factory=lambda: {
            SupplyGenerationRate.MINIMAL: 1.0,
            SupplyGenerationRate.BASIC: 2.0,
            SupplyGenerationRate.STANDARD: 3.0,
            SupplyGenerationRate.ENHANCED: 4.0,
            SupplyGenerationRate.INDUSTRIAL: 5.0,
        }
    )
    projection_radius: dict[SupplyProjection, int] = field(
        default_factory=lambda: {
            SupplyProjection.LOCAL: 2,
            SupplyProjection.EXTENDED: 4,
            SupplyProjection.REGIONAL: 6,
            SupplyProjection.STRATEGIC: 9,
            SupplyProjection.THEATER: 12,
        }
    )
    # minimum generation/projection tier that comes with each depot size
    size_baseline: dict[DepotSize, tuple[SupplyGenerationRate, SupplyProjection]] = field(
        default_factory=lambda: {
            DepotSize.SMALL: (SupplyGenerationRate.MINIMAL, SupplyProjection.LOCAL),
            DepotSize.MEDIUM: (SupplyGenerationRate.BASIC, SupplyProjection.EXTENDED),
            DepotSize.LARGE: (SupplyGenerationRate.STANDARD, SupplyProjection.REGIONAL),
            DepotSize.HUGE: (SupplyGenerationRate.ENHANCED, SupplyProjection.STRATEGIC),
        }
    )
    transfer_amount: float = 7.0  # days of supply per delivery, also its stockpile cost
    min_transfer_stockpile: float = 7.0  # stockpile must exceed this to deliver
    min_delivery_efficiency: float = 0.1
    distance_efficiency_slope: float = 0.4
    zoc_efficiency_slope: float = 0.3
    max_zoc_crossings: int = 1
    air_supply_max_range: int = 16
    air_distance_slope: float = 0.4
    naval_supply_max_range: int = 12
    naval_distance_slope: float = 0.4
    intelligence_radius: int = 5  # hexes covered by a main depot's intelligence network
    stockpile_epsilon: float = 0.001
    default_name: str = "Supply Depot"


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all facility kinds."""

    facility: FacilityRules = FacilityRules()
    airbase: AirbaseRules = AirbaseRules()
    depot: SupplyDepotRules = SupplyDepotRules()


DEFAULT_RULES = RulesConfig()
