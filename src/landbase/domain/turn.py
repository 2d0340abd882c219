"""Turn orchestration and load-cycle resolution for a campaign."""

from __future__ import annotations

import logging

from . import airbase as airbase_rules
from . import dispatch
from .dispatch import TurnReport
from .errors import InvalidOperationError
from .models import Airbase, Campaign, CombatUnit, Facility, FacilityID
from .rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)


def register_unit(campaign: Campaign, unit: CombatUnit) -> None:
    if unit.id in campaign.units and campaign.units[unit.id] is not unit:
        raise InvalidOperationError(f"unit id {unit.id} is already registered")
    campaign.units[unit.id] = unit


def register_facility(campaign: Campaign, facility: Facility) -> None:
    if facility.base.id in campaign.facilities:
        raise InvalidOperationError(f"facility id {facility.base.id} is already registered")
    campaign.facilities[facility.base.id] = facility


def resolve_all(
    campaign: Campaign, *, rules: RulesConfig = DEFAULT_RULES
) -> dict[FacilityID, airbase_rules.ResolutionOutcome]:
    """Reconnect every pending airbase to the campaign's units.

    Call only after all units of the campaign have been rebuilt.
    """

    outcomes: dict[FacilityID, airbase_rules.ResolutionOutcome] = {}
    for facility_id, facility in campaign.facilities.items():
        if isinstance(facility, Airbase) and airbase_rules.has_unresolved_references(facility):
            outcomes[facility_id] = airbase_rules.resolve_references(
                facility, campaign.units, rules=rules
            )
    _release_stale_hosts(campaign)
    mismatches = sum(len(outcome.mismatches) for outcome in outcomes.values())
    if mismatches:
        logger.warning(
            "campaign %s: %d unit reference(s) could not be reconnected",
            int(campaign.id),
            mismatches,
        )
    return outcomes


def _release_stale_hosts(campaign: Campaign) -> None:
    """Clear the host link of every unit that no live airbase actually holds."""

    hosted = {
        id(unit)
        for facility in campaign.facilities.values()
        if isinstance(facility, Airbase) and not airbase_rules.has_unresolved_references(facility)
        for unit in airbase_rules.attached_units(facility)
    }
    for unit in campaign.units.values():
        if unit.host_facility_id is not None and id(unit) not in hosted:
            logger.warning(
                "unit %s claims host %s but is attached nowhere, releasing it",
                unit.id,
                unit.host_facility_id,
            )
            unit.host_facility_id = None


def run_turn(campaign: Campaign, *, rules: RulesConfig = DEFAULT_RULES) -> list[TurnReport]:
    """Advance every facility of the campaign by one turn."""

    reports = [dispatch.end_turn(facility, rules=rules) for facility in campaign.facilities.values()]
    campaign.turn += 1
    return reports
