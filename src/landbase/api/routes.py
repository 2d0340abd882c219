"""HTTP routes for the land-base API."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from landbase.api.runtime import ApiState, FacilityDraft, UnitDraft
from landbase.domain import models as dm
from landbase.domain.enums import (
    DepotSize,
    EfficiencyLevel,
    FacilityKind,
    Side,
    SupplyChannel,
    UnitType,
    UpgradeTrack,
)
from landbase.domain.errors import (
    InvalidArgumentError,
    InvalidOperationError,
    NotFoundError,
    OutOfRangeError,
)

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


@contextmanager
def _domain_errors() -> Iterator[None]:
    """Translate rule violations into HTTP errors."""

    try:
        yield
    except (InvalidArgumentError, OutOfRangeError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except InvalidOperationError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="campaign not found"
        ) from exc


class CampaignSummary(BaseModel):
    id: int
    name: str
    turn: int
    unit_count: int
    facility_count: int


class CampaignDetail(CampaignSummary):
    facilities: dict[str, dict[str, object]]
    units: dict[str, dict[str, object]]


class CreateCampaignRequest(BaseModel):
    name: str = Field(min_length=1)


class ExportRequest(BaseModel):
    template: bool = False
    author: str | None = None


class ExportResponse(BaseModel):
    filename: str


class ImportRequest(BaseModel):
    filename: str = Field(min_length=1)


class ImportResponse(BaseModel):
    campaign: CampaignSummary
    dropped_references: int


class UnitSummary(BaseModel):
    id: str
    name: str
    unit_type: str
    side: str
    efficiency_level: str
    host_facility_id: str | None


class UnitCreateRequest(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    unit_type: UnitType
    side: Side = Side.PLAYER
    efficiency_level: EfficiencyLevel = EfficiencyLevel.OPERATIONAL


class FacilityCreateRequest(BaseModel):
    kind: FacilityKind
    name: str | None = None
    side: Side = Side.PLAYER
    initial_damage: int = Field(default=0, ge=0)
    depot_size: DepotSize = DepotSize.SMALL
    main_depot: bool = False


class DamageRequest(BaseModel):
    amount: int


class SetDamageRequest(BaseModel):
    damage: int


class UnitReferenceRequest(BaseModel):
    unit_id: str = Field(min_length=1)


class AttachResponse(BaseModel):
    success: bool
    rejection: str | None
    facility: dict[str, object]


class DetachResponse(BaseModel):
    removed: bool
    facility: dict[str, object]


class SupplyRequest(BaseModel):
    channel: SupplyChannel = SupplyChannel.OVERLAND
    distance: int
    zocs_crossed: int = 0


class SupplyResponse(BaseModel):
    delivered: float
    facility: dict[str, object]


class UpgradeRequest(BaseModel):
    track: UpgradeTrack


class UpgradeResponse(BaseModel):
    upgraded: bool
    facility: dict[str, object]


class TurnAdvanceRequest(BaseModel):
    turns: int = Field(default=1, ge=1, le=30)


class TurnReportSummary(BaseModel):
    facility_id: str
    kind: str
    capacity: str
    supplies_generated: float
    unresolved_references: bool


class TurnAdvanceResponse(BaseModel):
    campaign: CampaignSummary
    reports: list[TurnReportSummary]


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    return {
        "status": "ok",
        "rules_version": state.settings.rules_version,
        "max_air_units": state.rules.airbase.max_air_units,
    }


@router.get("/campaigns", response_model=list[CampaignSummary])
async def list_campaigns(state: ApiStateDep) -> list[CampaignSummary]:
    campaigns = state.campaigns.list_campaigns()
    return [CampaignSummary.model_validate(state.campaigns.to_summary_dict(c)) for c in campaigns]


@router.post(
    "/campaigns",
    response_model=CampaignDetail,
    status_code=status.HTTP_201_CREATED,
)
async def create_campaign(request: CreateCampaignRequest, state: ApiStateDep) -> CampaignDetail:
    campaign = state.campaigns.create_campaign(request.name)
    return CampaignDetail.model_validate(state.campaigns.to_detail_dict(campaign))


@router.post(
    "/campaigns/import",
    response_model=ImportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_campaign(request: ImportRequest, state: ApiStateDep) -> ImportResponse:
    with _domain_errors():
        try:
            restored = state.campaigns.import_campaign(request.filename)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc
    return ImportResponse(
        campaign=CampaignSummary.model_validate(
            state.campaigns.to_summary_dict(restored.campaign)
        ),
        dropped_references=restored.mismatch_count,
    )


@router.get("/campaigns/{campaign_id}", response_model=CampaignDetail)
async def get_campaign(campaign_id: int, state: ApiStateDep) -> CampaignDetail:
    with _domain_errors():
        campaign = state.campaigns.get_campaign(dm.CampaignID(campaign_id))
    return CampaignDetail.model_validate(state.campaigns.to_detail_dict(campaign))


@router.post("/campaigns/{campaign_id}/export", response_model=ExportResponse)
async def export_campaign(
    campaign_id: int, request: ExportRequest, state: ApiStateDep
) -> ExportResponse:
    with _domain_errors():
        path = state.campaigns.export_campaign(
            dm.CampaignID(campaign_id), template=request.template, author=request.author
        )
    return ExportResponse(filename=path.name)


@router.post(
    "/campaigns/{campaign_id}/units",
    response_model=UnitSummary,
    status_code=status.HTTP_201_CREATED,
)
async def register_unit(
    campaign_id: int, request: UnitCreateRequest, state: ApiStateDep
) -> UnitSummary:
    draft = UnitDraft(
        id=request.id,
        name=request.name,
        unit_type=request.unit_type,
        side=request.side,
        efficiency_level=request.efficiency_level,
    )
    with _domain_errors():
        unit = state.campaigns.register_unit(dm.CampaignID(campaign_id), draft)
    return UnitSummary.model_validate(state.campaigns.to_unit_dict(unit))


@router.post(
    "/campaigns/{campaign_id}/facilities",
    status_code=status.HTTP_201_CREATED,
)
async def create_facility(
    campaign_id: int, request: FacilityCreateRequest, state: ApiStateDep
) -> dict[str, object]:
    draft = FacilityDraft(
        kind=request.kind,
        name=request.name,
        side=request.side,
        initial_damage=request.initial_damage,
        depot_size=request.depot_size,
        main_depot=request.main_depot,
    )
    with _domain_errors():
        facility = state.campaigns.create_facility(dm.CampaignID(campaign_id), draft)
    return state.campaigns.to_facility_dict(facility)


@router.get("/campaigns/{campaign_id}/facilities/{facility_id}")
async def get_facility(campaign_id: int, facility_id: str, state: ApiStateDep) -> dict[str, object]:
    with _domain_errors():
        campaign = state.campaigns.get_campaign(dm.CampaignID(campaign_id))
        facility = state.campaigns.find_facility(campaign, dm.FacilityID(facility_id))
    return state.campaigns.to_facility_dict(facility)


@router.post("/campaigns/{campaign_id}/facilities/{facility_id}/damage")
async def add_damage(
    campaign_id: int, facility_id: str, request: DamageRequest, state: ApiStateDep
) -> dict[str, object]:
    with _domain_errors():
        facility = state.campaigns.damage_facility(
            dm.CampaignID(campaign_id), dm.FacilityID(facility_id), add=request.amount
        )
    return state.campaigns.to_facility_dict(facility)


@router.post("/campaigns/{campaign_id}/facilities/{facility_id}/repair")
async def repair_damage(
    campaign_id: int, facility_id: str, request: DamageRequest, state: ApiStateDep
) -> dict[str, object]:
    with _domain_errors():
        facility = state.campaigns.damage_facility(
            dm.CampaignID(campaign_id), dm.FacilityID(facility_id), repair=request.amount
        )
    return state.campaigns.to_facility_dict(facility)


@router.put("/campaigns/{campaign_id}/facilities/{facility_id}/damage")
async def set_damage(
    campaign_id: int, facility_id: str, request: SetDamageRequest, state: ApiStateDep
) -> dict[str, object]:
    with _domain_errors():
        facility = state.campaigns.damage_facility(
            dm.CampaignID(campaign_id), dm.FacilityID(facility_id), set_to=request.damage
        )
    return state.campaigns.to_facility_dict(facility)


@router.post(
    "/campaigns/{campaign_id}/facilities/{facility_id}/attach",
    response_model=AttachResponse,
)
async def attach_unit(
    campaign_id: int, facility_id: str, request: UnitReferenceRequest, state: ApiStateDep
) -> AttachResponse:
    campaign_key = dm.CampaignID(campaign_id)
    facility_key = dm.FacilityID(facility_id)
    with _domain_errors():
        outcome = state.campaigns.attach_unit(
            campaign_key, facility_key, dm.UnitID(request.unit_id)
        )
        campaign = state.campaigns.get_campaign(campaign_key)
        facility = state.campaigns.find_facility(campaign, facility_key)
    return AttachResponse(
        success=outcome.success,
        rejection=str(outcome.rejection) if outcome.rejection else None,
        facility=state.campaigns.to_facility_dict(facility),
    )


@router.post(
    "/campaigns/{campaign_id}/facilities/{facility_id}/detach",
    response_model=DetachResponse,
)
async def detach_unit(
    campaign_id: int, facility_id: str, request: UnitReferenceRequest, state: ApiStateDep
) -> DetachResponse:
    campaign_key = dm.CampaignID(campaign_id)
    facility_key = dm.FacilityID(facility_id)
    with _domain_errors():
        removed = state.campaigns.detach_unit(
            campaign_key, facility_key, dm.UnitID(request.unit_id)
        )
        campaign = state.campaigns.get_campaign(campaign_key)
        facility = state.campaigns.find_facility(campaign, facility_key)
    return DetachResponse(removed=removed, facility=state.campaigns.to_facility_dict(facility))


@router.post(
    "/campaigns/{campaign_id}/facilities/{facility_id}/supply",
    response_model=SupplyResponse,
)
async def request_supply(
    campaign_id: int, facility_id: str, request: SupplyRequest, state: ApiStateDep
) -> SupplyResponse:
    with _domain_errors():
        delivered, depot = state.campaigns.request_supply(
            dm.CampaignID(campaign_id),
            dm.FacilityID(facility_id),
            request.channel,
            request.distance,
            request.zocs_crossed,
        )
    return SupplyResponse(delivered=delivered, facility=state.campaigns.to_facility_dict(depot))


@router.post(
    "/campaigns/{campaign_id}/facilities/{facility_id}/upgrade",
    response_model=UpgradeResponse,
)
async def upgrade_depot(
    campaign_id: int, facility_id: str, request: UpgradeRequest, state: ApiStateDep
) -> UpgradeResponse:
    with _domain_errors():
        upgraded, depot = state.campaigns.upgrade_depot(
            dm.CampaignID(campaign_id), dm.FacilityID(facility_id), request.track
        )
    return UpgradeResponse(upgraded=upgraded, facility=state.campaigns.to_facility_dict(depot))


@router.post("/campaigns/{campaign_id}/turn/advance", response_model=TurnAdvanceResponse)
async def advance_turn(
    campaign_id: int, request: TurnAdvanceRequest, state: ApiStateDep
) -> TurnAdvanceResponse:
    campaign_key = dm.CampaignID(campaign_id)
    with _domain_errors():
        reports = state.campaigns.advance_turns(campaign_key, request.turns)
        campaign = state.campaigns.get_campaign(campaign_key)
    return TurnAdvanceResponse(
        campaign=CampaignSummary.model_validate(state.campaigns.to_summary_dict(campaign)),
        reports=[
            TurnReportSummary(
                facility_id=str(report.facility_id),
                kind=str(report.kind),
                capacity=str(report.capacity),
                supplies_generated=report.supplies_generated,
                unresolved_references=report.unresolved_references,
            )
            for report in reports
        ],
    )
