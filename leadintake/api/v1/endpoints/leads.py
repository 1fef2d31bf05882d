from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response

from leadintake.api.deps import get_lead_intake_service, get_lead_query_service
from leadintake.core.config import settings
from leadintake.core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from leadintake.core.rate_limit import limiter
from leadintake.schemas.angi import AngiLeadPayload
from leadintake.schemas.common import LeadStatus
from leadintake.schemas.lead import (
    LeadDetailResponse,
    LeadFilters,
    LeadIntakeResponse,
    LeadListResponse,
    StateStatsResponse,
)
from leadintake.services.lead_intake_service import LeadIntakeService
from leadintake.services.lead_query_service import LeadQueryService

router = APIRouter(prefix="/lead", tags=["Leads"])


@router.post("/angi", response_model=LeadIntakeResponse, status_code=201)
@limiter.limit(settings.RATE_LIMIT_INTAKE)
async def intake_angi_lead(
    request: Request,
    response: Response,
    payload: AngiLeadPayload,
    service: LeadIntakeService = Depends(get_lead_intake_service),
) -> LeadIntakeResponse:
    """Accept a lead posted by Angi.

    201 for a new lead, 200 when the correlation id was already seen;
    both are success from the partner's point of view.
    """
    result = await service.intake(payload)
    if result.is_duplicate:
        response.status_code = 200
    return result


@router.get("", response_model=LeadListResponse)
async def list_leads(
    status: Optional[LeadStatus] = Query(None),
    source: Optional[str] = Query(None),
    user_id: Optional[UUID] = Query(None, alias="userId"),
    received_from: Optional[datetime] = Query(None, alias="from"),
    received_to: Optional[datetime] = Query(None, alias="to"),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    service: LeadQueryService = Depends(get_lead_query_service),
) -> LeadListResponse:
    """Paginated lead listing, newest first."""
    filters = LeadFilters(
        status=status,
        source=source,
        user_id=user_id,
        received_from=received_from,
        received_to=received_to,
        limit=limit,
        offset=offset,
    )
    return await service.list_leads(filters)


@router.get("/stats", response_model=StateStatsResponse)
async def lead_stats_by_state(
    service: LeadQueryService = Depends(get_lead_query_service),
) -> StateStatsResponse:
    """Lead counts per state for the map view."""
    return await service.get_state_stats()


@router.get("/{lead_id}", response_model=LeadDetailResponse)
async def get_lead(
    lead_id: UUID,
    service: LeadQueryService = Depends(get_lead_query_service),
) -> LeadDetailResponse:
    return await service.get_lead_detail(lead_id)
