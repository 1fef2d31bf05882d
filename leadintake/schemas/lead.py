"""Lead-specific Pydantic schemas (intake response, listing, detail, stats)."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from leadintake.schemas.common import ApiModel, LeadStatus, SuccessResponse
from leadintake.schemas.message import MessageOut


# ---------------------------------------------------------------------------
# Query schemas
# ---------------------------------------------------------------------------


class LeadFilters(BaseModel):
    """Validated listing filters handed from the endpoint to the service."""

    status: Optional[LeadStatus] = None
    source: Optional[str] = None
    user_id: Optional[UUID] = None
    received_from: Optional[datetime] = None
    received_to: Optional[datetime] = None
    limit: int = Field(50, ge=1, le=100)
    offset: int = Field(0, ge=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeadIntakeResponse(SuccessResponse):
    """Response body for POST /api/v1/lead/angi."""

    lead_id: UUID
    user_id: UUID
    is_duplicate: bool
    speed_to_lead_ms: Optional[int] = None
    message_id: Optional[UUID] = None
    email_sent: Optional[bool] = None


class CustomerSummary(ApiModel):
    id: UUID
    email: Optional[str] = None
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class CustomerOut(CustomerSummary):
    created_at: datetime
    updated_at: datetime


class LeadOut(ApiModel):
    id: UUID
    user_id: UUID
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    source: str
    description: Optional[str] = None
    category: Optional[str] = None
    urgency: Optional[str] = None
    correlation_id: Optional[UUID] = None
    al_account_id: Optional[str] = None
    status: LeadStatus
    converted: bool = False
    received_at: datetime
    processed_at: Optional[datetime] = None


class LeadListItem(LeadOut):
    user: Optional[CustomerSummary] = None
    message_count: int = 0
    has_response: bool = False
    speed_to_lead_ms: Optional[int] = None


class Pagination(ApiModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class LeadListResponse(SuccessResponse):
    data: List[LeadListItem]
    pagination: Pagination


class LeadDetail(LeadOut):
    speed_to_lead_ms: Optional[int] = None
    message_count: int = 0
    inbound_count: int = 0
    outbound_count: int = 0
    has_response: bool = False


class OtherLead(ApiModel):
    id: UUID
    category: Optional[str] = None
    status: LeadStatus
    received_at: datetime
    description: Optional[str] = None


class LeadDetailData(ApiModel):
    lead: LeadDetail
    user: Optional[CustomerOut] = None
    messages: List[MessageOut]
    other_leads: List[OtherLead]


class LeadDetailResponse(SuccessResponse):
    data: LeadDetailData


class StateStats(ApiModel):
    by_state: Dict[str, int]
    max_count: int
    total_leads: int


class StateStatsResponse(SuccessResponse):
    data: StateStats


class MessageDetailResponse(SuccessResponse):
    """A message with its lead, customer and the whole thread."""

    message: MessageOut
    lead: Optional[LeadOut] = None
    user: Optional[CustomerOut] = None
    thread: List[MessageOut]
    thread_count: int
