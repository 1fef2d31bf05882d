"""Duplicate-lead (rebate tracking) schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from leadintake.schemas.common import ApiModel, RebateStatus, SuccessResponse


class DuplicateRecordOut(ApiModel):
    id: UUID
    original_lead_id: UUID
    duplicate_lead_id: Optional[UUID] = None
    match_criteria: str
    detected_at: datetime
    rebate_claimed: bool
    rebate_status: Optional[RebateStatus] = None


class DuplicateListResponse(SuccessResponse):
    data: List[DuplicateRecordOut]
    total: int


class RebateClaimRequest(BaseModel):
    """Request body for POST /api/v1/duplicates/{id}/rebate."""

    status: RebateStatus


class RebateClaimResponse(SuccessResponse):
    data: DuplicateRecordOut
