from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from leadintake.api.deps import get_duplicate_detector
from leadintake.schemas.duplicate import (
    DuplicateListResponse,
    DuplicateRecordOut,
    RebateClaimRequest,
    RebateClaimResponse,
)
from leadintake.services.duplicate_detector import DuplicateDetector

router = APIRouter(prefix="/duplicates", tags=["Duplicates"])


@router.get("", response_model=DuplicateListResponse)
async def list_duplicates(
    unclaimed: bool = Query(False, description="Only records without a rebate claim"),
    detected_from: Optional[datetime] = Query(None, alias="from"),
    detected_to: Optional[datetime] = Query(None, alias="to"),
    detector: DuplicateDetector = Depends(get_duplicate_detector),
) -> DuplicateListResponse:
    """Duplicate submissions for partner rebate reconciliation."""
    records = await detector.get_duplicates_for_rebate(
        unclaimed=unclaimed,
        detected_from=detected_from,
        detected_to=detected_to,
    )
    return DuplicateListResponse(
        data=[DuplicateRecordOut.model_validate(r) for r in records],
        total=len(records),
    )


@router.post("/{duplicate_id}/rebate", response_model=RebateClaimResponse)
async def claim_rebate(
    duplicate_id: UUID,
    body: RebateClaimRequest,
    detector: DuplicateDetector = Depends(get_duplicate_detector),
) -> RebateClaimResponse:
    record = await detector.mark_rebate_claimed(duplicate_id, body.status)
    return RebateClaimResponse(data=DuplicateRecordOut.model_validate(record))
