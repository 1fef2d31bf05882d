"""Pydantic schemas package – re-exports for convenience."""

# Common enums
from leadintake.schemas.common import (
    LeadStatus as LeadStatus,
    MessageChannel as MessageChannel,
    MessageDirection as MessageDirection,
    MessageStatus as MessageStatus,
    RebateStatus as RebateStatus,
    ApiModel as ApiModel,
    SuccessResponse as SuccessResponse,
)

# Partner payload
from leadintake.schemas.angi import (
    AngiLeadPayload as AngiLeadPayload,
    AngiPostalAddress as AngiPostalAddress,
)

# Message schemas
from leadintake.schemas.message import (
    MessageOut as MessageOut,
    MessageSendResponse as MessageSendResponse,
    MessageStatusOut as MessageStatusOut,
    MessageStatusResponse as MessageStatusResponse,
)

# Lead schemas
from leadintake.schemas.lead import (
    LeadFilters as LeadFilters,
    LeadIntakeResponse as LeadIntakeResponse,
    CustomerSummary as CustomerSummary,
    CustomerOut as CustomerOut,
    LeadOut as LeadOut,
    LeadListItem as LeadListItem,
    LeadListResponse as LeadListResponse,
    LeadDetail as LeadDetail,
    LeadDetailResponse as LeadDetailResponse,
    MessageDetailResponse as MessageDetailResponse,
    StateStats as StateStats,
    StateStatsResponse as StateStatsResponse,
)

# Duplicate / rebate schemas
from leadintake.schemas.duplicate import (
    DuplicateRecordOut as DuplicateRecordOut,
    DuplicateListResponse as DuplicateListResponse,
    RebateClaimRequest as RebateClaimRequest,
    RebateClaimResponse as RebateClaimResponse,
)
