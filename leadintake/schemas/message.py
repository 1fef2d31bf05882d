"""Message schemas (thread items, send results, status)."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from leadintake.schemas.common import (
    ApiModel,
    MessageChannel,
    MessageDirection,
    MessageStatus,
    SuccessResponse,
)


class MessageOut(ApiModel):
    id: UUID
    lead_id: UUID
    channel: MessageChannel
    direction: MessageDirection
    from_address: str
    to_address: str
    subject: Optional[str] = None
    body: str
    html_body: Optional[str] = None
    status: MessageStatus
    external_id: Optional[str] = None
    created_at: datetime
    sent_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None


class MessageSendResponse(SuccessResponse):
    """Response body for POST /api/v1/message/{id}/send."""

    message: MessageOut
    status: MessageStatus


class MessageStatusOut(ApiModel):
    id: UUID
    status: MessageStatus
    sent_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    external_id: Optional[str] = None


class MessageStatusResponse(SuccessResponse):
    """Response body for GET /api/v1/message/{id}/send."""

    message: MessageStatusOut

