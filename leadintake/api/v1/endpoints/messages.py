from uuid import UUID

from fastapi import APIRouter, Depends

from leadintake.api.deps import get_lead_query_service, get_message_service
from leadintake.core.exceptions import (
    ChannelNotSupportedError,
    EmailDeliveryError,
    MessageNotDraftError,
    MessageNotFoundError,
)
from leadintake.schemas.lead import MessageDetailResponse
from leadintake.schemas.message import (
    MessageOut,
    MessageSendResponse,
    MessageStatusOut,
    MessageStatusResponse,
)
from leadintake.services.lead_query_service import LeadQueryService
from leadintake.services.messaging import MessageService, SendFailure

router = APIRouter(prefix="/message", tags=["Messages"])

_FAILURE_ERRORS = {
    SendFailure.not_found: MessageNotFoundError,
    SendFailure.not_draft: MessageNotDraftError,
    SendFailure.channel_not_supported: ChannelNotSupportedError,
    SendFailure.not_configured: EmailDeliveryError,
    SendFailure.transport_failed: EmailDeliveryError,
}


@router.get("/{message_id}", response_model=MessageDetailResponse)
async def get_message(
    message_id: UUID,
    service: LeadQueryService = Depends(get_lead_query_service),
) -> MessageDetailResponse:
    """A message together with its lead, customer and full thread."""
    return await service.get_message_detail(message_id)


@router.post("/{message_id}/send", response_model=MessageSendResponse)
async def send_message(
    message_id: UUID,
    service: MessageService = Depends(get_message_service),
) -> MessageSendResponse:
    """Send a draft email.

    Sending anything other than a draft email is a 400; transport
    problems are a 500.
    """
    result = await service.send(message_id)
    if not result.success:
        raise _FAILURE_ERRORS[result.failure](result.error)
    return MessageSendResponse(
        message=MessageOut.model_validate(result.message),
        status=result.message.status,
    )


@router.get("/{message_id}/send", response_model=MessageStatusResponse)
async def get_message_send_status(
    message_id: UUID,
    service: MessageService = Depends(get_message_service),
) -> MessageStatusResponse:
    """Report a message's delivery status without changing it."""
    message = await service.get_message(message_id)
    if message is None:
        raise MessageNotFoundError(f"Message {message_id} not found")
    return MessageStatusResponse(message=MessageStatusOut.model_validate(message))
