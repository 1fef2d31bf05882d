import html
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence, Tuple
from urllib.parse import urlencode
from uuid import UUID

from leadintake.core.constants import SENDABLE_CHANNELS
from leadintake.core.exceptions import MessageNotFoundError
from leadintake.models.customer import Customer
from leadintake.models.lead import Lead
from leadintake.models.message import Message
from leadintake.repositories.message_repository import MessageRepository
from leadintake.schemas.common import MessageChannel, MessageDirection, MessageStatus
from leadintake.services.email_client import EmailSettings, ResendEmailClient

logger = logging.getLogger(__name__)


class SendFailure(str, Enum):
    not_found = "not_found"
    not_draft = "not_draft"
    channel_not_supported = "channel_not_supported"
    not_configured = "not_configured"
    transport_failed = "transport_failed"


@dataclass
class MessageSendResult:
    success: bool
    message: Optional[Message] = None
    error: Optional[str] = None
    failure: Optional[SendFailure] = None


@dataclass(frozen=True)
class IntroEmail:
    subject: str
    text: str
    html: str


def render_intro(
    *,
    first_name: Optional[str],
    category: Optional[str],
    city: Optional[str],
    booking_link: str,
    sender_name: str,
) -> IntroEmail:
    """Build the introductory email in plain-text and HTML form.

    Output depends only on the arguments, so the same lead always
    renders the same email.
    """
    greeting_name = first_name or "there"
    service = category.lower() if category else "your request"
    area = city or "your area"

    subject = f"Re: {category}" if category else "Re: your request"
    text = (
        f"Hello {greeting_name},\n\n"
        f"We can help with {service} in {area}. And, we are available today.\n\n"
        f"Please book here: {booking_link}\n\n"
        f"{sender_name}"
    )
    link = html.escape(booking_link, quote=True)
    html_body = (
        f"<p>Hello {html.escape(greeting_name)},</p>"
        f"<p>We can help with {html.escape(service)} in {html.escape(area)}. "
        f"And, we are available today.</p>"
        f'<p>Please book here: <a href="{link}">{link}</a></p>'
        f"<p>{html.escape(sender_name)}</p>"
    )
    return IntroEmail(subject=subject, text=text, html=html_body)


class MessageService:
    """Drafts, sends and records the messages in a lead's thread.

    Drafting never touches the network.  Sending is a separate step that
    is only legal from ``draft`` and only over email.
    """

    def __init__(
        self,
        message_repo: MessageRepository,
        email_client: ResendEmailClient,
        email_settings: EmailSettings,
    ) -> None:
        self._message_repo = message_repo
        self._email_client = email_client
        self._settings = email_settings

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def booking_link(self, lead_id: UUID) -> str:
        return f"{self._settings.booking_url}?{urlencode({'leadId': str(lead_id)})}"

    async def draft_intro(self, lead: Lead, customer: Customer) -> Message:
        """Persist the intro email for *lead* as a ``draft``."""
        intro = render_intro(
            first_name=customer.first_name,
            category=lead.category,
            city=lead.city,
            booking_link=self.booking_link(lead.id),
            sender_name=self._settings.sender_name,
        )
        message = await self._message_repo.create(
            lead_id=lead.id,
            channel=MessageChannel.email.value,
            direction=MessageDirection.outbound.value,
            from_address=self._settings.from_email,
            to_address=customer.email or "",
            subject=intro.subject,
            body=intro.text,
            html_body=intro.html,
            status=MessageStatus.draft.value,
            created_at=datetime.now(timezone.utc),
        )
        await self._message_repo.commit()
        logger.info("Drafted intro message %s for lead %s", message.id, lead.id)
        return message

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send(self, message_id: UUID) -> MessageSendResult:
        """Send a draft email through the transport.

        Preconditions are checked in order: the message exists, it is a
        draft, its channel is email.  An unconfigured transport leaves
        the draft untouched so it can be sent later; an attempted send
        that fails marks the message ``failed``.

        The draft is claimed with a conditional update (``draft`` to
        ``sending``) and committed before the transport is called, so
        of two concurrent sends only one reaches the provider.
        """
        message = await self._message_repo.get_by_id(message_id)
        if message is None:
            return MessageSendResult(
                success=False,
                error="Message not found",
                failure=SendFailure.not_found,
            )
        if message.status != MessageStatus.draft.value:
            return MessageSendResult(
                success=False,
                message=message,
                error=f"Message is not a draft (status: {message.status})",
                failure=SendFailure.not_draft,
            )
        if message.channel not in SENDABLE_CHANNELS:
            return MessageSendResult(
                success=False,
                message=message,
                error=f"Channel '{message.channel}' not supported for sending",
                failure=SendFailure.channel_not_supported,
            )
        if not self._email_client.is_configured:
            logger.warning("Email transport unconfigured; message %s left as draft", message.id)
            return MessageSendResult(
                success=False,
                message=message,
                error="Email service not configured",
                failure=SendFailure.not_configured,
            )

        claimed = await self._message_repo.claim_draft(message.id)
        await self._message_repo.commit()
        await self._message_repo.refresh(message)
        if not claimed:
            return MessageSendResult(
                success=False,
                message=message,
                error=f"Message is not a draft (status: {message.status})",
                failure=SendFailure.not_draft,
            )

        try:
            result = await self._email_client.send(
                to=message.to_address,
                subject=message.subject or "",
                text=message.body,
                html=message.html_body,
                from_address=message.from_address,
            )
        except Exception:
            await self._message_repo.update_status(message, MessageStatus.failed.value)
            await self._message_repo.commit()
            raise

        if result.success:
            await self._message_repo.update_status(
                message,
                MessageStatus.sent.value,
                external_id=result.message_id,
                sent_at=datetime.now(timezone.utc),
            )
            await self._message_repo.commit()
            return MessageSendResult(success=True, message=message)

        await self._message_repo.update_status(message, MessageStatus.failed.value)
        await self._message_repo.commit()
        logger.error("Sending message %s failed: %s", message.id, result.error)
        return MessageSendResult(
            success=False,
            message=message,
            error=result.error or "Email send failed",
            failure=SendFailure.transport_failed,
        )

    async def send_intro(
        self, lead: Lead, customer: Customer
    ) -> Tuple[Message, MessageSendResult]:
        """Draft the intro email and send it straight away."""
        message = await self.draft_intro(lead, customer)
        result = await self.send(message.id)
        return message, result

    # ------------------------------------------------------------------
    # Thread access
    # ------------------------------------------------------------------

    async def get_message(self, message_id: UUID) -> Optional[Message]:
        return await self._message_repo.get_by_id(message_id)

    async def get_thread(self, lead_id: UUID) -> Sequence[Message]:
        """All messages for *lead_id* in chronological order."""
        return await self._message_repo.list_for_lead(lead_id)

    async def record_inbound(
        self,
        lead_id: UUID,
        channel: MessageChannel,
        from_address: str,
        body: str,
        subject: Optional[str] = None,
    ) -> Message:
        """Store a customer reply in the lead's thread."""
        message = await self._message_repo.create(
            lead_id=lead_id,
            channel=channel.value,
            direction=MessageDirection.inbound.value,
            from_address=from_address,
            to_address=self._settings.from_email,
            subject=subject,
            body=body,
            status=MessageStatus.received.value,
            created_at=datetime.now(timezone.utc),
        )
        await self._message_repo.commit()
        return message

    async def update_status(
        self,
        message_id: UUID,
        status: MessageStatus,
        external_id: Optional[str] = None,
    ) -> Message:
        """Apply a provider status update (``sent``, ``delivered``, ``failed``)."""
        message = await self._message_repo.get_by_id(message_id)
        if message is None:
            raise MessageNotFoundError(f"Message {message_id} not found")

        now = datetime.now(timezone.utc)
        await self._message_repo.update_status(
            message,
            status.value,
            external_id=external_id,
            sent_at=now if status == MessageStatus.sent else None,
            delivered_at=now if status == MessageStatus.delivered else None,
        )
        await self._message_repo.commit()
        return message
