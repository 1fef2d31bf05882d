import logging
from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError

from leadintake.core.cache import CacheService
from leadintake.core.constants import STATE_STATS_CACHE_KEY
from leadintake.models.customer import Customer
from leadintake.models.lead import Lead
from leadintake.repositories.lead_repository import LeadRepository
from leadintake.schemas.angi import AngiLeadPayload
from leadintake.schemas.common import LeadStatus
from leadintake.schemas.lead import LeadIntakeResponse
from leadintake.services.duplicate_detector import DuplicateDetector
from leadintake.services.identity_resolver import IdentityResolver
from leadintake.services.messaging import MessageService

logger = logging.getLogger(__name__)


def speed_to_lead_ms(
    received_at: Optional[datetime], processed_at: Optional[datetime]
) -> Optional[int]:
    """Milliseconds between receipt and the end of processing, or ``None``."""
    if received_at is None or processed_at is None:
        return None
    return int((processed_at - received_at).total_seconds() * 1000)


class LeadIntakeService:
    """Orchestrates intake of one partner lead.

    Order of operations is fixed: duplicate check, identity resolution,
    lead insert, intro message, status update.  The lead is committed
    before any message work starts, so a messaging failure leaves it in
    ``pending`` instead of losing it.
    """

    def __init__(
        self,
        lead_repo: LeadRepository,
        duplicate_detector: DuplicateDetector,
        identity_resolver: IdentityResolver,
        message_service: MessageService,
        cache: Optional[CacheService] = None,
        send_intro: bool = True,
    ) -> None:
        self._lead_repo = lead_repo
        self._duplicate_detector = duplicate_detector
        self._identity_resolver = identity_resolver
        self._message_service = message_service
        self._cache: CacheService = cache or CacheService()
        self._send_intro = send_intro

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def intake(self, payload: AngiLeadPayload) -> LeadIntakeResponse:
        """Run the intake pipeline for a validated partner payload.

        Steps:
        1. Duplicate check on the correlation id
        2. Duplicate: record the attempt and return the original lead
        3. Resolve (or create) the customer
        4. Insert the lead as ``pending``; a unique-constraint conflict
           on the correlation id is handled as a duplicate
        5. Draft and send the intro email
        6. Mark the lead ``processed`` if the email went out, otherwise
           leave it ``pending``; stamp ``processed_at`` either way
        """
        check = await self._duplicate_detector.check(payload.correlation_id)
        if check.is_duplicate:
            return await self._duplicate_response(check.original_lead, payload)

        customer, is_new_customer = await self._identity_resolver.resolve(
            email=payload.email,
            phone=payload.phone_number,
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
        customer_id = customer.id

        lead_id = uuid4()
        received_at = datetime.now(timezone.utc)
        lead = await self._lead_repo.create(
            id=lead_id,
            user_id=customer_id,
            address_line1=payload.postal_address.address_first_line,
            address_line2=payload.postal_address.address_second_line,
            city=payload.postal_address.city,
            state=payload.postal_address.state,
            postal_code=payload.postal_address.postal_code,
            source=payload.source,
            description=payload.description,
            category=payload.category,
            urgency=payload.urgency,
            correlation_id=payload.correlation_id,
            al_account_id=payload.al_account_id,
            status=LeadStatus.pending.value,
            converted=False,
            received_at=received_at,
            processed_at=None,
        )
        try:
            await self._lead_repo.commit()
        except IntegrityError:
            await self._lead_repo.rollback()
            original = await self._lead_repo.get_by_correlation_id(payload.correlation_id)
            if original is None:
                raise
            logger.warning(
                "Correlation id %s inserted concurrently; returning lead %s",
                payload.correlation_id,
                original.id,
            )
            return await self._duplicate_response(original, payload)

        await self._duplicate_detector.remember(payload.correlation_id, lead_id)
        await self._cache.delete(STATE_STATS_CACHE_KEY)

        message_id, email_sent = await self._dispatch_intro(lead, customer)

        processed_at = datetime.now(timezone.utc)
        status = LeadStatus.processed if email_sent else LeadStatus.pending
        lead = await self._lead_repo.get_by_id(lead_id)
        await self._lead_repo.mark_processed(lead, status.value, processed_at)
        await self._lead_repo.commit()

        speed = speed_to_lead_ms(received_at, processed_at)
        logger.info(
            "Lead %s created for customer %s (new_customer=%s, email_sent=%s, speed_to_lead_ms=%s)",
            lead_id,
            customer_id,
            is_new_customer,
            email_sent,
            speed,
        )
        return LeadIntakeResponse(
            lead_id=lead_id,
            user_id=customer_id,
            is_duplicate=False,
            speed_to_lead_ms=speed,
            message_id=message_id,
            email_sent=email_sent,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _dispatch_intro(
        self, lead: Lead, customer: Customer
    ) -> Tuple[Optional[UUID], bool]:
        """Draft (and, by policy, send) the intro email.

        Returns ``(message_id, email_sent)``.  Failures are logged and
        never propagate: the lead is already committed.  The draft is
        committed before sending, so its id is reported even when the
        send itself blows up.
        """
        lead_id = lead.id
        message_id: Optional[UUID] = None
        try:
            message = await self._message_service.draft_intro(lead, customer)
            message_id = message.id
            if not self._send_intro:
                return message_id, False

            result = await self._message_service.send(message_id)
            if not result.success:
                logger.warning(
                    "Intro email for lead %s not sent: %s", lead_id, result.error
                )
            return message_id, result.success
        except Exception:
            logger.exception("Intro message failed for lead %s", lead_id)
            await self._lead_repo.rollback()
            return message_id, False

    async def _duplicate_response(
        self, original: Lead, payload: AngiLeadPayload
    ) -> LeadIntakeResponse:
        original_id = original.id
        original_user_id = original.user_id
        await self._duplicate_detector.record_duplicate_attempt(
            original_id, payload.correlation_id
        )
        return LeadIntakeResponse(
            lead_id=original_id,
            user_id=original_user_id,
            is_duplicate=True,
            speed_to_lead_ms=None,
            message_id=None,
        )
