import logging
from typing import Any, Dict, Optional
from uuid import UUID

from leadintake.core.cache import CacheService
from leadintake.core.config import settings
from leadintake.core.constants import STATE_STATS_CACHE_KEY
from leadintake.core.exceptions import LeadNotFoundError, MessageNotFoundError
from leadintake.models.lead import Lead
from leadintake.repositories.lead_repository import LeadRepository
from leadintake.repositories.message_repository import MessageRepository
from leadintake.schemas.common import MessageDirection
from leadintake.schemas.lead import (
    CustomerOut,
    CustomerSummary,
    LeadDetail,
    LeadDetailData,
    LeadDetailResponse,
    LeadFilters,
    LeadListItem,
    LeadListResponse,
    LeadOut,
    MessageDetailResponse,
    OtherLead,
    Pagination,
    StateStats,
    StateStatsResponse,
)
from leadintake.schemas.message import MessageOut
from leadintake.services.lead_intake_service import speed_to_lead_ms

logger = logging.getLogger(__name__)


def _lead_fields(lead: Lead) -> Dict[str, Any]:
    return LeadOut.model_validate(lead).model_dump()


class LeadQueryService:
    """Read-only views over leads for the dashboard."""

    def __init__(
        self,
        lead_repo: LeadRepository,
        message_repo: MessageRepository,
        cache: Optional[CacheService] = None,
    ) -> None:
        self._lead_repo = lead_repo
        self._message_repo = message_repo
        self._cache: CacheService = cache or CacheService()

    async def list_leads(self, filters: LeadFilters) -> LeadListResponse:
        """One page of leads with customer summary and message counts.

        Counts for the whole page come from a single grouped query.
        """
        rows = await self._lead_repo.list_with_customers(filters)
        total = await self._lead_repo.count(filters)
        counts = await self._message_repo.counts_by_lead_ids(lead.id for lead, _ in rows)

        items = []
        for lead, customer in rows:
            message_count, inbound = counts.get(lead.id, (0, 0))
            items.append(
                LeadListItem(
                    **_lead_fields(lead),
                    user=CustomerSummary.model_validate(customer) if customer else None,
                    message_count=message_count,
                    has_response=inbound > 0,
                    speed_to_lead_ms=speed_to_lead_ms(lead.received_at, lead.processed_at),
                )
            )

        return LeadListResponse(
            data=items,
            pagination=Pagination(
                total=total,
                limit=filters.limit,
                offset=filters.offset,
                has_more=filters.offset + len(items) < total,
            ),
        )

    async def get_lead_detail(self, lead_id: UUID) -> LeadDetailResponse:
        row = await self._lead_repo.get_with_customer(lead_id)
        if row is None:
            raise LeadNotFoundError(f"Lead {lead_id} not found")
        lead, customer = row

        messages = await self._message_repo.list_for_lead(lead.id)
        inbound = sum(
            1 for m in messages if m.direction == MessageDirection.inbound.value
        )
        other_leads = []
        if customer is not None:
            other_leads = await self._lead_repo.list_other_for_customer(
                customer.id, lead.id
            )

        detail = LeadDetail(
            **_lead_fields(lead),
            speed_to_lead_ms=speed_to_lead_ms(lead.received_at, lead.processed_at),
            message_count=len(messages),
            inbound_count=inbound,
            outbound_count=len(messages) - inbound,
            has_response=inbound > 0,
        )
        return LeadDetailResponse(
            data=LeadDetailData(
                lead=detail,
                user=CustomerOut.model_validate(customer) if customer else None,
                messages=[MessageOut.model_validate(m) for m in messages],
                other_leads=[OtherLead.model_validate(o) for o in other_leads],
            )
        )

    async def get_state_stats(self) -> StateStatsResponse:
        """Lead counts per normalised state code, cached briefly in Redis."""
        cached = await self._cache.get_json(STATE_STATS_CACHE_KEY)
        if cached is not None:
            return StateStatsResponse(data=StateStats.model_validate(cached))

        by_state = dict(await self._lead_repo.count_by_state())
        stats = StateStats(
            by_state=by_state,
            max_count=max(by_state.values(), default=0),
            total_leads=await self._lead_repo.count_all(),
        )
        await self._cache.set_json(
            STATE_STATS_CACHE_KEY, stats.model_dump(), ttl=settings.REDIS_CACHE_TTL
        )
        return StateStatsResponse(data=stats)

    async def get_message_detail(self, message_id: UUID) -> MessageDetailResponse:
        message = await self._message_repo.get_by_id(message_id)
        if message is None:
            raise MessageNotFoundError(f"Message {message_id} not found")

        lead, customer = None, None
        row = await self._lead_repo.get_with_customer(message.lead_id)
        if row is not None:
            lead, customer = row
        thread = await self._message_repo.list_for_lead(message.lead_id)

        return MessageDetailResponse(
            message=MessageOut.model_validate(message),
            lead=LeadOut.model_validate(lead) if lead else None,
            user=CustomerOut.model_validate(customer) if customer else None,
            thread=[MessageOut.model_validate(m) for m in thread],
            thread_count=len(thread),
        )
