import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence
from uuid import UUID

from leadintake.core.cache import CacheService
from leadintake.core.config import settings
from leadintake.core.constants import (
    CORRELATION_CACHE_PREFIX,
    MATCH_CRITERIA_CORRELATION_ID,
)
from leadintake.core.exceptions import DuplicateRecordNotFoundError
from leadintake.models.duplicate_lead import DuplicateLead
from leadintake.models.lead import Lead
from leadintake.repositories.duplicate_lead_repository import DuplicateLeadRepository
from leadintake.repositories.lead_repository import LeadRepository
from leadintake.schemas.common import RebateStatus

logger = logging.getLogger(__name__)


@dataclass
class DuplicateCheck:
    is_duplicate: bool
    original_lead: Optional[Lead] = None


class DuplicateDetector:
    """Correlation-id based duplicate detection and rebate bookkeeping.

    The check must run before a lead row is inserted.  Redis, when
    available, remembers ``correlation id -> lead id`` so repeated
    partner resends skip the indexed lookup; a cached id is still
    confirmed against the database before it is trusted.
    """

    def __init__(
        self,
        lead_repo: LeadRepository,
        duplicate_repo: DuplicateLeadRepository,
        cache: Optional[CacheService] = None,
    ) -> None:
        self._lead_repo = lead_repo
        self._duplicate_repo = duplicate_repo
        self._cache: CacheService = cache or CacheService()

    @staticmethod
    def _cache_key(correlation_id: UUID) -> str:
        return f"{CORRELATION_CACHE_PREFIX}:{correlation_id}"

    async def check(self, correlation_id: Optional[UUID]) -> DuplicateCheck:
        """Look up an existing lead for *correlation_id*."""
        if correlation_id is None:
            return DuplicateCheck(is_duplicate=False)

        cached = await self._cache.get(self._cache_key(correlation_id))
        if cached is not None:
            try:
                original = await self._lead_repo.get_by_id(UUID(cached))
            except ValueError:
                original = None
            if original is not None and original.correlation_id == correlation_id:
                return DuplicateCheck(is_duplicate=True, original_lead=original)

        original = await self._lead_repo.get_by_correlation_id(correlation_id)
        if original is None:
            return DuplicateCheck(is_duplicate=False)

        await self.remember(correlation_id, original.id)
        return DuplicateCheck(is_duplicate=True, original_lead=original)

    async def remember(self, correlation_id: Optional[UUID], lead_id: UUID) -> None:
        """Cache the lead that owns *correlation_id*."""
        if correlation_id is None:
            return
        await self._cache.set(
            self._cache_key(correlation_id),
            str(lead_id),
            ttl=settings.REDIS_DUPLICATE_CHECK_TTL,
        )

    async def record_duplicate_attempt(
        self, original_lead_id: UUID, correlation_id: Optional[UUID]
    ) -> DuplicateLead:
        """Write the audit row for a rejected re-submission.

        No lead row exists for the attempt, so ``duplicate_lead_id`` is
        left NULL.
        """
        record = await self._duplicate_repo.create(
            original_lead_id=original_lead_id,
            duplicate_lead_id=None,
            match_criteria=MATCH_CRITERIA_CORRELATION_ID,
            detected_at=datetime.now(timezone.utc),
            rebate_claimed=False,
        )
        await self._duplicate_repo.commit()
        logger.info(
            "Duplicate lead detected: original=%s correlation_id=%s",
            original_lead_id,
            correlation_id,
        )
        return record

    async def get_duplicates_for_rebate(
        self,
        unclaimed: bool = False,
        detected_from: Optional[datetime] = None,
        detected_to: Optional[datetime] = None,
    ) -> Sequence[DuplicateLead]:
        return await self._duplicate_repo.list_for_rebate(
            unclaimed=unclaimed,
            detected_from=detected_from,
            detected_to=detected_to,
        )

    async def mark_rebate_claimed(
        self, duplicate_id: UUID, status: RebateStatus
    ) -> DuplicateLead:
        record = await self._duplicate_repo.get_by_id(duplicate_id)
        if record is None:
            raise DuplicateRecordNotFoundError(
                f"Duplicate record {duplicate_id} not found"
            )
        await self._duplicate_repo.mark_rebate_claimed(record, status.value)
        await self._duplicate_repo.commit()
        return record
