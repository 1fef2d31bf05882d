from datetime import datetime
from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select

from leadintake.models.duplicate_lead import DuplicateLead
from leadintake.repositories.base import BaseRepository


class DuplicateLeadRepository(BaseRepository):
    """Encapsulates queries against the ``duplicate_leads`` table."""

    async def get_by_id(self, duplicate_id: UUID) -> Optional[DuplicateLead]:
        result = await self._db.execute(
            select(DuplicateLead).where(DuplicateLead.id == duplicate_id)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> DuplicateLead:
        record = DuplicateLead(**kwargs)
        self._db.add(record)
        await self._db.flush()
        return record

    async def list_for_rebate(
        self,
        *,
        unclaimed: bool = False,
        detected_from: Optional[datetime] = None,
        detected_to: Optional[datetime] = None,
    ) -> Sequence[DuplicateLead]:
        """Duplicate records for rebate reporting, oldest first."""
        query = select(DuplicateLead)
        if unclaimed:
            query = query.where(DuplicateLead.rebate_claimed.is_(False))
        if detected_from is not None:
            query = query.where(DuplicateLead.detected_at >= detected_from)
        if detected_to is not None:
            query = query.where(DuplicateLead.detected_at <= detected_to)
        result = await self._db.execute(query.order_by(DuplicateLead.detected_at.asc()))
        return result.scalars().all()

    async def count_for_original(self, original_lead_id: UUID) -> int:
        result = await self._db.execute(
            select(func.count())
            .select_from(DuplicateLead)
            .where(DuplicateLead.original_lead_id == original_lead_id)
        )
        return result.scalar() or 0

    async def mark_rebate_claimed(self, record: DuplicateLead, status: str) -> None:
        record.rebate_claimed = True
        record.rebate_status = status
        await self._db.flush()
