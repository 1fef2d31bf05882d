from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import Select, and_, func, select

from leadintake.models.customer import Customer
from leadintake.models.lead import Lead
from leadintake.repositories.base import BaseRepository
from leadintake.schemas.lead import LeadFilters


class LeadRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``leads`` table."""

    async def get_by_id(self, lead_id: UUID) -> Optional[Lead]:
        """Return a single lead by primary key, or ``None``."""
        result = await self._db.execute(select(Lead).where(Lead.id == lead_id))
        return result.scalar_one_or_none()

    async def get_by_correlation_id(self, correlation_id: UUID) -> Optional[Lead]:
        """Return the lead carrying *correlation_id*, or ``None``.

        The column is unique, so at most one row can match.
        """
        result = await self._db.execute(
            select(Lead).where(Lead.correlation_id == correlation_id)
        )
        return result.scalar_one_or_none()

    async def count_by_correlation_id(self, correlation_id: UUID) -> int:
        result = await self._db.execute(
            select(func.count())
            .select_from(Lead)
            .where(Lead.correlation_id == correlation_id)
        )
        return result.scalar() or 0

    async def get_with_customer(
        self, lead_id: UUID
    ) -> Optional[Tuple[Lead, Optional[Customer]]]:
        """Return ``(lead, customer)`` for *lead_id*, or ``None``."""
        result = await self._db.execute(
            select(Lead, Customer)
            .outerjoin(Customer, Lead.user_id == Customer.id)
            .where(Lead.id == lead_id)
        )
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def create(self, **kwargs: Any) -> Lead:
        """Stage a new lead; the unique constraint fires on flush/commit."""
        lead = Lead(**kwargs)
        self._db.add(lead)
        return lead

    async def mark_processed(
        self, lead: Lead, status: str, processed_at: datetime
    ) -> None:
        """Record the outcome of the intake pipeline on *lead*."""
        lead.status = status
        lead.processed_at = processed_at
        await self._db.flush()

    # ------------------------------------------------------------------
    # Listing / reporting
    # ------------------------------------------------------------------

    @staticmethod
    def _apply_filters(query: Select, filters: LeadFilters) -> Select:
        conditions = []
        if filters.status is not None:
            conditions.append(Lead.status == filters.status.value)
        if filters.source:
            conditions.append(Lead.source == filters.source)
        if filters.user_id is not None:
            conditions.append(Lead.user_id == filters.user_id)
        if filters.received_from is not None:
            conditions.append(Lead.received_at >= filters.received_from)
        if filters.received_to is not None:
            conditions.append(Lead.received_at <= filters.received_to)
        if conditions:
            query = query.where(and_(*conditions))
        return query

    async def list_with_customers(
        self, filters: LeadFilters
    ) -> List[Tuple[Lead, Optional[Customer]]]:
        """One page of leads joined with their customer, newest first."""
        query = select(Lead, Customer).outerjoin(Customer, Lead.user_id == Customer.id)
        query = (
            self._apply_filters(query, filters)
            .order_by(Lead.received_at.desc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        result = await self._db.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    async def count(self, filters: LeadFilters) -> int:
        """Total rows matching *filters*, ignoring pagination."""
        query = self._apply_filters(select(func.count()).select_from(Lead), filters)
        result = await self._db.execute(query)
        return result.scalar() or 0

    async def count_all(self) -> int:
        result = await self._db.execute(select(func.count()).select_from(Lead))
        return result.scalar() or 0

    async def list_other_for_customer(
        self, customer_id: UUID, exclude_lead_id: UUID
    ) -> Sequence[Lead]:
        """The customer's other leads, newest first."""
        result = await self._db.execute(
            select(Lead)
            .where(Lead.user_id == customer_id, Lead.id != exclude_lead_id)
            .order_by(Lead.received_at.desc())
        )
        return result.scalars().all()

    async def count_by_state(self) -> List[Tuple[str, int]]:
        """Lead counts grouped by upper-cased, trimmed state code.

        Normalisation happens in SQL so that ``"in"``, ``"IN "`` and
        ``"In"`` land in the same group.  NULL and blank states are
        excluded.
        """
        state_key = func.upper(func.trim(Lead.state))
        result = await self._db.execute(
            select(state_key.label("state"), func.count().label("count"))
            .where(Lead.state.is_not(None), func.trim(Lead.state) != "")
            .group_by(state_key)
        )
        return [(state, count) for state, count in result.all()]
