from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import case, func, select, update

from leadintake.models.message import Message
from leadintake.repositories.base import BaseRepository


class MessageRepository(BaseRepository):
    """Encapsulates queries against the ``messages`` table."""

    async def get_by_id(self, message_id: UUID) -> Optional[Message]:
        result = await self._db.execute(
            select(Message).where(Message.id == message_id)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> Message:
        """Insert a new message and flush it."""
        message = Message(**kwargs)
        self._db.add(message)
        await self._db.flush()
        return message

    async def list_for_lead(self, lead_id: UUID) -> Sequence[Message]:
        """The lead's thread in chronological order."""
        result = await self._db.execute(
            select(Message)
            .where(Message.lead_id == lead_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return result.scalars().all()

    async def claim_draft(self, message_id: UUID) -> bool:
        """Atomically move a message from ``draft`` to ``sending``.

        Returns ``False`` when another caller got there first.
        """
        result = await self._db.execute(
            update(Message)
            .where(Message.id == message_id, Message.status == "draft")
            .values(status="sending")
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def refresh(self, message: Message) -> None:
        await self._db.refresh(message)

    async def update_status(
        self,
        message: Message,
        status: str,
        *,
        external_id: Optional[str] = None,
        sent_at: Optional[datetime] = None,
        delivered_at: Optional[datetime] = None,
    ) -> None:
        message.status = status
        if external_id:
            message.external_id = external_id
        if sent_at is not None:
            message.sent_at = sent_at
        if delivered_at is not None:
            message.delivered_at = delivered_at
        await self._db.flush()

    async def counts_by_lead_ids(
        self, lead_ids: Iterable[UUID]
    ) -> Dict[UUID, Tuple[int, int]]:
        """Return ``{lead_id: (total, inbound)}`` in a single grouped query.

        Leads without messages are absent from the result.
        """
        ids = list(lead_ids)
        if not ids:
            return {}
        inbound = func.sum(case((Message.direction == "inbound", 1), else_=0))
        result = await self._db.execute(
            select(
                Message.lead_id,
                func.count().label("total"),
                inbound.label("inbound"),
            )
            .where(Message.lead_id.in_(ids))
            .group_by(Message.lead_id)
        )
        return {
            lead_id: (total or 0, int(inbound or 0))
            for lead_id, total, inbound in result.all()
        }
