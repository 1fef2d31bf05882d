from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select

from leadintake.models.customer import Customer
from leadintake.repositories.base import BaseRepository


class CustomerRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``users`` table."""

    async def get_by_id(self, customer_id: UUID) -> Optional[Customer]:
        """Return a single customer by primary key, or ``None``."""
        result = await self._db.execute(
            select(Customer).where(Customer.id == customer_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Customer]:
        """Exact (case-sensitive) email match."""
        result = await self._db.execute(
            select(Customer).where(Customer.email == email)
        )
        return result.scalar_one_or_none()

    async def get_by_phone(self, phone: str) -> Optional[Customer]:
        """Exact phone match; no normalisation is applied."""
        result = await self._db.execute(
            select(Customer).where(Customer.phone == phone)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> Customer:
        """Insert a new customer and flush so unique constraints fire now."""
        customer = Customer(**kwargs)
        self._db.add(customer)
        await self._db.flush()
        return customer

    async def touch(self, customer: Customer, now: datetime) -> None:
        """Bump ``updated_at`` on a matched customer."""
        customer.updated_at = now
        await self._db.flush()
