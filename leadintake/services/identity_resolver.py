import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError

from leadintake.models.customer import Customer
from leadintake.repositories.customer_repository import CustomerRepository

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class IdentityResolver:
    """Finds the customer behind a lead, creating one on first sighting.

    Matching is exact and ordered: email first, then phone, first match
    wins.  A customer known only by phone who now submits with a new
    email and the same phone is matched by phone; a customer known by
    email who submits with a different email is not reconciled with
    any other record.
    """

    def __init__(self, customer_repo: CustomerRepository) -> None:
        self._customer_repo = customer_repo

    async def resolve(
        self,
        email: Optional[str],
        phone: Optional[str],
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Tuple[Customer, bool]:
        """Return ``(customer, is_new)``.

        Performs at most one write: an ``updated_at`` bump on a match,
        or an insert.  If the insert loses a race on the email/phone
        unique constraints, the transaction is rolled back and the
        lookup is repeated once so the winner is returned.
        """
        email = _clean(email)
        phone = _clean(phone)

        existing = await self._find(email, phone)
        if existing is not None:
            await self._customer_repo.touch(existing, datetime.now(timezone.utc))
            return existing, False

        now = datetime.now(timezone.utc)
        try:
            customer = await self._customer_repo.create(
                email=email,
                phone=phone,
                first_name=_clean(first_name),
                last_name=_clean(last_name),
                created_at=now,
                updated_at=now,
            )
        except IntegrityError:
            await self._customer_repo.rollback()
            existing = await self._find(email, phone)
            if existing is None:
                raise
            logger.info("Customer insert raced; matched existing customer %s", existing.id)
            await self._customer_repo.touch(existing, datetime.now(timezone.utc))
            return existing, False

        logger.info("Created customer %s", customer.id)
        return customer, True

    async def _find(
        self, email: Optional[str], phone: Optional[str]
    ) -> Optional[Customer]:
        if email:
            customer = await self._customer_repo.get_by_email(email)
            if customer is not None:
                return customer
        if phone:
            return await self._customer_repo.get_by_phone(phone)
        return None
