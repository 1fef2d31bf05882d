"""Repository layer – all database access goes through here.

Repositories encapsulate SQLAlchemy queries so that the service layer
only contains business logic.  Repositories built for one request
share its ``AsyncSession`` and therefore its transaction.
"""

from leadintake.repositories.customer_repository import CustomerRepository
from leadintake.repositories.lead_repository import LeadRepository
from leadintake.repositories.message_repository import MessageRepository
from leadintake.repositories.duplicate_lead_repository import DuplicateLeadRepository

__all__ = [
    "CustomerRepository",
    "LeadRepository",
    "MessageRepository",
    "DuplicateLeadRepository",
]
