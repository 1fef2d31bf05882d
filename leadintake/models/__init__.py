from leadintake.models.base import Base
from leadintake.models.customer import Customer
from leadintake.models.lead import Lead
from leadintake.models.message import Message
from leadintake.models.duplicate_lead import DuplicateLead

__all__ = [
    "Base",
    "Customer",
    "Lead",
    "Message",
    "DuplicateLead",
]
