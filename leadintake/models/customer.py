from uuid import uuid4

from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from leadintake.models.base import Base


class Customer(Base):
    """A person who submitted one or more leads.

    Email and phone are each unique when present.  Identity resolution
    matches on exact equality of either field, email first.
    """

    __tablename__ = "users"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    email = Column(String(255), unique=True)
    phone = Column(String(50), unique=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    leads = relationship("Lead", back_populates="customer")
