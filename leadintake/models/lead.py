from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    false,
)
from sqlalchemy.orm import relationship

from leadintake.core.constants import LEAD_STATUS_CHECK_CLAUSE
from leadintake.models.base import Base


class Lead(Base):
    """One service request received from the partner.

    ``correlation_id`` is the partner's idempotency token.  It is unique
    when present and is the only thing duplicate detection relies on;
    the database constraint is the final word when two submissions
    race.  ``processed_at`` marks the end of the intake pipeline attempt,
    not email delivery.
    """

    __tablename__ = "leads"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)

    address_line1 = Column(String(255))
    address_line2 = Column(String(255))
    city = Column(String(100))
    state = Column(String(50))
    postal_code = Column(String(20))

    source = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(255))
    urgency = Column(String(100))

    correlation_id = Column(Uuid(as_uuid=True), unique=True)
    al_account_id = Column(String(100))

    status = Column(String(20), nullable=False, default="pending", server_default="pending")
    converted = Column(Boolean, nullable=False, default=False, server_default=false())
    received_at = Column(DateTime(timezone=True), nullable=False)
    processed_at = Column(DateTime(timezone=True))

    customer = relationship("Customer", back_populates="leads")
    messages = relationship(
        "Message", back_populates="lead", order_by="Message.created_at"
    )

    __table_args__ = (
        Index("ix_leads_user_id", "user_id"),
        Index("ix_leads_received_at", "received_at"),
        Index("ix_leads_status", "status"),
        CheckConstraint(LEAD_STATUS_CHECK_CLAUSE, name="ck_lead_status"),
    )
