from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from leadintake.core.constants import (
    MESSAGE_CHANNEL_CHECK_CLAUSE,
    MESSAGE_DIRECTION_CHECK_CLAUSE,
    MESSAGE_STATUS_CHECK_CLAUSE,
)
from leadintake.models.base import Base


class Message(Base):
    """One email or SMS in a lead's conversation thread."""

    __tablename__ = "messages"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    lead_id = Column(Uuid(as_uuid=True), ForeignKey("leads.id"), nullable=False)
    channel = Column(String(10), nullable=False)
    direction = Column(String(10), nullable=False)
    from_address = Column(String(255), nullable=False)
    to_address = Column(String(255), nullable=False)
    subject = Column(String(255))
    body = Column(Text, nullable=False)
    html_body = Column(Text)
    status = Column(String(20), nullable=False, default="draft", server_default="draft")
    external_id = Column(String(255))
    created_at = Column(DateTime(timezone=True), nullable=False)
    sent_at = Column(DateTime(timezone=True))
    delivered_at = Column(DateTime(timezone=True))
    read_at = Column(DateTime(timezone=True))

    lead = relationship("Lead", back_populates="messages")

    __table_args__ = (
        Index("ix_messages_lead_id_created_at", "lead_id", "created_at"),
        CheckConstraint(MESSAGE_CHANNEL_CHECK_CLAUSE, name="ck_message_channel"),
        CheckConstraint(MESSAGE_DIRECTION_CHECK_CLAUSE, name="ck_message_direction"),
        CheckConstraint(MESSAGE_STATUS_CHECK_CLAUSE, name="ck_message_status"),
    )
