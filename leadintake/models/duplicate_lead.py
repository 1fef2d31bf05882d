from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    String,
    Uuid,
    false,
)
from sqlalchemy.orm import relationship

from leadintake.core.constants import REBATE_STATUS_CHECK_CLAUSE
from leadintake.models.base import Base


class DuplicateLead(Base):
    """Audit row for a partner re-submission, used for rebate claims.

    ``duplicate_lead_id`` stays NULL for attempts recorded at intake:
    no lead row is ever created for a duplicate submission.
    """

    __tablename__ = "duplicate_leads"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    original_lead_id = Column(
        Uuid(as_uuid=True), ForeignKey("leads.id"), nullable=False, index=True
    )
    duplicate_lead_id = Column(Uuid(as_uuid=True), ForeignKey("leads.id"))
    match_criteria = Column(String(50), nullable=False)
    detected_at = Column(DateTime(timezone=True), nullable=False)
    rebate_claimed = Column(Boolean, nullable=False, default=False, server_default=false())
    rebate_status = Column(String(20))

    original_lead = relationship("Lead", foreign_keys=[original_lead_id])

    __table_args__ = (
        CheckConstraint(REBATE_STATUS_CHECK_CLAUSE, name="ck_duplicate_rebate_status"),
    )
