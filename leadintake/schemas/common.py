from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LeadStatus(str, Enum):
    pending = "pending"
    processed = "processed"
    duplicate = "duplicate"


class MessageChannel(str, Enum):
    email = "email"
    sms = "sms"


class MessageDirection(str, Enum):
    inbound = "inbound"
    outbound = "outbound"


class MessageStatus(str, Enum):
    draft = "draft"
    sending = "sending"
    sent = "sent"
    delivered = "delivered"
    failed = "failed"
    received = "received"


class RebateStatus(str, Enum):
    pending = "pending"
    submitted = "submitted"
    approved = "approved"
    rejected = "rejected"


class ApiModel(BaseModel):
    """Base for response bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(ApiModel):
    """Generic success response base."""

    success: bool = True
