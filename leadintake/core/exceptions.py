class LeadIntakeError(Exception):
    """Base class for all lead-intake domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except LeadIntakeError`` clause can catch any domain
    error.
    """

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class LeadNotFoundError(LeadIntakeError):
    """Raised when a requested lead does not exist."""

    def __init__(self, detail: str = "Lead not found"):
        super().__init__(detail)


class MessageNotFoundError(LeadIntakeError):
    """Raised when a requested message does not exist."""

    def __init__(self, detail: str = "Message not found"):
        super().__init__(detail)


class DuplicateRecordNotFoundError(LeadIntakeError):
    """Raised when a duplicate (rebate) record does not exist."""

    def __init__(self, detail: str = "Duplicate record not found"):
        super().__init__(detail)


class MessageNotDraftError(LeadIntakeError):
    """Raised when sending a message that has already left the draft state."""

    def __init__(self, detail: str = "Message is not a draft"):
        super().__init__(detail)


class ChannelNotSupportedError(LeadIntakeError):
    """Raised when sending over a channel with no send path (e.g. sms)."""

    def __init__(self, detail: str = "Message channel not supported"):
        super().__init__(detail)


class EmailDeliveryError(LeadIntakeError):
    """Raised when the email transport is unconfigured or the send failed.

    This is a server-side condition, not a client error: the partner or
    operator should retry later.
    """

    def __init__(self, detail: str = "Email delivery failed"):
        super().__init__(detail)
