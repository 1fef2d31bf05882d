"""Inbound payload schema for the Angi lead webhook."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class AngiPostalAddress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    address_first_line: str = Field(..., alias="AddressFirstLine")
    address_second_line: Optional[str] = Field(None, alias="AddressSecondLine")
    city: str = Field(..., alias="City")
    state: str = Field(..., alias="State")
    postal_code: str = Field(..., alias="PostalCode")

    @field_validator("address_second_line", mode="before")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        """Collapse missing, ``""`` and whitespace-only into ``None``.

        The partner sends either an empty string or omits the key; storage
        only ever sees ``NULL`` for "no second line".
        """
        if value is None:
            return None
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AngiLeadPayload(BaseModel):
    """Lead document posted by Angi.

    Field names on the wire are PascalCase; attribute names are
    snake_case.  ``CorrelationId`` is Angi's idempotency token and must
    be a UUID.
    """

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., alias="FirstName")
    last_name: str = Field(..., alias="LastName")
    phone_number: str = Field(..., alias="PhoneNumber")
    postal_address: AngiPostalAddress = Field(..., alias="PostalAddress")
    email: EmailStr = Field(..., alias="Email")
    source: str = Field(..., alias="Source")
    description: str = Field(..., alias="Description")
    category: str = Field(..., alias="Category")
    urgency: str = Field(..., alias="Urgency")
    correlation_id: UUID = Field(..., alias="CorrelationId")
    al_account_id: str = Field(..., alias="ALAccountId")
