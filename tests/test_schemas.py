from uuid import uuid4

import pytest
from pydantic import ValidationError

from leadintake.schemas.angi import AngiLeadPayload
from leadintake.schemas.duplicate import RebateClaimRequest
from leadintake.schemas.lead import LeadFilters, LeadIntakeResponse


class TestAngiPayload:
    def test_pascal_case_aliases(self, make_payload):
        payload = AngiLeadPayload.model_validate(make_payload(ALAccountId="AL-9"))

        assert payload.first_name == "Jane"
        assert payload.postal_address.city == "Indianapolis"
        assert payload.al_account_id == "AL-9"

    @pytest.mark.parametrize("second_line", ["", "   ", None])
    def test_blank_second_line_becomes_none(self, make_payload, second_line):
        body = make_payload()
        body["PostalAddress"]["AddressSecondLine"] = second_line

        payload = AngiLeadPayload.model_validate(body)

        assert payload.postal_address.address_second_line is None

    def test_second_line_may_be_omitted(self, make_payload):
        body = make_payload()
        del body["PostalAddress"]["AddressSecondLine"]

        payload = AngiLeadPayload.model_validate(body)

        assert payload.postal_address.address_second_line is None

    def test_second_line_kept_when_present(self, make_payload):
        body = make_payload()
        body["PostalAddress"]["AddressSecondLine"] = "Apt 4"

        payload = AngiLeadPayload.model_validate(body)

        assert payload.postal_address.address_second_line == "Apt 4"

    def test_correlation_id_must_be_uuid(self, make_payload):
        with pytest.raises(ValidationError):
            AngiLeadPayload.model_validate(make_payload(CorrelationId="12345"))

    def test_email_must_be_valid(self, make_payload):
        with pytest.raises(ValidationError):
            AngiLeadPayload.model_validate(make_payload(Email="jane@"))


class TestResponseShapes:
    def test_intake_response_is_camel_case(self):
        response = LeadIntakeResponse(
            lead_id=uuid4(), user_id=uuid4(), is_duplicate=False, speed_to_lead_ms=12
        )

        dumped = response.model_dump(by_alias=True)

        assert set(dumped) == {
            "success",
            "leadId",
            "userId",
            "isDuplicate",
            "speedToLeadMs",
            "messageId",
            "emailSent",
        }
        assert dumped["success"] is True


class TestFilters:
    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_bounds(self, limit):
        with pytest.raises(ValidationError):
            LeadFilters(limit=limit)

    def test_defaults(self):
        filters = LeadFilters()
        assert filters.limit == 50
        assert filters.offset == 0


def test_rebate_status_must_be_known():
    with pytest.raises(ValidationError):
        RebateClaimRequest(status="paid")
