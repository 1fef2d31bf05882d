from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest
from sqlalchemy import func, select

from leadintake.models.customer import Customer
from leadintake.models.duplicate_lead import DuplicateLead
from leadintake.models.lead import Lead
from leadintake.models.message import Message
from leadintake.repositories.customer_repository import CustomerRepository
from leadintake.repositories.duplicate_lead_repository import DuplicateLeadRepository
from leadintake.repositories.lead_repository import LeadRepository
from leadintake.repositories.message_repository import MessageRepository
from leadintake.schemas.angi import AngiLeadPayload
from leadintake.services.duplicate_detector import DuplicateCheck, DuplicateDetector
from leadintake.services.email_client import EmailSendResult
from leadintake.services.identity_resolver import IdentityResolver
from leadintake.services.lead_intake_service import LeadIntakeService, speed_to_lead_ms
from leadintake.services.messaging import MessageService


async def _count(session, model, *where) -> int:
    query = select(func.count()).select_from(model)
    if where:
        query = query.where(*where)
    return (await session.execute(query)).scalar()


@pytest.fixture
def make_service(db_session, email_client, email_settings):
    def _make(send_intro=True, detector=None, message_service=None):
        lead_repo = LeadRepository(db_session)
        return LeadIntakeService(
            lead_repo=lead_repo,
            duplicate_detector=detector
            or DuplicateDetector(lead_repo, DuplicateLeadRepository(db_session)),
            identity_resolver=IdentityResolver(CustomerRepository(db_session)),
            message_service=message_service
            or MessageService(MessageRepository(db_session), email_client, email_settings),
            send_intro=send_intro,
        )

    return _make


class TestSpeedToLead:
    def test_none_when_not_processed(self):
        assert speed_to_lead_ms(None, None) is None

    def test_milliseconds(self):
        received = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert speed_to_lead_ms(received, received + timedelta(seconds=1.5)) == 1500


class TestNewLead:
    @pytest.mark.asyncio
    async def test_new_lead_is_processed_when_email_sent(
        self, db_session, make_service, make_payload
    ):
        payload = AngiLeadPayload.model_validate(make_payload())

        response = await make_service().intake(payload)

        assert response.is_duplicate is False
        assert response.email_sent is True
        assert response.speed_to_lead_ms >= 0
        assert response.message_id is not None
        lead = await db_session.get(Lead, response.lead_id)
        assert lead.status == "processed"
        assert lead.processed_at is not None
        assert lead.user_id == response.user_id
        assert lead.correlation_id == payload.correlation_id
        assert lead.address_line2 is None
        message = await db_session.get(Message, response.message_id)
        assert message.status == "sent"

    @pytest.mark.asyncio
    async def test_failed_send_leaves_lead_pending(
        self, db_session, make_service, make_payload, email_client
    ):
        email_client.send = AsyncMock(
            return_value=EmailSendResult(success=False, error="provider down")
        )
        payload = AngiLeadPayload.model_validate(make_payload())

        response = await make_service().intake(payload)

        assert response.email_sent is False
        lead = await db_session.get(Lead, response.lead_id)
        assert lead.status == "pending"
        assert lead.processed_at is not None
        message = await db_session.get(Message, response.message_id)
        assert message.status == "failed"

    @pytest.mark.asyncio
    async def test_unconfigured_transport_leaves_lead_pending(
        self, db_session, make_service, make_payload, email_client
    ):
        email_client.is_configured = False
        payload = AngiLeadPayload.model_validate(make_payload())

        response = await make_service().intake(payload)

        assert response.email_sent is False
        lead = await db_session.get(Lead, response.lead_id)
        assert lead.status == "pending"
        message = await db_session.get(Message, response.message_id)
        assert message.status == "draft"

    @pytest.mark.asyncio
    async def test_messaging_exception_does_not_fail_intake(
        self, db_session, make_service, make_payload
    ):
        broken = AsyncMock(spec=MessageService)
        broken.draft_intro = AsyncMock(side_effect=RuntimeError("template exploded"))
        payload = AngiLeadPayload.model_validate(make_payload())

        response = await make_service(message_service=broken).intake(payload)

        assert response.is_duplicate is False
        assert response.email_sent is False
        assert response.message_id is None
        lead = await db_session.get(Lead, response.lead_id)
        assert lead.status == "pending"
        assert lead.processed_at is not None

    @pytest.mark.asyncio
    async def test_transport_exception_still_reports_draft(
        self, db_session, make_service, make_payload, email_client
    ):
        email_client.send = AsyncMock(side_effect=RuntimeError("boom"))
        payload = AngiLeadPayload.model_validate(make_payload())

        response = await make_service().intake(payload)

        assert response.email_sent is False
        assert response.message_id is not None
        drafts = (
            await db_session.execute(
                select(Message).where(Message.lead_id == response.lead_id)
            )
        ).scalars().all()
        assert [m.id for m in drafts] == [response.message_id]
        assert drafts[0].status == "failed"
        lead = await db_session.get(Lead, response.lead_id)
        assert lead.status == "pending"

    @pytest.mark.asyncio
    async def test_draft_only_policy(
        self, db_session, make_service, make_payload, email_client
    ):
        payload = AngiLeadPayload.model_validate(make_payload())

        response = await make_service(send_intro=False).intake(payload)

        assert response.email_sent is False
        email_client.send.assert_not_awaited()
        lead = await db_session.get(Lead, response.lead_id)
        assert lead.status == "pending"
        message = await db_session.get(Message, response.message_id)
        assert message.status == "draft"

    @pytest.mark.asyncio
    async def test_same_email_reuses_customer(
        self, db_session, make_service, make_payload
    ):
        service = make_service()
        first = await service.intake(
            AngiLeadPayload.model_validate(make_payload(Email="a@x.com"))
        )
        second = await service.intake(
            AngiLeadPayload.model_validate(
                make_payload(Email="a@x.com", PhoneNumber="317-555-0199")
            )
        )

        assert first.lead_id != second.lead_id
        assert first.user_id == second.user_id
        assert await _count(db_session, Customer) == 1


class TestDuplicates:
    @pytest.mark.asyncio
    async def test_replay_returns_original(
        self, db_session, make_service, make_payload, email_client
    ):
        body = make_payload()
        service = make_service()
        original = await service.intake(AngiLeadPayload.model_validate(body))
        email_client.send.reset_mock()

        replay = await service.intake(
            AngiLeadPayload.model_validate({**body, "FirstName": "Someone"})
        )

        assert replay.is_duplicate is True
        assert replay.lead_id == original.lead_id
        assert replay.user_id == original.user_id
        assert replay.speed_to_lead_ms is None
        assert replay.message_id is None
        email_client.send.assert_not_awaited()
        correlation_id = UUID(body["CorrelationId"])
        assert await _count(db_session, Lead, Lead.correlation_id == correlation_id) == 1

    @pytest.mark.asyncio
    async def test_duplicate_does_not_touch_customer(
        self, db_session, make_service, make_payload
    ):
        body = make_payload()
        service = make_service()
        await service.intake(AngiLeadPayload.model_validate(body))

        await service.intake(
            AngiLeadPayload.model_validate({**body, "Email": "other@x.com"})
        )

        assert await _count(db_session, Customer) == 1

    @pytest.mark.parametrize("attempts", [1, 2, 5])
    @pytest.mark.asyncio
    async def test_idempotent_for_n_submissions(
        self, db_session, make_service, make_payload, attempts
    ):
        body = make_payload()
        service = make_service()

        for _ in range(attempts):
            await service.intake(AngiLeadPayload.model_validate(body))

        assert await _count(db_session, Lead) == 1
        assert await _count(db_session, DuplicateLead) == attempts - 1

    @pytest.mark.asyncio
    async def test_unique_violation_becomes_duplicate(
        self, db_session, make_service, make_payload
    ):
        """Two requests both pass the check; the second insert loses."""
        body = make_payload()
        winner = await make_service().intake(AngiLeadPayload.model_validate(body))

        blind = AsyncMock(spec=DuplicateDetector)
        blind.check = AsyncMock(return_value=DuplicateCheck(is_duplicate=False))
        blind.record_duplicate_attempt = AsyncMock()
        loser = await make_service(detector=blind).intake(
            AngiLeadPayload.model_validate(
                {**body, "Email": "late@x.com", "PhoneNumber": "317-555-0177"}
            )
        )

        assert loser.is_duplicate is True
        assert loser.lead_id == winner.lead_id
        assert loser.user_id == winner.user_id
        blind.record_duplicate_attempt.assert_awaited_once()
        assert await _count(db_session, Lead) == 1
        # The loser's customer insert was rolled back with the lead.
        assert await _count(db_session, Customer) == 1

    @pytest.mark.asyncio
    async def test_fresh_correlation_ids_are_independent(
        self, make_service, make_payload
    ):
        service = make_service()
        a = await service.intake(AngiLeadPayload.model_validate(make_payload()))
        b = await service.intake(
            AngiLeadPayload.model_validate(make_payload(CorrelationId=str(uuid4())))
        )

        assert a.lead_id != b.lead_id
        assert b.is_duplicate is False
