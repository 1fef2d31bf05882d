from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from leadintake.core.cache import CacheService
from leadintake.core.exceptions import DuplicateRecordNotFoundError
from leadintake.models.customer import Customer
from leadintake.models.duplicate_lead import DuplicateLead
from leadintake.models.lead import Lead
from leadintake.repositories.duplicate_lead_repository import DuplicateLeadRepository
from leadintake.repositories.lead_repository import LeadRepository
from leadintake.schemas.common import RebateStatus
from leadintake.services.duplicate_detector import DuplicateDetector


async def _seed_lead(session, correlation_id=None) -> Lead:
    customer = Customer(email=f"{uuid4().hex}@x.com")
    session.add(customer)
    await session.flush()
    lead = Lead(
        user_id=customer.id,
        source="Angi",
        correlation_id=correlation_id,
        status="pending",
        received_at=datetime.now(timezone.utc),
    )
    session.add(lead)
    await session.commit()
    return lead


def _detector(session, cache=None) -> DuplicateDetector:
    return DuplicateDetector(
        LeadRepository(session), DuplicateLeadRepository(session), cache=cache
    )


class TestDuplicateCheck:
    @pytest.mark.asyncio
    async def test_unknown_correlation_id_is_not_duplicate(self, db_session):
        check = await _detector(db_session).check(uuid4())

        assert check.is_duplicate is False
        assert check.original_lead is None

    @pytest.mark.asyncio
    async def test_existing_correlation_id_is_duplicate(self, db_session):
        correlation_id = uuid4()
        lead = await _seed_lead(db_session, correlation_id)

        check = await _detector(db_session).check(correlation_id)

        assert check.is_duplicate is True
        assert check.original_lead.id == lead.id

    @pytest.mark.asyncio
    async def test_missing_correlation_id_is_never_duplicate(self, db_session):
        await _seed_lead(db_session, None)

        check = await _detector(db_session).check(None)

        assert check.is_duplicate is False

    @pytest.mark.asyncio
    async def test_db_hit_is_cached(self, db_session, mock_redis, mock_cache):
        correlation_id = uuid4()
        lead = await _seed_lead(db_session, correlation_id)

        await _detector(db_session, mock_cache).check(correlation_id)

        mock_redis.setex.assert_awaited_once()
        key, _ttl, value = mock_redis.setex.await_args.args
        assert key == f"lead_correlation:{correlation_id}"
        assert value == str(lead.id)

    @pytest.mark.asyncio
    async def test_stale_cache_entry_is_not_trusted(self, db_session, mock_redis):
        """A cached id that no longer matches the database is ignored."""
        mock_redis.get = AsyncMock(return_value=str(uuid4()))
        detector = _detector(db_session, CacheService(redis_client=mock_redis))

        check = await detector.check(uuid4())

        assert check.is_duplicate is False

    @pytest.mark.asyncio
    async def test_redis_failure_falls_back_to_database(self, db_session, mock_redis):
        correlation_id = uuid4()
        await _seed_lead(db_session, correlation_id)
        mock_redis.get = AsyncMock(side_effect=ConnectionError("down"))
        detector = _detector(db_session, CacheService(redis_client=mock_redis))

        check = await detector.check(correlation_id)

        assert check.is_duplicate is True


class TestRebateTracking:
    @pytest.mark.asyncio
    async def test_record_duplicate_attempt(self, db_session):
        lead = await _seed_lead(db_session, uuid4())

        record = await _detector(db_session).record_duplicate_attempt(
            lead.id, lead.correlation_id
        )

        assert record.original_lead_id == lead.id
        assert record.duplicate_lead_id is None
        assert record.match_criteria == "correlation_id"
        assert record.rebate_claimed is False
        assert record.rebate_status is None

    @pytest.mark.asyncio
    async def test_unclaimed_filter_and_mark_claimed(self, db_session):
        lead = await _seed_lead(db_session, uuid4())
        detector = _detector(db_session)
        first = await detector.record_duplicate_attempt(lead.id, lead.correlation_id)
        second = await detector.record_duplicate_attempt(lead.id, lead.correlation_id)

        claimed = await detector.mark_rebate_claimed(first.id, RebateStatus.submitted)
        unclaimed = await detector.get_duplicates_for_rebate(unclaimed=True)

        assert claimed.rebate_claimed is True
        assert claimed.rebate_status == "submitted"
        assert [r.id for r in unclaimed] == [second.id]

    @pytest.mark.asyncio
    async def test_detected_range_filter(self, db_session):
        lead = await _seed_lead(db_session, uuid4())
        now = datetime.now(timezone.utc)
        db_session.add_all(
            [
                DuplicateLead(
                    original_lead_id=lead.id,
                    match_criteria="correlation_id",
                    detected_at=now - timedelta(days=10),
                ),
                DuplicateLead(
                    original_lead_id=lead.id,
                    match_criteria="correlation_id",
                    detected_at=now,
                ),
            ]
        )
        await db_session.commit()

        recent = await _detector(db_session).get_duplicates_for_rebate(
            detected_from=now - timedelta(days=1)
        )

        assert len(recent) == 1

    @pytest.mark.asyncio
    async def test_mark_unknown_record_raises(self, db_session):
        with pytest.raises(DuplicateRecordNotFoundError):
            await _detector(db_session).mark_rebate_claimed(
                uuid4(), RebateStatus.approved
            )
