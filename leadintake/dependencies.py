import logging
from typing import AsyncIterator, Optional

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from leadintake.core.cache import CacheService
from leadintake.core.config import settings
from leadintake.core.database import get_db
from leadintake.repositories.customer_repository import CustomerRepository
from leadintake.repositories.duplicate_lead_repository import DuplicateLeadRepository
from leadintake.repositories.lead_repository import LeadRepository
from leadintake.repositories.message_repository import MessageRepository
from leadintake.services.duplicate_detector import DuplicateDetector
from leadintake.services.email_client import EmailSettings, ResendEmailClient
from leadintake.services.identity_resolver import IdentityResolver
from leadintake.services.lead_intake_service import LeadIntakeService
from leadintake.services.lead_query_service import LeadQueryService
from leadintake.services.messaging import MessageService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Redis client factory
# ---------------------------------------------------------------------------


async def get_redis_client() -> AsyncIterator[Optional[Redis]]:
    """Yield an async Redis client, or ``None`` when Redis is unreachable."""
    if not settings.REDIS_URL:
        yield None
        return

    client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except Exception:
        logger.warning("Redis unavailable – caching disabled for this request")
        await client.aclose()
        yield None
        return

    try:
        yield client
    finally:
        await client.aclose()


async def get_cache_service(
    redis_client: Optional[Redis] = Depends(get_redis_client),
) -> CacheService:
    """Build a :class:`CacheService` backed by the request's Redis client."""
    return CacheService(redis_client=redis_client)


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_customer_repo(db: AsyncSession = Depends(get_db)) -> CustomerRepository:
    return CustomerRepository(db)


async def get_lead_repo(db: AsyncSession = Depends(get_db)) -> LeadRepository:
    return LeadRepository(db)


async def get_message_repo(db: AsyncSession = Depends(get_db)) -> MessageRepository:
    return MessageRepository(db)


async def get_duplicate_repo(
    db: AsyncSession = Depends(get_db),
) -> DuplicateLeadRepository:
    return DuplicateLeadRepository(db)


# ---------------------------------------------------------------------------
# Email transport
# ---------------------------------------------------------------------------


def get_email_settings() -> EmailSettings:
    return EmailSettings.from_settings(settings)


def get_email_client(
    email_settings: EmailSettings = Depends(get_email_settings),
) -> ResendEmailClient:
    return ResendEmailClient(email_settings)


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_identity_resolver(
    customer_repo: CustomerRepository = Depends(get_customer_repo),
) -> IdentityResolver:
    return IdentityResolver(customer_repo)


async def get_duplicate_detector(
    lead_repo: LeadRepository = Depends(get_lead_repo),
    duplicate_repo: DuplicateLeadRepository = Depends(get_duplicate_repo),
    cache: CacheService = Depends(get_cache_service),
) -> DuplicateDetector:
    return DuplicateDetector(lead_repo, duplicate_repo, cache=cache)


async def get_message_service(
    message_repo: MessageRepository = Depends(get_message_repo),
    email_client: ResendEmailClient = Depends(get_email_client),
    email_settings: EmailSettings = Depends(get_email_settings),
) -> MessageService:
    return MessageService(message_repo, email_client, email_settings)


async def get_lead_intake_service(
    lead_repo: LeadRepository = Depends(get_lead_repo),
    duplicate_detector: DuplicateDetector = Depends(get_duplicate_detector),
    identity_resolver: IdentityResolver = Depends(get_identity_resolver),
    message_service: MessageService = Depends(get_message_service),
    cache: CacheService = Depends(get_cache_service),
) -> LeadIntakeService:
    """Build a :class:`LeadIntakeService` with injected dependencies."""
    return LeadIntakeService(
        lead_repo=lead_repo,
        duplicate_detector=duplicate_detector,
        identity_resolver=identity_resolver,
        message_service=message_service,
        cache=cache,
        send_intro=settings.SEND_INTRO_ON_INTAKE,
    )


async def get_lead_query_service(
    lead_repo: LeadRepository = Depends(get_lead_repo),
    message_repo: MessageRepository = Depends(get_message_repo),
    cache: CacheService = Depends(get_cache_service),
) -> LeadQueryService:
    return LeadQueryService(lead_repo, message_repo, cache=cache)
