"""API-layer dependency functions.

Re-exports the dependency factories from ``leadintake.dependencies`` so
that endpoint modules only need to import from ``leadintake.api.deps``.
"""

from leadintake.dependencies import (
    # Repository factories
    get_customer_repo,
    get_lead_repo,
    get_message_repo,
    get_duplicate_repo,
    # Service factories
    get_identity_resolver,
    get_duplicate_detector,
    get_message_service,
    get_lead_intake_service,
    get_lead_query_service,
    # Email transport
    get_email_settings,
    get_email_client,
    # Redis
    get_redis_client,
    get_cache_service,
)

__all__ = [
    "get_customer_repo",
    "get_lead_repo",
    "get_message_repo",
    "get_duplicate_repo",
    "get_identity_resolver",
    "get_duplicate_detector",
    "get_message_service",
    "get_lead_intake_service",
    "get_lead_query_service",
    "get_email_settings",
    "get_email_client",
    "get_redis_client",
    "get_cache_service",
]
