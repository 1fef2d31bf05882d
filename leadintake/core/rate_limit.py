from slowapi import Limiter
from slowapi.util import get_remote_address

from leadintake.core.config import settings

# Keyed by client IP; the partner posts from a small, fixed set of hosts.
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
