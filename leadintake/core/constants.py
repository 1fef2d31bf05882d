from typing import FrozenSet

from leadintake.schemas.common import (
    LeadStatus,
    MessageChannel,
    MessageDirection,
    MessageStatus,
    RebateStatus,
)


def _check_clause(column: str, values: FrozenSet[str]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in sorted(values))})"


LEAD_STATUSES: FrozenSet[str] = frozenset(s.value for s in LeadStatus)
MESSAGE_CHANNELS: FrozenSet[str] = frozenset(c.value for c in MessageChannel)
MESSAGE_DIRECTIONS: FrozenSet[str] = frozenset(d.value for d in MessageDirection)
MESSAGE_STATUSES: FrozenSet[str] = frozenset(s.value for s in MessageStatus)
REBATE_STATUSES: FrozenSet[str] = frozenset(s.value for s in RebateStatus)

LEAD_STATUS_CHECK_CLAUSE: str = _check_clause("status", LEAD_STATUSES)
MESSAGE_CHANNEL_CHECK_CLAUSE: str = _check_clause("channel", MESSAGE_CHANNELS)
MESSAGE_DIRECTION_CHECK_CLAUSE: str = _check_clause("direction", MESSAGE_DIRECTIONS)
MESSAGE_STATUS_CHECK_CLAUSE: str = _check_clause("status", MESSAGE_STATUSES)
REBATE_STATUS_CHECK_CLAUSE: str = (
    "rebate_status IS NULL OR " + _check_clause("rebate_status", REBATE_STATUSES)
)

# Channels that have a working send path out of the draft state.
SENDABLE_CHANNELS: FrozenSet[str] = frozenset({MessageChannel.email.value})

# Label stored on every DuplicateLead row produced by intake.
MATCH_CRITERIA_CORRELATION_ID: str = "correlation_id"

# Listing pagination bounds
DEFAULT_PAGE_LIMIT: int = 50
MAX_PAGE_LIMIT: int = 100

# Cache keys
CORRELATION_CACHE_PREFIX: str = "lead_correlation"
STATE_STATS_CACHE_KEY: str = "lead_stats:by_state"
