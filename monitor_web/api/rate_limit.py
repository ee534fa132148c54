import logging

from prometheus_client import Counter
from slowapi import Limiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

_PROM_RATE_LIMIT = Counter(
    "monitor_web_rate_limit_exceeded_events",
    "Rate limit exceeded events (handler invocations)",
)

# Probes are identified by source address; counters live in process memory.
limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def increment_rate_limit_exceeded() -> None:
    _PROM_RATE_LIMIT.inc()
    logger.warning("Rate limit exceeded")
