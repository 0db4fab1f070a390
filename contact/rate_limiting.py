"""
Rate Limiting Utilities for Contact Form

Prevents spam and abuse of the contact form with an in-memory sliding
window per client. State lives in the limiter instance for the lifetime of
the process, so limits only hold within a single worker process.
"""
import logging
import math
import threading
from dataclasses import dataclass
from datetime import timedelta

from django.utils import timezone

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = 'unknown'


def get_client_ip(headers):
    """
    Get the client identifier from request headers.

    Uses the first X-Forwarded-For entry, then X-Client-IP, then 'unknown'.
    Header names are matched case-insensitively.
    """
    lowered = {key.lower(): value for key, value in headers.items()}

    x_forwarded_for = lowered.get('x-forwarded-for') or ''
    first = x_forwarded_for.split(',')[0].strip()
    if first:
        return first

    client_ip = (lowered.get('x-client-ip') or '').strip()
    return client_ip or UNKNOWN_CLIENT


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: int = 0


class SlidingWindowRateLimiter:
    """
    Admits at most `max_requests` events per client in any trailing `window`.

    Every check runs its lookup, prune, count and append under one lock.
    Timestamps older than the window are pruned lazily when their client
    is checked. When a new client would grow the table beyond
    `max_tracked_clients`, clients with no admissions inside the window are
    evicted first; clients still inside their window are always kept, so
    the bound is soft.

    Usage:
        limiter = SlidingWindowRateLimiter(max_requests=5, window=timedelta(minutes=10))
        if not limiter.admit('203.0.113.7'):
            ...
    """

    def __init__(self, max_requests=5, window=timedelta(minutes=10), max_tracked_clients=10000):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window <= timedelta(0):
            raise ValueError("window must be positive")

        self.max_requests = max_requests
        self.window = window
        self.max_tracked_clients = max_tracked_clients
        self._buckets = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config):
        return cls(
            max_requests=config.rate_limit_max,
            window=config.rate_limit_window,
            max_tracked_clients=config.rate_limit_max_clients,
        )

    @property
    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._buckets)

    def admit(self, client_id, now=None) -> bool:
        """Record an admission for client_id if allowed. Returns False when rate limited."""
        return self.check(client_id, now).allowed

    def check(self, client_id, now=None) -> RateLimitDecision:
        """
        Check and record an admission for client_id.

        Args:
            client_id: Opaque client key (usually an IP address)
            now: Aware datetime of the request (defaults to timezone.now())

        Returns:
            RateLimitDecision with retry_after seconds when rejected
        """
        now = now or timezone.now()
        cutoff = now - self.window

        with self._lock:
            bucket = self._buckets.get(client_id)
            if bucket is None:
                if len(self._buckets) >= self.max_tracked_clients:
                    self._evict_idle(cutoff)
                bucket = []
                self._buckets[client_id] = bucket

            bucket[:] = [ts for ts in bucket if ts >= cutoff]

            if len(bucket) >= self.max_requests:
                retry_after = (min(bucket) + self.window - now).total_seconds()
                return RateLimitDecision(allowed=False, retry_after=max(1, math.ceil(retry_after)))

            bucket.append(now)
            return RateLimitDecision(allowed=True)

    def reset(self):
        """Forget all recorded admissions."""
        with self._lock:
            self._buckets.clear()

    def _evict_idle(self, cutoff):
        # Caller holds self._lock
        idle = [
            client_id for client_id, bucket in self._buckets.items()
            if not bucket or max(bucket) < cutoff
        ]
        for client_id in idle:
            del self._buckets[client_id]

        if idle:
            logger.info(f"Evicted {len(idle)} idle rate limit entries")
        if len(self._buckets) >= self.max_tracked_clients:
            logger.warning(
                f"Rate limit table holds {len(self._buckets)} active clients, "
                f"above the configured bound of {self.max_tracked_clients}"
            )
