"""
Fixed-window rate limiting on top of the status store.

Each user gets one counter per `window_ms` slice of wall-clock time, stored
under `rl:<user_id>:<window_index>`. A new window means a new key, so counts
reset at window boundaries; the old key expires a few seconds after its
window closes.
"""
import logging
import math
from typing import Callable, Optional

from clone_api.adapters.status_store import BaseStatusStore
from clone_api.config.settings import Settings
from clone_api.utils.clock import now_ms

logger = logging.getLogger(__name__)

DEFAULT_MAX_COUNT = 10
DEFAULT_WINDOW_MS = 60_000
EXPIRY_GRACE_SECONDS = 5


class FixedWindowRateLimiter:
    def __init__(
        self,
        store: BaseStatusStore,
        max_count: int = DEFAULT_MAX_COUNT,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.store = store
        self.max_count = max_count
        self.window_ms = window_ms
        self.clock = clock or now_ms

    @classmethod
    def from_settings(cls, store: BaseStatusStore, settings: Settings) -> "FixedWindowRateLimiter":
        return cls(
            store,
            max_count=settings.rate_limit_max_count,
            window_ms=settings.rate_limit_window_ms,
        )

    @property
    def ttl_seconds(self) -> int:
        return math.ceil(self.window_ms / 1000) + EXPIRY_GRACE_SECONDS

    def bucket_key(self, user_id: str, at_ms: Optional[int] = None) -> str:
        at_ms = self.clock() if at_ms is None else at_ms
        return f"rl:{user_id}:{at_ms // self.window_ms}"

    async def allow(self, user_id: str) -> bool:
        """Count one request for `user_id`; False once the window's quota is spent."""
        key = self.bucket_key(user_id)
        allowed = await self.store.incr_if_below(key, self.max_count, self.ttl_seconds)
        if not allowed:
            logger.warning("Rate limit reached for user %s (bucket %s)", user_id, key)
        return allowed
