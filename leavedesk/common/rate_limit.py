"""Rate limiting: slowapi per-endpoint limits and the login-attempt limiter.

``limiter`` is the module-level slowapi instance wired into the app in
main.py. ``LoginAttemptLimiter`` counts login attempts per caller identity
in a moving window backed by a ``limits`` storage; one instance lives on
``app.state`` and reaches the login route through ``get_login_limiter``.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import Request
from limits import RateLimitItemPerMinute
from limits.storage import MemoryStorage, Storage
from limits.strategies import MovingWindowRateLimiter
from slowapi import Limiter
from slowapi.util import get_remote_address

from leavedesk.common.exceptions import TooManyAttemptsException

logger = logging.getLogger(__name__)

# Default: 60 requests/minute per client IP for all endpoints.
# Individual routes can override with @limiter.limit("N/period").
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["60/minute"],
)


class LoginAttemptLimiter:
    """Moving-window attempt counter keyed by caller identity.

    Every attempt counts, successful or not. Once ``max_attempts`` hits
    are recorded inside the window, further attempts are refused until
    the oldest one expires.
    """

    namespace = "login"

    def __init__(
        self,
        max_attempts: int,
        window_minutes: int,
        storage: Optional[Storage] = None,
    ) -> None:
        self.item = RateLimitItemPerMinute(max_attempts, window_minutes)
        self.storage = storage or MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self.storage)

    def hit(self, identity: str) -> None:
        """Record one attempt for *identity*; raise 429 when over budget."""
        if self._strategy.hit(self.item, self.namespace, identity):
            return
        stats = self._strategy.get_window_stats(self.item, self.namespace, identity)
        retry_after = max(1, int(stats.reset_time - time.time()))
        logger.warning("Login attempts exhausted for %s (retry in %ss)", identity, retry_after)
        raise TooManyAttemptsException(retry_after=retry_after)

    def remaining(self, identity: str) -> int:
        stats = self._strategy.get_window_stats(self.item, self.namespace, identity)
        return stats.remaining

    def clear(self, identity: str) -> None:
        self._strategy.clear(self.item, self.namespace, identity)

    def reset(self) -> None:
        self.storage.reset()


def get_login_limiter(request: Request) -> LoginAttemptLimiter:
    """FastAPI dependency: the app-wide ``LoginAttemptLimiter``."""
    return request.app.state.login_limiter


def client_identity(request: Request) -> str:
    """Caller identity used for attempt counting (client address)."""
    return get_remote_address(request) or "unknown"
