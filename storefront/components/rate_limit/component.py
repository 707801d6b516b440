"""
Sliding-window rate limiter over persisted submissions.

No in-memory counters: the window is recomputed from the submission store
on every check, so limits survive restarts and are shared by every worker
that uses the same store.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from storefront.rules.models import RateLimitWindow

from .ports import SubmissionCountPort, TimePort

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 15 * 60
DEFAULT_MAX_REQUESTS = 5


class SubmissionRateLimiter:
    def __init__(
        self,
        repo: SubmissionCountPort,
        clock: TimePort,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        max_requests: int = DEFAULT_MAX_REQUESTS,
    ) -> None:
        self.repo = repo
        self.clock = clock
        self.window_seconds = window_seconds
        self.max_requests = max_requests

    @classmethod
    def from_rules(
        cls, repo: SubmissionCountPort, clock: TimePort, window: RateLimitWindow
    ) -> SubmissionRateLimiter:
        return cls(
            repo,
            clock,
            window_seconds=window.window_seconds,
            max_requests=window.max_requests,
        )

    def check_limit(self, ip_address: str) -> bool:
        """
        True if `ip_address` has fewer than `max_requests` submissions in
        the last `window_seconds`. Does not record anything.
        """
        if self.max_requests <= 0:
            return False

        since = self.clock.now_utc() - timedelta(seconds=self.window_seconds)
        count = self.repo.count_by_ip_since(ip_address, since)
        if count >= self.max_requests:
            logger.debug("Rate limit reached: %d submissions in window", count)
            return False
        return True
