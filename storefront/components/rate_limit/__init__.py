"""
Rate limit component - per-IP submission limits.
"""

from .component import DEFAULT_MAX_REQUESTS, DEFAULT_WINDOW_SECONDS, SubmissionRateLimiter
from .ports import SubmissionCountPort, TimePort

__all__ = [
    "SubmissionRateLimiter",
    "DEFAULT_WINDOW_SECONDS",
    "DEFAULT_MAX_REQUESTS",
    "SubmissionCountPort",
    "TimePort",
]
