"""
Rate limit component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class SubmissionCountPort(Protocol):
    """Persisted submission history, queried by visitor IP."""

    def count_by_ip_since(self, ip_address: str, since: datetime) -> int:
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
