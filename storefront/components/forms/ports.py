"""
Form submission component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from storefront.domain.entities import FormSubmission

from .models import SubmissionFilters


class FormSubmissionRepoPort(Protocol):
    """Repository interface for visitor form submissions."""

    def create(self, submission: FormSubmission) -> FormSubmission:
        ...

    def get_by_id(self, submission_id: UUID) -> FormSubmission | None:
        ...

    def update_by_id(
        self, submission_id: UUID, changes: dict[str, Any]
    ) -> FormSubmission | None:
        """Apply a partial update. Returns None if the submission does not exist."""
        ...

    def delete_by_id(self, submission_id: UUID) -> FormSubmission | None:
        ...

    def list(self, filters: SubmissionFilters) -> tuple[list[FormSubmission], int]:
        """Page of submissions matching filters plus the total match count."""
        ...

    def find_for_export(self, filters: SubmissionFilters) -> list[FormSubmission]:
        """Every submission matching filters, newest first, unpaged."""
        ...

    def count_by_ip_since(self, ip_address: str, since: datetime) -> int:
        ...

    def stats(self) -> dict[str, Any]:
        """{"total": int, "by_status": {...}, "by_type": {...}}"""
        ...


class RateLimiterPort(Protocol):
    def check_limit(self, ip_address: str) -> bool:
        """True if another submission from this IP is allowed now."""
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
