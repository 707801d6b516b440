"""
Form submission pipeline.

Public intake:
    validate -> rate limit -> strip markup -> normalize -> stamp consent -> persist

A submission is stored only if its schema validates, the visitor IP is under
the rate limit, and GDPR consent was given. Status changes are admin-only.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable, Mapping
from typing import Any
from uuid import UUID

import pydantic

from storefront.domain.entities import (
    SUBMISSION_STATUSES,
    FormSubmission,
    SubmissionMetadata,
)
from storefront.domain.errors import (
    BadRequestError,
    NotFoundError,
    TooManyRequestsError,
    ValidationError,
)
from storefront.domain.sanitize import strip_html

from .models import (
    FORM_SCHEMAS,
    FREE_TEXT_FIELDS,
    FormsConfig,
    SubmissionFilters,
    SubmissionPage,
    SubmissionStats,
)
from .ports import FormSubmissionRepoPort, RateLimiterPort, TimePort

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."

CALLBACK_NAME = "Callback request"

CSV_COLUMNS: list[tuple[str, str]] = [
    ("ID", "id"),
    ("Type", "type"),
    ("Status", "status"),
    ("Full Name", "full_name"),
    ("Email", "email"),
    ("Country Code", "country_code"),
    ("Country", "country_name"),
    ("Phone", "phone"),
    ("Company", "company_name"),
    ("Corporation Number", "corporation_number"),
    ("Subject", "subject"),
    ("Message", "message"),
    ("Product Name", "product_name"),
    ("Help Type", "help_type"),
    ("GDPR Consent", "gdpr_consent"),
    ("Created At", "created_at"),
    ("IP Address", "ip_address"),
]


def collect_errors(exc: pydantic.ValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into [{"field", "message"}], one per failure."""
    issues: list[dict[str, str]] = []
    for err in exc.errors():
        name = ".".join(str(part) for part in err["loc"]) or "__root__"
        message = err["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        issues.append({"field": name, "message": message})
    return issues


class FormSubmissionService:
    """Visitor form intake plus the admin inbox operations."""

    def __init__(
        self,
        repo: FormSubmissionRepoPort,
        rate_limiter: RateLimiterPort,
        clock: TimePort,
        config: FormsConfig | None = None,
    ) -> None:
        self.repo = repo
        self.rate_limiter = rate_limiter
        self.clock = clock
        self.config = config or FormsConfig()

    # --- Public intake ---

    def submit(
        self,
        form_type: str,
        raw_input: Mapping[str, Any],
        metadata: SubmissionMetadata,
    ) -> FormSubmission:
        """
        Validate and store a visitor submission.

        Raises:
            BadRequestError: unknown or disabled form type
            ValidationError: schema failures (every failing field listed)
            TooManyRequestsError: IP over the submission limit
        """
        schema = FORM_SCHEMAS.get(form_type)  # type: ignore[call-overload]
        if schema is None or form_type not in self.config.enabled_types:
            raise BadRequestError(f'Unsupported form type "{form_type}"')

        try:
            valid = schema.model_validate(dict(raw_input))
        except pydantic.ValidationError as e:
            raise ValidationError("Validation failed", errors=collect_errors(e)) from e

        if not self.rate_limiter.check_limit(metadata.ip_address):
            logger.warning("Form submission rate limited: type=%s", form_type)
            raise TooManyRequestsError(RATE_LIMIT_MESSAGE)

        data = self._clean(valid.model_dump())
        if form_type == "callback_request":
            data.setdefault("full_name", CALLBACK_NAME)

        now = self.clock.now_utc()
        submission = FormSubmission(
            **data,
            type=form_type,
            status="new",
            gdpr_consent_timestamp=now,
            gdpr_consent_version=self.config.gdpr_consent_version,
            metadata=metadata.model_copy(update={"submitted_at": now}),
        )
        created = self.repo.create(submission)

        logger.info("Form submission created: %s (type=%s)", created.id, form_type)
        return created

    @staticmethod
    def _clean(data: dict[str, Any]) -> dict[str, Any]:
        for name in FREE_TEXT_FIELDS:
            if name in data and data[name] is not None:
                data[name] = strip_html(data[name]) or None
        if data.get("email"):
            data["email"] = data["email"].strip().lower()
        # Required strings on the record itself cannot be None
        for name in ("full_name", "phone", "country_name", "email", "country_code"):
            if data.get(name) is None:
                data.pop(name, None)
        return data

    # --- Admin ---

    def get(self, submission_id: UUID) -> FormSubmission:
        submission = self.repo.get_by_id(submission_id)
        if submission is None:
            raise NotFoundError("Submission not found")
        return submission

    def list(self, filters: SubmissionFilters | None = None) -> SubmissionPage:
        filters = filters or SubmissionFilters()
        items, total = self.repo.list(filters)
        return SubmissionPage(items=items, total=total, limit=filters.limit, offset=filters.offset)

    def update_status(self, submission_id: UUID, status: str, acting_user_id: str) -> FormSubmission:
        changes = self._status_changes(status, acting_user_id)
        updated = self.repo.update_by_id(submission_id, changes)
        if updated is None:
            raise NotFoundError("Submission not found")
        logger.info(
            "Submission %s status updated to %s by user %s", submission_id, status, acting_user_id
        )
        return updated

    def bulk_update_status(
        self, ids: Iterable[str | UUID], status: str, acting_user_id: str
    ) -> int:
        """
        Set `status` on every resolvable id. Unknown or malformed ids are
        skipped; the count of updated submissions is returned.
        """
        ids = list(ids)
        if not ids:
            raise BadRequestError("No submission IDs provided")
        changes = self._status_changes(status, acting_user_id)

        count = 0
        for raw in ids:
            try:
                submission_id = raw if isinstance(raw, UUID) else UUID(str(raw))
            except ValueError:
                continue
            if self.repo.update_by_id(submission_id, changes) is not None:
                count += 1

        logger.info(
            "Bulk status update: %d of %d submissions set to %s by user %s",
            count,
            len(ids),
            status,
            acting_user_id,
        )
        return count

    def delete(self, submission_id: UUID) -> None:
        if self.repo.delete_by_id(submission_id) is None:
            raise NotFoundError("Submission not found")
        logger.info("Submission %s deleted", submission_id)

    def stats(self) -> SubmissionStats:
        raw = self.repo.stats()
        by_status = {s: int(raw.get("by_status", {}).get(s, 0)) for s in SUBMISSION_STATUSES}
        return SubmissionStats(
            total=int(raw.get("total", 0)),
            by_status=by_status,
            by_type=dict(raw.get("by_type", {})),
        )

    def export_csv(self, filters: SubmissionFilters | None = None) -> str:
        """Render matching submissions as CSV with a header row."""
        submissions = self.repo.find_for_export(filters or SubmissionFilters())

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow([header for header, _ in CSV_COLUMNS])
        for s in submissions:
            writer.writerow([_csv_value(s, attr) for _, attr in CSV_COLUMNS])

        logger.info("Exported %d submissions to CSV", len(submissions))
        return buffer.getvalue()

    def _status_changes(self, status: str, acting_user_id: str) -> dict[str, Any]:
        if status not in SUBMISSION_STATUSES:
            raise BadRequestError(f'Invalid status "{status}"')
        changes: dict[str, Any] = {"status": status}
        now = self.clock.now_utc()
        if status == "read":
            changes.update(read_at=now, read_by=acting_user_id)
        elif status == "archived":
            changes.update(archived_at=now, archived_by=acting_user_id)
        return changes


def _csv_value(submission: FormSubmission, attr: str) -> str:
    if attr == "ip_address":
        return submission.metadata.ip_address
    value = getattr(submission, attr)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
