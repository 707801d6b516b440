from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import UUID

import pytest

from storefront.adapters.clock import FrozenClock
from storefront.adapters.sqlite.migrator import SQLiteMigrator
from storefront.components.content import ContentFilters, ContentService
from storefront.components.forms import FormSubmissionService, SubmissionFilters
from storefront.components.rate_limit import SubmissionRateLimiter
from storefront.domain.entities import (
    ENTITY_CLASSES,
    PUBLISH_TYPES,
    SUBMISSION_STATUSES,
    Category,
    FormSubmission,
)
from storefront.rules.loader import load_rules

ROOT = Path(__file__).resolve().parents[1]


# --- In-memory fakes for the repository ports ---


class InMemoryContentRepo:
    def __init__(self, kind: str, clock: FrozenClock):
        self.kind = kind
        self.clock = clock
        self.items: dict[UUID, Any] = {}
        self.writes = 0

    def get_by_id(self, item_id):
        return self.items.get(item_id)

    def get_by_slug(self, slug):
        return next((e for e in self.items.values() if e.slug == slug), None)

    def slug_exists(self, slug, exclude_id=None):
        return any(e.slug == slug and e.id != exclude_id for e in self.items.values())

    def create(self, entity):
        now = self.clock.now_utc()
        entity = entity.model_copy(update={"created_at": now, "updated_at": now})
        self.items[entity.id] = entity
        self.writes += 1
        return entity

    def update_by_id(self, item_id, changes):
        existing = self.items.get(item_id)
        if existing is None:
            return None
        merged = {**existing.model_dump(), **changes, "updated_at": self.clock.now_utc()}
        entity = ENTITY_CLASSES[self.kind].model_validate(merged)
        self.items[item_id] = entity
        self.writes += 1
        return entity

    def delete_by_id(self, item_id):
        self.writes += 1
        return self.items.pop(item_id, None)

    def list(self, filters: ContentFilters):
        items = [
            e
            for e in self.items.values()
            if (not filters.publish_type or e.publish_type == filters.publish_type)
            and (not filters.search or filters.search.lower() in e.title.lower())
        ]
        items.sort(key=lambda e: e.created_at, reverse=filters.sort.startswith("-"))
        return items[filters.offset : filters.offset + filters.limit], len(items)

    def stats(self):
        counts = {t: 0 for t in PUBLISH_TYPES}
        for e in self.items.values():
            counts[e.publish_type] += 1
        counts["total"] = len(self.items)
        return counts


class InMemoryCategoryRepo:
    def __init__(self, categories=()):
        self.categories = {c.id: c for c in categories}

    def find_category_by_id(self, category_id):
        return self.categories.get(category_id)


class InMemorySubmissionRepo:
    def __init__(self, clock: FrozenClock):
        self.clock = clock
        self.items: dict[UUID, FormSubmission] = {}

    def create(self, submission):
        now = self.clock.now_utc()
        submission = submission.model_copy(update={"created_at": now, "updated_at": now})
        self.items[submission.id] = submission
        return submission

    def get_by_id(self, submission_id):
        return self.items.get(submission_id)

    def update_by_id(self, submission_id, changes):
        existing = self.items.get(submission_id)
        if existing is None:
            return None
        updated = FormSubmission.model_validate({**existing.model_dump(), **changes})
        self.items[submission_id] = updated
        return updated

    def delete_by_id(self, submission_id):
        return self.items.pop(submission_id, None)

    def _matching(self, filters: SubmissionFilters):
        return [
            s
            for s in self.items.values()
            if (not filters.type or s.type == filters.type)
            and (not filters.status or s.status == filters.status)
        ]

    def list(self, filters):
        items = self._matching(filters)
        return items[filters.offset : filters.offset + filters.limit], len(items)

    def find_for_export(self, filters):
        return sorted(self._matching(filters), key=lambda s: s.created_at, reverse=True)

    def count_by_ip_since(self, ip_address, since):
        return sum(
            1
            for s in self.items.values()
            if s.metadata.ip_address == ip_address and s.metadata.submitted_at >= since
        )

    def stats(self):
        by_status = {s: 0 for s in SUBMISSION_STATUSES}
        by_type: dict[str, int] = {}
        for s in self.items.values():
            by_status[s.status] += 1
            by_type[s.type] = by_type.get(s.type, 0) + 1
        return {"total": len(self.items), "by_status": by_status, "by_type": by_type}


# --- Fixtures ---


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 3, 2, 9, 0, 0, tzinfo=UTC))


@pytest.fixture
def blog_category():
    return Category(kind="blog", name="News", slug="news")


@pytest.fixture
def categories(blog_category):
    return InMemoryCategoryRepo([blog_category])


@pytest.fixture
def blog_repo(clock):
    return InMemoryContentRepo("blog_post", clock)


@pytest.fixture
def product_repo(clock):
    return InMemoryContentRepo("product", clock)


@pytest.fixture
def blog_service(blog_repo, categories, clock):
    return ContentService("blog_post", repo=blog_repo, categories=categories, clock=clock)


@pytest.fixture
def product_service(product_repo, clock):
    return ContentService(
        "product", repo=product_repo, categories=InMemoryCategoryRepo(), clock=clock
    )


@pytest.fixture
def submission_repo(clock):
    return InMemorySubmissionRepo(clock)


@pytest.fixture
def rate_limiter(submission_repo, clock):
    return SubmissionRateLimiter(submission_repo, clock, window_seconds=900, max_requests=5)


@pytest.fixture
def form_service(submission_repo, rate_limiter, clock):
    return FormSubmissionService(submission_repo, rate_limiter, clock)


@pytest.fixture
def contact_payload():
    return {
        "full_name": "Anna Svensson",
        "email": "  Anna.Svensson@Example.COM ",
        "country_code": "+46",
        "country_name": "Sweden",
        "phone": "70 123 45 67",
        "subject": "Question about training",
        "message": "Hello, I would like to know more about your courses.",
        "gdpr_consent": True,
    }


@pytest.fixture
def rules():
    return load_rules(ROOT / "rules.yaml")


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "storefront.db")
    SQLiteMigrator(path, ROOT / "migrations").run_migrations()
    return path
