"""
Content service - blog post and product lifecycle.

State machine (publish_type):
- draft | pending | private -> publish   (gated by the publish validator)
- any state -> draft | pending | private (always allowed)
- no terminal state; delete is a hard delete

Guards:
- G1: slug unique per kind after every write; an explicit slug that is
  taken is a conflict, a generated slug is suffixed until free
- G2: every category reference resolves at write time and again at publish
- G3: rich text is sanitized before it is stored
- G4: an entity only ever persists as `publish` if the candidate state has
  no error-level findings; nothing is written when the gate fails
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel

from storefront.components.publish import split_issues, validate_for_publish
from storefront.components.publish.models import PublishIssue
from storefront.domain.entities import (
    ENTITY_CLASSES,
    PUBLISH_TYPES,
    RICH_TEXT_FIELDS,
    BlogPost,
    ContentKind,
    IdRef,
    PopulatedRef,
    Product,
    PublishType,
)
from storefront.domain.errors import (
    BadRequestError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from storefront.domain.sanitize import DEFAULT_CONFIG, SanitizerConfig, sanitize_html
from storefront.domain.slugs import (
    DEFAULT_MAX_LENGTH,
    generate_slug,
    generate_unique_slug,
    normalize_slug,
)

from .models import ContentFields, ContentFilters, ContentPage, PublishResult
from .ports import CategoryLookupPort, ContentRepoPort, TimePort

logger = logging.getLogger(__name__)

Entity = BlogPost | Product

LABELS: dict[ContentKind, str] = {
    "blog_post": "Blog post",
    "product": "Product",
}

UNTITLED_SLUG = "untitled"


def resolve_category_id(ref: Any) -> UUID:
    """
    Extract a category id from whatever shape the caller holds.

    Accepts a UUID, an id string, IdRef / PopulatedRef, or a mapping with
    "_id", "id" or "value". Raises BadRequestError otherwise.
    """
    raw: Any = ref
    if isinstance(ref, (IdRef, PopulatedRef)):
        raw = ref.id
    elif isinstance(ref, Mapping):
        raw = ref.get("_id") or ref.get("id") or ref.get("value")

    if isinstance(raw, UUID):
        return raw
    if not raw or not isinstance(raw, str):
        raise BadRequestError("Invalid category id")
    try:
        return UUID(raw.strip())
    except ValueError as e:
        raise BadRequestError(f'Invalid category id "{raw}"') from e


class ContentService:
    """Lifecycle orchestration for one content kind."""

    def __init__(
        self,
        kind: ContentKind,
        repo: ContentRepoPort,
        categories: CategoryLookupPort,
        clock: TimePort,
        sanitizer: SanitizerConfig = DEFAULT_CONFIG,
        slug_max_length: int = DEFAULT_MAX_LENGTH,
    ) -> None:
        self.kind = kind
        self.repo = repo
        self.categories = categories
        self.clock = clock
        self.sanitizer = sanitizer
        self.slug_max_length = slug_max_length
        self._entity_cls = ENTITY_CLASSES[kind]
        self._label = LABELS[kind]

    # --- Reads ---

    def get(self, item_id: UUID) -> Entity:
        entity = self.repo.get_by_id(item_id)
        if entity is None:
            raise NotFoundError(f"{self._label} not found")
        return entity

    def get_by_slug(self, slug: str) -> Entity:
        """Admin lookup; no publish filter."""
        entity = self.repo.get_by_slug(normalize_slug(slug))
        if entity is None:
            raise NotFoundError(f"{self._label} not found")
        return entity

    def get_public_by_slug(self, slug: str) -> Entity:
        """Public lookup; only published (and, for products, visible) entities."""
        entity = self.repo.get_by_slug(normalize_slug(slug))
        if entity is None or entity.publish_type != "publish":
            raise NotFoundError(f"{self._label} not found")
        if isinstance(entity, Product) and entity.visibility == "hidden":
            raise NotFoundError(f"{self._label} not found")
        return entity

    def list(self, filters: ContentFilters | None = None) -> ContentPage:
        filters = filters or ContentFilters()
        items, total = self.repo.list(filters)
        return ContentPage(items=items, total=total, limit=filters.limit, offset=filters.offset)

    def stats(self) -> dict[str, int]:
        return self.repo.stats()

    def preview_validation(self, item_id: UUID) -> list[PublishIssue]:
        """Run the publish checks without changing anything."""
        return self._publish_issues(self.get(item_id))

    # --- Writes ---

    def create(self, fields: ContentFields, author_id: str | None = None) -> Entity:
        """
        Create a new entity (draft unless the caller asks otherwise).

        Raises:
            ConflictError: explicit slug already in use
            BadRequestError: malformed or unknown category reference
            ValidationError: caller asked for `publish` and the gate fails
        """
        return self._create(fields, author_id).entity

    def create_and_publish(
        self, fields: ContentFields, author_id: str | None = None
    ) -> PublishResult:
        """Create straight into `publish`, returning the gate's warnings."""
        fields = fields.model_copy(update={"publish_type": "publish"})
        return self._create(fields, author_id)

    def _create(self, fields: ContentFields, author_id: str | None) -> PublishResult:
        """Validate, gate and persist a new entity; nothing is written on failure."""
        data = fields.model_dump(exclude_unset=True, exclude_none=True)

        data["slug"] = self._assign_slug(data.get("slug"), data.get("title", ""))
        if "categories" in data:
            data["categories"] = self._resolve_categories(data["categories"])
        self._sanitize_rich_text(data)

        data.setdefault("publish_type", "draft")
        data["author_id"] = author_id
        data["last_edited_by"] = author_id

        candidate = self._entity_cls.model_validate({**data, "id": uuid4()})

        warnings: list[PublishIssue] = []
        if candidate.publish_type == "publish":
            warnings = self._check_gate(candidate)
            candidate = candidate.model_copy(update={"published_at": self.clock.now_utc()})

        entity = self.repo.create(candidate)

        logger.info(
            "%s created: %s (slug=%s, publish_type=%s, warnings=%d)",
            self._label,
            entity.id,
            entity.slug,
            entity.publish_type,
            len(warnings),
        )
        return PublishResult(entity=entity, warnings=warnings)

    def update(
        self,
        item_id: UUID,
        patch: ContentFields,
        editor_id: str | None = None,
    ) -> Entity:
        """
        Apply a partial update.

        If the entity is (or is being moved to) `publish`, the candidate state
        must pass the publish gate before anything is written.
        """
        existing = self.get(item_id)
        changes = self._prepare_changes(existing, patch, editor_id)

        target = changes.get("publish_type", existing.publish_type)
        if target == "publish":
            return self._commit_publish(existing, changes).entity

        if "publish_type" in changes:
            changes["published_at"] = None

        updated = self._write(item_id, changes)
        logger.info("%s updated: %s (fields=%s)", self._label, item_id, sorted(changes))
        return updated

    def save_and_publish(
        self,
        item_id: UUID,
        patch: ContentFields,
        editor_id: str | None = None,
    ) -> PublishResult:
        """
        Update and publish as one action.

        Validation runs against the post-update candidate; on failure the
        entity is left exactly as it was.
        """
        existing = self.get(item_id)
        changes = self._prepare_changes(existing, patch, editor_id)
        return self._commit_publish(existing, changes)

    def publish(self, item_id: UUID) -> PublishResult:
        """
        Publish an entity.

        Raises ValidationError naming every blocking field; the entity keeps
        its prior state in that case.
        """
        existing = self.get(item_id)
        return self._commit_publish(existing, {})

    def unpublish(self, item_id: UUID) -> Entity:
        """Revert to draft. No validation required."""
        return self._set_publish_type(item_id, "draft")

    def submit_for_review(self, item_id: UUID) -> Entity:
        return self._set_publish_type(item_id, "pending")

    def set_private(self, item_id: UUID) -> Entity:
        return self._set_publish_type(item_id, "private")

    def update_publish_type(self, item_id: UUID, publish_type: str) -> Entity:
        if publish_type not in PUBLISH_TYPES:
            raise BadRequestError(f'Invalid publish type "{publish_type}"')
        if publish_type == "publish":
            return self.publish(item_id).entity
        return self._set_publish_type(item_id, publish_type)  # type: ignore[arg-type]

    def delete(self, item_id: UUID) -> None:
        deleted = self.repo.delete_by_id(item_id)
        if deleted is None:
            raise NotFoundError(f"{self._label} not found")
        logger.info("%s deleted: %s (%s)", self._label, item_id, deleted.title)

    def duplicate(self, item_id: UUID, editor_id: str | None = None) -> Entity:
        """Copy an entity into a new draft with a free `<slug>-copy` slug."""
        source = self.get(item_id)

        base = normalize_slug(f"{source.slug}-copy") or UNTITLED_SLUG
        slug = generate_unique_slug(base, self.repo.slug_exists)

        copy = source.model_copy(
            deep=True,
            update={
                "id": uuid4(),
                "title": f"{source.title} (Copy)",
                "slug": slug,
                "publish_type": "draft",
                "published_at": None,
                "seo": source.seo.model_copy(update={"canonical_url": ""}),
                "last_edited_by": editor_id,
            },
        )
        created = self.repo.create(copy)
        logger.info("%s duplicated: %s -> %s", self._label, item_id, created.id)
        return created

    # --- Internals ---

    def _assign_slug(self, requested: str | None, title: str) -> str:
        if requested:
            slug = normalize_slug(requested)
            if not slug:
                raise BadRequestError(f'Invalid slug "{requested}"')
            if self.repo.slug_exists(slug):
                raise ConflictError(f'Slug "{slug}" already exists')
            return slug

        base = generate_slug(title, self.slug_max_length) or UNTITLED_SLUG
        return generate_unique_slug(base, self.repo.slug_exists)

    def _resolve_categories(self, refs: list[Any]) -> list[UUID]:
        resolved: list[UUID] = []
        for ref in refs:
            category_id = resolve_category_id(ref)
            if self.categories.find_category_by_id(category_id) is None:
                raise BadRequestError(f'Category "{category_id}" not found')
            if category_id not in resolved:
                resolved.append(category_id)
        return resolved

    def _sanitize_rich_text(self, data: dict[str, Any]) -> None:
        for name in RICH_TEXT_FIELDS[self.kind]:
            if name in data:
                data[name] = sanitize_html(data[name], self.sanitizer)

    def _prepare_changes(
        self,
        existing: Entity,
        patch: ContentFields,
        editor_id: str | None,
    ) -> dict[str, Any]:
        """Validate and transform a patch without writing anything."""
        changes = patch.model_dump(exclude_unset=True)

        if "slug" in changes:
            slug = normalize_slug(changes["slug"])
            if not slug:
                raise BadRequestError(f'Invalid slug "{changes["slug"]}"')
            if slug != existing.slug and self.repo.slug_exists(slug, exclude_id=existing.id):
                raise ConflictError(f'Slug "{slug}" already exists')
            changes["slug"] = slug

        if "categories" in changes:
            changes["categories"] = self._resolve_categories(changes["categories"] or [])

        self._sanitize_rich_text(changes)

        # Explicit nulls clear a field back to its default
        defaults = self._entity_cls.model_fields
        for name, value in list(changes.items()):
            if value is None and name in defaults and not defaults[name].is_required():
                changes[name] = defaults[name].get_default(call_default_factory=True)
                if isinstance(changes[name], BaseModel):
                    changes[name] = changes[name].model_dump()

        if editor_id is not None:
            changes["last_edited_by"] = editor_id
        return changes

    def _publish_issues(self, entity: Entity) -> list[PublishIssue]:
        """Validator findings plus category references that no longer resolve."""
        issues = validate_for_publish(entity)
        missing = [
            str(category_id)
            for category_id in entity.categories
            if self.categories.find_category_by_id(category_id) is None
        ]
        if missing:
            issues.append(
                PublishIssue(
                    "categories",
                    f"Categories not found: {', '.join(missing)}",
                    "error",
                )
            )
        return issues

    def _check_gate(self, candidate: Entity) -> list[PublishIssue]:
        report = split_issues(self._publish_issues(candidate))
        if report.errors:
            fields = ", ".join(dict.fromkeys(e.field for e in report.errors))
            raise ValidationError(
                f"Please fill in the following required fields: {fields}",
                errors=report.errors,
            )
        return report.warnings

    def _commit_publish(self, existing: Entity, changes: dict[str, Any]) -> PublishResult:
        candidate = self._entity_cls.model_validate(
            {**existing.model_dump(), **changes, "publish_type": "publish"}
        )
        warnings = self._check_gate(candidate)

        changes = {**changes, "publish_type": "publish"}
        if existing.publish_type != "publish" or existing.published_at is None:
            changes["published_at"] = self.clock.now_utc()

        published = self._write(existing.id, changes, action="publish")
        logger.info(
            "%s published: %s (%s, warnings=%d)",
            self._label,
            existing.id,
            published.title,
            len(warnings),
        )
        return PublishResult(entity=published, warnings=warnings)

    def _set_publish_type(self, item_id: UUID, publish_type: PublishType) -> Entity:
        entity = self.repo.update_by_id(
            item_id, {"publish_type": publish_type, "published_at": None}
        )
        if entity is None:
            raise NotFoundError(f"{self._label} not found")
        logger.info("%s publish type set to %s: %s", self._label, publish_type, item_id)
        return entity

    def _write(self, item_id: UUID, changes: dict[str, Any], action: str = "update") -> Entity:
        updated = self.repo.update_by_id(item_id, changes)
        if updated is None:
            # Loaded moments ago; vanished between read and write
            logger.error("%s %s lost its row: %s", self._label, action, item_id)
            raise DatabaseError(f"Failed to {action} {self._label.lower()}")
        return updated


def create_content_service(
    kind: ContentKind,
    repo: ContentRepoPort,
    categories: CategoryLookupPort,
    clock: TimePort,
    sanitizer: SanitizerConfig = DEFAULT_CONFIG,
    slug_max_length: int = DEFAULT_MAX_LENGTH,
) -> ContentService:
    """Factory for a content service bound to one kind."""
    return ContentService(
        kind,
        repo=repo,
        categories=categories,
        clock=clock,
        sanitizer=sanitizer,
        slug_max_length=slug_max_length,
    )
