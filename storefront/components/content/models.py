"""
Content component input/output models.

Input models treat every field as optional so the same shape serves both
create and partial update; only fields the caller actually set are applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel

from storefront.components.publish import PublishIssue
from storefront.domain.entities import (
    BlogPost,
    DocumentationLink,
    ImageRef,
    Product,
    ProductVisibility,
    PublishType,
    QuestionAnswer,
    SeoMeta,
    TechSpecification,
)

# --- Input Models ---


class ContentFields(BaseModel):
    """Fields accepted for any content kind."""

    title: str | None = None
    slug: str | None = None
    # Each entry may be an id string, an IdRef/PopulatedRef, or a
    # {"_id"|"id"|"value": ...} mapping.
    categories: list[Any] | None = None
    publish_type: PublishType | None = None
    seo: SeoMeta | None = None


class BlogPostFields(ContentFields):
    excerpt: str | None = None
    content: str | None = None
    featured_image: ImageRef | None = None
    tags: list[str] | None = None


class ProductFields(ContentFields):
    short_description: str | None = None
    product_description: str | None = None
    description: str | None = None
    product_images: list[str] | None = None
    tech_specifications: list[TechSpecification] | None = None
    documentation: list[DocumentationLink] | None = None
    qa: list[QuestionAnswer] | None = None
    youtube_url: str | None = None
    visibility: ProductVisibility | None = None


SortKey = Literal["created_at", "-created_at", "title", "-title", "published_at", "-published_at"]


@dataclass(frozen=True)
class ContentFilters:
    """Filters for listing content."""

    publish_type: PublishType | None = None
    category_id: str | None = None
    tag: str | None = None
    author_id: str | None = None
    search: str | None = None
    sort: SortKey = "-created_at"
    limit: int = 20
    offset: int = 0


# --- Output Models ---


@dataclass(frozen=True)
class PublishResult:
    """A published entity plus the non-blocking findings."""

    entity: BlogPost | Product
    warnings: list[PublishIssue] = field(default_factory=list)


@dataclass(frozen=True)
class ContentPage:
    """A page of content items."""

    items: list[BlogPost | Product]
    total: int
    limit: int
    offset: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit
