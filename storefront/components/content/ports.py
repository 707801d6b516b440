"""
Content component port definitions.

The repository boundary is the only shared mutable resource; adapters live
in storefront.adapters.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from storefront.domain.entities import BlogPost, Category, Product

from .models import ContentFilters

Entity = BlogPost | Product


class ContentRepoPort(Protocol):
    """Repository interface for one content kind (blog posts or products)."""

    def get_by_id(self, item_id: UUID) -> Entity | None:
        """Get entity by ID."""
        ...

    def get_by_slug(self, slug: str) -> Entity | None:
        """Get entity by slug."""
        ...

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        """Check whether another entity already uses `slug`."""
        ...

    def create(self, entity: Entity) -> Entity:
        """Persist a new entity. Stamps created_at/updated_at."""
        ...

    def update_by_id(self, item_id: UUID, changes: dict[str, Any]) -> Entity | None:
        """Apply a partial update. Returns None if the entity does not exist."""
        ...

    def delete_by_id(self, item_id: UUID) -> Entity | None:
        """Hard delete. Returns the deleted entity or None."""
        ...

    def list(self, filters: ContentFilters) -> tuple[list[Entity], int]:
        """List entities with filters. Returns (items, total_count)."""
        ...

    def stats(self) -> dict[str, int]:
        """Counts per publish type plus total."""
        ...


class CategoryLookupPort(Protocol):
    """Category existence lookup, scoped to one category kind."""

    def find_category_by_id(self, category_id: UUID) -> Category | None:
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
