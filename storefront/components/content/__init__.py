"""
Content component - blog post and product lifecycle with publish gating.
"""

from .component import (
    LABELS,
    ContentService,
    create_content_service,
    resolve_category_id,
)
from .models import (
    BlogPostFields,
    ContentFields,
    ContentFilters,
    ContentPage,
    ProductFields,
    PublishResult,
    SortKey,
)
from .ports import (
    CategoryLookupPort,
    ContentRepoPort,
    TimePort,
)

__all__ = [
    # Service
    "ContentService",
    "create_content_service",
    "resolve_category_id",
    "LABELS",
    # Input models
    "ContentFields",
    "BlogPostFields",
    "ProductFields",
    "ContentFilters",
    "SortKey",
    # Output models
    "ContentPage",
    "PublishResult",
    # Ports
    "CategoryLookupPort",
    "ContentRepoPort",
    "TimePort",
]
