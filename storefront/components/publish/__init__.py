"""
Publish component - readiness validation for blog posts and products.
"""

from .component import (
    has_blocking_errors,
    split_issues,
    validate_blog_post,
    validate_for_publish,
    validate_product,
)
from .models import PublishIssue, PublishReport, Severity

__all__ = [
    # Entry points
    "validate_for_publish",
    "validate_blog_post",
    "validate_product",
    "split_issues",
    "has_blocking_errors",
    # Models
    "PublishIssue",
    "PublishReport",
    "Severity",
]
