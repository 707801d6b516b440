"""
Publish validator - readiness checks for blog posts and products.

Pure functions: no I/O, deterministic for a given entity.

Blog post:
- errors: title, slug (present and well-formed), content
- warnings: excerpt, featured image, SEO title, SEO description

Product:
- errors: title, slug, short description, product description, at least one
  image, complete tech specs / documentation / Q&A rows, http(s) YouTube URL
- warnings: SEO title, SEO description
"""

from __future__ import annotations

from urllib.parse import urlparse

from storefront.domain.entities import BlogPost, ContentEntity, Product
from storefront.domain.sanitize import is_blank_html
from storefront.domain.slugs import is_valid_slug

from .models import PublishIssue, PublishReport


def _blank(value: str | None) -> bool:
    return not value or not value.strip()


def _is_http_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _check_common(entity: ContentEntity) -> list[PublishIssue]:
    issues: list[PublishIssue] = []

    if _blank(entity.title):
        issues.append(PublishIssue("title", "Title is required for publishing", "error"))

    if _blank(entity.slug):
        issues.append(PublishIssue("slug", "Slug is required for publishing", "error"))
    elif not is_valid_slug(entity.slug):
        issues.append(
            PublishIssue(
                "slug",
                "Slug must be lowercase, alphanumeric with hyphens only",
                "error",
            )
        )

    return issues


def _check_seo(entity: ContentEntity) -> list[PublishIssue]:
    issues: list[PublishIssue] = []
    if _blank(entity.seo.title):
        issues.append(
            PublishIssue(
                "seo.title",
                "SEO title is recommended for better search visibility",
                "warning",
            )
        )
    if _blank(entity.seo.description):
        issues.append(
            PublishIssue(
                "seo.description",
                "SEO description is recommended for better search visibility",
                "warning",
            )
        )
    return issues


def validate_blog_post(post: BlogPost) -> list[PublishIssue]:
    issues = _check_common(post)

    if is_blank_html(post.content):
        issues.append(PublishIssue("content", "Content is required for publishing", "error"))

    if _blank(post.excerpt):
        issues.append(
            PublishIssue(
                "excerpt",
                "Excerpt is recommended for better SEO and social sharing",
                "warning",
            )
        )

    if post.featured_image is None or _blank(post.featured_image.url):
        issues.append(
            PublishIssue(
                "featured_image",
                "Featured image is recommended for better visibility",
                "warning",
            )
        )

    issues.extend(_check_seo(post))
    return issues


def validate_product(product: Product) -> list[PublishIssue]:
    issues = _check_common(product)

    if _blank(product.short_description):
        issues.append(
            PublishIssue(
                "short_description",
                "Short description is required for publishing",
                "error",
            )
        )

    if is_blank_html(product.product_description):
        issues.append(
            PublishIssue(
                "product_description",
                "Description is required for publishing",
                "error",
            )
        )

    if not [url for url in product.product_images if url.strip()]:
        issues.append(
            PublishIssue(
                "product_images",
                "At least one product image is required for publishing",
                "error",
            )
        )

    for i, spec in enumerate(product.tech_specifications):
        if _blank(spec.title):
            issues.append(
                PublishIssue(
                    f"tech_specifications[{i}].title",
                    f"Tech specification {i + 1} requires a title",
                    "error",
                )
            )
        if _blank(spec.description):
            issues.append(
                PublishIssue(
                    f"tech_specifications[{i}].description",
                    f"Tech specification {i + 1} requires a description",
                    "error",
                )
            )

    for i, doc in enumerate(product.documentation):
        if _blank(doc.title):
            issues.append(
                PublishIssue(
                    f"documentation[{i}].title",
                    f"Documentation {i + 1} requires a title",
                    "error",
                )
            )
        if _blank(doc.url):
            issues.append(
                PublishIssue(
                    f"documentation[{i}].url",
                    f"Documentation {i + 1} requires a URL",
                    "error",
                )
            )

    for i, qa in enumerate(product.qa):
        if _blank(qa.question):
            issues.append(
                PublishIssue(f"qa[{i}].question", f"Q&A {i + 1} requires a question", "error")
            )
        if _blank(qa.answer):
            issues.append(
                PublishIssue(f"qa[{i}].answer", f"Q&A {i + 1} requires an answer", "error")
            )

    if product.youtube_url and not _is_http_url(product.youtube_url):
        issues.append(PublishIssue("youtube_url", "Invalid YouTube URL format", "error"))

    issues.extend(_check_seo(product))
    return issues


def validate_for_publish(entity: BlogPost | Product) -> list[PublishIssue]:
    """Return every error and warning for publishing `entity`."""
    if isinstance(entity, BlogPost):
        return validate_blog_post(entity)
    if isinstance(entity, Product):
        return validate_product(entity)
    raise TypeError(f"Unsupported entity type: {type(entity).__name__}")


def split_issues(issues: list[PublishIssue]) -> PublishReport:
    return PublishReport(
        errors=[i for i in issues if i.is_error],
        warnings=[i for i in issues if not i.is_error],
    )


def has_blocking_errors(issues: list[PublishIssue]) -> bool:
    return any(i.is_error for i in issues)
