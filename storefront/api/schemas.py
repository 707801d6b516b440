from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from storefront.components.content.models import BlogPostFields, ProductFields
from storefront.domain.entities import (
    BlogPost,
    Category,
    FormSubmission,
    Product,
    PublishType,
    SubmissionStatus,
)


# --- Content ---
class BlogPostWriteRequest(BlogPostFields):
    # Update only: validate the merged state and publish in one step
    should_publish: bool = False


class ProductWriteRequest(ProductFields):
    should_publish: bool = False


class PublishTypeRequest(BaseModel):
    publish_type: PublishType


class PublishIssueModel(BaseModel):
    field: str
    message: str
    severity: str


class PublishResponse(BaseModel):
    data: BlogPost | Product
    warnings: list[PublishIssueModel] = []


class ValidationPreviewResponse(BaseModel):
    can_publish: bool
    errors: list[PublishIssueModel]
    warnings: list[PublishIssueModel]


class ContentListResponse(BaseModel):
    items: list[BlogPost | Product]
    total: int
    limit: int
    offset: int
    total_pages: int


# --- Categories ---
class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: str | None = None
    description: str = ""
    parent_id: UUID | None = None


class CategoryListResponse(BaseModel):
    items: list[Category]


# --- Form submissions ---
class StatusUpdateRequest(BaseModel):
    status: SubmissionStatus


class BulkStatusRequest(BaseModel):
    ids: list[str]
    status: SubmissionStatus


class BulkStatusResponse(BaseModel):
    updated: int


class SubmissionCreatedResponse(BaseModel):
    success: bool = True
    id: UUID
    message: str = "Thank you! We will get back to you shortly."


class SubmissionListResponse(BaseModel):
    items: list[FormSubmission]
    total: int
    limit: int
    offset: int
    total_pages: int


class SubmissionStatsResponse(BaseModel):
    total: int
    new: int
    read: int
    archived: int
    by_type: dict[str, int]


def issues_to_models(issues: list[Any]) -> list[PublishIssueModel]:
    return [PublishIssueModel(**i.to_dict()) for i in issues]
