"""
Shared admin and public routes for blog posts and products.

Both kinds expose the same lifecycle; each router module builds its own
instance bound to its service dependency and request model.
"""

from collections.abc import Callable
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from storefront.api.auth_utils import CurrentUser
from storefront.api.deps import require_admin
from storefront.api.schemas import (
    ContentListResponse,
    PublishResponse,
    PublishTypeRequest,
    ValidationPreviewResponse,
    issues_to_models,
)
from storefront.components.content import ContentFilters, ContentService
from storefront.components.publish import split_issues
from storefront.domain.entities import ENTITY_CLASSES, ContentKind, PublishType

ServiceDep = Callable[..., ContentService]


def build_content_router(
    kind: ContentKind,
    get_service: ServiceDep,
    fields_model: type[Any],
    write_model: type[Any],
) -> APIRouter:
    router = APIRouter()
    entity_model = ENTITY_CLASSES[kind]

    def _fields(req: Any) -> Any:
        return fields_model.model_validate(
            req.model_dump(exclude_unset=True, exclude={"should_publish"})
        )

    # --- Public ---

    @router.get("/public/{slug}", response_model=entity_model)
    def get_public(slug: str, service: ContentService = Depends(get_service)) -> Any:
        """Published entity by slug; 404 for anything not public."""
        return service.get_public_by_slug(slug)

    # --- Admin: collection ---

    @router.get("", response_model=ContentListResponse)
    def list_items(
        publish_type: PublishType | None = None,
        category_id: str | None = None,
        tag: str | None = None,
        author_id: str | None = None,
        search: str | None = None,
        sort: str = "-created_at",
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1, le=100),
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> ContentListResponse:
        filters = ContentFilters(
            publish_type=publish_type,
            category_id=category_id,
            tag=tag,
            author_id=author_id,
            search=search,
            sort=sort,  # type: ignore[arg-type]
            limit=limit,
            offset=(page - 1) * limit,
        )
        result = service.list(filters)
        return ContentListResponse(
            items=result.items,
            total=result.total,
            limit=result.limit,
            offset=result.offset,
            total_pages=result.total_pages,
        )

    @router.get("/stats")
    def stats(
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> dict[str, int]:
        return service.stats()

    @router.post("", response_model=None, status_code=status.HTTP_201_CREATED)
    def create_item(
        req: write_model,  # type: ignore[valid-type]
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> Any:
        """Create a draft, or with should_publish a published entity plus its warnings."""
        fields = _fields(req)
        if req.should_publish:
            result = service.create_and_publish(fields, author_id=current_user.id)
            return PublishResponse(data=result.entity, warnings=issues_to_models(result.warnings))
        return service.create(fields, author_id=current_user.id)

    @router.get("/slug/{slug}", response_model=entity_model)
    def get_by_slug(
        slug: str,
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> Any:
        return service.get_by_slug(slug)

    # --- Admin: item ---

    @router.get("/{item_id}", response_model=entity_model)
    def get_item(
        item_id: UUID,
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> Any:
        return service.get(item_id)

    @router.patch("/{item_id}", response_model=PublishResponse)
    def update_item(
        item_id: UUID,
        req: write_model,  # type: ignore[valid-type]
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> PublishResponse:
        """Partial update; with should_publish the merged state must pass the gate."""
        fields = _fields(req)
        if req.should_publish:
            result = service.save_and_publish(item_id, fields, editor_id=current_user.id)
            return PublishResponse(data=result.entity, warnings=issues_to_models(result.warnings))
        return PublishResponse(data=service.update(item_id, fields, editor_id=current_user.id))

    @router.delete("/{item_id}")
    def delete_item(
        item_id: UUID,
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> dict[str, Any]:
        service.delete(item_id)
        return {"success": True}

    @router.post("/{item_id}/publish", response_model=PublishResponse)
    def publish_item(
        item_id: UUID,
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> PublishResponse:
        result = service.publish(item_id)
        return PublishResponse(data=result.entity, warnings=issues_to_models(result.warnings))

    @router.post("/{item_id}/unpublish", response_model=entity_model)
    def unpublish_item(
        item_id: UUID,
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> Any:
        return service.unpublish(item_id)

    @router.patch("/{item_id}/publish-type", response_model=entity_model)
    def set_publish_type(
        item_id: UUID,
        req: PublishTypeRequest,
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> Any:
        return service.update_publish_type(item_id, req.publish_type)

    @router.get("/{item_id}/validate", response_model=ValidationPreviewResponse)
    def validate_item(
        item_id: UUID,
        current_user: CurrentUser = Depends(require_admin),
        service: ContentService = Depends(get_service),
    ) -> ValidationPreviewResponse:
        report = split_issues(service.preview_validation(item_id))
        return ValidationPreviewResponse(
            can_publish=report.can_publish,
            errors=issues_to_models(report.errors),
            warnings=issues_to_models(report.warnings),
        )

    return router
